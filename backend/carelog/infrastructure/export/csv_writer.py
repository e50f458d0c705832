"""Streaming CSV writer for service-log exports."""

import csv
import io
from collections.abc import AsyncIterator

from carelog.application.interfaces import ExportWriter
from carelog.domain.entities import EXPORT_COLUMNS, ExportRow

# Spreadsheet apps evaluate cells starting with these as formulas
_FORMULA_PREFIXES = ("=", "+", "-", "@")


def _neutralize(value: object) -> object:
    if isinstance(value, str) and value.startswith(_FORMULA_PREFIXES):
        return "'" + value
    return value


class CsvExportWriter(ExportWriter):
    """Encodes rows as UTF-8 CSV, one chunk per incoming batch."""

    media_type = "text/csv; charset=utf-8"

    def _encode(self, rows: list[list[object]]) -> bytes:
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
        writer.writerows(rows)
        return buffer.getvalue().encode("utf-8")

    async def write(self, batches: AsyncIterator[list[ExportRow]]) -> AsyncIterator[bytes]:
        yield self._encode([list(EXPORT_COLUMNS)])
        async for batch in batches:
            if batch:
                yield self._encode(
                    [[_neutralize(value) for value in row.as_values()] for row in batch]
                )
