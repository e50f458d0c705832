"""XLSX writer for service-log exports (openpyxl write-only mode)."""

import io
from collections.abc import AsyncIterator

from carelog.application.interfaces import ExportWriter
from carelog.domain.entities import EXPORT_COLUMNS, ExportRow


class ExcelExportWriter(ExportWriter):
    """Appends rows to a write-only workbook and emits the file at the end.

    Write-only worksheets keep memory flat while rows are appended; the
    zip container can only be produced once all rows are in.
    """

    media_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

    def __init__(self, sheet_title: str = "Service Logs"):
        self._sheet_title = sheet_title

    async def write(self, batches: AsyncIterator[list[ExportRow]]) -> AsyncIterator[bytes]:
        from openpyxl import Workbook

        workbook = Workbook(write_only=True)
        sheet = workbook.create_sheet(title=self._sheet_title)
        sheet.append(list(EXPORT_COLUMNS))
        async for batch in batches:
            for row in batch:
                sheet.append(row.as_values())

        buffer = io.BytesIO()
        workbook.save(buffer)
        yield buffer.getvalue()
