"""Abstract interface (port) for export file writers."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from carelog.domain.entities import ExportRow


class ExportWriter(ABC):
    """Turns batches of export rows into an encoded byte stream."""

    media_type: str

    @abstractmethod
    def write(self, batches: AsyncIterator[list[ExportRow]]) -> AsyncIterator[bytes]:
        """Consume row batches lazily and yield encoded chunks."""
        ...
