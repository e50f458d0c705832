"""Abstract repository interface (port) for the audit trail."""

from abc import ABC, abstractmethod

from carelog.domain.entities import AuditAction, AuditEntry, PaginatedResult


class AuditLogRepository(ABC):
    """Append-only port — entries are never updated or deleted."""

    @abstractmethod
    async def append(self, entry: AuditEntry) -> AuditEntry | None:
        """Record an entry. Returns None if the write failed (best effort)."""
        ...

    @abstractmethod
    async def find_for_record(self, table_name: str, record_id: str) -> list[AuditEntry]:
        """Full history of one record, oldest first."""
        ...

    @abstractmethod
    async def find_all(
        self,
        *,
        table_name: str | None = None,
        record_id: str | None = None,
        user_id: str | None = None,
        action: AuditAction | None = None,
        page: int = 1,
        limit: int = 50,
    ) -> PaginatedResult[AuditEntry]:
        """Filtered, newest-first page of audit entries."""
        ...
