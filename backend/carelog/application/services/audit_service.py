"""Application service for reading the audit trail."""

from carelog.application.interfaces import AuditLogRepository
from carelog.domain.entities import ActingUser, AuditAction, AuditEntry, PaginatedResult

from .access import require_admin


class AuditService:
    """Read-only access to audit history; admins only."""

    def __init__(self, audit_log: AuditLogRepository):
        self._audit_log = audit_log

    async def list_entries(
        self,
        actor: ActingUser | None,
        *,
        table_name: str | None = None,
        record_id: str | None = None,
        user_id: str | None = None,
        action: AuditAction | None = None,
        page: int = 1,
        limit: int = 50,
    ) -> PaginatedResult[AuditEntry]:
        require_admin(actor, "view the audit log")
        return await self._audit_log.find_all(
            table_name=table_name,
            record_id=record_id,
            user_id=user_id,
            action=action,
            page=page,
            limit=limit,
        )

    async def record_history(
        self, actor: ActingUser | None, table_name: str, record_id: str
    ) -> list[AuditEntry]:
        require_admin(actor, "view the audit log")
        return await self._audit_log.find_for_record(table_name, record_id)
