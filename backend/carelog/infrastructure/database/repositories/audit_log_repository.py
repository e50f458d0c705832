"""Append-only audit trail backed by SQLAlchemy."""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from carelog.application.interfaces import AuditLogRepository
from carelog.domain.entities import AuditAction, AuditEntry, PaginatedResult
from carelog.infrastructure.database.models import AuditLogModel

logger = logging.getLogger(__name__)


class SQLAlchemyAuditLogRepository(AuditLogRepository):
    """Implements the AuditLogRepository port using SQLAlchemy async sessions.

    ``append`` runs inside its own SAVEPOINT on the caller's session so the
    entry commits together with the mutation it describes, while a failed
    audit write only rolls back itself.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_domain(self, model: AuditLogModel) -> AuditEntry:
        return AuditEntry(
            id=model.id,
            table_name=model.table_name,
            record_id=model.record_id,
            action=AuditAction(model.action),
            old_values=model.old_values,
            new_values=model.new_values,
            user_id=model.user_id,
            timestamp=model.timestamp,
        )

    async def append(self, entry: AuditEntry) -> AuditEntry | None:
        model = AuditLogModel(
            table_name=entry.table_name,
            record_id=entry.record_id,
            action=entry.action.value,
            old_values=entry.old_values,
            new_values=entry.new_values,
            user_id=entry.user_id,
            timestamp=entry.timestamp,
        )
        try:
            async with self._session.begin_nested():
                self._session.add(model)
                await self._session.flush()
        except SQLAlchemyError:
            # Data commit has priority over audit durability.
            logger.exception(
                "Audit write failed for %s %s/%s (user=%s)",
                entry.action.value,
                entry.table_name,
                entry.record_id,
                entry.user_id,
            )
            return None

        logger.debug(
            "Audit %s %s/%s by %s",
            entry.action.value,
            entry.table_name,
            entry.record_id,
            entry.user_id,
        )
        return self._to_domain(model)

    async def find_for_record(self, table_name: str, record_id: str) -> list[AuditEntry]:
        result = await self._session.execute(
            select(AuditLogModel)
            .where(
                AuditLogModel.table_name == table_name,
                AuditLogModel.record_id == str(record_id),
            )
            .order_by(AuditLogModel.timestamp.asc(), AuditLogModel.id.asc())
        )
        return [self._to_domain(m) for m in result.scalars().all()]

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
        page = max(1, page)
        limit = max(1, limit)

        conditions = []
        if table_name is not None:
            conditions.append(AuditLogModel.table_name == table_name)
        if record_id is not None:
            conditions.append(AuditLogModel.record_id == str(record_id))
        if user_id is not None:
            conditions.append(AuditLogModel.user_id == user_id)
        if action is not None:
            conditions.append(AuditLogModel.action == AuditAction(action).value)

        count_stmt = select(func.count()).select_from(AuditLogModel)
        stmt = select(AuditLogModel)
        if conditions:
            count_stmt = count_stmt.where(*conditions)
            stmt = stmt.where(*conditions)

        total = (await self._session.execute(count_stmt)).scalar_one()
        result = await self._session.execute(
            stmt.order_by(AuditLogModel.timestamp.desc(), AuditLogModel.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        items = [self._to_domain(m) for m in result.scalars().all()]
        return PaginatedResult.build(items, total, page, limit)
