"""Generic audited repository on top of SQLAlchemy async sessions.

Every domain repository derives from ``SQLAlchemyRepository`` and only
supplies its ORM model, its explicit row↔entity mapping and its extra
queries. The base class owns pagination, soft-delete visibility and the
audit side effect of every mutation.
"""

import logging
from abc import abstractmethod
from collections.abc import Awaitable, Callable, Mapping, Sequence
from datetime import date, datetime
from enum import Enum
from typing import Any, Generic, TypeVar
from uuid import uuid4

from sqlalchemy import asc, desc, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from carelog.application.interfaces import AuditLogRepository, Repository
from carelog.config import get_settings
from carelog.domain.entities import AuditAction, AuditEntry, PaginatedResult, SortDirection
from carelog.domain.exceptions import (
    BulkOperationError,
    DomainValidationError,
    DuplicateEntityError,
    EntityNotFoundError,
    PersistenceError,
)
from carelog.infrastructure.database.base import Base, utcnow

from .audit_log_repository import SQLAlchemyAuditLogRepository

logger = logging.getLogger(__name__)

D = TypeVar("D")
M = TypeVar("M", bound=Base)

# Managed by the repository, never taken from caller input
_SYSTEM_FIELDS = frozenset({"id", "created_at", "updated_at", "deleted_at"})

_OPERATIONS = {
    AuditAction.INSERT: "create",
    AuditAction.UPDATE: "update",
    AuditAction.DELETE: "delete",
}


def _jsonable(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


class SQLAlchemyRepository(Repository[D], Generic[D, M]):
    """Implements the generic Repository port for one ORM model.

    Subclasses set the class attributes below and implement ``_to_domain``
    and ``_to_storage_row``.

    Attributes:
        model: ORM model class the repository reads and writes.
        entity_name: Name used in errors and log lines.
        key_type: ``int`` for auto-increment keys, ``str`` for UUID keys
            (generated on create).
        supports_soft_delete: Whether the table has ``deleted_at``.
        sortable_fields / filterable_fields: Whitelists for ``find_all``.
        unique_field: Field reported by DuplicateEntityError.
    """

    model: type[Base]
    entity_name: str
    key_type: type = str
    supports_soft_delete: bool = True
    sortable_fields: frozenset[str] = frozenset({"id", "created_at", "updated_at"})
    filterable_fields: frozenset[str] = frozenset()
    default_order_by: str = "created_at"
    unique_field: str = "id"

    def __init__(
        self,
        session: AsyncSession,
        audit_log: AuditLogRepository | None = None,
        *,
        default_page_size: int | None = None,
        max_page_size: int | None = None,
    ):
        settings = get_settings()
        self._session = session
        self._audit_log = audit_log or SQLAlchemyAuditLogRepository(session)
        self._default_page_size = default_page_size or settings.default_page_size
        self._max_page_size = max_page_size or settings.max_page_size

    # ── Mapping ──────────────────────────────────────────────────────

    @abstractmethod
    def _to_domain(self, model: M) -> D:
        """Map ORM model → domain entity."""
        ...

    @abstractmethod
    def _to_storage_row(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Map domain field values → column values.

        Only keys present in *values* are returned, so the same mapping
        serves inserts, partial patches and equality filters.
        """
        ...

    def _snapshot(self, model: M) -> dict[str, Any]:
        """JSON-safe copy of every column, used for audit before/after values."""
        return {
            column.key: _jsonable(getattr(model, column.key))
            for column in self.model.__table__.columns
        }

    def _coerce_key(self, entity_id: Any) -> Any:
        """Convert a domain id to the column's key type; None if it cannot be one."""
        if entity_id is None:
            return None
        if self.key_type is int:
            try:
                return int(entity_id)
            except (TypeError, ValueError):
                return None
        return str(entity_id)

    # ── Query helpers ────────────────────────────────────────────────

    def _visible(self) -> list:
        if self.supports_soft_delete:
            return [self.model.deleted_at.is_(None)]
        return []

    def _page_window(self, page: int | None, limit: int | None) -> tuple[int, int]:
        page = max(1, int(page or 1))
        limit = self._default_page_size if limit is None else int(limit)
        return page, min(max(1, limit), self._max_page_size)

    def _order_clause(self, order_by: str | None, order_direction: SortDirection) -> list:
        field = order_by or self.default_order_by
        if field not in self.sortable_fields:
            raise DomainValidationError(
                f"Cannot sort {self.entity_name} by '{field}'", field="order_by"
            )
        direction = asc if SortDirection(order_direction) == SortDirection.ASC else desc
        # Primary key as tiebreaker so pages never overlap
        return [direction(getattr(self.model, field)), direction(self.model.id)]

    def _equality_conditions(self, where: Mapping[str, Any] | None) -> list:
        if not where:
            return []
        unknown = sorted(set(where) - self.filterable_fields)
        if unknown:
            raise DomainValidationError(
                f"Cannot filter {self.entity_name} by '{unknown[0]}'", field=unknown[0]
            )
        row = self._to_storage_row(where)
        return [getattr(self.model, key) == value for key, value in row.items()]

    async def _count_where(self, conditions: Sequence) -> int:
        stmt = select(func.count()).select_from(self.model)
        if conditions:
            stmt = stmt.where(*conditions)
        return (await self._session.execute(stmt)).scalar_one()

    async def _paginate(
        self,
        conditions: Sequence,
        *,
        page: int | None,
        limit: int | None,
        order_by: str | None = None,
        order_direction: SortDirection = SortDirection.DESC,
    ) -> PaginatedResult[D]:
        page, limit = self._page_window(page, limit)
        order = self._order_clause(order_by, order_direction)
        conditions = [*self._visible(), *conditions]

        total = await self._count_where(conditions)
        stmt = select(self.model)
        if conditions:
            stmt = stmt.where(*conditions)
        result = await self._session.execute(
            stmt.order_by(*order).offset((page - 1) * limit).limit(limit)
        )
        items = [self._to_domain(m) for m in result.scalars().all()]
        return PaginatedResult.build(items, total, page, limit)

    async def _get_live_model(self, entity_id: Any) -> M | None:
        key = self._coerce_key(entity_id)
        if key is None:
            return None
        result = await self._session.execute(
            select(self.model).where(self.model.id == key, *self._visible())
        )
        return result.scalar_one_or_none()

    async def _require_live_model(self, entity_id: Any) -> M:
        model = await self._get_live_model(entity_id)
        if model is None:
            raise EntityNotFoundError(self.entity_name, entity_id)
        return model

    # ── Transactional mutation ───────────────────────────────────────

    async def _mutate_with_audit(
        self,
        action: AuditAction,
        mutation: Callable[[], Awaitable[Any]],
        *,
        record_id: str | None = None,
        before: dict[str, Any] | None = None,
        acting_user_id: str | None = None,
        values: Mapping[str, Any] | None = None,
    ) -> Any:
        """Apply *mutation* and append its audit entry in one SAVEPOINT.

        When the mutation returns a model instance its id and snapshot become
        the audit record id and ``new_values``; any other return value is
        stored as ``new_values`` as-is (None for hard deletes).
        """
        try:
            async with self._session.begin_nested():
                result = await mutation()
                if isinstance(result, self.model):
                    record_id = str(result.id)
                    after = self._snapshot(result)
                else:
                    after = result
                await self._audit_log.append(
                    AuditEntry(
                        table_name=self.model.__tablename__,
                        record_id=str(record_id),
                        action=action,
                        old_values=before,
                        new_values=after,
                        user_id=acting_user_id,
                    )
                )
        except IntegrityError as exc:
            raise self._translate_integrity_error(exc, values or {}) from exc
        except SQLAlchemyError as exc:
            logger.exception("%s on %s failed", action.value, self.entity_name)
            raise PersistenceError(self.entity_name, _OPERATIONS[action]) from exc
        return result

    def _translate_integrity_error(
        self, exc: IntegrityError, values: Mapping[str, Any]
    ) -> Exception:
        """Map a constraint violation raised by the store to a domain error."""
        message = str(exc.orig).lower()
        if "unique" in message or "duplicate key" in message:
            return DuplicateEntityError(
                self.entity_name, self.unique_field, str(values.get(self.unique_field, ""))
            )
        if "foreign key" in message:
            return DomainValidationError(
                f"{self.entity_name} references a missing record or is still referenced"
            )
        if "check constraint" in message or "violates check" in message:
            return DomainValidationError(f"Invalid {self.entity_name} values")
        logger.error("Unexpected integrity error on %s: %s", self.entity_name, exc.orig)
        return PersistenceError(self.entity_name, "save")

    # ── Repository port ──────────────────────────────────────────────

    async def find_by_id(self, entity_id: str) -> D | None:
        model = await self._get_live_model(entity_id)
        return self._to_domain(model) if model else None

    async def find_all(
        self,
        *,
        page: int = 1,
        limit: int | None = None,
        order_by: str | None = None,
        order_direction: SortDirection = SortDirection.DESC,
        where: Mapping[str, Any] | None = None,
    ) -> PaginatedResult[D]:
        return await self._paginate(
            self._equality_conditions(where),
            page=page,
            limit=limit,
            order_by=order_by,
            order_direction=order_direction,
        )

    async def count(self, where: Mapping[str, Any] | None = None) -> int:
        return await self._count_where([*self._visible(), *self._equality_conditions(where)])

    def _prepare_insert(self, data: Mapping[str, Any]) -> dict[str, Any]:
        values = self._to_storage_row(
            {k: v for k, v in data.items() if k not in _SYSTEM_FIELDS}
        )
        if self.key_type is str:
            values["id"] = str(data.get("id") or uuid4())
        now = utcnow()
        values["created_at"] = now
        values["updated_at"] = now
        return values

    async def create(self, data: Mapping[str, Any], acting_user_id: str | None = None) -> D:
        values = self._prepare_insert(data)
        model = self.model(**values)

        async def _insert():
            self._session.add(model)
            await self._session.flush()
            return model

        await self._mutate_with_audit(
            AuditAction.INSERT, _insert, acting_user_id=acting_user_id, values=values
        )
        await self._session.refresh(model)
        return self._to_domain(model)

    async def update(
        self, entity_id: str, patch: Mapping[str, Any], acting_user_id: str | None = None
    ) -> D:
        model = await self._require_live_model(entity_id)
        changes = self._to_storage_row(
            {k: v for k, v in patch.items() if k not in _SYSTEM_FIELDS}
        )
        if not changes:
            return self._to_domain(model)
        before = self._snapshot(model)

        async def _apply():
            for key, value in changes.items():
                setattr(model, key, value)
            model.updated_at = utcnow()
            await self._session.flush()
            return model

        await self._mutate_with_audit(
            AuditAction.UPDATE,
            _apply,
            before=before,
            acting_user_id=acting_user_id,
            values=changes,
        )
        return self._to_domain(model)

    async def soft_delete(self, entity_id: str, acting_user_id: str | None = None) -> None:
        if not self.supports_soft_delete:
            raise NotImplementedError(f"{self.entity_name} does not support soft delete")
        model = await self._require_live_model(entity_id)
        before = self._snapshot(model)

        async def _apply():
            now = utcnow()
            model.deleted_at = now
            model.updated_at = now
            await self._session.flush()
            return model

        await self._mutate_with_audit(
            AuditAction.DELETE, _apply, before=before, acting_user_id=acting_user_id
        )

    async def hard_delete(self, entity_id: str, acting_user_id: str | None = None) -> bool:
        key = self._coerce_key(entity_id)
        if key is None:
            return False
        result = await self._session.execute(select(self.model).where(self.model.id == key))
        model = result.scalar_one_or_none()
        if model is None:
            return False
        before = self._snapshot(model)

        async def _apply():
            await self._session.delete(model)
            await self._session.flush()
            return None

        await self._mutate_with_audit(
            AuditAction.DELETE,
            _apply,
            record_id=str(key),
            before=before,
            acting_user_id=acting_user_id,
        )
        return True

    async def bulk_create(
        self, items: Sequence[Mapping[str, Any]], acting_user_id: str | None = None
    ) -> list[D]:
        created: list[D] = []
        async with self._session.begin_nested():
            for index, item in enumerate(items):
                try:
                    created.append(await self.create(item, acting_user_id))
                except (
                    DuplicateEntityError,
                    DomainValidationError,
                    EntityNotFoundError,
                    PersistenceError,
                ) as exc:
                    raise BulkOperationError(self.entity_name, index, exc) from exc
        logger.debug("Bulk created %d %s rows", len(created), self.entity_name)
        return created
