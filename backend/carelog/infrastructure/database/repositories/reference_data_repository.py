"""Concrete repositories for clients, activities and outcomes."""

from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from sqlalchemy import and_, func, select

from carelog.application.interfaces import (
    ActivityRepository,
    ClientRepository,
    OutcomeRepository,
)
from carelog.domain.entities import (
    Activity,
    Client,
    Outcome,
    ReferenceData,
    ReferenceDataUsage,
)
from carelog.domain.exceptions import (
    BulkOperationError,
    DomainValidationError,
    DuplicateEntityError,
)
from carelog.infrastructure.database.base import Base
from carelog.infrastructure.database.models import (
    ActivityModel,
    ClientModel,
    OutcomeModel,
    PatientEntryModel,
    ServiceLogModel,
)

from .base_repository import SQLAlchemyRepository

R = TypeVar("R", bound=ReferenceData)
M = TypeVar("M", bound=Base)


def _normalize_name(name: Any) -> str:
    normalized = str(name or "").strip()
    if not normalized:
        raise DomainValidationError("Name must not be empty", field="name")
    return normalized


class SQLAlchemyReferenceDataRepository(SQLAlchemyRepository[R, M]):
    """Shared implementation for named lookup tables.

    Name uniqueness is enforced by the ``ux_<table>_name_live`` partial index;
    a violation surfaces as DuplicateEntityError through the base class.
    """

    entity_class: type[ReferenceData]
    usage_model: type[Base]
    usage_column: str

    key_type = int
    sortable_fields = frozenset({"id", "name", "created_at", "updated_at"})
    filterable_fields = frozenset({"name", "is_active"})
    default_order_by = "name"
    unique_field = "name"

    def _to_domain(self, model: M) -> R:
        return self.entity_class(
            id=str(model.id),
            name=model.name,
            is_active=model.is_active,
            created_at=model.created_at,
            updated_at=model.updated_at,
            deleted_at=model.deleted_at,
        )

    def _to_storage_row(self, values: Mapping[str, Any]) -> dict[str, Any]:
        row: dict[str, Any] = {}
        if "id" in values:
            row["id"] = self._coerce_key(values["id"])
        if "name" in values:
            row["name"] = values["name"]
        if "is_active" in values:
            row["is_active"] = bool(values["is_active"])
        for key in ("created_at", "updated_at", "deleted_at"):
            if key in values:
                row[key] = values[key]
        return row

    async def create(self, data: Mapping[str, Any], acting_user_id: str | None = None) -> R:
        data = {**data, "name": _normalize_name(data.get("name"))}
        return await super().create(data, acting_user_id)

    async def update(
        self, entity_id: str, patch: Mapping[str, Any], acting_user_id: str | None = None
    ) -> R:
        if "name" in patch:
            patch = {**patch, "name": _normalize_name(patch["name"])}
        return await super().update(entity_id, patch, acting_user_id)

    async def bulk_create(
        self, items: Sequence[Mapping[str, Any]], acting_user_id: str | None = None
    ) -> list[R]:
        seen: set[str] = set()
        for index, item in enumerate(items):
            try:
                name = _normalize_name(item.get("name"))
            except DomainValidationError as exc:
                raise BulkOperationError(self.entity_name, index, exc) from exc
            if name.lower() in seen:
                raise BulkOperationError(
                    self.entity_name,
                    index,
                    DuplicateEntityError(self.entity_name, "name", name),
                )
            seen.add(name.lower())
        return await super().bulk_create(items, acting_user_id)

    async def find_by_name(self, fragment: str) -> list[R]:
        result = await self._session.execute(
            select(self.model)
            .where(
                func.lower(self.model.name).contains(fragment.strip().lower(), autoescape=True),
                self.model.is_active.is_(True),
                *self._visible(),
            )
            .order_by(self.model.name)
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    async def find_active(self) -> list[R]:
        result = await self._session.execute(
            select(self.model)
            .where(self.model.is_active.is_(True), *self._visible())
            .order_by(self.model.name)
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    async def is_name_taken(self, name: str, exclude_id: str | None = None) -> bool:
        stmt = select(func.count()).select_from(self.model).where(
            func.lower(self.model.name) == name.strip().lower(), *self._visible()
        )
        key = self._coerce_key(exclude_id)
        if key is not None:
            stmt = stmt.where(self.model.id != key)
        return (await self._session.execute(stmt)).scalar_one() > 0

    async def find_with_stats(self) -> list[ReferenceDataUsage[R]]:
        usage = self.usage_model
        stmt = (
            select(
                self.model,
                func.count(usage.id).label("usage_count"),
                func.max(usage.created_at).label("last_used"),
            )
            .outerjoin(
                usage,
                and_(
                    getattr(usage, self.usage_column) == self.model.id,
                    usage.deleted_at.is_(None),
                ),
            )
            .where(*self._visible())
            .group_by(self.model.id)
            .order_by(self.model.name)
        )
        result = await self._session.execute(stmt)
        return [
            ReferenceDataUsage(
                item=self._to_domain(model),
                usage_count=usage_count or 0,
                last_used=last_used,
            )
            for model, usage_count, last_used in result.all()
        ]

    async def toggle_active(self, entity_id: str, acting_user_id: str | None = None) -> R:
        model = await self._require_live_model(entity_id)
        return await self.update(entity_id, {"is_active": not model.is_active}, acting_user_id)

    async def get_name_map(self) -> dict[str, str]:
        # Soft-deleted rows stay resolvable for historical reporting
        result = await self._session.execute(select(self.model.id, self.model.name))
        return {str(row_id): name for row_id, name in result.all()}


class SQLAlchemyClientRepository(
    SQLAlchemyReferenceDataRepository[Client, ClientModel], ClientRepository
):
    """Implements the ClientRepository port using SQLAlchemy async sessions."""

    model = ClientModel
    entity_name = "Client"
    entity_class = Client
    usage_model = ServiceLogModel
    usage_column = "client_id"


class SQLAlchemyActivityRepository(
    SQLAlchemyReferenceDataRepository[Activity, ActivityModel], ActivityRepository
):
    """Implements the ActivityRepository port using SQLAlchemy async sessions."""

    model = ActivityModel
    entity_name = "Activity"
    entity_class = Activity
    usage_model = ServiceLogModel
    usage_column = "activity_id"


class SQLAlchemyOutcomeRepository(
    SQLAlchemyReferenceDataRepository[Outcome, OutcomeModel], OutcomeRepository
):
    """Implements the OutcomeRepository port using SQLAlchemy async sessions."""

    model = OutcomeModel
    entity_name = "Outcome"
    entity_class = Outcome
    usage_model = PatientEntryModel
    usage_column = "outcome_id"
