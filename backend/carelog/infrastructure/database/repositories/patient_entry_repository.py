"""Concrete repository implementation for PatientEntry backed by SQLAlchemy."""

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import func, select, update

from carelog.application.interfaces import PatientEntryRepository
from carelog.domain.entities import (
    AppointmentType,
    AuditAction,
    DimensionCount,
    PaginatedResult,
    PatientEntry,
    PatientEntryWithOutcome,
    ServiceLogEntryStats,
    SortDirection,
    UNKNOWN_OUTCOME,
)
from carelog.domain.exceptions import DomainValidationError
from carelog.infrastructure.database.base import utcnow
from carelog.infrastructure.database.models import OutcomeModel, PatientEntryModel

from .base_repository import SQLAlchemyRepository

_REQUIRED_FIELDS = ("service_log_id", "appointment_type", "outcome_id")


def _appointment_type(value: Any) -> AppointmentType:
    try:
        return AppointmentType(value)
    except ValueError:
        raise DomainValidationError(
            "appointment_type must be one of: new, followup, dna",
            field="appointment_type",
        ) from None


def _outcome_key(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise DomainValidationError(
            f"Invalid outcome id '{value}'", field="outcome_id"
        ) from None


class SQLAlchemyPatientEntryRepository(
    SQLAlchemyRepository[PatientEntry, PatientEntryModel], PatientEntryRepository
):
    """Implements the PatientEntryRepository port using SQLAlchemy async sessions."""

    model = PatientEntryModel
    entity_name = "PatientEntry"
    key_type = str
    sortable_fields = frozenset({"id", "created_at", "updated_at", "appointment_type"})
    filterable_fields = frozenset({"service_log_id", "outcome_id", "appointment_type"})

    def _to_domain(self, model: PatientEntryModel) -> PatientEntry:
        """Map ORM model → domain entity."""
        return PatientEntry(
            id=model.id,
            service_log_id=model.service_log_id,
            appointment_type=AppointmentType(model.appointment_type),
            outcome_id=str(model.outcome_id),
            created_at=model.created_at,
            updated_at=model.updated_at,
            deleted_at=model.deleted_at,
        )

    def _to_storage_row(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Map domain values → column values, validating type and outcome."""
        row: dict[str, Any] = {}
        if "id" in values:
            row["id"] = str(values["id"])
        if "service_log_id" in values:
            row["service_log_id"] = str(values["service_log_id"])
        if "appointment_type" in values:
            row["appointment_type"] = _appointment_type(values["appointment_type"]).value
        if "outcome_id" in values:
            row["outcome_id"] = _outcome_key(values["outcome_id"])
        for key in ("created_at", "updated_at", "deleted_at"):
            if key in values:
                row[key] = values[key]
        return row

    async def create(
        self, data: Mapping[str, Any], acting_user_id: str | None = None
    ) -> PatientEntry:
        for field in _REQUIRED_FIELDS:
            if data.get(field) in (None, ""):
                raise DomainValidationError(f"{field} is required", field=field)
        return await super().create(data, acting_user_id)

    def _live_for_log(self, service_log_id: str) -> list:
        return [PatientEntryModel.service_log_id == str(service_log_id), *self._visible()]

    async def find_by_service_log(
        self, service_log_id: str, *, page: int = 1, limit: int | None = None
    ) -> PaginatedResult[PatientEntry]:
        return await self._paginate(
            [PatientEntryModel.service_log_id == str(service_log_id)],
            page=page,
            limit=limit,
            order_by="created_at",
            order_direction=SortDirection.ASC,
        )

    async def find_by_service_log_ids(
        self, service_log_ids: Sequence[str]
    ) -> dict[str, list[PatientEntry]]:
        ids = [str(log_id) for log_id in service_log_ids]
        if not ids:
            return {}

        grouped: dict[str, list[PatientEntry]] = {log_id: [] for log_id in ids}
        result = await self._session.execute(
            select(PatientEntryModel)
            .where(PatientEntryModel.service_log_id.in_(ids), *self._visible())
            .order_by(PatientEntryModel.created_at, PatientEntryModel.id)
        )
        for model in result.scalars().all():
            grouped.setdefault(model.service_log_id, []).append(self._to_domain(model))
        return grouped

    async def find_by_outcome(
        self, outcome_id: str, *, page: int = 1, limit: int | None = None
    ) -> PaginatedResult[PatientEntry]:
        return await self._paginate(
            [PatientEntryModel.outcome_id == _outcome_key(outcome_id)],
            page=page,
            limit=limit,
        )

    async def find_by_service_log_with_outcomes(
        self, service_log_id: str
    ) -> list[PatientEntryWithOutcome]:
        result = await self._session.execute(
            select(PatientEntryModel, OutcomeModel.name)
            .outerjoin(OutcomeModel, OutcomeModel.id == PatientEntryModel.outcome_id)
            .where(*self._live_for_log(service_log_id))
            .order_by(PatientEntryModel.created_at, PatientEntryModel.id)
        )
        return [
            PatientEntryWithOutcome(entry=self._to_domain(model), outcome_name=name)
            for model, name in result.all()
        ]

    async def get_service_log_stats(self, service_log_id: str) -> ServiceLogEntryStats:
        stats = ServiceLogEntryStats(service_log_id=str(service_log_id))
        conditions = self._live_for_log(service_log_id)

        by_type = await self._session.execute(
            select(PatientEntryModel.appointment_type, func.count(PatientEntryModel.id))
            .where(*conditions)
            .group_by(PatientEntryModel.appointment_type)
        )
        for appointment_type, count in by_type.all():
            stats.appointments.add(AppointmentType(appointment_type), count)

        entry_count = func.count(PatientEntryModel.id).label("entry_count")
        by_outcome = await self._session.execute(
            select(PatientEntryModel.outcome_id, OutcomeModel.name, entry_count)
            .outerjoin(OutcomeModel, OutcomeModel.id == PatientEntryModel.outcome_id)
            .where(*conditions)
            .group_by(PatientEntryModel.outcome_id, OutcomeModel.name)
            .order_by(entry_count.desc(), OutcomeModel.name)
        )
        stats.by_outcome = [
            DimensionCount(id=str(outcome_id), name=name or UNKNOWN_OUTCOME, count=count)
            for outcome_id, name, count in by_outcome.all()
        ]
        return stats

    async def bulk_create_for_service_log(
        self,
        service_log_id: str,
        entries: Sequence[Mapping[str, Any]],
        acting_user_id: str | None = None,
    ) -> list[PatientEntry]:
        items = [{**entry, "service_log_id": str(service_log_id)} for entry in entries]
        return await self.bulk_create(items, acting_user_id)

    async def delete_by_service_log(
        self, service_log_id: str, acting_user_id: str | None = None
    ) -> int:
        result = await self._session.execute(
            select(PatientEntryModel.id).where(*self._live_for_log(service_log_id))
        )
        entry_ids = list(result.scalars().all())
        if not entry_ids:
            return 0

        async def _apply():
            now = utcnow()
            await self._session.execute(
                update(PatientEntryModel)
                .where(PatientEntryModel.id.in_(entry_ids))
                .values(deleted_at=now, updated_at=now)
            )
            return {"deleted_at": now.isoformat(), "deleted_count": len(entry_ids)}

        await self._mutate_with_audit(
            AuditAction.DELETE,
            _apply,
            record_id=str(service_log_id),
            before={"service_log_id": str(service_log_id), "entry_ids": entry_ids},
            acting_user_id=acting_user_id,
        )
        return len(entry_ids)
