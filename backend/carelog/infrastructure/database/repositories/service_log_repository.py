"""Concrete repository implementation for ServiceLog backed by SQLAlchemy."""

import logging
from collections.abc import AsyncIterator, Mapping, Sequence
from datetime import date, datetime
from typing import Any

from sqlalchemy import and_, case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from carelog.application.interfaces import (
    AuditLogRepository,
    PatientEntryRepository,
    ServiceLogRepository,
)
from carelog.domain.entities import (
    AppointmentBreakdown,
    AppointmentType,
    DimensionCount,
    PaginatedResult,
    ServiceLog,
    ServiceLogDetails,
    ServiceLogFilter,
    ServiceLogListing,
    ServiceLogStatistics,
    SortDirection,
    UNKNOWN_ACTIVITY,
    UNKNOWN_CLIENT,
    UNKNOWN_OUTCOME,
)
from carelog.domain.exceptions import DomainValidationError
from carelog.infrastructure.database.base import Base, utcnow
from carelog.infrastructure.database.models import (
    ActivityModel,
    ClientModel,
    OutcomeModel,
    PatientEntryModel,
    ServiceLogModel,
)

from .base_repository import SQLAlchemyRepository
from .patient_entry_repository import SQLAlchemyPatientEntryRepository

logger = logging.getLogger(__name__)


def _reference_key(field: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise DomainValidationError(f"Invalid {field} '{value}'", field=field) from None


def _as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise DomainValidationError(
            f"Invalid service_date '{value}'", field="service_date"
        ) from None


class SQLAlchemyServiceLogRepository(
    SQLAlchemyRepository[ServiceLog, ServiceLogModel], ServiceLogRepository
):
    """Implements the ServiceLogRepository port using SQLAlchemy async sessions."""

    model = ServiceLogModel
    entity_name = "ServiceLog"
    key_type = str
    sortable_fields = frozenset(
        {"id", "service_date", "created_at", "updated_at", "submitted_at", "patient_count"}
    )
    filterable_fields = frozenset(
        {"user_id", "client_id", "activity_id", "is_draft", "service_date"}
    )
    default_order_by = "service_date"

    def __init__(
        self,
        session: AsyncSession,
        audit_log: AuditLogRepository | None = None,
        patient_entries: PatientEntryRepository | None = None,
        **kwargs: Any,
    ):
        super().__init__(session, audit_log, **kwargs)
        self._entries = patient_entries or SQLAlchemyPatientEntryRepository(
            session, self._audit_log
        )

    # ── Mapping ──────────────────────────────────────────────────────

    def _to_domain(self, model: ServiceLogModel) -> ServiceLog:
        """Map ORM model → domain entity."""
        return ServiceLog(
            id=model.id,
            user_id=model.user_id,
            client_id=str(model.client_id),
            activity_id=str(model.activity_id),
            service_date=model.service_date,
            patient_count=model.patient_count,
            is_draft=model.is_draft,
            submitted_at=model.submitted_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
            deleted_at=model.deleted_at,
        )

    def _to_storage_row(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Map domain values → column values (integer reference keys, real dates)."""
        row: dict[str, Any] = {}
        if "id" in values:
            row["id"] = str(values["id"])
        if "user_id" in values:
            row["user_id"] = str(values["user_id"])
        for key in ("client_id", "activity_id"):
            if key in values:
                row[key] = _reference_key(key, values[key])
        if "service_date" in values:
            row["service_date"] = _as_date(values["service_date"])
        if "patient_count" in values:
            patient_count = int(values["patient_count"])
            if patient_count < 0:
                raise DomainValidationError(
                    "patient_count must not be negative", field="patient_count"
                )
            row["patient_count"] = patient_count
        if "is_draft" in values:
            row["is_draft"] = bool(values["is_draft"])
        for key in ("submitted_at", "created_at", "updated_at", "deleted_at"):
            if key in values:
                row[key] = values[key]
        return row

    def _filter_conditions(self, criteria: ServiceLogFilter) -> list:
        conditions = []
        if criteria.user_id is not None:
            conditions.append(ServiceLogModel.user_id == criteria.user_id)
        if criteria.client_id is not None:
            conditions.append(
                ServiceLogModel.client_id == _reference_key("client_id", criteria.client_id)
            )
        if criteria.activity_id is not None:
            conditions.append(
                ServiceLogModel.activity_id
                == _reference_key("activity_id", criteria.activity_id)
            )
        if criteria.is_draft is not None:
            conditions.append(ServiceLogModel.is_draft == criteria.is_draft)
        if criteria.date_from is not None:
            conditions.append(ServiceLogModel.service_date >= criteria.date_from)
        if criteria.date_to is not None:
            conditions.append(ServiceLogModel.service_date <= criteria.date_to)
        return conditions

    # ── Reads ────────────────────────────────────────────────────────

    async def find_by_user(
        self, user_id: str, *, page: int = 1, limit: int | None = None
    ) -> PaginatedResult[ServiceLog]:
        return await self._paginate(
            [ServiceLogModel.user_id == str(user_id)], page=page, limit=limit
        )

    async def find_by_client(
        self, client_id: str, *, page: int = 1, limit: int | None = None
    ) -> PaginatedResult[ServiceLog]:
        return await self._paginate(
            [ServiceLogModel.client_id == _reference_key("client_id", client_id)],
            page=page,
            limit=limit,
        )

    async def find_by_activity(
        self, activity_id: str, *, page: int = 1, limit: int | None = None
    ) -> PaginatedResult[ServiceLog]:
        return await self._paginate(
            [ServiceLogModel.activity_id == _reference_key("activity_id", activity_id)],
            page=page,
            limit=limit,
        )

    async def find_drafts_by_user(self, user_id: str, limit: int = 50) -> list[ServiceLog]:
        result = await self._session.execute(
            select(ServiceLogModel)
            .where(
                ServiceLogModel.user_id == str(user_id),
                ServiceLogModel.is_draft.is_(True),
                *self._visible(),
            )
            .order_by(ServiceLogModel.updated_at.desc(), ServiceLogModel.id.desc())
            .limit(limit)
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    def _appointment_counts(self):
        """Per-log appointment counts by type, as a joinable subquery."""
        entry = PatientEntryModel

        def _count_of(appointment_type: AppointmentType):
            return func.sum(
                case((entry.appointment_type == appointment_type.value, 1), else_=0)
            )

        return (
            select(
                entry.service_log_id.label("service_log_id"),
                _count_of(AppointmentType.NEW).label("new_count"),
                _count_of(AppointmentType.FOLLOWUP).label("followup_count"),
                _count_of(AppointmentType.DNA).label("dna_count"),
            )
            .where(entry.deleted_at.is_(None))
            .group_by(entry.service_log_id)
            .subquery("appointment_counts")
        )

    async def find_with_filters(
        self,
        criteria: ServiceLogFilter,
        *,
        page: int = 1,
        limit: int | None = None,
        order_by: str | None = None,
        order_direction: SortDirection = SortDirection.DESC,
    ) -> PaginatedResult[ServiceLogListing]:
        page, limit = self._page_window(page, limit)
        order = self._order_clause(order_by, order_direction)
        conditions = [*self._visible(), *self._filter_conditions(criteria)]

        total = await self._count_where(conditions)
        counts = self._appointment_counts()
        result = await self._session.execute(
            select(
                ServiceLogModel,
                ClientModel.name.label("client_name"),
                ActivityModel.name.label("activity_name"),
                counts.c.new_count,
                counts.c.followup_count,
                counts.c.dna_count,
            )
            .outerjoin(ClientModel, ClientModel.id == ServiceLogModel.client_id)
            .outerjoin(ActivityModel, ActivityModel.id == ServiceLogModel.activity_id)
            .outerjoin(counts, counts.c.service_log_id == ServiceLogModel.id)
            .where(*conditions)
            .order_by(*order)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        items = [
            ServiceLogListing(
                log=self._to_domain(model),
                client_name=client_name,
                activity_name=activity_name,
                appointments=AppointmentBreakdown(
                    new=new_count or 0,
                    followup=followup_count or 0,
                    dna=dna_count or 0,
                ),
            )
            for model, client_name, activity_name, new_count, followup_count, dna_count in result.all()
        ]
        return PaginatedResult.build(items, total, page, limit)

    async def find_by_id_with_details(self, log_id: str) -> ServiceLogDetails | None:
        result = await self._session.execute(
            select(
                ServiceLogModel,
                ClientModel.name.label("client_name"),
                ActivityModel.name.label("activity_name"),
            )
            .outerjoin(ClientModel, ClientModel.id == ServiceLogModel.client_id)
            .outerjoin(ActivityModel, ActivityModel.id == ServiceLogModel.activity_id)
            .where(ServiceLogModel.id == str(log_id), *self._visible())
        )
        row = result.first()
        if row is None:
            return None

        model, client_name, activity_name = row
        entries = await self._entries.find_by_service_log_with_outcomes(model.id)
        return ServiceLogDetails(
            log=self._to_domain(model),
            client_name=client_name,
            activity_name=activity_name,
            entries=entries,
        )

    async def iter_batches(
        self, criteria: ServiceLogFilter, batch_size: int
    ) -> AsyncIterator[list[ServiceLog]]:
        """Keyset-paginate on (created_at, id) descending.

        Only one batch is held at a time, and rows inserted while the export
        runs cannot shift later pages the way OFFSET would.
        """
        conditions = [*self._visible(), *self._filter_conditions(criteria)]
        cursor: tuple[datetime, str] | None = None
        while True:
            stmt = select(ServiceLogModel).where(*conditions)
            if cursor is not None:
                created_at, log_id = cursor
                stmt = stmt.where(
                    or_(
                        ServiceLogModel.created_at < created_at,
                        and_(
                            ServiceLogModel.created_at == created_at,
                            ServiceLogModel.id < log_id,
                        ),
                    )
                )
            result = await self._session.execute(
                stmt.order_by(ServiceLogModel.created_at.desc(), ServiceLogModel.id.desc())
                .limit(batch_size)
            )
            models = result.scalars().all()
            if not models:
                return

            yield [self._to_domain(m) for m in models]

            if len(models) < batch_size:
                return
            cursor = (models[-1].created_at, models[-1].id)

    # ── Statistics ───────────────────────────────────────────────────

    async def _breakdown_by(
        self,
        reference_model: type[Base],
        foreign_key,
        conditions: list,
        limit: int,
        unknown_label: str,
    ) -> list[DimensionCount]:
        log_count = func.count(ServiceLogModel.id).label("log_count")
        result = await self._session.execute(
            select(foreign_key, reference_model.name, log_count)
            .select_from(ServiceLogModel)
            .outerjoin(reference_model, reference_model.id == foreign_key)
            .where(*conditions)
            .group_by(foreign_key, reference_model.name)
            .order_by(log_count.desc(), reference_model.name)
            .limit(limit)
        )
        return [
            DimensionCount(id=str(key), name=name or unknown_label, count=count)
            for key, name, count in result.all()
        ]

    async def get_statistics(
        self,
        criteria: ServiceLogFilter,
        breakdown_limit: int = 20,
        outcome_limit: int | None = None,
    ) -> ServiceLogStatistics:
        conditions = [*self._visible(), *self._filter_conditions(criteria)]
        stats = ServiceLogStatistics()

        totals = await self._session.execute(
            select(
                func.count(ServiceLogModel.id),
                func.coalesce(
                    func.sum(case((ServiceLogModel.is_draft.is_(True), 1), else_=0)), 0
                ),
                func.coalesce(func.sum(ServiceLogModel.patient_count), 0),
                func.min(ServiceLogModel.service_date),
                func.max(ServiceLogModel.service_date),
            ).where(*conditions)
        )
        total, drafts, patients, first_date, last_date = totals.one()
        stats.total_logs = total
        stats.drafts = drafts
        stats.submitted = total - drafts
        stats.total_patients = patients
        stats.average_patients_per_log = round(patients / total, 2) if total else 0.0
        stats.first_service_date = first_date
        stats.last_service_date = last_date

        live_entries = [PatientEntryModel.deleted_at.is_(None), *conditions]
        by_type = await self._session.execute(
            select(PatientEntryModel.appointment_type, func.count(PatientEntryModel.id))
            .select_from(PatientEntryModel)
            .join(ServiceLogModel, ServiceLogModel.id == PatientEntryModel.service_log_id)
            .where(*live_entries)
            .group_by(PatientEntryModel.appointment_type)
        )
        for appointment_type, count in by_type.all():
            stats.appointments.add(AppointmentType(appointment_type), count)

        stats.by_client = await self._breakdown_by(
            ClientModel, ServiceLogModel.client_id, conditions, breakdown_limit, UNKNOWN_CLIENT
        )
        stats.by_activity = await self._breakdown_by(
            ActivityModel,
            ServiceLogModel.activity_id,
            conditions,
            breakdown_limit,
            UNKNOWN_ACTIVITY,
        )

        entry_count = func.count(PatientEntryModel.id).label("entry_count")
        by_outcome = await self._session.execute(
            select(PatientEntryModel.outcome_id, OutcomeModel.name, entry_count)
            .select_from(PatientEntryModel)
            .join(ServiceLogModel, ServiceLogModel.id == PatientEntryModel.service_log_id)
            .outerjoin(OutcomeModel, OutcomeModel.id == PatientEntryModel.outcome_id)
            .where(*live_entries)
            .group_by(PatientEntryModel.outcome_id, OutcomeModel.name)
            .order_by(entry_count.desc(), OutcomeModel.name)
            .limit(outcome_limit or breakdown_limit)
        )
        stats.by_outcome = [
            DimensionCount(id=str(outcome_id), name=name or UNKNOWN_OUTCOME, count=count)
            for outcome_id, name, count in by_outcome.all()
        ]
        return stats

    # ── Composite mutations ──────────────────────────────────────────

    async def create_with_entries(
        self,
        data: Mapping[str, Any],
        entries: Sequence[Mapping[str, Any]],
        acting_user_id: str | None = None,
    ) -> ServiceLog:
        async with self._session.begin_nested():
            log = await self.create(data, acting_user_id)
            if entries:
                await self._entries.bulk_create_for_service_log(log.id, entries, acting_user_id)
        return log

    async def update_with_entries(
        self,
        log_id: str,
        patch: Mapping[str, Any],
        entries: Sequence[Mapping[str, Any]] | None,
        acting_user_id: str | None = None,
    ) -> ServiceLog:
        await self._require_live_model(log_id)
        async with self._session.begin_nested():
            if entries is not None:
                await self._entries.delete_by_service_log(log_id, acting_user_id)
                await self._entries.bulk_create_for_service_log(log_id, entries, acting_user_id)
                patch = {**patch, "patient_count": len(entries)}
            log = await self.update(log_id, patch, acting_user_id)
        return log

    async def delete_with_entries(self, log_id: str, acting_user_id: str | None = None) -> None:
        await self._require_live_model(log_id)
        async with self._session.begin_nested():
            await self._entries.delete_by_service_log(log_id, acting_user_id)
            await self.soft_delete(log_id, acting_user_id)

    async def submit_draft(self, log_id: str, acting_user_id: str | None = None) -> ServiceLog:
        model = await self._require_live_model(log_id)
        if not model.is_draft:
            raise DomainValidationError("Service log is already submitted", field="is_draft")
        return await self.update(
            log_id, {"is_draft": False, "submitted_at": utcnow()}, acting_user_id
        )

    async def convert_to_draft(self, log_id: str, acting_user_id: str | None = None) -> ServiceLog:
        model = await self._require_live_model(log_id)
        if model.is_draft:
            raise DomainValidationError("Service log is already a draft", field="is_draft")
        return await self.update(log_id, {"is_draft": True, "submitted_at": None}, acting_user_id)

    async def bulk_delete_by_user(self, user_id: str, acting_user_id: str | None = None) -> int:
        result = await self._session.execute(
            select(ServiceLogModel.id).where(
                ServiceLogModel.user_id == str(user_id), *self._visible()
            )
        )
        log_ids = list(result.scalars().all())
        async with self._session.begin_nested():
            for log_id in log_ids:
                await self.soft_delete(log_id, acting_user_id)

        logger.info("Soft-deleted %d service logs of user %s", len(log_ids), user_id)
        return len(log_ids)
