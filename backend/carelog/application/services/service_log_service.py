"""Application service (use case) for service logs."""

import logging
from typing import Any

from carelog.application.interfaces import (
    ActivityRepository,
    ClientRepository,
    OutcomeRepository,
    PatientEntryRepository,
    ServiceLogRepository,
)
from carelog.application.schemas import (
    PatientEntryInput,
    ServiceLogCreate,
    ServiceLogUpdate,
)
from carelog.domain.entities import (
    ActingUser,
    PaginatedResult,
    ServiceLog,
    ServiceLogDetails,
    ServiceLogFilter,
    ServiceLogListing,
    ServiceLogStatistics,
    SortDirection,
)
from carelog.domain.exceptions import (
    DomainValidationError,
    EntityNotFoundError,
    PermissionDeniedError,
)
from carelog.infrastructure.database.base import utcnow

from .access import can_edit, can_view, require_actor, require_admin, scope_filter

logger = logging.getLogger(__name__)


class ServiceLogService:
    """Orchestrates service-log use cases and the rules on who may do what.

    - candidates see and manage only their own logs
    - a submitted log is frozen for its owner; only an admin may revert it
    - every log carries at least one patient entry
    """

    def __init__(
        self,
        service_logs: ServiceLogRepository,
        patient_entries: PatientEntryRepository,
        clients: ClientRepository,
        activities: ActivityRepository,
        outcomes: OutcomeRepository,
        *,
        drafts_limit: int = 50,
        breakdown_limit: int = 20,
    ):
        self._service_logs = service_logs
        self._patient_entries = patient_entries
        self._clients = clients
        self._activities = activities
        self._outcomes = outcomes
        self._drafts_limit = drafts_limit
        self._breakdown_limit = breakdown_limit

    # ── Reads ────────────────────────────────────────────────────────

    async def list_logs(
        self,
        actor: ActingUser | None,
        criteria: ServiceLogFilter | None = None,
        *,
        page: int = 1,
        limit: int | None = None,
        order_by: str | None = None,
        order_direction: SortDirection = SortDirection.DESC,
    ) -> PaginatedResult[ServiceLogListing]:
        actor = require_actor(actor)
        return await self._service_logs.find_with_filters(
            scope_filter(actor, criteria),
            page=page,
            limit=limit,
            order_by=order_by,
            order_direction=order_direction,
        )

    async def list_drafts(self, actor: ActingUser | None) -> list[ServiceLog]:
        actor = require_actor(actor)
        return await self._service_logs.find_drafts_by_user(actor.id, self._drafts_limit)

    async def get_log(self, actor: ActingUser | None, log_id: str) -> ServiceLogDetails:
        actor = require_actor(actor)
        details = await self._service_logs.find_by_id_with_details(log_id)
        if details is None:
            raise EntityNotFoundError("ServiceLog", log_id)
        if not can_view(actor, details.log):
            raise PermissionDeniedError("view this service log")
        return details

    async def get_statistics(
        self, actor: ActingUser | None, criteria: ServiceLogFilter | None = None
    ) -> ServiceLogStatistics:
        actor = require_actor(actor)
        return await self._service_logs.get_statistics(
            scope_filter(actor, criteria), self._breakdown_limit
        )

    # ── Writes ───────────────────────────────────────────────────────

    async def create_log(self, actor: ActingUser | None, data: ServiceLogCreate) -> ServiceLog:
        actor = require_actor(actor)
        await self._check_references(data.client_id, data.activity_id, data.entries)

        values: dict[str, Any] = {
            "user_id": actor.id,
            "client_id": data.client_id,
            "activity_id": data.activity_id,
            "service_date": data.service_date,
            "patient_count": len(data.entries),
            "is_draft": data.is_draft,
            "submitted_at": None if data.is_draft else utcnow(),
        }
        log = await self._service_logs.create_with_entries(
            values, self._entry_rows(data.entries), actor.id
        )
        logger.info(
            "Service log %s created by %s (%d entries, draft=%s)",
            log.id, actor.id, len(data.entries), log.is_draft,
        )
        return log

    async def update_log(
        self, actor: ActingUser | None, log_id: str, data: ServiceLogUpdate
    ) -> ServiceLog:
        actor = require_actor(actor)
        log = await self._require_log(log_id)
        if not can_edit(actor, log):
            raise PermissionDeniedError("edit this service log")

        patch = data.model_dump(exclude_unset=True, exclude_none=True, exclude={"entries"})
        await self._check_references(
            patch.get("client_id"), patch.get("activity_id"), data.entries or []
        )
        entries = self._entry_rows(data.entries) if data.entries is not None else None
        return await self._service_logs.update_with_entries(log_id, patch, entries, actor.id)

    async def submit(self, actor: ActingUser | None, log_id: str) -> ServiceLog:
        actor = require_actor(actor)
        log = await self._require_log(log_id)
        if log.user_id != actor.id:
            raise PermissionDeniedError("submit this service log")
        return await self._service_logs.submit_draft(log_id, actor.id)

    async def revert_to_draft(self, actor: ActingUser | None, log_id: str) -> ServiceLog:
        actor = require_admin(actor, "revert a submitted service log")
        return await self._service_logs.convert_to_draft(log_id, actor.id)

    async def delete_log(self, actor: ActingUser | None, log_id: str) -> None:
        actor = require_actor(actor)
        log = await self._require_log(log_id)
        if not can_edit(actor, log):
            raise PermissionDeniedError("delete this service log")
        await self._service_logs.delete_with_entries(log_id, actor.id)

    async def bulk_delete_by_user(self, actor: ActingUser | None, user_id: str) -> int:
        actor = require_admin(actor, "delete another user's service logs")
        return await self._service_logs.bulk_delete_by_user(user_id, actor.id)

    # ── Helpers ──────────────────────────────────────────────────────

    async def _require_log(self, log_id: str) -> ServiceLog:
        log = await self._service_logs.find_by_id(log_id)
        if log is None:
            raise EntityNotFoundError("ServiceLog", log_id)
        return log

    async def _check_references(
        self,
        client_id: str | None,
        activity_id: str | None,
        entries: list[PatientEntryInput],
    ) -> None:
        """Referenced rows must exist and be active."""
        checks = [("client_id", client_id, self._clients, "Client"),
                  ("activity_id", activity_id, self._activities, "Activity")]
        checks += [
            ("outcome_id", outcome_id, self._outcomes, "Outcome")
            for outcome_id in dict.fromkeys(e.outcome_id for e in entries)
        ]
        for field, ref_id, repository, label in checks:
            if ref_id is None:
                continue
            item = await repository.find_by_id(ref_id)
            if item is None:
                raise EntityNotFoundError(label, ref_id)
            if not item.is_active:
                raise DomainValidationError(f"{label} '{item.name}' is inactive", field=field)

    @staticmethod
    def _entry_rows(entries: list[PatientEntryInput]) -> list[dict[str, Any]]:
        return [
            {"appointment_type": e.appointment_type, "outcome_id": e.outcome_id}
            for e in entries
        ]
