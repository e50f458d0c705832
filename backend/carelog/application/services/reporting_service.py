"""Reporting and export use cases over service logs."""

import math
from collections.abc import AsyncIterator, Mapping
from datetime import date, timedelta

from carelog.application.interfaces import (
    ActivityRepository,
    ClientRepository,
    ExportWriter,
    OutcomeRepository,
    PatientEntryRepository,
    ServiceLogRepository,
)
from carelog.domain.entities import (
    UNKNOWN_ACTIVITY,
    UNKNOWN_CLIENT,
    UNKNOWN_OUTCOME,
    ActingUser,
    AppliedFilters,
    AppointmentType,
    AppointmentTypeSummary,
    ExportFormat,
    ExportResult,
    ExportRow,
    PatientEntry,
    ReportBreakdowns,
    ReportOverview,
    ReportPeriod,
    ServiceLog,
    ServiceLogFilter,
    SummaryReport,
)
from carelog.domain.exceptions import InvalidExportFormatError
from carelog.infrastructure.database.base import utcnow
from carelog.infrastructure.logging.export_logger import ExportLogger, ExportStage

from .access import require_actor, scope_filter


def _percentage(part: int, whole: int) -> int:
    """Whole-number percentage, halves rounded up; 0 when nothing to divide."""
    if not whole:
        return 0
    return math.floor(part * 100 / whole + 0.5)


def count_weekdays(start: date, end: date) -> int:
    """Monday-to-Friday days in the inclusive range ``start..end``."""
    if end < start:
        return 0
    total_days = (end - start).days + 1
    full_weeks, remainder = divmod(total_days, 7)
    weekdays = full_weeks * 5
    for offset in range(remainder):
        if (start + timedelta(days=full_weeks * 7 + offset)).weekday() < 5:
            weekdays += 1
    return weekdays


def build_export_rows(
    log: ServiceLog,
    entries: list[PatientEntry],
    client_names: Mapping[str, str],
    activity_names: Mapping[str, str],
    outcome_names: Mapping[str, str],
) -> list[ExportRow]:
    """One row per patient entry; a log without entries still gets one row."""

    def _row(new: int, followup: int, dna: int, outcome: str) -> ExportRow:
        return ExportRow(
            service_log_id=log.id,
            user_id=log.user_id,
            client_name=client_names.get(log.client_id, UNKNOWN_CLIENT),
            activity_name=activity_names.get(log.activity_id, UNKNOWN_ACTIVITY),
            service_date=log.service_date,
            total_patient_count=log.patient_count,
            new_patients=new,
            followup_patients=followup,
            dna_count=dna,
            primary_outcome=outcome,
            is_draft=log.is_draft,
            submitted_at=log.submitted_at,
            created_at=log.created_at,
            updated_at=log.updated_at,
        )

    if not entries:
        return [_row(0, 0, 0, "")]
    return [
        _row(
            int(entry.appointment_type == AppointmentType.NEW),
            int(entry.appointment_type == AppointmentType.FOLLOWUP),
            int(entry.appointment_type == AppointmentType.DNA),
            outcome_names.get(entry.outcome_id, UNKNOWN_OUTCOME),
        )
        for entry in entries
    ]


class ReportingService:
    """Builds summary reports and streams service-log exports.

    Both honour the same visibility rule as listings: a non-admin only ever
    reports on their own logs, whatever filter they pass.
    """

    def __init__(
        self,
        service_logs: ServiceLogRepository,
        patient_entries: PatientEntryRepository,
        clients: ClientRepository,
        activities: ActivityRepository,
        outcomes: OutcomeRepository,
        writers: Mapping[ExportFormat, ExportWriter],
        *,
        batch_size: int = 1000,
        progress_every: int = 10,
        top_clients: int = 15,
        top_outcomes: int = 10,
    ):
        self._service_logs = service_logs
        self._patient_entries = patient_entries
        self._clients = clients
        self._activities = activities
        self._outcomes = outcomes
        self._writers = writers
        self._batch_size = batch_size
        self._progress_every = max(1, progress_every)
        self._top_clients = top_clients
        self._top_outcomes = top_outcomes
        self._log = ExportLogger()

    # ── Summary ──────────────────────────────────────────────────────

    async def get_summary_report(
        self, actor: ActingUser | None, criteria: ServiceLogFilter | None = None
    ) -> SummaryReport:
        actor = require_actor(actor)
        effective = scope_filter(actor, criteria)
        stats = await self._service_logs.get_statistics(
            effective, self._top_clients, self._top_outcomes
        )

        appointments = stats.appointments
        overview = ReportOverview(
            total_service_logs=stats.total_logs,
            total_drafts=stats.drafts,
            total_submitted=stats.submitted,
            total_patients=stats.total_patients,
            average_patients_per_log=stats.average_patients_per_log,
            completion_rate=_percentage(stats.submitted, stats.total_logs),
        )
        appointment_types = AppointmentTypeSummary(
            new_patients=appointments.new,
            followup_patients=appointments.followup,
            dna_count=appointments.dna,
            total_appointments=appointments.total,
            dna_rate=_percentage(appointments.dna, appointments.total),
        )

        period_start = effective.date_from or stats.first_service_date
        period_end = effective.date_to or stats.last_service_date
        period = ReportPeriod(date_from=period_start, date_to=period_end)
        if period_start and period_end and period_start <= period_end:
            period.total_days = (period_end - period_start).days + 1
            period.weekdays = count_weekdays(period_start, period_end)

        return SummaryReport(
            overview=overview,
            appointment_types=appointment_types,
            breakdowns=ReportBreakdowns(
                by_client=stats.by_client,
                by_activity=stats.by_activity,
                by_outcome=stats.by_outcome,
            ),
            period=period,
            applied_filters=AppliedFilters(
                filters=effective.as_dict(), has_filters=effective.has_filters
            ),
        )

    # ── Export ───────────────────────────────────────────────────────

    def export_service_logs(
        self,
        actor: ActingUser | None,
        criteria: ServiceLogFilter | None,
        export_format: str,
        today: date | None = None,
    ) -> ExportResult:
        """Validate the request and return a lazily produced export.

        Nothing is read from the store until the returned content is iterated,
        so an unsupported format fails before any query runs.
        """
        actor = require_actor(actor)
        try:
            fmt = ExportFormat(str(export_format).lower())
        except ValueError:
            raise InvalidExportFormatError(export_format) from None
        writer = self._writers.get(fmt)
        if writer is None:
            raise InvalidExportFormatError(export_format)

        effective = scope_filter(actor, criteria)
        stamp = (today or utcnow().date()).isoformat()
        return ExportResult(
            filename=f"service-logs-export-{stamp}.{fmt.extension}",
            media_type=writer.media_type,
            content=writer.write(self._export_batches(effective, fmt)),
        )

    async def _export_batches(
        self, criteria: ServiceLogFilter, fmt: ExportFormat
    ) -> AsyncIterator[list[ExportRow]]:
        self._log.step_start(
            ExportStage.FILTERS, "Export started", format=fmt.value, **criteria.as_dict()
        )

        with self._log.timed_step(ExportStage.LOOKUPS, "Building lookup maps"):
            client_names = await self._clients.get_name_map()
            activity_names = await self._activities.get_name_map()
            outcome_names = await self._outcomes.get_name_map()

        batches = logs = rows = 0
        try:
            async for batch in self._service_logs.iter_batches(criteria, self._batch_size):
                entries = await self._patient_entries.find_by_service_log_ids(
                    [log.id for log in batch]
                )
                batch_rows: list[ExportRow] = []
                for log in batch:
                    batch_rows.extend(
                        build_export_rows(
                            log,
                            entries.get(log.id, []),
                            client_names,
                            activity_names,
                            outcome_names,
                        )
                    )
                batches += 1
                logs += len(batch)
                rows += len(batch_rows)
                if batches % self._progress_every == 0:
                    self._log.detail("Export progress", batches=batches, logs=logs, rows=rows)
                yield batch_rows
        except Exception as e:
            self._log.step_error(ExportStage.ERROR, "Export aborted", error=e)
            raise

        self._log.step_complete(ExportStage.COMPLETE, "Export finished")
        self._log.stats(batches=batches, service_logs=logs, rows=rows)
