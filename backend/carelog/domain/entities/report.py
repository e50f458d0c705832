"""Domain objects for summary reports and service-log exports."""

from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any

from .statistics import DimensionCount

UNKNOWN_CLIENT = "Unknown Client"
UNKNOWN_ACTIVITY = "Unknown Activity"
UNKNOWN_OUTCOME = "Unknown Outcome"

EXPORT_COLUMNS: tuple[str, ...] = (
    "Service Log ID",
    "User ID",
    "Client Name",
    "Activity Name",
    "Service Date",
    "Total Patient Count",
    "New Patients",
    "Followup Patients",
    "DNA Count",
    "Primary Outcome",
    "Is Draft",
    "Submitted At",
    "Created At",
    "Updated At",
)


class ExportFormat(str, Enum):
    CSV = "csv"
    EXCEL = "excel"

    @property
    def extension(self) -> str:
        return "xlsx" if self is ExportFormat.EXCEL else "csv"


@dataclass
class ExportRow:
    """One exported line: a single appointment, or an empty service log."""

    service_log_id: str
    user_id: str
    client_name: str
    activity_name: str
    service_date: date
    total_patient_count: int
    new_patients: int
    followup_patients: int
    dna_count: int
    primary_outcome: str
    is_draft: bool
    submitted_at: datetime | None
    created_at: datetime
    updated_at: datetime

    def as_values(self) -> list[Any]:
        """Cell values in ``EXPORT_COLUMNS`` order."""
        return [
            self.service_log_id,
            self.user_id,
            self.client_name,
            self.activity_name,
            self.service_date.isoformat(),
            self.total_patient_count,
            self.new_patients,
            self.followup_patients,
            self.dna_count,
            self.primary_outcome,
            "Yes" if self.is_draft else "No",
            self.submitted_at.isoformat() if self.submitted_at else "",
            self.created_at.isoformat(),
            self.updated_at.isoformat(),
        ]


@dataclass
class ExportResult:
    """A ready-to-stream export: metadata plus a lazy byte stream."""

    filename: str
    media_type: str
    content: AsyncIterator[bytes]

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'


@dataclass
class ReportOverview:
    total_service_logs: int = 0
    total_drafts: int = 0
    total_submitted: int = 0
    total_patients: int = 0
    average_patients_per_log: float = 0.0
    completion_rate: int = 0


@dataclass
class AppointmentTypeSummary:
    new_patients: int = 0
    followup_patients: int = 0
    dna_count: int = 0
    total_appointments: int = 0
    dna_rate: int = 0


@dataclass
class ReportBreakdowns:
    by_client: list[DimensionCount] = field(default_factory=list)
    by_activity: list[DimensionCount] = field(default_factory=list)
    by_outcome: list[DimensionCount] = field(default_factory=list)


@dataclass
class ReportPeriod:
    date_from: date | None = None
    date_to: date | None = None
    total_days: int = 0
    weekdays: int = 0


@dataclass
class AppliedFilters:
    filters: dict[str, Any] = field(default_factory=dict)
    has_filters: bool = False


@dataclass
class SummaryReport:
    overview: ReportOverview
    appointment_types: AppointmentTypeSummary
    breakdowns: ReportBreakdowns
    period: ReportPeriod
    applied_filters: AppliedFilters
