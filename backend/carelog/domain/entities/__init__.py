from .audit import AuditAction, AuditEntry
from .pagination import PaginatedResult, SortDirection
from .patient_entry import (
    AppointmentBreakdown,
    AppointmentType,
    PatientEntry,
    PatientEntryWithOutcome,
)
from .reference_data import (
    Activity,
    Client,
    Outcome,
    ReferenceData,
    ReferenceDataUsage,
)
from .report import (
    EXPORT_COLUMNS,
    UNKNOWN_ACTIVITY,
    UNKNOWN_CLIENT,
    UNKNOWN_OUTCOME,
    AppliedFilters,
    AppointmentTypeSummary,
    ExportFormat,
    ExportResult,
    ExportRow,
    ReportBreakdowns,
    ReportOverview,
    ReportPeriod,
    SummaryReport,
)
from .service_log import ServiceLog, ServiceLogDetails, ServiceLogListing
from .service_log_filter import ServiceLogFilter
from .statistics import DimensionCount, ServiceLogEntryStats, ServiceLogStatistics
from .user import ActingUser, UserRole

__all__ = [
    "AuditAction",
    "AuditEntry",
    "PaginatedResult",
    "SortDirection",
    "AppointmentBreakdown",
    "AppointmentType",
    "PatientEntry",
    "PatientEntryWithOutcome",
    "Activity",
    "Client",
    "Outcome",
    "ReferenceData",
    "ReferenceDataUsage",
    "EXPORT_COLUMNS",
    "UNKNOWN_ACTIVITY",
    "UNKNOWN_CLIENT",
    "UNKNOWN_OUTCOME",
    "AppliedFilters",
    "AppointmentTypeSummary",
    "ExportFormat",
    "ExportResult",
    "ExportRow",
    "ReportBreakdowns",
    "ReportOverview",
    "ReportPeriod",
    "SummaryReport",
    "ServiceLog",
    "ServiceLogDetails",
    "ServiceLogListing",
    "ServiceLogFilter",
    "DimensionCount",
    "ServiceLogEntryStats",
    "ServiceLogStatistics",
    "ActingUser",
    "UserRole",
]
