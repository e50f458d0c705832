"""Aggregate statistics over service logs and patient entries."""

from dataclasses import dataclass, field
from datetime import date

from .patient_entry import AppointmentBreakdown


@dataclass
class DimensionCount:
    """Count of rows grouped by one reference dimension."""

    id: str
    name: str
    count: int


@dataclass
class ServiceLogStatistics:
    total_logs: int = 0
    drafts: int = 0
    submitted: int = 0
    total_patients: int = 0
    average_patients_per_log: float = 0.0
    appointments: AppointmentBreakdown = field(default_factory=AppointmentBreakdown)
    by_client: list[DimensionCount] = field(default_factory=list)
    by_activity: list[DimensionCount] = field(default_factory=list)
    by_outcome: list[DimensionCount] = field(default_factory=list)
    first_service_date: date | None = None
    last_service_date: date | None = None


@dataclass
class ServiceLogEntryStats:
    """Appointment statistics for a single service log."""

    service_log_id: str
    appointments: AppointmentBreakdown = field(default_factory=AppointmentBreakdown)
    by_outcome: list[DimensionCount] = field(default_factory=list)
