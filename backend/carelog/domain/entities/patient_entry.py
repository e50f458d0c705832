"""Domain entities for patient entries (individual appointments)."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class AppointmentType(str, Enum):
    """How the patient was seen."""

    NEW = "new"
    FOLLOWUP = "followup"
    DNA = "dna"  # did not attend


@dataclass
class PatientEntry:
    """One appointment recorded against a service log."""

    service_log_id: str
    appointment_type: AppointmentType
    outcome_id: str
    id: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    deleted_at: datetime | None = None


@dataclass
class PatientEntryWithOutcome:
    """A patient entry joined with its outcome name."""

    entry: PatientEntry
    outcome_name: str | None = None


@dataclass
class AppointmentBreakdown:
    """Appointment counts by type."""

    new: int = 0
    followup: int = 0
    dna: int = 0

    @property
    def total(self) -> int:
        return self.new + self.followup + self.dna

    def add(self, appointment_type: AppointmentType, count: int = 1) -> None:
        if appointment_type == AppointmentType.NEW:
            self.new += count
        elif appointment_type == AppointmentType.FOLLOWUP:
            self.followup += count
        else:
            self.dna += count
