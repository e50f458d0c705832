"""Domain entities for service logs."""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from .patient_entry import AppointmentBreakdown, PatientEntryWithOutcome


@dataclass
class ServiceLog:
    """A record of a service session delivered by a user.

    Lifecycle: created as a draft (or directly submitted); a draft moves to
    submitted one way, and only an admin may revert it back to draft.
    """

    user_id: str
    client_id: str
    activity_id: str
    service_date: date
    patient_count: int = 0
    is_draft: bool = True
    submitted_at: datetime | None = None
    id: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    deleted_at: datetime | None = None

    @property
    def is_submitted(self) -> bool:
        return not self.is_draft


@dataclass
class ServiceLogListing:
    """A service log row as shown in listings — names and counts resolved."""

    log: ServiceLog
    client_name: str | None = None
    activity_name: str | None = None
    appointments: AppointmentBreakdown = field(default_factory=AppointmentBreakdown)


@dataclass
class ServiceLogDetails:
    """A service log with its resolved names and patient entries."""

    log: ServiceLog
    client_name: str | None = None
    activity_name: str | None = None
    entries: list[PatientEntryWithOutcome] = field(default_factory=list)
