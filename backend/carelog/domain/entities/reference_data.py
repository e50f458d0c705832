"""Domain entities for reference data — clients, activities and outcomes."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Generic, TypeVar


@dataclass
class ReferenceData:
    """A named, toggleable lookup row.

    Names are unique (case-insensitively) among rows that have not been
    soft-deleted. Inactive rows stay visible to admins but may not be picked
    for new service logs.
    """

    name: str
    id: str = ""
    is_active: bool = True
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


@dataclass
class Client(ReferenceData):
    """A site or organisation services are delivered for."""


@dataclass
class Activity(ReferenceData):
    """A kind of service delivered at a client."""


@dataclass
class Outcome(ReferenceData):
    """The recorded result of a single appointment."""


R = TypeVar("R", bound=ReferenceData)


@dataclass
class ReferenceDataUsage(Generic[R]):
    """A reference row together with how often it has been used."""

    item: R
    usage_count: int = 0
    last_used: datetime | None = None
