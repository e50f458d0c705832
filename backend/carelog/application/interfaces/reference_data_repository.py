"""Abstract repository interfaces (ports) for reference data."""

from abc import abstractmethod
from typing import TypeVar

from carelog.domain.entities import (
    Activity,
    Client,
    Outcome,
    ReferenceData,
    ReferenceDataUsage,
)

from .repository import Repository

R = TypeVar("R", bound=ReferenceData)


class ReferenceDataRepository(Repository[R]):
    """Port for named lookup rows with case-insensitive unique names.

    ``create``, ``update`` and ``bulk_create`` raise DuplicateEntityError
    when a name collides with another row that is not soft-deleted.
    """

    @abstractmethod
    async def find_by_name(self, fragment: str) -> list[R]:
        """Case-insensitive substring search over active rows."""
        ...

    @abstractmethod
    async def find_active(self) -> list[R]:
        ...

    @abstractmethod
    async def is_name_taken(self, name: str, exclude_id: str | None = None) -> bool:
        ...

    @abstractmethod
    async def find_with_stats(self) -> list[ReferenceDataUsage[R]]:
        """Every live row with its usage count and last-used timestamp."""
        ...

    @abstractmethod
    async def toggle_active(self, entity_id: str, acting_user_id: str | None = None) -> R:
        ...

    @abstractmethod
    async def get_name_map(self) -> dict[str, str]:
        """id → name for all rows, soft-deleted ones included."""
        ...


class ClientRepository(ReferenceDataRepository[Client]):
    """Port for client persistence."""


class ActivityRepository(ReferenceDataRepository[Activity]):
    """Port for activity persistence."""


class OutcomeRepository(ReferenceDataRepository[Outcome]):
    """Port for outcome persistence."""
