"""Generic repository port shared by every audited entity repository."""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any, Generic, TypeVar

from carelog.domain.entities import PaginatedResult, SortDirection

T = TypeVar("T")


class Repository(ABC, Generic[T]):
    """Port for CRUD persistence with soft delete and an audit side effect.

    Every mutating method writes exactly one audit entry in the same
    transaction as the row change. Reads never return soft-deleted rows.
    """

    @abstractmethod
    async def find_by_id(self, entity_id: str) -> T | None:
        """Retrieve a live entity by id."""
        ...

    @abstractmethod
    async def find_all(
        self,
        *,
        page: int = 1,
        limit: int | None = None,
        order_by: str | None = None,
        order_direction: SortDirection = SortDirection.DESC,
        where: Mapping[str, Any] | None = None,
    ) -> PaginatedResult[T]:
        """Retrieve one page of live entities matching equality filters."""
        ...

    @abstractmethod
    async def create(self, data: Mapping[str, Any], acting_user_id: str | None = None) -> T:
        """Persist a new entity and return it as stored."""
        ...

    @abstractmethod
    async def update(
        self, entity_id: str, patch: Mapping[str, Any], acting_user_id: str | None = None
    ) -> T:
        """Merge the supplied fields into a live entity."""
        ...

    @abstractmethod
    async def soft_delete(self, entity_id: str, acting_user_id: str | None = None) -> None:
        """Hide a live entity from reads without removing it."""
        ...

    @abstractmethod
    async def hard_delete(self, entity_id: str, acting_user_id: str | None = None) -> bool:
        """Physically remove a row. Returns False if it did not exist."""
        ...

    @abstractmethod
    async def bulk_create(
        self, items: Sequence[Mapping[str, Any]], acting_user_id: str | None = None
    ) -> list[T]:
        """Create all items or none of them."""
        ...

    @abstractmethod
    async def count(self, where: Mapping[str, Any] | None = None) -> int:
        """Count live entities matching equality filters."""
        ...
