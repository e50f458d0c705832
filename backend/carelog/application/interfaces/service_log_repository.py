"""Abstract repository interface (port) for ServiceLog persistence."""

from abc import abstractmethod
from collections.abc import AsyncIterator, Mapping, Sequence
from typing import Any

from carelog.domain.entities import (
    PaginatedResult,
    ServiceLog,
    ServiceLogDetails,
    ServiceLogFilter,
    ServiceLogListing,
    ServiceLogStatistics,
    SortDirection,
)

from .repository import Repository


class ServiceLogRepository(Repository[ServiceLog]):
    """Port for service log persistence — implemented in the infrastructure layer.

    The repository does not know who may do what; draft/submitted rules that
    depend on the acting user live in the service layer.
    """

    @abstractmethod
    async def find_by_user(
        self, user_id: str, *, page: int = 1, limit: int | None = None
    ) -> PaginatedResult[ServiceLog]:
        ...

    @abstractmethod
    async def find_by_client(
        self, client_id: str, *, page: int = 1, limit: int | None = None
    ) -> PaginatedResult[ServiceLog]:
        ...

    @abstractmethod
    async def find_by_activity(
        self, activity_id: str, *, page: int = 1, limit: int | None = None
    ) -> PaginatedResult[ServiceLog]:
        ...

    @abstractmethod
    async def find_drafts_by_user(self, user_id: str, limit: int = 50) -> list[ServiceLog]:
        """Most recently updated drafts first."""
        ...

    @abstractmethod
    async def find_with_filters(
        self,
        criteria: ServiceLogFilter,
        *,
        page: int = 1,
        limit: int | None = None,
        order_by: str | None = None,
        order_direction: SortDirection = SortDirection.DESC,
    ) -> PaginatedResult[ServiceLogListing]:
        """Listing rows with client/activity names and appointment counts."""
        ...

    @abstractmethod
    async def find_by_id_with_details(self, log_id: str) -> ServiceLogDetails | None:
        ...

    @abstractmethod
    async def create_with_entries(
        self,
        data: Mapping[str, Any],
        entries: Sequence[Mapping[str, Any]],
        acting_user_id: str | None = None,
    ) -> ServiceLog:
        """Create a log and its patient entries atomically."""
        ...

    @abstractmethod
    async def update_with_entries(
        self,
        log_id: str,
        patch: Mapping[str, Any],
        entries: Sequence[Mapping[str, Any]] | None,
        acting_user_id: str | None = None,
    ) -> ServiceLog:
        """Patch a log and, when ``entries`` is given, replace its entries atomically."""
        ...

    @abstractmethod
    async def delete_with_entries(self, log_id: str, acting_user_id: str | None = None) -> None:
        """Soft-delete a log together with its patient entries."""
        ...

    @abstractmethod
    async def submit_draft(self, log_id: str, acting_user_id: str | None = None) -> ServiceLog:
        """Draft → Submitted. Raises DomainValidationError if not a draft."""
        ...

    @abstractmethod
    async def convert_to_draft(self, log_id: str, acting_user_id: str | None = None) -> ServiceLog:
        """Submitted → Draft. Raises DomainValidationError if already a draft."""
        ...

    @abstractmethod
    async def get_statistics(
        self,
        criteria: ServiceLogFilter,
        breakdown_limit: int = 20,
        outcome_limit: int | None = None,
    ) -> ServiceLogStatistics:
        """Totals plus top-N breakdowns by client, activity and outcome."""
        ...

    @abstractmethod
    async def bulk_delete_by_user(self, user_id: str, acting_user_id: str | None = None) -> int:
        """Soft-delete every visible log of a user; returns how many."""
        ...

    @abstractmethod
    def iter_batches(
        self, criteria: ServiceLogFilter, batch_size: int
    ) -> AsyncIterator[list[ServiceLog]]:
        """Yield matching logs in fixed-size batches without loading them all."""
        ...
