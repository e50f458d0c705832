"""Abstract repository interface (port) for PatientEntry persistence."""

from abc import abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

from carelog.domain.entities import (
    PaginatedResult,
    PatientEntry,
    PatientEntryWithOutcome,
    ServiceLogEntryStats,
)

from .repository import Repository


class PatientEntryRepository(Repository[PatientEntry]):
    """Port for patient entry persistence."""

    @abstractmethod
    async def find_by_service_log(
        self, service_log_id: str, *, page: int = 1, limit: int | None = None
    ) -> PaginatedResult[PatientEntry]:
        ...

    @abstractmethod
    async def find_by_service_log_ids(
        self, service_log_ids: Sequence[str]
    ) -> dict[str, list[PatientEntry]]:
        """Batch lookup for many logs in one query, grouped by log id."""
        ...

    @abstractmethod
    async def find_by_outcome(
        self, outcome_id: str, *, page: int = 1, limit: int | None = None
    ) -> PaginatedResult[PatientEntry]:
        ...

    @abstractmethod
    async def find_by_service_log_with_outcomes(
        self, service_log_id: str
    ) -> list[PatientEntryWithOutcome]:
        ...

    @abstractmethod
    async def get_service_log_stats(self, service_log_id: str) -> ServiceLogEntryStats:
        ...

    @abstractmethod
    async def bulk_create_for_service_log(
        self,
        service_log_id: str,
        entries: Sequence[Mapping[str, Any]],
        acting_user_id: str | None = None,
    ) -> list[PatientEntry]:
        ...

    @abstractmethod
    async def delete_by_service_log(
        self, service_log_id: str, acting_user_id: str | None = None
    ) -> int:
        """Soft-delete all entries of a log with a single audit entry."""
        ...
