"""Filter criteria for service-log queries, reports and exports."""

from dataclasses import asdict, dataclass, replace
from datetime import date
from typing import Any

from carelog.domain.exceptions import DomainValidationError


@dataclass(frozen=True)
class ServiceLogFilter:
    """Optional criteria combined with AND; ``None`` means "not filtered"."""

    user_id: str | None = None
    client_id: str | None = None
    activity_id: str | None = None
    is_draft: bool | None = None
    date_from: date | None = None
    date_to: date | None = None

    def __post_init__(self) -> None:
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise DomainValidationError(
                "date_from must not be after date_to", field="date_from"
            )

    @property
    def has_filters(self) -> bool:
        return any(value is not None for value in asdict(self).values())

    def for_user(self, user_id: str) -> "ServiceLogFilter":
        """Return a copy restricted to the given user's logs."""
        return replace(self, user_id=user_id)

    def as_dict(self) -> dict[str, Any]:
        """Non-empty criteria, with dates rendered as ISO strings."""
        result: dict[str, Any] = {}
        for key, value in asdict(self).items():
            if value is None:
                continue
            result[key] = value.isoformat() if isinstance(value, date) else value
        return result
