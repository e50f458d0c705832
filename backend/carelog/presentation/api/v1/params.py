"""Shared query-parameter dependencies for v1 endpoints."""

from datetime import date

from fastapi import Query

from carelog.domain.entities import ServiceLogFilter, SortDirection
from carelog.domain.exceptions import DomainValidationError

from .errors import to_http_exception


def service_log_filter(
    user_id: str | None = Query(None, description="Only logs of this user (admins)"),
    client_id: str | None = Query(None),
    activity_id: str | None = Query(None),
    is_draft: bool | None = Query(None),
    date_from: date | None = Query(None, description="Inclusive lower bound on service date"),
    date_to: date | None = Query(None, description="Inclusive upper bound on service date"),
) -> ServiceLogFilter:
    try:
        return ServiceLogFilter(
            user_id=user_id,
            client_id=client_id,
            activity_id=activity_id,
            is_draft=is_draft,
            date_from=date_from,
            date_to=date_to,
        )
    except DomainValidationError as e:
        raise to_http_exception(e) from e


class PageParams:
    """page / limit / order_by / order_direction query parameters."""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: int | None = Query(None, ge=1, le=100),
        order_by: str | None = Query(None),
        order_direction: SortDirection | None = Query(None),
    ):
        self.page = page
        self.limit = limit
        self.order_by = order_by
        self.order_direction = order_direction

    def as_kwargs(self, default_direction: SortDirection) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "order_by": self.order_by,
            "order_direction": self.order_direction or default_direction,
        }
