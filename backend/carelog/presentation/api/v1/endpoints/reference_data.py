"""CRUD endpoints shared by clients, activities and outcomes."""

from collections.abc import Callable

from fastapi import APIRouter, Depends, Query, status

from carelog.application.schemas import (
    PaginatedResponse,
    ReferenceDataBulkCreate,
    ReferenceDataCreate,
    ReferenceDataResponse,
    ReferenceDataUpdate,
    ReferenceDataUsageResponse,
)
from carelog.application.services import ReferenceDataService
from carelog.domain.entities import ActingUser, ReferenceDataUsage, SortDirection
from carelog.infrastructure.dependencies import (
    get_acting_user,
    get_activity_service,
    get_client_service,
    get_outcome_service,
)
from carelog.presentation.api.v1.errors import DOMAIN_ERRORS, to_http_exception
from carelog.presentation.api.v1.params import PageParams


def _usage_response(usage: ReferenceDataUsage) -> ReferenceDataUsageResponse:
    return ReferenceDataUsageResponse(
        **ReferenceDataResponse.model_validate(usage.item).model_dump(),
        usage_count=usage.usage_count,
        last_used=usage.last_used,
    )


def build_reference_router(
    prefix: str, tag: str, get_service: Callable[..., ReferenceDataService]
) -> APIRouter:
    """Build the router for one lookup table; the three tables behave alike."""
    router = APIRouter(prefix=prefix, tags=[tag])

    @router.get("", response_model=PaginatedResponse[ReferenceDataResponse])
    async def list_items(
        page: PageParams = Depends(),
        is_active: bool | None = Query(None, description="Filter by active flag"),
        actor: ActingUser | None = Depends(get_acting_user),
        service: ReferenceDataService = Depends(get_service),
    ) -> PaginatedResponse[ReferenceDataResponse]:
        """Paginated list, ordered by name unless told otherwise."""
        try:
            result = await service.list_items(
                actor, is_active=is_active, **page.as_kwargs(SortDirection.ASC)
            )
        except DOMAIN_ERRORS as e:
            raise to_http_exception(e) from e
        return PaginatedResponse[ReferenceDataResponse](
            items=[ReferenceDataResponse.model_validate(i) for i in result.items],
            total=result.total,
            page=result.page,
            limit=result.limit,
            total_pages=result.total_pages,
        )

    @router.get("/active", response_model=list[ReferenceDataResponse])
    async def list_active(
        actor: ActingUser | None = Depends(get_acting_user),
        service: ReferenceDataService = Depends(get_service),
    ) -> list[ReferenceDataResponse]:
        try:
            items = await service.list_active(actor)
        except DOMAIN_ERRORS as e:
            raise to_http_exception(e) from e
        return [ReferenceDataResponse.model_validate(i) for i in items]

    @router.get("/search", response_model=list[ReferenceDataResponse])
    async def search(
        name: str = Query(..., min_length=1, description="Case-insensitive name fragment"),
        actor: ActingUser | None = Depends(get_acting_user),
        service: ReferenceDataService = Depends(get_service),
    ) -> list[ReferenceDataResponse]:
        try:
            items = await service.search(actor, name)
        except DOMAIN_ERRORS as e:
            raise to_http_exception(e) from e
        return [ReferenceDataResponse.model_validate(i) for i in items]

    @router.get("/stats", response_model=list[ReferenceDataUsageResponse])
    async def usage_stats(
        actor: ActingUser | None = Depends(get_acting_user),
        service: ReferenceDataService = Depends(get_service),
    ) -> list[ReferenceDataUsageResponse]:
        """Every live row with how often it has been used."""
        try:
            usages = await service.list_with_stats(actor)
        except DOMAIN_ERRORS as e:
            raise to_http_exception(e) from e
        return [_usage_response(u) for u in usages]

    @router.get("/{item_id}", response_model=ReferenceDataResponse)
    async def get_item(
        item_id: str,
        actor: ActingUser | None = Depends(get_acting_user),
        service: ReferenceDataService = Depends(get_service),
    ) -> ReferenceDataResponse:
        try:
            item = await service.get_item(actor, item_id)
        except DOMAIN_ERRORS as e:
            raise to_http_exception(e) from e
        return ReferenceDataResponse.model_validate(item)

    @router.post("", response_model=ReferenceDataResponse, status_code=status.HTTP_201_CREATED)
    async def create_item(
        data: ReferenceDataCreate,
        actor: ActingUser | None = Depends(get_acting_user),
        service: ReferenceDataService = Depends(get_service),
    ) -> ReferenceDataResponse:
        try:
            item = await service.create_item(actor, data)
        except DOMAIN_ERRORS as e:
            raise to_http_exception(e) from e
        return ReferenceDataResponse.model_validate(item)

    @router.post(
        "/bulk",
        response_model=list[ReferenceDataResponse],
        status_code=status.HTTP_201_CREATED,
    )
    async def bulk_create(
        data: ReferenceDataBulkCreate,
        actor: ActingUser | None = Depends(get_acting_user),
        service: ReferenceDataService = Depends(get_service),
    ) -> list[ReferenceDataResponse]:
        """All-or-nothing: one bad item rolls back the whole batch."""
        try:
            items = await service.bulk_create(actor, data.items)
        except DOMAIN_ERRORS as e:
            raise to_http_exception(e) from e
        return [ReferenceDataResponse.model_validate(i) for i in items]

    @router.patch("/{item_id}", response_model=ReferenceDataResponse)
    async def update_item(
        item_id: str,
        data: ReferenceDataUpdate,
        actor: ActingUser | None = Depends(get_acting_user),
        service: ReferenceDataService = Depends(get_service),
    ) -> ReferenceDataResponse:
        try:
            item = await service.update_item(actor, item_id, data)
        except DOMAIN_ERRORS as e:
            raise to_http_exception(e) from e
        return ReferenceDataResponse.model_validate(item)

    @router.post("/{item_id}/toggle-active", response_model=ReferenceDataResponse)
    async def toggle_active(
        item_id: str,
        actor: ActingUser | None = Depends(get_acting_user),
        service: ReferenceDataService = Depends(get_service),
    ) -> ReferenceDataResponse:
        try:
            item = await service.toggle_active(actor, item_id)
        except DOMAIN_ERRORS as e:
            raise to_http_exception(e) from e
        return ReferenceDataResponse.model_validate(item)

    @router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_item(
        item_id: str,
        actor: ActingUser | None = Depends(get_acting_user),
        service: ReferenceDataService = Depends(get_service),
    ) -> None:
        """Soft delete; the name becomes available again."""
        try:
            await service.delete_item(actor, item_id)
        except DOMAIN_ERRORS as e:
            raise to_http_exception(e) from e

    return router


clients_router = build_reference_router("/clients", "Clients", get_client_service)
activities_router = build_reference_router("/activities", "Activities", get_activity_service)
outcomes_router = build_reference_router("/outcomes", "Outcomes", get_outcome_service)
