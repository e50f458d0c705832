"""Service log endpoints."""

from fastapi import APIRouter, Depends, status

from carelog.application.schemas import (
    BulkDeleteResponse,
    PaginatedResponse,
    PatientEntryResponse,
    ServiceLogCreate,
    ServiceLogDetailResponse,
    ServiceLogListingResponse,
    ServiceLogResponse,
    ServiceLogStatisticsResponse,
    ServiceLogUpdate,
)
from carelog.application.services import ServiceLogService
from carelog.domain.entities import (
    ActingUser,
    ServiceLogDetails,
    ServiceLogFilter,
    ServiceLogListing,
    SortDirection,
)
from carelog.infrastructure.dependencies import get_acting_user, get_service_log_service
from carelog.presentation.api.v1.errors import DOMAIN_ERRORS, to_http_exception
from carelog.presentation.api.v1.params import PageParams, service_log_filter

router = APIRouter(prefix="/service-logs", tags=["Service Logs"])


def _listing_response(listing: ServiceLogListing) -> ServiceLogListingResponse:
    counts = listing.appointments
    return ServiceLogListingResponse(
        **ServiceLogResponse.model_validate(listing.log).model_dump(),
        client_name=listing.client_name,
        activity_name=listing.activity_name,
        new_patients=counts.new,
        followup_patients=counts.followup,
        dna_count=counts.dna,
        total_appointments=counts.total,
    )


def _detail_response(details: ServiceLogDetails) -> ServiceLogDetailResponse:
    return ServiceLogDetailResponse(
        **ServiceLogResponse.model_validate(details.log).model_dump(),
        client_name=details.client_name,
        activity_name=details.activity_name,
        entries=[
            PatientEntryResponse(
                id=e.entry.id,
                appointment_type=e.entry.appointment_type,
                outcome_id=e.entry.outcome_id,
                outcome_name=e.outcome_name,
            )
            for e in details.entries
        ],
    )


@router.get("", response_model=PaginatedResponse[ServiceLogListingResponse])
async def list_service_logs(
    criteria: ServiceLogFilter = Depends(service_log_filter),
    page: PageParams = Depends(),
    actor: ActingUser | None = Depends(get_acting_user),
    service: ServiceLogService = Depends(get_service_log_service),
) -> PaginatedResponse[ServiceLogListingResponse]:
    """Filtered, paginated listing. Candidates only ever see their own logs."""
    try:
        result = await service.list_logs(actor, criteria, **page.as_kwargs(SortDirection.DESC))
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return PaginatedResponse[ServiceLogListingResponse](
        items=[_listing_response(i) for i in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages,
    )


@router.get("/drafts", response_model=list[ServiceLogResponse])
async def list_drafts(
    actor: ActingUser | None = Depends(get_acting_user),
    service: ServiceLogService = Depends(get_service_log_service),
) -> list[ServiceLogResponse]:
    """The acting user's drafts, most recently edited first."""
    try:
        drafts = await service.list_drafts(actor)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return [ServiceLogResponse.model_validate(d) for d in drafts]


@router.get("/statistics", response_model=ServiceLogStatisticsResponse)
async def get_statistics(
    criteria: ServiceLogFilter = Depends(service_log_filter),
    actor: ActingUser | None = Depends(get_acting_user),
    service: ServiceLogService = Depends(get_service_log_service),
) -> ServiceLogStatisticsResponse:
    try:
        stats = await service.get_statistics(actor, criteria)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return ServiceLogStatisticsResponse.model_validate(stats)


@router.get("/{log_id}", response_model=ServiceLogDetailResponse)
async def get_service_log(
    log_id: str,
    actor: ActingUser | None = Depends(get_acting_user),
    service: ServiceLogService = Depends(get_service_log_service),
) -> ServiceLogDetailResponse:
    try:
        details = await service.get_log(actor, log_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return _detail_response(details)


@router.post("", response_model=ServiceLogResponse, status_code=status.HTTP_201_CREATED)
async def create_service_log(
    data: ServiceLogCreate,
    actor: ActingUser | None = Depends(get_acting_user),
    service: ServiceLogService = Depends(get_service_log_service),
) -> ServiceLogResponse:
    """Create a log with its patient entries in one transaction."""
    try:
        log = await service.create_log(actor, data)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return ServiceLogResponse.model_validate(log)


@router.patch("/{log_id}", response_model=ServiceLogResponse)
async def update_service_log(
    log_id: str,
    data: ServiceLogUpdate,
    actor: ActingUser | None = Depends(get_acting_user),
    service: ServiceLogService = Depends(get_service_log_service),
) -> ServiceLogResponse:
    try:
        log = await service.update_log(actor, log_id, data)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return ServiceLogResponse.model_validate(log)


@router.post("/{log_id}/submit", response_model=ServiceLogResponse)
async def submit_service_log(
    log_id: str,
    actor: ActingUser | None = Depends(get_acting_user),
    service: ServiceLogService = Depends(get_service_log_service),
) -> ServiceLogResponse:
    try:
        log = await service.submit(actor, log_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return ServiceLogResponse.model_validate(log)


@router.post("/{log_id}/revert-to-draft", response_model=ServiceLogResponse)
async def revert_service_log(
    log_id: str,
    actor: ActingUser | None = Depends(get_acting_user),
    service: ServiceLogService = Depends(get_service_log_service),
) -> ServiceLogResponse:
    try:
        log = await service.revert_to_draft(actor, log_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return ServiceLogResponse.model_validate(log)


@router.delete("/users/{user_id}", response_model=BulkDeleteResponse)
async def delete_user_service_logs(
    user_id: str,
    actor: ActingUser | None = Depends(get_acting_user),
    service: ServiceLogService = Depends(get_service_log_service),
) -> BulkDeleteResponse:
    """Soft-delete every service log of a user (admin only)."""
    try:
        deleted = await service.bulk_delete_by_user(actor, user_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return BulkDeleteResponse(user_id=user_id, deleted_count=deleted)


@router.delete("/{log_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_service_log(
    log_id: str,
    actor: ActingUser | None = Depends(get_acting_user),
    service: ServiceLogService = Depends(get_service_log_service),
) -> None:
    try:
        await service.delete_log(actor, log_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
