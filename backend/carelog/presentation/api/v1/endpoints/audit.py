"""Audit trail endpoints (admin only)."""

from fastapi import APIRouter, Depends, Query

from carelog.application.schemas import AuditEntryResponse, PaginatedResponse
from carelog.application.services import AuditService
from carelog.domain.entities import ActingUser, AuditAction
from carelog.infrastructure.dependencies import get_acting_user, get_audit_service
from carelog.presentation.api.v1.errors import DOMAIN_ERRORS, to_http_exception

router = APIRouter(prefix="/audit", tags=["Audit"])


@router.get("", response_model=PaginatedResponse[AuditEntryResponse])
async def list_audit_entries(
    table_name: str | None = Query(None),
    record_id: str | None = Query(None),
    user_id: str | None = Query(None),
    action: AuditAction | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    actor: ActingUser | None = Depends(get_acting_user),
    service: AuditService = Depends(get_audit_service),
) -> PaginatedResponse[AuditEntryResponse]:
    """Newest-first audit entries, optionally filtered."""
    try:
        result = await service.list_entries(
            actor,
            table_name=table_name,
            record_id=record_id,
            user_id=user_id,
            action=action,
            page=page,
            limit=limit,
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return PaginatedResponse[AuditEntryResponse](
        items=[AuditEntryResponse.model_validate(i) for i in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
        total_pages=result.total_pages,
    )


@router.get("/{table_name}/{record_id}", response_model=list[AuditEntryResponse])
async def record_history(
    table_name: str,
    record_id: str,
    actor: ActingUser | None = Depends(get_acting_user),
    service: AuditService = Depends(get_audit_service),
) -> list[AuditEntryResponse]:
    """Full history of one record, oldest first."""
    try:
        entries = await service.record_history(actor, table_name, record_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return [AuditEntryResponse.model_validate(e) for e in entries]
