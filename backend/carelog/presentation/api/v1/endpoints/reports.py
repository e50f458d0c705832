"""Summary report and export endpoints."""

from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from carelog.application.schemas import SummaryReportResponse
from carelog.application.services import ReportingService
from carelog.domain.entities import ActingUser, ServiceLogFilter
from carelog.infrastructure.database.session import get_session_factory
from carelog.infrastructure.dependencies import (
    build_reporting_service,
    get_acting_user,
    get_reporting_service,
)
from carelog.presentation.api.v1.errors import DOMAIN_ERRORS, to_http_exception
from carelog.presentation.api.v1.params import service_log_filter

router = APIRouter(prefix="/reports", tags=["Reports"])

_NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


@router.get("/summary", response_model=SummaryReportResponse)
async def summary_report(
    criteria: ServiceLogFilter = Depends(service_log_filter),
    actor: ActingUser | None = Depends(get_acting_user),
    service: ReportingService = Depends(get_reporting_service),
) -> SummaryReportResponse:
    """Totals, appointment mix, top breakdowns and the covered period."""
    try:
        report = await service.get_summary_report(actor, criteria)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return SummaryReportResponse.model_validate(report)


@router.get("/export")
async def export_service_logs(
    export_format: str = Query("csv", alias="format", description="csv or excel"),
    criteria: ServiceLogFilter = Depends(service_log_filter),
    actor: ActingUser | None = Depends(get_acting_user),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> StreamingResponse:
    """Stream every matching service log as CSV or XLSX.

    The body is produced after this handler returns, so the export runs on
    its own session that is closed once the stream is exhausted.
    """
    session = session_factory()
    try:
        result = build_reporting_service(session).export_service_logs(
            actor, criteria, export_format
        )
    except DOMAIN_ERRORS as e:
        await session.close()
        raise to_http_exception(e) from e

    async def _stream() -> AsyncIterator[bytes]:
        try:
            async for chunk in result.content:
                yield chunk
        finally:
            await session.close()

    return StreamingResponse(
        _stream(),
        media_type=result.media_type,
        headers={"Content-Disposition": result.content_disposition, **_NO_CACHE_HEADERS},
    )
