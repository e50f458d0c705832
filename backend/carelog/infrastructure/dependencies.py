"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from carelog.config import get_settings
from carelog.application.services import (
    AuditService,
    ReferenceDataService,
    ReportingService,
    ServiceLogService,
)
from carelog.domain.entities import ActingUser, ExportFormat, UserRole
from carelog.infrastructure.database.session import get_db_session
from carelog.infrastructure.database.repositories import (
    SQLAlchemyActivityRepository,
    SQLAlchemyAuditLogRepository,
    SQLAlchemyClientRepository,
    SQLAlchemyOutcomeRepository,
    SQLAlchemyPatientEntryRepository,
    SQLAlchemyServiceLogRepository,
)
from carelog.infrastructure.export import CsvExportWriter, ExcelExportWriter


async def get_acting_user(
    x_user_id: str | None = Header(None),
    x_user_role: str | None = Header(None),
) -> ActingUser | None:
    """The user the upstream auth layer vouched for, or None if anonymous.

    Services raise AuthenticationRequiredError for a None actor, so
    endpoints that need a user get a 401 from the error mapping.
    """
    if not x_user_id:
        return None
    try:
        role = UserRole((x_user_role or UserRole.CANDIDATE.value).lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown user role '{x_user_role}'",
        ) from None
    return ActingUser(id=x_user_id, role=role)


async def get_client_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[ReferenceDataService, None]:
    """Provides a ReferenceDataService bound to the clients table."""
    yield ReferenceDataService(SQLAlchemyClientRepository(session), "Client")


async def get_activity_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[ReferenceDataService, None]:
    """Provides a ReferenceDataService bound to the activities table."""
    yield ReferenceDataService(SQLAlchemyActivityRepository(session), "Activity")


async def get_outcome_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[ReferenceDataService, None]:
    """Provides a ReferenceDataService bound to the outcomes table."""
    yield ReferenceDataService(SQLAlchemyOutcomeRepository(session), "Outcome")


def _build_service_log_service(session: AsyncSession) -> ServiceLogService:
    settings = get_settings()
    audit_log = SQLAlchemyAuditLogRepository(session)
    patient_entries = SQLAlchemyPatientEntryRepository(session, audit_log)
    return ServiceLogService(
        service_logs=SQLAlchemyServiceLogRepository(session, audit_log, patient_entries),
        patient_entries=patient_entries,
        clients=SQLAlchemyClientRepository(session, audit_log),
        activities=SQLAlchemyActivityRepository(session, audit_log),
        outcomes=SQLAlchemyOutcomeRepository(session, audit_log),
        drafts_limit=settings.drafts_limit,
        breakdown_limit=settings.statistics_breakdown_limit,
    )


async def get_service_log_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[ServiceLogService, None]:
    """Provides a ServiceLogService with all of its repositories on one session."""
    yield _build_service_log_service(session)


def build_reporting_service(session: AsyncSession) -> ReportingService:
    settings = get_settings()
    patient_entries = SQLAlchemyPatientEntryRepository(session)
    return ReportingService(
        service_logs=SQLAlchemyServiceLogRepository(session, patient_entries=patient_entries),
        patient_entries=patient_entries,
        clients=SQLAlchemyClientRepository(session),
        activities=SQLAlchemyActivityRepository(session),
        outcomes=SQLAlchemyOutcomeRepository(session),
        writers={
            ExportFormat.CSV: CsvExportWriter(),
            ExportFormat.EXCEL: ExcelExportWriter(),
        },
        batch_size=settings.export_batch_size,
        progress_every=settings.export_progress_every,
        top_clients=settings.report_top_clients,
        top_outcomes=settings.report_top_outcomes,
    )


async def get_reporting_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[ReportingService, None]:
    """Provides a ReportingService for request-scoped reads (summary report)."""
    yield build_reporting_service(session)


async def get_audit_service(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AuditService, None]:
    """Provides an AuditService with the audit repository wired up."""
    yield AuditService(SQLAlchemyAuditLogRepository(session))
