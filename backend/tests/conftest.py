"""Shared fixtures: an in-memory SQLite store and seeded reference data."""

from collections.abc import AsyncIterator
from datetime import date
from types import SimpleNamespace

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from carelog.domain.entities import AppointmentType, ServiceLog
from carelog.infrastructure.database import Base, build_engine, build_session_factory
from carelog.infrastructure.database.repositories import (
    SQLAlchemyActivityRepository,
    SQLAlchemyAuditLogRepository,
    SQLAlchemyClientRepository,
    SQLAlchemyOutcomeRepository,
    SQLAlchemyPatientEntryRepository,
    SQLAlchemyServiceLogRepository,
)

ADMIN_ID = "admin-1"


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    async with build_session_factory(engine)() as session:
        yield session


@pytest_asyncio.fixture
async def repos(session: AsyncSession) -> SimpleNamespace:
    """Every repository, sharing one session and one audit trail."""
    audit_log = SQLAlchemyAuditLogRepository(session)
    patient_entries = SQLAlchemyPatientEntryRepository(session, audit_log)
    return SimpleNamespace(
        audit_log=audit_log,
        clients=SQLAlchemyClientRepository(session, audit_log),
        activities=SQLAlchemyActivityRepository(session, audit_log),
        outcomes=SQLAlchemyOutcomeRepository(session, audit_log),
        patient_entries=patient_entries,
        service_logs=SQLAlchemyServiceLogRepository(session, audit_log, patient_entries),
    )


@pytest_asyncio.fixture
async def reference(repos: SimpleNamespace) -> SimpleNamespace:
    """One client, one activity and two outcomes."""
    return SimpleNamespace(
        client=await repos.clients.create({"name": "North Clinic"}, ADMIN_ID),
        activity=await repos.activities.create({"name": "Home Visit"}, ADMIN_ID),
        improved=await repos.outcomes.create({"name": "Improved"}, ADMIN_ID),
        referred=await repos.outcomes.create({"name": "Referred"}, ADMIN_ID),
    )


@pytest_asyncio.fixture
async def make_log(repos: SimpleNamespace, reference: SimpleNamespace):
    """Factory creating a service log with entries of the given types."""

    async def _make(
        user_id: str = "user-a",
        types: list[AppointmentType] | None = None,
        *,
        is_draft: bool = False,
        service_date: date = date(2024, 3, 4),
    ) -> ServiceLog:
        types = types if types is not None else [AppointmentType.NEW]
        entries = [
            {"appointment_type": t, "outcome_id": reference.improved.id} for t in types
        ]
        return await repos.service_logs.create_with_entries(
            {
                "user_id": user_id,
                "client_id": reference.client.id,
                "activity_id": reference.activity.id,
                "service_date": service_date,
                "patient_count": len(entries),
                "is_draft": is_draft,
            },
            entries,
            user_id,
        )

    return _make
