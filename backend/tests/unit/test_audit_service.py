"""Unit tests for the AuditService."""

import pytest
import pytest_asyncio

from carelog.application.interfaces import AuditLogRepository
from carelog.application.services import AuditService
from carelog.domain.entities import (
    ActingUser,
    AuditAction,
    AuditEntry,
    PaginatedResult,
    UserRole,
)
from carelog.domain.exceptions import AuthenticationRequiredError, PermissionDeniedError

ADMIN = ActingUser(id="admin-1", role=UserRole.ADMIN)


class FakeAuditLogRepository(AuditLogRepository):
    """In-memory fake repository for unit testing."""

    def __init__(self):
        self._entries: list[AuditEntry] = []

    async def append(self, entry: AuditEntry) -> AuditEntry | None:
        entry.id = len(self._entries) + 1
        self._entries.append(entry)
        return entry

    async def find_for_record(self, table_name: str, record_id: str) -> list[AuditEntry]:
        return [
            e for e in self._entries if e.table_name == table_name and e.record_id == record_id
        ]

    async def find_all(
        self,
        *,
        table_name=None,
        record_id=None,
        user_id=None,
        action=None,
        page: int = 1,
        limit: int = 50,
    ) -> PaginatedResult[AuditEntry]:
        matches = [
            e
            for e in reversed(self._entries)
            if (table_name is None or e.table_name == table_name)
            and (user_id is None or e.user_id == user_id)
            and (action is None or e.action == action)
        ]
        start = (page - 1) * limit
        return PaginatedResult.build(matches[start : start + limit], len(matches), page, limit)


@pytest_asyncio.fixture
async def service() -> AuditService:
    repository = FakeAuditLogRepository()
    seeded = [("1", AuditAction.INSERT), ("1", AuditAction.UPDATE), ("2", AuditAction.INSERT)]
    for record_id, action in seeded:
        await repository.append(
            AuditEntry(
                table_name="clients", record_id=record_id, action=action, user_id="admin-1"
            )
        )
    return AuditService(repository)


@pytest.mark.asyncio
async def test_record_history_returns_entries_of_one_record(service: AuditService):
    history = await service.record_history(ADMIN, "clients", "1")
    assert [e.action for e in history] == [AuditAction.INSERT, AuditAction.UPDATE]


@pytest.mark.asyncio
async def test_list_entries_filters_by_action(service: AuditService):
    result = await service.list_entries(ADMIN, action=AuditAction.INSERT)
    assert result.total == 2
    assert [e.record_id for e in result.items] == ["2", "1"]


@pytest.mark.asyncio
async def test_audit_is_admin_only(service: AuditService):
    with pytest.raises(PermissionDeniedError):
        await service.list_entries(ActingUser(id="user-a"))
    with pytest.raises(AuthenticationRequiredError):
        await service.record_history(None, "clients", "1")
