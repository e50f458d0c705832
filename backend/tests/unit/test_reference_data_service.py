"""Unit tests for the ReferenceDataService."""

from dataclasses import replace

import pytest

from carelog.application.interfaces import ClientRepository
from carelog.application.schemas import ReferenceDataCreate, ReferenceDataUpdate
from carelog.application.services import ReferenceDataService
from carelog.domain.entities import (
    ActingUser,
    Client,
    PaginatedResult,
    ReferenceDataUsage,
    UserRole,
)
from carelog.domain.exceptions import (
    AuthenticationRequiredError,
    EntityNotFoundError,
    PermissionDeniedError,
)

ADMIN = ActingUser(id="admin-1", role=UserRole.ADMIN)
CANDIDATE = ActingUser(id="user-a")


class FakeClientRepository(ClientRepository):
    """In-memory fake repository for unit testing."""

    def __init__(self):
        self._clients: dict[str, Client] = {}
        self._next_id = 1
        self.acting_users: list[str | None] = []

    async def find_by_id(self, entity_id):
        client = self._clients.get(entity_id)
        return client if client and not client.is_deleted else None

    async def find_all(self, *, page=1, limit=None, order_by=None, order_direction=None, where=None):
        items = [c for c in self._clients.values() if not c.is_deleted]
        if where and "is_active" in where:
            items = [c for c in items if c.is_active == where["is_active"]]
        limit = limit or 20
        return PaginatedResult.build(
            items[(page - 1) * limit : page * limit], len(items), page, limit
        )

    async def create(self, data, acting_user_id=None):
        client = Client(name=data["name"], is_active=data.get("is_active", True))
        client.id = str(self._next_id)
        self._next_id += 1
        self._clients[client.id] = client
        self.acting_users.append(acting_user_id)
        return client

    async def update(self, entity_id, patch, acting_user_id=None):
        client = await self.find_by_id(entity_id)
        if client is None:
            raise EntityNotFoundError("Client", entity_id)
        self._clients[entity_id] = replace(client, **patch)
        self.acting_users.append(acting_user_id)
        return self._clients[entity_id]

    async def soft_delete(self, entity_id, acting_user_id=None):
        await self.update(entity_id, {"deleted_at": "now"}, acting_user_id)

    async def hard_delete(self, entity_id, acting_user_id=None):
        return self._clients.pop(entity_id, None) is not None

    async def bulk_create(self, items, acting_user_id=None):
        return [await self.create(item, acting_user_id) for item in items]

    async def count(self, where=None):
        return (await self.find_all(where=where)).total

    async def find_by_name(self, fragment):
        return [c for c in self._clients.values() if fragment.lower() in c.name.lower()]

    async def find_active(self):
        return [c for c in self._clients.values() if c.is_active and not c.is_deleted]

    async def is_name_taken(self, name, exclude_id=None):
        return any(c.name.lower() == name.lower() for c in self._clients.values())

    async def find_with_stats(self):
        return [ReferenceDataUsage(item=c) for c in self._clients.values()]

    async def toggle_active(self, entity_id, acting_user_id=None):
        client = await self.find_by_id(entity_id)
        return await self.update(entity_id, {"is_active": not client.is_active}, acting_user_id)

    async def get_name_map(self):
        return {c.id: c.name for c in self._clients.values()}


@pytest.fixture
def repository() -> FakeClientRepository:
    return FakeClientRepository()


@pytest.fixture
def service(repository: FakeClientRepository) -> ReferenceDataService:
    return ReferenceDataService(repository, "Client")


@pytest.mark.asyncio
async def test_admin_creates_and_acting_user_is_passed_through(service, repository):
    client = await service.create_item(ADMIN, ReferenceDataCreate(name="North"))

    assert client.name == "North"
    assert repository.acting_users == ["admin-1"]


@pytest.mark.asyncio
async def test_candidate_can_read_but_not_write(service):
    created = await service.create_item(ADMIN, ReferenceDataCreate(name="North"))

    assert (await service.get_item(CANDIDATE, created.id)).name == "North"
    with pytest.raises(PermissionDeniedError):
        await service.create_item(CANDIDATE, ReferenceDataCreate(name="South"))
    with pytest.raises(PermissionDeniedError):
        await service.delete_item(CANDIDATE, created.id)
    with pytest.raises(PermissionDeniedError):
        await service.list_with_stats(CANDIDATE)


@pytest.mark.asyncio
async def test_reads_require_an_acting_user(service):
    with pytest.raises(AuthenticationRequiredError):
        await service.list_active(None)


@pytest.mark.asyncio
async def test_get_missing_item_raises_not_found(service):
    with pytest.raises(EntityNotFoundError):
        await service.get_item(ADMIN, "404")


@pytest.mark.asyncio
async def test_update_only_sends_supplied_fields(service):
    created = await service.create_item(ADMIN, ReferenceDataCreate(name="North"))

    updated = await service.update_item(ADMIN, created.id, ReferenceDataUpdate(is_active=False))

    assert updated.name == "North"
    assert updated.is_active is False


@pytest.mark.asyncio
async def test_list_items_filters_on_active_flag(service):
    await service.create_item(ADMIN, ReferenceDataCreate(name="On"))
    await service.create_item(ADMIN, ReferenceDataCreate(name="Off", is_active=False))

    result = await service.list_items(CANDIDATE, is_active=False)

    assert [c.name for c in result.items] == ["Off"]


@pytest.mark.asyncio
async def test_deleted_item_disappears(service):
    created = await service.create_item(ADMIN, ReferenceDataCreate(name="Gone"))

    await service.delete_item(ADMIN, created.id)

    with pytest.raises(EntityNotFoundError):
        await service.get_item(ADMIN, created.id)
