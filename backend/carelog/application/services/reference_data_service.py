"""Application service for clients, activities and outcomes."""

from carelog.application.interfaces import ReferenceDataRepository
from carelog.application.schemas import ReferenceDataCreate, ReferenceDataUpdate
from carelog.domain.entities import (
    ActingUser,
    PaginatedResult,
    ReferenceData,
    ReferenceDataUsage,
    SortDirection,
)
from carelog.domain.exceptions import EntityNotFoundError

from .access import require_actor, require_admin


class ReferenceDataService:
    """Orchestrates lookup-table use cases. Depends on the repository port (DI).

    Any authenticated user may read; only admins may change anything.
    """

    def __init__(self, repository: ReferenceDataRepository, entity_name: str):
        self._repository = repository
        self._entity_name = entity_name

    async def list_items(
        self,
        actor: ActingUser | None,
        *,
        page: int = 1,
        limit: int | None = None,
        order_by: str | None = None,
        order_direction: SortDirection = SortDirection.ASC,
        is_active: bool | None = None,
    ) -> PaginatedResult[ReferenceData]:
        require_actor(actor)
        where = {"is_active": is_active} if is_active is not None else None
        return await self._repository.find_all(
            page=page,
            limit=limit,
            order_by=order_by,
            order_direction=order_direction,
            where=where,
        )

    async def list_active(self, actor: ActingUser | None) -> list[ReferenceData]:
        require_actor(actor)
        return await self._repository.find_active()

    async def search(self, actor: ActingUser | None, fragment: str) -> list[ReferenceData]:
        require_actor(actor)
        return await self._repository.find_by_name(fragment)

    async def get_item(self, actor: ActingUser | None, item_id: str) -> ReferenceData:
        require_actor(actor)
        item = await self._repository.find_by_id(item_id)
        if item is None:
            raise EntityNotFoundError(self._entity_name, item_id)
        return item

    async def list_with_stats(
        self, actor: ActingUser | None
    ) -> list[ReferenceDataUsage[ReferenceData]]:
        require_admin(actor, f"view {self._entity_name.lower()} statistics")
        return await self._repository.find_with_stats()

    async def create_item(
        self, actor: ActingUser | None, data: ReferenceDataCreate
    ) -> ReferenceData:
        actor = require_admin(actor, f"create a {self._entity_name.lower()}")
        return await self._repository.create(data.model_dump(), actor.id)

    async def bulk_create(
        self, actor: ActingUser | None, items: list[ReferenceDataCreate]
    ) -> list[ReferenceData]:
        actor = require_admin(actor, f"create a {self._entity_name.lower()}")
        return await self._repository.bulk_create([i.model_dump() for i in items], actor.id)

    async def update_item(
        self, actor: ActingUser | None, item_id: str, data: ReferenceDataUpdate
    ) -> ReferenceData:
        actor = require_admin(actor, f"update a {self._entity_name.lower()}")
        patch = data.model_dump(exclude_unset=True, exclude_none=True)
        return await self._repository.update(item_id, patch, actor.id)

    async def toggle_active(self, actor: ActingUser | None, item_id: str) -> ReferenceData:
        actor = require_admin(actor, f"update a {self._entity_name.lower()}")
        return await self._repository.toggle_active(item_id, actor.id)

    async def delete_item(self, actor: ActingUser | None, item_id: str) -> None:
        actor = require_admin(actor, f"delete a {self._entity_name.lower()}")
        await self._repository.soft_delete(item_id, actor.id)
