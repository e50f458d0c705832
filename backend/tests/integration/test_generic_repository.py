"""Integration tests for the audited generic repository over SQLite."""

from datetime import date

import pytest
from sqlalchemy import select

from carelog.domain.entities import AuditAction, ServiceLog, SortDirection
from carelog.domain.exceptions import (
    BulkOperationError,
    DomainValidationError,
    DuplicateEntityError,
    EntityNotFoundError,
)
from carelog.infrastructure.database.models import AuditLogModel, ClientModel

ADMIN_ID = "admin-1"


@pytest.mark.asyncio
async def test_each_mutation_appends_one_matching_audit_entry(repos):
    client = await repos.clients.create({"name": "Harbour Clinic"}, ADMIN_ID)
    await repos.clients.update(client.id, {"name": "Harbour Clinic East"}, ADMIN_ID)
    await repos.clients.soft_delete(client.id, ADMIN_ID)

    history = await repos.audit_log.find_for_record("clients", client.id)

    assert [e.action for e in history] == [
        AuditAction.INSERT,
        AuditAction.UPDATE,
        AuditAction.DELETE,
    ]
    assert all(e.record_id == client.id for e in history)
    assert all(e.user_id == ADMIN_ID for e in history)
    assert history[0].old_values is None
    assert history[0].new_values["name"] == "Harbour Clinic"
    assert history[1].old_values["name"] == "Harbour Clinic"
    assert history[1].new_values["name"] == "Harbour Clinic East"
    assert history[2].new_values["deleted_at"] is not None


@pytest.mark.asyncio
async def test_soft_deleted_rows_are_invisible(repos):
    client = await repos.clients.create({"name": "Gone Soon"}, ADMIN_ID)
    await repos.clients.soft_delete(client.id, ADMIN_ID)

    assert await repos.clients.find_by_id(client.id) is None
    assert await repos.clients.count() == 0
    assert (await repos.clients.find_all()).total == 0
    with pytest.raises(EntityNotFoundError):
        await repos.clients.update(client.id, {"name": "Back"}, ADMIN_ID)
    with pytest.raises(EntityNotFoundError):
        await repos.clients.soft_delete(client.id, ADMIN_ID)


@pytest.mark.asyncio
async def test_hard_delete_removes_row_even_when_soft_deleted(repos, session):
    client = await repos.clients.create({"name": "Temporary"}, ADMIN_ID)
    await repos.clients.soft_delete(client.id, ADMIN_ID)

    assert await repos.clients.hard_delete(client.id, ADMIN_ID) is True

    result = await session.execute(select(ClientModel).where(ClientModel.id == int(client.id)))
    assert result.scalar_one_or_none() is None
    assert await repos.clients.hard_delete(client.id, ADMIN_ID) is False


@pytest.mark.asyncio
async def test_hard_delete_of_unknown_id_returns_false(repos):
    assert await repos.clients.hard_delete("12345") is False
    assert await repos.clients.hard_delete("not-a-number") is False


@pytest.mark.asyncio
async def test_pages_cover_every_row_exactly_once(repos):
    for i in range(7):
        await repos.clients.create({"name": f"Client {i}"}, ADMIN_ID)

    seen: list[str] = []
    totals = set()
    for page in (1, 2, 3):
        result = await repos.clients.find_all(
            page=page, limit=3, order_by="name", order_direction=SortDirection.ASC
        )
        totals.add(result.total)
        assert result.total_pages == 3
        seen.extend(item.id for item in result.items)

    assert totals == {7}
    assert len(seen) == 7
    assert len(set(seen)) == 7
    empty = await repos.clients.find_all(page=4, limit=3)
    assert empty.items == []
    assert empty.total == 7


@pytest.mark.asyncio
async def test_limit_is_clamped_to_max_page_size(repos):
    await repos.clients.create({"name": "Only One"}, ADMIN_ID)
    result = await repos.clients.find_all(limit=10_000)
    assert result.limit == 100


@pytest.mark.asyncio
async def test_find_all_rejects_unknown_sort_and_filter_fields(repos):
    with pytest.raises(DomainValidationError):
        await repos.clients.find_all(order_by="password")
    with pytest.raises(DomainValidationError):
        await repos.clients.find_all(where={"secret": 1})


@pytest.mark.asyncio
async def test_find_all_filters_by_equality(repos):
    await repos.clients.create({"name": "Active"}, ADMIN_ID)
    await repos.clients.create({"name": "Dormant", "is_active": False}, ADMIN_ID)

    result = await repos.clients.find_all(where={"is_active": False})

    assert [c.name for c in result.items] == ["Dormant"]
    assert await repos.clients.count({"is_active": True}) == 1


@pytest.mark.asyncio
async def test_storage_mapping_round_trips_domain_fields(repos):
    values = {
        "id": "3f1e2d4c-0000-4000-8000-000000000001",
        "user_id": "user-a",
        "client_id": "7",
        "activity_id": "9",
        "service_date": date(2024, 5, 17),
        "patient_count": 3,
        "is_draft": False,
    }
    model = repos.service_logs.model(**repos.service_logs._to_storage_row(values))
    log = repos.service_logs._to_domain(model)

    assert isinstance(log, ServiceLog)
    for key, value in values.items():
        assert getattr(log, key) == value


@pytest.mark.asyncio
async def test_duplicate_name_is_rejected_case_insensitively(repos):
    await repos.clients.create({"name": "Riverside"}, ADMIN_ID)

    with pytest.raises(DuplicateEntityError) as exc_info:
        await repos.clients.create({"name": "  RIVERSIDE "}, ADMIN_ID)

    assert exc_info.value.field == "name"
    assert await repos.clients.count() == 1


@pytest.mark.asyncio
async def test_name_is_reusable_after_soft_delete(repos):
    first = await repos.clients.create({"name": "Riverside"}, ADMIN_ID)
    await repos.clients.soft_delete(first.id, ADMIN_ID)

    second = await repos.clients.create({"name": "Riverside"}, ADMIN_ID)

    assert second.id != first.id


@pytest.mark.asyncio
async def test_rename_onto_existing_name_is_rejected(repos):
    await repos.clients.create({"name": "Alpha"}, ADMIN_ID)
    beta = await repos.clients.create({"name": "Beta"}, ADMIN_ID)

    with pytest.raises(DuplicateEntityError):
        await repos.clients.update(beta.id, {"name": "alpha"}, ADMIN_ID)

    assert (await repos.clients.find_by_id(beta.id)).name == "Beta"


@pytest.mark.asyncio
async def test_bulk_create_rolls_back_whole_batch_and_reports_index(repos):
    await repos.clients.create({"name": "Existing"}, ADMIN_ID)

    with pytest.raises(BulkOperationError) as exc_info:
        await repos.clients.bulk_create(
            [{"name": "New One"}, {"name": "New Two"}, {"name": "existing"}], ADMIN_ID
        )

    assert exc_info.value.index == 2
    assert isinstance(exc_info.value.cause, DuplicateEntityError)
    assert await repos.clients.count() == 1


@pytest.mark.asyncio
async def test_bulk_create_rejects_duplicates_within_the_batch(repos):
    with pytest.raises(BulkOperationError) as exc_info:
        await repos.clients.bulk_create([{"name": "Twin"}, {"name": "twin"}], ADMIN_ID)

    assert exc_info.value.index == 1
    assert await repos.clients.count() == 0


@pytest.mark.asyncio
async def test_bulk_create_returns_items_in_input_order(repos):
    created = await repos.activities.bulk_create(
        [{"name": "Group"}, {"name": "Clinic"}, {"name": "Phone"}], ADMIN_ID
    )
    assert [a.name for a in created] == ["Group", "Clinic", "Phone"]
    assert await repos.activities.count() == 3


@pytest.mark.asyncio
async def test_update_with_empty_patch_leaves_row_and_audit_untouched(repos, session):
    client = await repos.clients.create({"name": "Steady"}, ADMIN_ID)

    unchanged = await repos.clients.update(client.id, {}, ADMIN_ID)

    assert unchanged.updated_at == client.updated_at
    entries = (await session.execute(select(AuditLogModel))).scalars().all()
    assert len(entries) == 1


@pytest.mark.asyncio
async def test_failed_audit_write_does_not_undo_the_mutation(engine, repos):
    async with engine.begin() as conn:
        await conn.run_sync(AuditLogModel.__table__.drop)

    client = await repos.clients.create({"name": "Unaudited"}, ADMIN_ID)

    assert (await repos.clients.find_by_id(client.id)).name == "Unaudited"
