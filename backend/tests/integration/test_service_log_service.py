"""Integration tests for ServiceLogService rules over real repositories."""

from datetime import date

import pytest

from carelog.application.schemas import (
    PatientEntryInput,
    ServiceLogCreate,
    ServiceLogUpdate,
)
from carelog.application.services import ServiceLogService
from carelog.domain.entities import ActingUser, AppointmentType, ServiceLogFilter, UserRole
from carelog.domain.exceptions import (
    AuthenticationRequiredError,
    DomainValidationError,
    EntityNotFoundError,
    PermissionDeniedError,
)

ADMIN = ActingUser(id="admin-1", role=UserRole.ADMIN)
ALICE = ActingUser(id="user-a")
BOB = ActingUser(id="user-b")


@pytest.fixture
def service(repos) -> ServiceLogService:
    return ServiceLogService(
        repos.service_logs,
        repos.patient_entries,
        repos.clients,
        repos.activities,
        repos.outcomes,
    )


def _create(reference, *types: AppointmentType, is_draft: bool = True) -> ServiceLogCreate:
    return ServiceLogCreate(
        client_id=reference.client.id,
        activity_id=reference.activity.id,
        service_date=date(2024, 4, 2),
        is_draft=is_draft,
        entries=[
            PatientEntryInput(appointment_type=t, outcome_id=reference.improved.id)
            for t in types or (AppointmentType.NEW,)
        ],
    )


@pytest.mark.asyncio
async def test_create_sets_owner_and_patient_count(service, reference):
    log = await service.create_log(
        ALICE, _create(reference, AppointmentType.NEW, AppointmentType.DNA)
    )

    assert log.user_id == "user-a"
    assert log.patient_count == 2
    assert log.is_draft is True
    assert log.submitted_at is None


@pytest.mark.asyncio
async def test_create_submitted_log_stamps_submitted_at(service, reference):
    log = await service.create_log(ALICE, _create(reference, is_draft=False))
    assert log.submitted_at is not None


@pytest.mark.asyncio
async def test_create_rejects_inactive_reference(service, repos, reference):
    await repos.activities.toggle_active(reference.activity.id, "admin-1")

    with pytest.raises(DomainValidationError) as exc_info:
        await service.create_log(ALICE, _create(reference))
    assert exc_info.value.field == "activity_id"


@pytest.mark.asyncio
async def test_create_rejects_unknown_outcome(service, reference):
    data = _create(reference)
    data.entries[0].outcome_id = "999"

    with pytest.raises(EntityNotFoundError):
        await service.create_log(ALICE, data)


@pytest.mark.asyncio
async def test_anonymous_caller_is_rejected(service, reference):
    with pytest.raises(AuthenticationRequiredError):
        await service.create_log(None, _create(reference))


@pytest.mark.asyncio
async def test_candidate_lists_only_own_logs(service, reference):
    await service.create_log(ALICE, _create(reference))
    await service.create_log(BOB, _create(reference))

    mine = await service.list_logs(ALICE, ServiceLogFilter(user_id="user-b"))
    everything = await service.list_logs(ADMIN)

    assert [item.log.user_id for item in mine.items] == ["user-a"]
    assert everything.total == 2


@pytest.mark.asyncio
async def test_other_users_log_is_forbidden(service, reference):
    log = await service.create_log(ALICE, _create(reference))

    with pytest.raises(PermissionDeniedError):
        await service.get_log(BOB, log.id)
    assert (await service.get_log(ADMIN, log.id)).log.id == log.id


@pytest.mark.asyncio
async def test_owner_cannot_edit_after_submit_but_admin_can(service, reference):
    log = await service.create_log(ALICE, _create(reference))
    await service.submit(ALICE, log.id)

    with pytest.raises(PermissionDeniedError):
        await service.update_log(ALICE, log.id, ServiceLogUpdate(service_date=date(2024, 4, 3)))
    with pytest.raises(PermissionDeniedError):
        await service.delete_log(ALICE, log.id)

    updated = await service.update_log(
        ADMIN, log.id, ServiceLogUpdate(service_date=date(2024, 4, 3))
    )
    assert updated.service_date == date(2024, 4, 3)


@pytest.mark.asyncio
async def test_update_replaces_entries(service, reference):
    log = await service.create_log(ALICE, _create(reference))

    updated = await service.update_log(
        ALICE,
        log.id,
        ServiceLogUpdate(
            entries=[
                PatientEntryInput(
                    appointment_type=AppointmentType.FOLLOWUP,
                    outcome_id=reference.referred.id,
                ),
                PatientEntryInput(
                    appointment_type=AppointmentType.DNA, outcome_id=reference.referred.id
                ),
            ]
        ),
    )

    assert updated.patient_count == 2
    details = await service.get_log(ALICE, log.id)
    assert {e.outcome_name for e in details.entries} == {"Referred"}


@pytest.mark.asyncio
async def test_only_owner_submits_and_only_admin_reverts(service, reference):
    log = await service.create_log(ALICE, _create(reference))

    with pytest.raises(PermissionDeniedError):
        await service.submit(BOB, log.id)
    await service.submit(ALICE, log.id)

    with pytest.raises(PermissionDeniedError):
        await service.revert_to_draft(ALICE, log.id)
    reverted = await service.revert_to_draft(ADMIN, log.id)
    assert reverted.is_draft is True


@pytest.mark.asyncio
async def test_drafts_and_deletion(service, reference):
    draft = await service.create_log(ALICE, _create(reference))
    await service.create_log(ALICE, _create(reference, is_draft=False))

    assert [d.id for d in await service.list_drafts(ALICE)] == [draft.id]

    await service.delete_log(ALICE, draft.id)
    with pytest.raises(EntityNotFoundError):
        await service.get_log(ALICE, draft.id)


@pytest.mark.asyncio
async def test_bulk_delete_by_user_is_admin_only(service, reference):
    await service.create_log(ALICE, _create(reference))
    await service.create_log(ALICE, _create(reference))
    await service.create_log(BOB, _create(reference))

    with pytest.raises(PermissionDeniedError):
        await service.bulk_delete_by_user(ALICE, "user-b")

    assert await service.bulk_delete_by_user(ADMIN, "user-a") == 2
    assert (await service.list_logs(ADMIN)).total == 1


@pytest.mark.asyncio
async def test_statistics_are_scoped_for_candidates(service, reference):
    await service.create_log(ALICE, _create(reference, AppointmentType.NEW))
    await service.create_log(BOB, _create(reference, AppointmentType.DNA))

    stats = await service.get_statistics(ALICE)

    assert stats.total_logs == 1
    assert stats.appointments.dna == 0
