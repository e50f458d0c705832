"""Unit tests for the shared authorization helpers."""

from datetime import date

import pytest

from carelog.application.services.access import (
    can_edit,
    can_view,
    require_actor,
    require_admin,
    scope_filter,
)
from carelog.domain.entities import ActingUser, ServiceLog, ServiceLogFilter, UserRole
from carelog.domain.exceptions import AuthenticationRequiredError, PermissionDeniedError

ADMIN = ActingUser(id="admin-1", role=UserRole.ADMIN)
CANDIDATE = ActingUser(id="user-a")


def _log(user_id: str = "user-a", is_draft: bool = True) -> ServiceLog:
    return ServiceLog(
        user_id=user_id,
        client_id="1",
        activity_id="1",
        service_date=date(2024, 1, 1),
        is_draft=is_draft,
    )


def test_missing_actor_is_unauthenticated():
    with pytest.raises(AuthenticationRequiredError):
        require_actor(None)
    with pytest.raises(AuthenticationRequiredError):
        require_actor(ActingUser(id=""))


def test_require_admin_rejects_candidates():
    assert require_admin(ADMIN, "do it") is ADMIN
    with pytest.raises(PermissionDeniedError, match="Not allowed to do it"):
        require_admin(CANDIDATE, "do it")


def test_candidate_filter_is_narrowed_to_own_logs():
    scoped = scope_filter(CANDIDATE, ServiceLogFilter(user_id="user-b", client_id="3"))

    assert scoped.user_id == "user-a"
    assert scoped.client_id == "3"


def test_admin_filter_is_left_alone():
    assert scope_filter(ADMIN, None) == ServiceLogFilter()
    assert scope_filter(ADMIN, ServiceLogFilter(user_id="user-b")).user_id == "user-b"


def test_owner_edits_only_drafts_admin_edits_anything():
    assert can_edit(CANDIDATE, _log(is_draft=True))
    assert not can_edit(CANDIDATE, _log(is_draft=False))
    assert not can_edit(CANDIDATE, _log(user_id="user-b"))
    assert can_edit(ADMIN, _log(user_id="user-b", is_draft=False))


def test_view_requires_ownership_or_admin():
    assert can_view(CANDIDATE, _log(is_draft=False))
    assert not can_view(CANDIDATE, _log(user_id="user-b"))
    assert can_view(ADMIN, _log(user_id="user-b"))
