"""Authorization helpers shared by the application services."""

from carelog.domain.entities import ActingUser, ServiceLog, ServiceLogFilter
from carelog.domain.exceptions import AuthenticationRequiredError, PermissionDeniedError


def require_actor(actor: ActingUser | None) -> ActingUser:
    if actor is None or not actor.id:
        raise AuthenticationRequiredError()
    return actor


def require_admin(actor: ActingUser | None, action: str) -> ActingUser:
    actor = require_actor(actor)
    if not actor.is_admin:
        raise PermissionDeniedError(action)
    return actor


def scope_filter(actor: ActingUser, criteria: ServiceLogFilter | None) -> ServiceLogFilter:
    """Non-admins only ever see their own service logs."""
    criteria = criteria or ServiceLogFilter()
    if actor.is_admin:
        return criteria
    return criteria.for_user(actor.id)


def can_view(actor: ActingUser, log: ServiceLog) -> bool:
    return actor.is_admin or log.user_id == actor.id


def can_edit(actor: ActingUser, log: ServiceLog) -> bool:
    """Owners edit their drafts; admins edit anything."""
    return actor.is_admin or (log.user_id == actor.id and log.is_draft)
