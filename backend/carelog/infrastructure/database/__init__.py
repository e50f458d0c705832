from .base import Base
from .session import (
    async_session_factory,
    build_engine,
    build_session_factory,
    engine,
    get_db_session,
    get_session_factory,
)
from .models import (
    ActivityModel,
    AuditLogModel,
    ClientModel,
    OutcomeModel,
    PatientEntryModel,
    ServiceLogModel,
)

__all__ = [
    "Base",
    "engine",
    "async_session_factory",
    "build_engine",
    "build_session_factory",
    "get_db_session",
    "get_session_factory",
    "ActivityModel",
    "AuditLogModel",
    "ClientModel",
    "OutcomeModel",
    "PatientEntryModel",
    "ServiceLogModel",
]
