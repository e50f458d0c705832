from .audit_log_repository import SQLAlchemyAuditLogRepository
from .base_repository import SQLAlchemyRepository
from .reference_data_repository import (
    SQLAlchemyActivityRepository,
    SQLAlchemyClientRepository,
    SQLAlchemyOutcomeRepository,
    SQLAlchemyReferenceDataRepository,
)
from .patient_entry_repository import SQLAlchemyPatientEntryRepository
from .service_log_repository import SQLAlchemyServiceLogRepository

__all__ = [
    "SQLAlchemyAuditLogRepository",
    "SQLAlchemyRepository",
    "SQLAlchemyActivityRepository",
    "SQLAlchemyClientRepository",
    "SQLAlchemyOutcomeRepository",
    "SQLAlchemyReferenceDataRepository",
    "SQLAlchemyPatientEntryRepository",
    "SQLAlchemyServiceLogRepository",
]
