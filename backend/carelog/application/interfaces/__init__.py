from .repository import Repository
from .audit_log_repository import AuditLogRepository
from .reference_data_repository import (
    ActivityRepository,
    ClientRepository,
    OutcomeRepository,
    ReferenceDataRepository,
)
from .service_log_repository import ServiceLogRepository
from .patient_entry_repository import PatientEntryRepository
from .export_writer import ExportWriter

__all__ = [
    "Repository",
    "AuditLogRepository",
    "ActivityRepository",
    "ClientRepository",
    "OutcomeRepository",
    "ReferenceDataRepository",
    "ServiceLogRepository",
    "PatientEntryRepository",
    "ExportWriter",
]
