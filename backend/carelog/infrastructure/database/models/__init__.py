from .audit_log import AuditLogModel
from .reference_data_models import ActivityModel, ClientModel, OutcomeModel
from .service_log_models import PatientEntryModel, ServiceLogModel

__all__ = [
    "AuditLogModel",
    "ActivityModel",
    "ClientModel",
    "OutcomeModel",
    "PatientEntryModel",
    "ServiceLogModel",
]
