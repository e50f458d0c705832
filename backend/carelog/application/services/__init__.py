from .audit_service import AuditService
from .reference_data_service import ReferenceDataService
from .reporting_service import ReportingService, build_export_rows, count_weekdays
from .service_log_service import ServiceLogService

__all__ = [
    "AuditService",
    "ReferenceDataService",
    "ReportingService",
    "ServiceLogService",
    "build_export_rows",
    "count_weekdays",
]
