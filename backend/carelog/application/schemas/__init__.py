from .audit import AuditEntryResponse
from .pagination import PaginatedResponse
from .reference_data import (
    ReferenceDataBulkCreate,
    ReferenceDataCreate,
    ReferenceDataResponse,
    ReferenceDataUpdate,
    ReferenceDataUsageResponse,
)
from .report import SummaryReportResponse
from .service_log import (
    BulkDeleteResponse,
    PatientEntryInput,
    PatientEntryResponse,
    ServiceLogCreate,
    ServiceLogDetailResponse,
    ServiceLogListingResponse,
    ServiceLogResponse,
    ServiceLogStatisticsResponse,
    ServiceLogUpdate,
)

__all__ = [
    "AuditEntryResponse",
    "PaginatedResponse",
    "ReferenceDataBulkCreate",
    "ReferenceDataCreate",
    "ReferenceDataResponse",
    "ReferenceDataUpdate",
    "ReferenceDataUsageResponse",
    "SummaryReportResponse",
    "BulkDeleteResponse",
    "PatientEntryInput",
    "PatientEntryResponse",
    "ServiceLogCreate",
    "ServiceLogDetailResponse",
    "ServiceLogListingResponse",
    "ServiceLogResponse",
    "ServiceLogStatisticsResponse",
    "ServiceLogUpdate",
]
