"""Pydantic DTOs for the summary report."""

from datetime import date
from typing import Any

from pydantic import BaseModel

from .service_log import DimensionCountResponse


class ReportOverviewResponse(BaseModel):
    total_service_logs: int
    total_drafts: int
    total_submitted: int
    total_patients: int
    average_patients_per_log: float
    completion_rate: int

    model_config = {"from_attributes": True}


class AppointmentTypeSummaryResponse(BaseModel):
    new_patients: int
    followup_patients: int
    dna_count: int
    total_appointments: int
    dna_rate: int

    model_config = {"from_attributes": True}


class ReportBreakdownsResponse(BaseModel):
    by_client: list[DimensionCountResponse]
    by_activity: list[DimensionCountResponse]
    by_outcome: list[DimensionCountResponse]

    model_config = {"from_attributes": True}


class ReportPeriodResponse(BaseModel):
    date_from: date | None
    date_to: date | None
    total_days: int
    weekdays: int

    model_config = {"from_attributes": True}


class AppliedFiltersResponse(BaseModel):
    filters: dict[str, Any]
    has_filters: bool

    model_config = {"from_attributes": True}


class SummaryReportResponse(BaseModel):
    """Schema returned by GET /reports/summary."""

    overview: ReportOverviewResponse
    appointment_types: AppointmentTypeSummaryResponse
    breakdowns: ReportBreakdownsResponse
    period: ReportPeriodResponse
    applied_filters: AppliedFiltersResponse

    model_config = {"from_attributes": True}
