"""Pydantic DTOs for service logs and patient entries."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from carelog.domain.entities import AppointmentType


class PatientEntryInput(BaseModel):
    """One appointment as submitted by the client."""

    appointment_type: AppointmentType
    outcome_id: str = Field(..., min_length=1)


class ServiceLogCreate(BaseModel):
    """Schema for creating a service log together with its appointments."""

    client_id: str = Field(..., min_length=1)
    activity_id: str = Field(..., min_length=1)
    service_date: date
    is_draft: bool = True
    entries: list[PatientEntryInput] = Field(..., min_length=1)


class ServiceLogUpdate(BaseModel):
    """Schema for updating a service log — all fields optional.

    When ``entries`` is supplied it replaces the existing appointments.
    """

    client_id: str | None = None
    activity_id: str | None = None
    service_date: date | None = None
    entries: list[PatientEntryInput] | None = Field(None, min_length=1)


class ServiceLogResponse(BaseModel):
    id: str
    user_id: str
    client_id: str
    activity_id: str
    service_date: date
    patient_count: int
    is_draft: bool
    submitted_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ServiceLogListingResponse(ServiceLogResponse):
    client_name: str | None = None
    activity_name: str | None = None
    new_patients: int = 0
    followup_patients: int = 0
    dna_count: int = 0
    total_appointments: int = 0


class PatientEntryResponse(BaseModel):
    id: str
    appointment_type: AppointmentType
    outcome_id: str
    outcome_name: str | None = None


class ServiceLogDetailResponse(ServiceLogResponse):
    client_name: str | None = None
    activity_name: str | None = None
    entries: list[PatientEntryResponse] = []


class DimensionCountResponse(BaseModel):
    id: str
    name: str
    count: int

    model_config = {"from_attributes": True}


class AppointmentBreakdownResponse(BaseModel):
    new: int
    followup: int
    dna: int
    total: int

    model_config = {"from_attributes": True}


class ServiceLogStatisticsResponse(BaseModel):
    total_logs: int
    drafts: int
    submitted: int
    total_patients: int
    average_patients_per_log: float
    appointments: AppointmentBreakdownResponse
    by_client: list[DimensionCountResponse]
    by_activity: list[DimensionCountResponse]
    by_outcome: list[DimensionCountResponse]

    model_config = {"from_attributes": True}


class BulkDeleteResponse(BaseModel):
    user_id: str
    deleted_count: int
