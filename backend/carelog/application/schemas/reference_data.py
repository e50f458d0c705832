"""Pydantic DTOs for clients, activities and outcomes."""

from datetime import datetime

from pydantic import BaseModel, Field


class ReferenceDataCreate(BaseModel):
    """Schema for creating a client, activity or outcome."""

    name: str = Field(..., min_length=1, max_length=200, examples=["North Clinic"])
    is_active: bool = True


class ReferenceDataUpdate(BaseModel):
    """Schema for updating a reference row — all fields optional."""

    name: str | None = Field(None, min_length=1, max_length=200)
    is_active: bool | None = None


class ReferenceDataBulkCreate(BaseModel):
    items: list[ReferenceDataCreate] = Field(..., min_length=1, max_length=500)


class ReferenceDataResponse(BaseModel):
    """Schema returned to the client."""

    id: str
    name: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ReferenceDataUsageResponse(ReferenceDataResponse):
    usage_count: int
    last_used: datetime | None = None
