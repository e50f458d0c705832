"""Pydantic DTOs for audit history."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from carelog.domain.entities import AuditAction


class AuditEntryResponse(BaseModel):
    id: int | None
    table_name: str
    record_id: str
    action: AuditAction
    old_values: dict[str, Any] | None
    new_values: dict[str, Any] | None
    user_id: str | None
    timestamp: datetime

    model_config = {"from_attributes": True}
