"""Domain entity for the append-only audit trail."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class AuditAction(str, Enum):
    """Kind of mutation an audit entry records."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass
class AuditEntry:
    """One audited mutation of one record.

    ``old_values`` is None for inserts; ``new_values`` is None for hard
    deletes. Soft deletes carry both snapshots.
    """

    table_name: str
    record_id: str
    action: AuditAction
    old_values: dict[str, Any] | None = None
    new_values: dict[str, Any] | None = None
    user_id: str | None = None
    id: int | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
