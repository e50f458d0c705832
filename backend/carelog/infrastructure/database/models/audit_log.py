"""SQLAlchemy ORM model for the append-only audit trail."""

from datetime import datetime
from typing import Any

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from carelog.infrastructure.database.base import Base, utcnow


class AuditLogModel(Base):
    """ORM model — maps to the 'audit_log' table. Rows are never updated."""

    __tablename__ = "audit_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    table_name: Mapped[str] = mapped_column(String(100), nullable=False)
    record_id: Mapped[str] = mapped_column(String(64), nullable=False)
    action: Mapped[str] = mapped_column(String(10), nullable=False)
    old_values: Mapped[dict[str, Any] | None] = mapped_column(
        JSON(none_as_null=True), nullable=True
    )
    new_values: Mapped[dict[str, Any] | None] = mapped_column(
        JSON(none_as_null=True), nullable=True
    )
    user_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "action IN ('INSERT', 'UPDATE', 'DELETE')", name="ck_audit_log_action"
        ),
        Index("ix_audit_log_record", "table_name", "record_id"),
        Index("ix_audit_log_timestamp", "timestamp"),
        Index("ix_audit_log_user", "user_id"),
        Index("ix_audit_log_action", "action"),
    )

    def __repr__(self) -> str:
        return (
            f"<AuditLogModel(id={self.id}, {self.action} "
            f"{self.table_name}/{self.record_id})>"
        )
