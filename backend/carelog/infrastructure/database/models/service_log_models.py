"""SQLAlchemy ORM models for service logs and their patient entries."""

from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from carelog.infrastructure.database.base import Base, SoftDeleteMixin, TimestampMixin


class ServiceLogModel(TimestampMixin, SoftDeleteMixin, Base):
    """ORM model — maps to the 'service_logs' table."""

    __tablename__ = "service_logs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    client_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("clients.id"), nullable=False
    )
    activity_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("activities.id"), nullable=False
    )
    service_date: Mapped[date] = mapped_column(Date, nullable=False)
    patient_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_draft: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    submitted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        CheckConstraint("patient_count >= 0", name="ck_service_logs_patient_count"),
        Index("ix_service_logs_user", "user_id"),
        Index("ix_service_logs_client", "client_id"),
        Index("ix_service_logs_activity", "activity_id"),
        Index("ix_service_logs_date", "service_date"),
        Index("ix_service_logs_draft", "is_draft"),
        Index("ix_service_logs_cursor", "created_at", "id"),
    )

    def __repr__(self) -> str:
        return (
            f"<ServiceLogModel(id={self.id}, user='{self.user_id}', "
            f"date={self.service_date}, draft={self.is_draft})>"
        )


class PatientEntryModel(TimestampMixin, SoftDeleteMixin, Base):
    """ORM model — maps to the 'patient_entries' table."""

    __tablename__ = "patient_entries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    service_log_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("service_logs.id"), nullable=False
    )
    appointment_type: Mapped[str] = mapped_column(String(10), nullable=False)
    outcome_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("outcomes.id"), nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "appointment_type IN ('new', 'followup', 'dna')",
            name="ck_patient_entries_appointment_type",
        ),
        Index("ix_patient_entries_service_log", "service_log_id"),
        Index("ix_patient_entries_outcome", "outcome_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<PatientEntryModel(id={self.id}, log={self.service_log_id}, "
            f"type='{self.appointment_type}')>"
        )
