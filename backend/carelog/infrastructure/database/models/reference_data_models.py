"""SQLAlchemy ORM models for reference data — clients, activities, outcomes."""

from sqlalchemy import Boolean, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from carelog.infrastructure.database.base import Base, SoftDeleteMixin, TimestampMixin


class ReferenceDataMixin(TimestampMixin, SoftDeleteMixin):
    """Columns shared by every reference-data table."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, name='{self.name}')>"


class ClientModel(ReferenceDataMixin, Base):
    """ORM model — maps to the 'clients' table."""

    __tablename__ = "clients"


class ActivityModel(ReferenceDataMixin, Base):
    """ORM model — maps to the 'activities' table."""

    __tablename__ = "activities"


class OutcomeModel(ReferenceDataMixin, Base):
    """ORM model — maps to the 'outcomes' table."""

    __tablename__ = "outcomes"


def _live_name_index(model: type[ReferenceDataMixin]) -> Index:
    """Case-insensitive unique name among rows that are not soft-deleted."""
    table = model.__tablename__
    live = model.deleted_at.is_(None)
    return Index(
        f"ux_{table}_name_live",
        func.lower(model.name),
        unique=True,
        sqlite_where=live,
        postgresql_where=live,
    )


for _model in (ClientModel, ActivityModel, OutcomeModel):
    _live_name_index(_model)
    Index(f"ix_{_model.__tablename__}_active", _model.is_active, _model.deleted_at)
