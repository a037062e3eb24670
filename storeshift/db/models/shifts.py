from sqlalchemy import Integer, String, DateTime, ForeignKey, Enum as SQLEnum, Index, func
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from enum import Enum
from typing import Optional
from storeshift.db.database import Base


class ShiftStatus(str, Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    CANCELLED = "CANCELLED"


class ShiftSource(str, Enum):
    MANUAL = "MANUAL"
    GENERATED = "GENERATED"
    TEMPLATE = "TEMPLATE"


class Shifts(Base):
    __tablename__ = "shifts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    location_id: Mapped[int] = mapped_column(Integer, ForeignKey("locations.id"), nullable=False)
    employee_id: Mapped[int] = mapped_column(Integer, ForeignKey("employees.id"), nullable=False)
    start_datetime: Mapped[datetime] = mapped_column(DateTime, nullable=False)  # store local time
    end_datetime: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    role_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)  # null = employee's own role
    status: Mapped[ShiftStatus] = mapped_column(SQLEnum(ShiftStatus, name="shift_status_enum"), nullable=False, default=ShiftStatus.DRAFT)
    source: Mapped[ShiftSource] = mapped_column(SQLEnum(ShiftSource, name="shift_source_enum"), nullable=False, default=ShiftSource.MANUAL)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_shifts_location_start", "location_id", "start_datetime"),
        Index("ix_shifts_employee_start", "employee_id", "start_datetime"),
    )
