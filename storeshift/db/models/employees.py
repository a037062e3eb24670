from typing import Optional
from sqlalchemy import Integer, Float, Date, DateTime, Boolean, String, func, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from datetime import date, datetime
from enum import Enum
from storeshift.db.database import Base

class EmploymentType(str, Enum):
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    OTHER = "OTHER"

class Employees(Base):
    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    location_id: Mapped[int] = mapped_column(Integer, ForeignKey("locations.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    job_code: Mapped[str] = mapped_column(String(20), nullable=False)  # raw code, variants allowed
    employment_type: Mapped[EmploymentType] = mapped_column(SQLEnum(EmploymentType, name="employment_type_enum", native_enum=True), nullable=False)
    max_weekly_hours: Mapped[float] = mapped_column(Float, nullable=False)
    allowed_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # part-time only
    non_working_days: Mapped[str] = mapped_column(String(20), nullable=False, default="")  # comma-separated weekdays, Monday = 0
    hidden_from_schedule: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    hire_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
