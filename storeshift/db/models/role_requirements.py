from typing import Optional
from datetime import datetime
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, func, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from storeshift.db.database import Base


class RoleRequirements(Base):
    __tablename__ = "role_requirements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    location_id: Mapped[int] = mapped_column(Integer, ForeignKey("locations.id"), nullable=False, index=True)
    role_code: Mapped[str] = mapped_column(String(20), nullable=False)
    day_of_week: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # null = every day
    min_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    max_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # null = same as min
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint(
            'location_id', 'role_code', 'day_of_week',
            name='uix_role_requirements_location_role_day'
        ),
    )


class StationLimits(Base):
    __tablename__ = "station_limits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    location_id: Mapped[int] = mapped_column(Integer, ForeignKey("locations.id"), nullable=False, index=True)
    role_code: Mapped[str] = mapped_column(String(20), nullable=False)
    day_of_week: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # null = every day
    max_count: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            'location_id', 'role_code', 'day_of_week',
            name='uix_station_limits_location_role_day'
        ),
    )
