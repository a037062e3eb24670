from typing import Optional
from datetime import datetime
from sqlalchemy import Boolean, Float, Integer, String, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column
from storeshift.db.database import Base

class Locations(Base):
    __tablename__ = "locations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    scheduling_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    weekly_hours_budget: Mapped[Optional[float]] = mapped_column(Float, nullable=True)  # null = no allocation
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
