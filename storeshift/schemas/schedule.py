from pydantic import BaseModel
from datetime import date, datetime
from typing import List, Optional
from storeshift.services.scheduling.roles import Role
from storeshift.services.scheduling.types import ShiftSource, UnmetReason, WarningKind


class ScheduleRangeRequest(BaseModel):
    location_id: int
    week_start: date
    week_end: Optional[date] = None  # null = full week from week_start


class GenerateRequest(ScheduleRangeRequest):
    seed: Optional[int] = None
    persist: bool = False


class ValidateRequest(ScheduleRangeRequest):
    pass


class ShiftResponse(BaseModel):
    employee_id: int
    location_id: int
    start_datetime: datetime
    end_datetime: datetime
    role: Optional[Role]
    source: ShiftSource

    class Config:
        from_attributes = True


class UnmetRequirementResponse(BaseModel):
    location_id: int
    day: date
    role: Role
    shortfall: int
    reason: UnmetReason

    class Config:
        from_attributes = True


class WarningResponse(BaseModel):
    kind: WarningKind
    employee_id: Optional[int]
    dates: List[date]
    detail: str

    class Config:
        from_attributes = True


class GenerateResponse(BaseModel):
    location_id: int
    week_start: date
    week_end: date
    new_shifts: List[ShiftResponse]
    phase_one_count: int
    phase_two_count: int
    unmet_requirements: List[UnmetRequirementResponse]
    warnings: List[WarningResponse]
    persisted: bool


class ValidateResponse(BaseModel):
    location_id: int
    week_start: date
    week_end: date
    shift_count: int
    warnings: List[WarningResponse]
