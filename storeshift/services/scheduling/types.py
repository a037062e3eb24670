"""
Internal data types for scheduling logic.
decoupled from SQLAlchemy models for cleaner logic.
"""

from dataclasses import dataclass, field
from datetime import date, time, datetime, timedelta
from enum import Enum
from typing import Optional

from storeshift.core.config import settings

from .roles import Role, to_role


class EmploymentType(str, Enum):
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    OTHER = "OTHER"


class TimeOffStatus(str, Enum):
    APPROVED = "APPROVED"
    PENDING = "PENDING"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class ShiftSource(str, Enum):
    MANUAL = "MANUAL"
    GENERATED = "GENERATED"
    TEMPLATE = "TEMPLATE"


class ShiftKind(str, Enum):
    OPENER = "OPENER"
    MID = "MID"
    CLOSER = "CLOSER"


class UnmetReason(str, Enum):
    NO_ELIGIBLE_EMPLOYEE = "NO_ELIGIBLE_EMPLOYEE"
    NO_MANAGER_PRESENT = "NO_MANAGER_PRESENT"
    STATION_LIMIT = "STATION_LIMIT"


class WarningKind(str, Enum):
    MAX_HOURS = "MAX_HOURS"
    CLOPENING = "CLOPENING"
    CONSECUTIVE_DAYS = "CONSECUTIVE_DAYS"
    STATION_LIMIT = "STATION_LIMIT"
    LEADERSHIP_GAP = "LEADERSHIP_GAP"
    DOUBLE_BOOKING = "DOUBLE_BOOKING"
    HOLIDAY_SHIFT = "HOLIDAY_SHIFT"
    MANAGER_CLOSING_LIMIT = "MANAGER_CLOSING_LIMIT"
    LOCATION_HOURS_BUDGET = "LOCATION_HOURS_BUDGET"
    MANAGER_COVERAGE = "MANAGER_COVERAGE"
    CASHIER_COVERAGE = "CASHIER_COVERAGE"
    GREETER_COVERAGE = "GREETER_COVERAGE"


@dataclass
class Employee:
    id: int
    location_id: int
    job_code: str
    employment_type: EmploymentType
    max_weekly_hours: float
    allowed_days: Optional[int] = None  # part-time only, 1-5
    hidden_from_schedule: bool = False
    name: str = ""
    hire_date: Optional[date] = None
    non_working_days: frozenset[int] = frozenset()  # weekday numbers, Monday = 0

    @property
    def role(self) -> Optional[Role]:
        return to_role(self.job_code)

    @property
    def is_full_time(self) -> bool:
        return self.employment_type == EmploymentType.FULL_TIME

    @property
    def is_part_time(self) -> bool:
        return self.employment_type == EmploymentType.PART_TIME


@dataclass
class Location:
    id: int
    name: str
    active: bool = True
    scheduling_enabled: bool = True
    weekly_hours_budget: Optional[float] = None


@dataclass
class TimeOffRequest:
    employee_id: int
    start_date: date
    end_date: date  # inclusive
    status: TimeOffStatus = TimeOffStatus.APPROVED
    paid_hours: float = 0.0

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass
class RoleRequirement:
    location_id: int
    role: Role
    min_count: int
    max_count: Optional[int] = None  # None = same as min_count
    day_of_week: Optional[int] = None  # None = every day
    id: Optional[int] = None

    @property
    def capacity(self) -> int:
        return self.min_count if self.max_count is None else max(self.max_count, self.min_count)


@dataclass
class StationLimit:
    location_id: int
    role: Role
    max_count: int
    day_of_week: Optional[int] = None  # None = every day


@dataclass(frozen=True)
class Shift:
    """A shift assignment (existing or generated)."""
    employee_id: int
    location_id: int
    start_datetime: datetime
    end_datetime: datetime
    role: Optional[Role] = None  # role worked; None = employee's own role
    source: ShiftSource = ShiftSource.MANUAL

    @classmethod
    def from_times(
        cls,
        employee_id: int,
        location_id: int,
        day: date,
        start: time,
        end: time,
        role: Optional[Role] = None,
        source: ShiftSource = ShiftSource.MANUAL,
    ) -> "Shift":
        """Build a shift from wall-clock times; an end at or before the start rolls to the next day."""
        start_dt = datetime.combine(day, start)
        end_dt = datetime.combine(day, end)
        if end_dt <= start_dt:
            end_dt += timedelta(days=1)
        return cls(employee_id, location_id, start_dt, end_dt, role=role, source=source)

    @property
    def duration_hours(self) -> float:
        delta = self.end_datetime - self.start_datetime
        return delta.total_seconds() / 3600

    @property
    def work_date(self) -> date:
        return self.start_datetime.date()

    @property
    def day_of_week(self) -> int:
        return self.start_datetime.weekday()

    def overlaps(self, other: "Shift") -> bool:
        return self.start_datetime < other.end_datetime and other.start_datetime < self.end_datetime


@dataclass(frozen=True)
class Holiday:
    day: date
    name: str


@dataclass(frozen=True)
class ScheduleWeek:
    """The (location, start, end) scope a run covers. Dates are inclusive."""
    location_id: int
    start: date
    end: date

    @property
    def days(self) -> list[date]:
        return [self.start + timedelta(days=i) for i in range((self.end - self.start).days + 1)]

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class UnmetRequirement:
    location_id: int
    day: date
    role: Role
    shortfall: int
    reason: UnmetReason


@dataclass(frozen=True)
class ValidationWarning:
    kind: WarningKind
    employee_id: Optional[int]
    dates: tuple[date, ...]
    detail: str


@dataclass
class ScheduleContext:
    """All data needed to generate a schedule for one location/week."""
    location: Location
    week: ScheduleWeek
    employees: list[Employee]
    time_off_requests: list[TimeOffRequest]
    role_requirements: list[RoleRequirement]
    station_limits: list[StationLimit] = field(default_factory=list)
    existing_shifts: list[Shift] = field(default_factory=list)

    @property
    def location_id(self) -> int:
        return self.location.id


@dataclass
class ScheduleResult:
    """Output of the scheduling algorithm."""
    shifts: list[Shift]  # existing shifts first, verbatim, then new ones
    new_shifts: list[Shift]
    phase_one_shifts: list[Shift] = field(default_factory=list)
    phase_two_shifts: list[Shift] = field(default_factory=list)
    unmet_requirements: list[UnmetRequirement] = field(default_factory=list)
    warnings: list[ValidationWarning] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.unmet_requirements


@dataclass(frozen=True)
class SchedulingRules:
    """Tunable constants for one run. Defaults come from application settings."""
    max_span_days: int = 7
    min_rest_hours: float = 12
    max_consecutive_days: int = 5
    holiday_deduction_hours: float = 8
    holiday_eligibility_days: int = 30
    closed_on_holidays: bool = True
    default_part_time_days: int = 5
    unpaid_break_threshold_hours: float = 6
    unpaid_break_hours: float = 0.5
    default_station_limits: tuple[tuple[Role, int], ...] = (
        (Role.APPAREL_PROCESSOR, 2),
        (Role.DONATION_PRICER, 1),
    )
    priority_weekdays: tuple[int, ...] = (4, 5, 6)
    manager_max_closes: int = 3
    managers_required: int = 1

    @classmethod
    def from_settings(cls, cfg=None) -> "SchedulingRules":
        if cfg is None:
            cfg = settings
        return cls(
            max_span_days=cfg.MAX_SCHEDULE_SPAN_DAYS,
            min_rest_hours=cfg.CLOPENING_MIN_REST_HOURS,
            max_consecutive_days=cfg.MAX_CONSECUTIVE_DAYS,
            holiday_deduction_hours=cfg.HOLIDAY_DEDUCTION_HOURS,
            holiday_eligibility_days=cfg.HOLIDAY_ELIGIBILITY_DAYS,
            closed_on_holidays=cfg.CLOSED_ON_HOLIDAYS,
            default_part_time_days=cfg.DEFAULT_PART_TIME_DAYS,
            unpaid_break_threshold_hours=cfg.UNPAID_BREAK_THRESHOLD_HOURS,
            unpaid_break_hours=cfg.UNPAID_BREAK_HOURS,
            default_station_limits=(
                (Role.APPAREL_PROCESSOR, cfg.DEFAULT_APPAREL_STATIONS),
                (Role.DONATION_PRICER, cfg.DEFAULT_PRICER_STATIONS),
            ),
            priority_weekdays=tuple(cfg.PRIORITY_WEEKDAYS),
            manager_max_closes=cfg.MANAGER_MAX_CLOSES,
            managers_required=cfg.MANAGERS_REQUIRED,
        )

    def paid_hours(self, shift: Shift) -> float:
        """Clock hours minus the unpaid lunch on long shifts."""
        hours = shift.duration_hours
        if hours >= self.unpaid_break_threshold_hours:
            return hours - self.unpaid_break_hours
        return hours
