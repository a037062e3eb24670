"""
Per-location constraint resolution.
Role requirements, station limits, holiday closures, shift windows and the
weekly hours allocation for one location and date range.
"""

from dataclasses import dataclass, field
from datetime import datetime, date, time, timedelta
from typing import Optional

from .errors import ConfigurationError, InvalidRangeError
from .holidays import holidays_in_range
from .roles import Role, ROLE_ORDER, is_production_station
from .types import (
    Holiday,
    Location,
    RoleRequirement,
    ScheduleWeek,
    SchedulingRules,
    Shift,
    ShiftKind,
    StationLimit,
)


SUNDAY = 6

SHIFT_WINDOWS: dict[ShiftKind, tuple[time, time]] = {
    ShiftKind.OPENER: (time(8, 0), time(16, 30)),
    ShiftKind.MID: (time(10, 0), time(18, 30)),
    ShiftKind.CLOSER: (time(12, 0), time(20, 30)),
}

# Sunday opens later and closes at 7:30pm
SUNDAY_SHIFT_WINDOWS: dict[ShiftKind, tuple[time, time]] = {
    ShiftKind.OPENER: (time(10, 0), time(18, 30)),
    ShiftKind.MID: (time(10, 30), time(19, 0)),
    ShiftKind.CLOSER: (time(11, 0), time(19, 30)),
}

# Any shift running to this time or later counts as a close
LATE_CLOSE = time(19, 30)

DEFAULT_SHIFT_KINDS = (ShiftKind.OPENER, ShiftKind.CLOSER, ShiftKind.MID)
ROLE_SHIFT_KINDS: dict[Role, tuple[ShiftKind, ...]] = {
    Role.APPAREL_PROCESSOR: (ShiftKind.OPENER, ShiftKind.MID),
    Role.DONATION_PRICER: (ShiftKind.OPENER, ShiftKind.MID),
}


def shift_kinds_for(role: Role) -> tuple[ShiftKind, ...]:
    return ROLE_SHIFT_KINDS.get(role, DEFAULT_SHIFT_KINDS)


def shift_window(kind: ShiftKind, day: date) -> tuple[datetime, datetime]:
    """Absolute start/end for a shift kind on a given day."""
    windows = SUNDAY_SHIFT_WINDOWS if day.weekday() == SUNDAY else SHIFT_WINDOWS
    start, end = windows[kind]
    start_dt = datetime.combine(day, start)
    end_dt = datetime.combine(day, end)
    if end_dt <= start_dt:
        end_dt += timedelta(days=1)
    return start_dt, end_dt


def classify_shift(shift: Shift) -> ShiftKind:
    """Opener/mid/closer label for any shift, generated or manual."""
    day = shift.work_date
    windows = SUNDAY_SHIFT_WINDOWS if day.weekday() == SUNDAY else SHIFT_WINDOWS
    start = shift.start_datetime.time()
    if start < windows[ShiftKind.MID][0]:
        return ShiftKind.OPENER
    if shift.end_datetime >= datetime.combine(day, windows[ShiftKind.CLOSER][1]):
        return ShiftKind.CLOSER
    return ShiftKind.MID


def is_closing_shift(shift: Shift) -> bool:
    if classify_shift(shift) == ShiftKind.CLOSER:
        return True
    return shift.end_datetime >= datetime.combine(shift.work_date, LATE_CLOSE)


def calculate_employee_hours(shifts: list[Shift], employee_id: int, rules: SchedulingRules) -> float:
    """Paid hours assigned to an employee."""
    return sum(rules.paid_hours(s) for s in shifts if s.employee_id == employee_id)


def validate_range(start: date, end: date, rules: SchedulingRules) -> None:
    if end < start:
        raise InvalidRangeError(f"Range end {end} precedes start {start}")
    span = (end - start).days + 1
    if span > rules.max_span_days:
        raise InvalidRangeError(
            f"Range {start} to {end} spans {span} days; at most {rules.max_span_days} are supported"
        )


def build_week(
    location_id: int,
    start: date,
    end: Optional[date] = None,
    rules: Optional[SchedulingRules] = None,
) -> ScheduleWeek:
    """Validated schedule week; end defaults to a full seven days."""
    rules = rules or SchedulingRules.from_settings()
    if end is None:
        end = start + timedelta(days=6)
    validate_range(start, end, rules)
    return ScheduleWeek(location_id=location_id, start=start, end=end)


@dataclass
class WeekConstraints:
    """Constraints resolved for every day of one schedule week."""
    week: ScheduleWeek
    requirements: dict[date, list[RoleRequirement]]
    station_limits: dict[date, dict[Role, int]]
    weekly_hours_budget: Optional[float]
    holidays: list[Holiday] = field(default_factory=list)

    def requirements_for(self, day: date) -> list[RoleRequirement]:
        return self.requirements.get(day, [])

    def station_limit(self, role: Role, day: date) -> Optional[int]:
        return self.station_limits.get(day, {}).get(role)

    def minimum_target(self, requirement: RoleRequirement, day: date) -> int:
        """Minimum count clipped to the station limit for production roles."""
        limit = self.station_limit(requirement.role, day)
        if limit is None:
            return requirement.min_count
        return min(requirement.min_count, limit)

    def capacity(self, requirement: RoleRequirement, day: date) -> int:
        """Maximum count clipped to the station limit for production roles."""
        limit = self.station_limit(requirement.role, day)
        if limit is None:
            return requirement.capacity
        return min(requirement.capacity, limit)

    def holiday_on(self, day: date) -> Optional[Holiday]:
        return next((h for h in self.holidays if h.day == day), None)


class ConstraintSet:
    """
    Staffing configuration for one location.

    Each location configures its own requirements; there is no global
    fallback. A scheduling-enabled location with no requirements is a
    configuration error rather than an empty schedule.
    """

    def __init__(
        self,
        location: Location,
        role_requirements: list[RoleRequirement],
        station_limits: Optional[list[StationLimit]] = None,
        rules: Optional[SchedulingRules] = None,
    ):
        self.location = location
        self.rules = rules or SchedulingRules.from_settings()
        self.role_requirements = [r for r in role_requirements if r.location_id == location.id]
        self.station_limits = [s for s in (station_limits or []) if s.location_id == location.id]

    def check(self) -> None:
        """Raise ConfigurationError if this location cannot be scheduled."""
        if not self.location.active:
            raise ConfigurationError(f"Location '{self.location.name}' is inactive")
        if not self.location.scheduling_enabled:
            raise ConfigurationError(f"Location '{self.location.name}' is not enabled for scheduling")
        if not self.role_requirements:
            raise ConfigurationError(
                f"Location '{self.location.name}' is enabled for scheduling but has no role requirements; "
                "configure at least one before generating"
            )
        for req in self.role_requirements:
            if req.min_count < 0 or (req.max_count is not None and req.max_count < 0):
                raise ConfigurationError(
                    f"Role requirement for {req.role.value} at '{self.location.name}' has a negative count"
                )

    def resolve(self, week: ScheduleWeek) -> WeekConstraints:
        self.check()
        holidays = holidays_in_range(week.start, week.end)
        closed = {h.day for h in holidays} if self.rules.closed_on_holidays else set()

        requirements = {}
        station_limits = {}
        for day in week.days:
            station_limits[day] = self.station_limits_for(day)
            if day in closed:
                requirements[day] = []
            else:
                requirements[day] = self.requirements_for(day)

        return WeekConstraints(
            week=week,
            requirements=requirements,
            station_limits=station_limits,
            weekly_hours_budget=self.location.weekly_hours_budget,
            holidays=holidays,
        )

    def requirements_for(self, day: date) -> list[RoleRequirement]:
        """One requirement per role; a day-specific row beats an every-day row."""
        weekday = day.weekday()
        by_role: dict[Role, RoleRequirement] = {}
        for req in self.role_requirements:
            if req.day_of_week is None:
                by_role.setdefault(req.role, req)
        for req in self.role_requirements:
            if req.day_of_week == weekday:
                by_role[req.role] = req
        return [by_role[role] for role in ROLE_ORDER if role in by_role]

    def station_limits_for(self, day: date) -> dict[Role, int]:
        weekday = day.weekday()
        limits = {role: count for role, count in self.rules.default_station_limits}
        for limit in self.station_limits:
            if limit.day_of_week is None and is_production_station(limit.role):
                limits[limit.role] = limit.max_count
        for limit in self.station_limits:
            if limit.day_of_week == weekday and is_production_station(limit.role):
                limits[limit.role] = limit.max_count
        return limits
