"""
Schedule validation.
Read-only pass over a week's shifts (generated or hand-edited) that reports
soft rule violations as warnings. Nothing here blocks saving a schedule.
"""

from collections import defaultdict
from datetime import timedelta
from itertools import combinations
from typing import Optional

from .availability import AvailabilityModel, weekly_hours_budget
from .constraints import ConstraintSet, classify_shift, is_closing_shift
from .holidays import holidays_in_range
from .roles import LEADERSHIP_ROLES, Role, is_leadership, is_manager, is_production_station
from .types import (
    Employee,
    Location,
    RoleRequirement,
    ScheduleContext,
    ScheduleWeek,
    SchedulingRules,
    Shift,
    ShiftKind,
    StationLimit,
    TimeOffRequest,
    ValidationWarning,
    WarningKind,
)


class ScheduleValidator:
    def __init__(
        self,
        employees: list[Employee],
        station_limits: Optional[list[StationLimit]] = None,
        rules: Optional[SchedulingRules] = None,
        role_requirements: Optional[list[RoleRequirement]] = None,
        time_off_requests: Optional[list[TimeOffRequest]] = None,
    ):
        self.employees = {e.id: e for e in employees}
        self.station_limits = list(station_limits or [])
        self.rules = rules or SchedulingRules.from_settings()
        self.role_requirements = list(role_requirements or [])
        self.time_off_requests = list(time_off_requests or [])

    def validate(self, location: Location, week: ScheduleWeek, shifts: list[Shift]) -> list[ValidationWarning]:
        """
        Check a week's shifts at one location.

        Shifts outside the week or at other locations are dropped before any
        check runs, so every warning is dated inside the week. The one
        exception is the hours budget, which counts the employee's shifts
        at every location.
        """
        constraint_set = ConstraintSet(location, self.role_requirements, self.station_limits, self.rules)
        hours = AvailabilityModel(
            self.time_off_requests,
            [s for s in shifts if week.contains(s.work_date)],
            self.rules,
            week,
        )
        in_scope = [
            s for s in shifts
            if s.location_id == location.id and week.contains(s.work_date)
        ]
        in_scope.sort(key=lambda s: (s.employee_id, s.start_datetime))

        by_employee: dict[int, list[Shift]] = defaultdict(list)
        for shift in in_scope:
            by_employee[shift.employee_id].append(shift)

        warnings: list[ValidationWarning] = []
        for employee_id, emp_shifts in by_employee.items():
            employee = self.employees.get(employee_id)
            warnings.extend(self._check_double_booking(employee_id, emp_shifts))
            warnings.extend(self._check_clopening(employee_id, emp_shifts))
            warnings.extend(self._check_consecutive_days(employee_id, emp_shifts))
            if employee is not None:
                warnings.extend(self._check_max_hours(employee, week, emp_shifts, hours))
                warnings.extend(self._check_manager_closes(employee, emp_shifts))

        warnings.extend(self._check_station_limits(constraint_set, week, in_scope))
        warnings.extend(self._check_leadership(week, in_scope))
        warnings.extend(self._check_coverage(constraint_set, week, in_scope))
        warnings.extend(self._check_holidays(week, in_scope))
        warnings.extend(self._check_location_budget(location, week, in_scope))
        return warnings

    def _role_of(self, shift: Shift) -> Optional[Role]:
        if shift.role is not None:
            return shift.role
        employee = self.employees.get(shift.employee_id)
        return employee.role if employee else None

    def _check_double_booking(self, employee_id: int, shifts: list[Shift]) -> list[ValidationWarning]:
        warnings = []
        for a, b in combinations(shifts, 2):
            if a.overlaps(b):
                warnings.append(ValidationWarning(
                    kind=WarningKind.DOUBLE_BOOKING,
                    employee_id=employee_id,
                    dates=tuple(sorted({a.work_date, b.work_date})),
                    detail=f"Overlapping shifts {a.start_datetime:%a %H:%M}-{a.end_datetime:%H:%M} "
                           f"and {b.start_datetime:%a %H:%M}-{b.end_datetime:%H:%M}",
                ))
        return warnings

    def _check_max_hours(
        self,
        employee: Employee,
        week: ScheduleWeek,
        shifts: list[Shift],
        hours: AvailabilityModel,
    ) -> list[ValidationWarning]:
        """Shifts at any location plus approved paid leave against the weekly budget."""
        total = hours.committed_hours(employee, week)
        budget = weekly_hours_budget(employee, week, self.rules)
        if total <= budget:
            return []
        return [ValidationWarning(
            kind=WarningKind.MAX_HOURS,
            employee_id=employee.id,
            dates=tuple(sorted({s.work_date for s in shifts})),
            detail=f"{total:g}h committed against a budget of {budget:g}h",
        )]

    def _check_clopening(self, employee_id: int, shifts: list[Shift]) -> list[ValidationWarning]:
        warnings = []
        min_rest = timedelta(hours=self.rules.min_rest_hours)
        for close, open_ in zip(shifts, shifts[1:]):
            if open_.work_date - close.work_date != timedelta(days=1):
                continue
            if not is_closing_shift(close) or classify_shift(open_) != ShiftKind.OPENER:
                continue
            rest = open_.start_datetime - close.end_datetime
            if rest < min_rest:
                hours = rest.total_seconds() / 3600
                warnings.append(ValidationWarning(
                    kind=WarningKind.CLOPENING,
                    employee_id=employee_id,
                    dates=(close.work_date, open_.work_date),
                    detail=f"Closes {close.end_datetime:%a %H:%M} then opens "
                           f"{open_.start_datetime:%a %H:%M} ({hours:g}h rest)",
                ))
        return warnings

    def _check_consecutive_days(self, employee_id: int, shifts: list[Shift]) -> list[ValidationWarning]:
        days = sorted({s.work_date for s in shifts})
        runs = []
        run = []
        for day in days:
            if run and day - run[-1] != timedelta(days=1):
                runs.append(run)
                run = []
            run.append(day)
        if run:
            runs.append(run)

        limit = self.rules.max_consecutive_days
        return [
            ValidationWarning(
                kind=WarningKind.CONSECUTIVE_DAYS,
                employee_id=employee_id,
                dates=tuple(r),
                detail=f"{len(r)} consecutive days without a day off (limit {limit})",
            )
            for r in runs if len(r) > limit
        ]

    def _check_manager_closes(self, employee: Employee, shifts: list[Shift]) -> list[ValidationWarning]:
        if not is_manager(employee.role):
            return []
        closes = [s for s in shifts if is_closing_shift(s)]
        if len(closes) <= self.rules.manager_max_closes:
            return []
        return [ValidationWarning(
            kind=WarningKind.MANAGER_CLOSING_LIMIT,
            employee_id=employee.id,
            dates=tuple(s.work_date for s in closes),
            detail=f"{len(closes)} closing shifts this week (limit {self.rules.manager_max_closes})",
        )]

    def _check_station_limits(
        self,
        constraint_set: ConstraintSet,
        week: ScheduleWeek,
        shifts: list[Shift],
    ) -> list[ValidationWarning]:
        warnings = []
        for day in week.days:
            counts: dict[Role, int] = defaultdict(int)
            for shift in shifts:
                role = self._role_of(shift)
                if shift.work_date == day and is_production_station(role):
                    counts[role] += 1
            limits = constraint_set.station_limits_for(day)
            for role, count in counts.items():
                limit = limits.get(role)
                if limit is not None and count > limit:
                    warnings.append(ValidationWarning(
                        kind=WarningKind.STATION_LIMIT,
                        employee_id=None,
                        dates=(day,),
                        detail=f"{count} {role.value} shifts against a station limit of {limit}",
                    ))
        return warnings

    def _check_leadership(self, week: ScheduleWeek, shifts: list[Shift]) -> list[ValidationWarning]:
        warnings = []
        for day in week.days:
            roles = [self._role_of(s) for s in shifts if s.work_date == day]
            if Role.TEAM_LEAD in roles and not any(is_manager(r) for r in roles):
                warnings.append(ValidationWarning(
                    kind=WarningKind.LEADERSHIP_GAP,
                    employee_id=None,
                    dates=(day,),
                    detail="Team lead scheduled without a store or assistant manager",
                ))
        return warnings

    def _open_close_counts(self, shifts: list[Shift], roles) -> tuple[int, int]:
        matching = [s for s in shifts if self._role_of(s) in roles]
        opens = sum(1 for s in matching if classify_shift(s) == ShiftKind.OPENER)
        closes = sum(1 for s in matching if is_closing_shift(s))
        return opens, closes

    def _check_coverage(
        self,
        constraint_set: ConstraintSet,
        week: ScheduleWeek,
        shifts: list[Shift],
    ) -> list[ValidationWarning]:
        """Opening and closing cover for leadership, cashiers and greeters on days that require them."""
        closed = set()
        if self.rules.closed_on_holidays:
            closed = {h.day for h in holidays_in_range(week.start, week.end)}

        warnings = []
        for day in week.days:
            if day in closed:
                continue
            required = {r.role for r in constraint_set.requirements_for(day) if r.min_count > 0}
            if not required:
                continue
            day_shifts = [s for s in shifts if s.work_date == day]

            if any(is_leadership(r) for r in required):
                opens, closes = self._open_close_counts(day_shifts, LEADERSHIP_ROLES)
                need = self.rules.managers_required
                for label, have in (("opening", opens), ("closing", closes)):
                    if have < need:
                        warnings.append(ValidationWarning(
                            kind=WarningKind.MANAGER_COVERAGE,
                            employee_id=None,
                            dates=(day,),
                            detail=f"Need {need} {label} manager(s), have {have}",
                        ))

            for role, kind, title in (
                (Role.CASHIER, WarningKind.CASHIER_COVERAGE, "cashier"),
                (Role.DONOR_GREETER, WarningKind.GREETER_COVERAGE, "donor greeter"),
            ):
                if role not in required:
                    continue
                opens, closes = self._open_close_counts(day_shifts, {role})
                for label, have in (("opening", opens), ("closing", closes)):
                    if not have:
                        warnings.append(ValidationWarning(
                            kind=kind,
                            employee_id=None,
                            dates=(day,),
                            detail=f"Missing {label} {title}",
                        ))
        return warnings

    def _check_holidays(self, week: ScheduleWeek, shifts: list[Shift]) -> list[ValidationWarning]:
        if not self.rules.closed_on_holidays:
            return []
        names = {h.day: h.name for h in holidays_in_range(week.start, week.end)}
        return [
            ValidationWarning(
                kind=WarningKind.HOLIDAY_SHIFT,
                employee_id=s.employee_id,
                dates=(s.work_date,),
                detail=f"Scheduled on {names[s.work_date]} while the store is closed",
            )
            for s in shifts if s.work_date in names
        ]

    def _check_location_budget(self, location: Location, week: ScheduleWeek, shifts: list[Shift]) -> list[ValidationWarning]:
        budget = location.weekly_hours_budget
        if budget is None:
            return []
        total = sum(self.rules.paid_hours(s) for s in shifts)
        if total <= budget:
            return []
        return [ValidationWarning(
            kind=WarningKind.LOCATION_HOURS_BUDGET,
            employee_id=None,
            dates=(week.start, week.end),
            detail=f"{total:g}h scheduled against a location allocation of {budget:g}h",
        )]


def validate_schedule(
    context: ScheduleContext,
    shifts: list[Shift],
    rules: Optional[SchedulingRules] = None,
) -> list[ValidationWarning]:
    """Validate shifts for the context's location and week."""
    validator = ScheduleValidator(
        context.employees,
        context.station_limits,
        rules,
        role_requirements=context.role_requirements,
        time_off_requests=context.time_off_requests,
    )
    return validator.validate(context.location, context.week, shifts)
