"""
Availability checking utilities.
Determines whether an employee can be scheduled on a day, how many paid hours
they have left this week, and whether a specific shift fits around the shifts
they already hold.
"""

from datetime import datetime, date, timedelta
from typing import Optional

from .holidays import holidays_in_range
from .ledger import AssignmentLedger
from .types import (
    Employee,
    ScheduleWeek,
    SchedulingRules,
    Shift,
    TimeOffRequest,
    TimeOffStatus,
)


def datetime_ranges_overlap(
    start1: datetime, end1: datetime,
    start2: datetime, end2: datetime
) -> bool:
    """Check if two datetime ranges overlap."""
    return start1 < end2 and start2 < end1


def is_employee_on_time_off(
    employee_id: int,
    day: date,
    time_off_requests: list[TimeOffRequest]
) -> bool:
    """Check if employee has approved time off covering day."""
    for req in time_off_requests:
        if req.employee_id != employee_id or req.status != TimeOffStatus.APPROVED:
            continue
        if req.covers(day):
            return True
    return False


def is_eligible_for_paid_holiday(employee: Employee, holiday_day: date, rules: SchedulingRules) -> bool:
    """Full-time staff past their qualifying service period on the holiday."""
    if not employee.is_full_time:
        return False
    if employee.hire_date is None:
        return True
    return (holiday_day - employee.hire_date).days >= rules.holiday_eligibility_days


def holiday_deduction_hours(employee: Employee, week: ScheduleWeek, rules: SchedulingRules) -> float:
    eligible = [
        h for h in holidays_in_range(week.start, week.end)
        if is_eligible_for_paid_holiday(employee, h.day, rules)
    ]
    return len(eligible) * rules.holiday_deduction_hours


def weekly_hours_budget(employee: Employee, week: ScheduleWeek, rules: SchedulingRules) -> float:
    """Max weekly hours, reduced for holidays in the week (full-time only)."""
    return max(0.0, employee.max_weekly_hours - holiday_deduction_hours(employee, week, rules))


def rest_gap(shift: Shift, other: Shift) -> Optional[timedelta]:
    """Time between two shifts, or None if they overlap."""
    if datetime_ranges_overlap(shift.start_datetime, shift.end_datetime, other.start_datetime, other.end_datetime):
        return None
    if other.end_datetime <= shift.start_datetime:
        return shift.start_datetime - other.end_datetime
    return other.start_datetime - shift.end_datetime


class AvailabilityModel:
    """
    Per-employee availability over an immutable snapshot of time off and
    existing shifts. Tentative assignments are passed in as a ledger.
    """

    def __init__(
        self,
        time_off_requests: list[TimeOffRequest],
        existing_shifts: Optional[list[Shift]] = None,
        rules: Optional[SchedulingRules] = None,
        week: Optional[ScheduleWeek] = None,
    ):
        self.time_off_requests = list(time_off_requests)
        self.existing_shifts = list(existing_shifts or [])
        self.rules = rules or SchedulingRules.from_settings()
        self.week = week

    def _employee_shifts(self, employee_id: int, ledger: Optional[AssignmentLedger]) -> list[Shift]:
        if ledger is not None:
            return ledger.shifts_for(employee_id)
        return [s for s in self.existing_shifts if s.employee_id == employee_id]

    def allowed_days(self, employee: Employee) -> Optional[int]:
        if not employee.is_part_time:
            return None
        return employee.allowed_days or self.rules.default_part_time_days

    def unavailable_reason(
        self,
        employee: Employee,
        day: date,
        ledger: Optional[AssignmentLedger] = None,
    ) -> Optional[str]:
        """Why employee cannot be scheduled on day, or None if they can."""
        if employee.hidden_from_schedule:
            return "Employee is hidden from scheduling"

        if day.weekday() in employee.non_working_days:
            return "Non-working day for employee"

        if is_employee_on_time_off(employee.id, day, self.time_off_requests):
            return "Employee has approved time off"

        allowed = self.allowed_days(employee)
        if allowed is not None:
            if self.week is not None:
                first, last = self.week.start, self.week.end
            else:
                first, last = day - timedelta(days=6), day + timedelta(days=6)
            worked = {
                s.work_date for s in self._employee_shifts(employee.id, ledger)
                if first <= s.work_date <= last
            }
            worked.discard(day)
            if len(worked) >= allowed:
                return f"Part-time employee already has {len(worked)} of {allowed} allowed days"

        return None

    def is_available(
        self,
        employee: Employee,
        day: date,
        ledger: Optional[AssignmentLedger] = None,
    ) -> bool:
        return self.unavailable_reason(employee, day, ledger) is None

    def committed_hours(
        self,
        employee: Employee,
        week: ScheduleWeek,
        ledger: Optional[AssignmentLedger] = None,
    ) -> float:
        """Paid hours already spoken for this week: shifts at any location plus approved paid leave."""
        placed = sum(
            self.rules.paid_hours(s)
            for s in self._employee_shifts(employee.id, ledger)
            if week.contains(s.work_date)
        )
        paid_leave = sum(
            req.paid_hours for req in self.time_off_requests
            if req.employee_id == employee.id
            and req.status == TimeOffStatus.APPROVED
            and req.start_date <= week.end
            and req.end_date >= week.start
        )
        return placed + paid_leave

    def remaining_hours_budget(
        self,
        employee: Employee,
        week: ScheduleWeek,
        ledger: Optional[AssignmentLedger] = None,
    ) -> float:
        """
        Paid hours the employee can still take this week.

        Starts from max weekly hours, less the committed hours, less the
        holiday deduction for full-time staff. Never negative.
        """
        remaining = weekly_hours_budget(employee, week, self.rules) - self.committed_hours(employee, week, ledger)
        return max(0.0, remaining)

    def can_employee_work_shift(
        self,
        employee: Employee,
        shift: Shift,
        week: ScheduleWeek,
        ledger: AssignmentLedger,
    ) -> tuple[bool, str]:
        """
        Check if an employee can work a specific shift.
        """
        day = shift.work_date

        reason = self.unavailable_reason(employee, day, ledger)
        if reason:
            return False, reason

        existing = ledger.shifts_for(employee.id)

        # One shift per employee per day at this location
        if any(s.work_date == day and s.location_id == shift.location_id for s in existing):
            return False, "Already working this day"

        min_rest = timedelta(hours=self.rules.min_rest_hours)
        for other in existing:
            gap = rest_gap(shift, other)
            if gap is None:
                return False, "Conflicts with existing shift"
            if gap < min_rest:
                return False, f"Less than {self.rules.min_rest_hours:g}h rest between shifts"

        if self.rules.paid_hours(shift) > self.remaining_hours_budget(employee, week, ledger):
            return False, "Weekly hours budget exhausted"

        return True, "OK"
