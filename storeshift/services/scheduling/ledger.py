"""
Assignment ledger.
Immutable record of every shift placed so far in a run (pre-existing plus
generated). Adding a shift returns a new ledger; the old one is untouched,
so each step of the generator can be inspected and tested on its own.
"""

from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Iterable, Mapping, Optional

from .constraints import classify_shift
from .roles import Role, is_manager
from .types import ScheduleWeek, SchedulingRules, Shift


@dataclass(frozen=True, eq=False)
class AssignmentLedger:
    location_id: int
    employee_roles: Mapping[int, Optional[Role]]
    shifts: tuple[Shift, ...] = ()
    generated: tuple[Shift, ...] = field(default=())

    @classmethod
    def start(
        cls,
        location_id: int,
        employee_roles: Mapping[int, Optional[Role]],
        existing: Iterable[Shift],
    ) -> "AssignmentLedger":
        return cls(location_id=location_id, employee_roles=dict(employee_roles), shifts=tuple(existing))

    def add(self, shift: Shift) -> "AssignmentLedger":
        return replace(self, shifts=self.shifts + (shift,), generated=self.generated + (shift,))

    def role_of(self, shift: Shift) -> Optional[Role]:
        if shift.role is not None:
            return shift.role
        return self.employee_roles.get(shift.employee_id)

    def shifts_for(self, employee_id: int, week: Optional[ScheduleWeek] = None) -> list[Shift]:
        """An employee's shifts at any location, limited to week when given."""
        return [
            s for s in self.shifts
            if s.employee_id == employee_id and (week is None or week.contains(s.work_date))
        ]

    def shifts_on(self, day: date) -> list[Shift]:
        return [s for s in self.shifts if s.location_id == self.location_id and s.work_date == day]

    def shift_count(self, employee_id: int, week: Optional[ScheduleWeek] = None) -> int:
        return len(self.shifts_for(employee_id, week))

    def paid_hours(self, employee_id: int, rules: SchedulingRules) -> float:
        return sum(rules.paid_hours(s) for s in self.shifts_for(employee_id))

    def days_worked(self, employee_id: int) -> set[date]:
        return {s.work_date for s in self.shifts_for(employee_id)}

    def works_on(self, employee_id: int, day: date) -> bool:
        return any(s.work_date == day for s in self.shifts_for(employee_id))

    def role_count(self, day: date, role: Role) -> int:
        return sum(1 for s in self.shifts_on(day) if self.role_of(s) == role)

    def has_manager_on(self, day: date) -> bool:
        return any(is_manager(self.role_of(s)) for s in self.shifts_on(day))

    def kind_coverage(self, day: date, roles: Iterable[Role]) -> Counter:
        """How many shifts of each kind the given roles hold on day."""
        wanted = set(roles)
        return Counter(classify_shift(s) for s in self.shifts_on(day) if self.role_of(s) in wanted)

    def employee_kinds(self, employee_id: int, week: Optional[ScheduleWeek] = None) -> Counter:
        return Counter(classify_shift(s) for s in self.shifts_for(employee_id, week))
