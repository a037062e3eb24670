"""
Two-phase schedule generator.

Strategy:
1. Phase 1: walk the week's days Sunday through Saturday and bring every role
   requirement up to its minimum, preferring employees with fewer shifts.
2. Phase 2: visit the priority days (Fri/Sat/Sun) in random order and fill
   any remaining capacity up to each role's maximum.
Existing shifts are never moved or removed; slots that cannot be filled are
reported as unmet requirements and the run carries on.
"""

import logging
import random
from datetime import date
from typing import Optional

from .availability import AvailabilityModel
from .constraints import (
    ConstraintSet,
    WeekConstraints,
    shift_kinds_for,
    shift_window,
    validate_range,
)
from .ledger import AssignmentLedger
from .roles import LEADERSHIP_ROLES, Role, eligible_roles_for_slot, is_leadership
from .types import (
    Employee,
    RoleRequirement,
    ScheduleContext,
    ScheduleResult,
    SchedulingRules,
    Shift,
    ShiftKind,
    ShiftSource,
    UnmetReason,
    UnmetRequirement,
)


logger = logging.getLogger(__name__)


class TwoPhaseGenerator:
    """
    Rule-based generator for one location and week.

    All random choices draw from `rng`; pass a seeded random.Random for
    reproducible runs.
    """

    def __init__(
        self,
        context: ScheduleContext,
        rng: Optional[random.Random] = None,
        rules: Optional[SchedulingRules] = None,
    ):
        self.context = context
        self.rules = rules or SchedulingRules.from_settings()
        self.rng = rng if rng is not None else random.Random()
        self.constraint_set = ConstraintSet(
            context.location,
            context.role_requirements,
            context.station_limits,
            self.rules,
        )
        self.availability = AvailabilityModel(
            context.time_off_requests,
            context.existing_shifts,
            self.rules,
            context.week,
        )
        self.employees = [e for e in context.employees if e.location_id == context.location_id]
        self.unmet: list[UnmetRequirement] = []

    def solve(self) -> ScheduleResult:
        """
        Run both phases.

        Raises:
            InvalidRangeError: the week is inverted or too long
            ConfigurationError: the location cannot be scheduled
        """
        week = self.context.week
        validate_range(week.start, week.end, self.rules)
        constraints = self.constraint_set.resolve(week)
        self.unmet = []

        logger.info(
            f"Generating schedule for location {self.context.location_id} "
            f"{week.start} to {week.end} ({len(self.employees)} employees, "
            f"{len(self.context.existing_shifts)} existing shifts)"
        )
        for holiday in constraints.holidays:
            logger.info(f"{holiday.name} on {holiday.day}")

        ledger = AssignmentLedger.start(
            self.context.location_id,
            {e.id: e.role for e in self.context.employees},
            self.context.existing_shifts,
        )

        ledger = self.phase_one(ledger, constraints)
        phase_one_shifts = list(ledger.generated)
        logger.info(
            f"Phase 1 placed {len(phase_one_shifts)} shifts, {len(self.unmet)} unmet slots"
        )

        ledger = self.phase_two(ledger, constraints)
        new_shifts = list(ledger.generated)
        phase_two_shifts = new_shifts[len(phase_one_shifts):]
        logger.info(f"Phase 2 placed {len(phase_two_shifts)} shifts")

        return ScheduleResult(
            shifts=list(self.context.existing_shifts) + new_shifts,
            new_shifts=new_shifts,
            phase_one_shifts=phase_one_shifts,
            phase_two_shifts=phase_two_shifts,
            unmet_requirements=list(self.unmet),
        )

    def phase_one(self, ledger: AssignmentLedger, constraints: WeekConstraints) -> AssignmentLedger:
        """Guaranteed minimum coverage, days run Sunday through Saturday."""
        week = constraints.week
        days = sorted(week.days, key=lambda d: (d.weekday() + 1) % 7)
        logger.debug(f"Phase 1 day order: {[d.isoformat() for d in days]}")

        for day in days:
            for req in constraints.requirements_for(day):
                target = constraints.minimum_target(req, day)
                over_limit = req.min_count - target
                if over_limit > 0:
                    self._record_unmet(day, req.role, over_limit, UnmetReason.STATION_LIMIT)

                needed = target - ledger.role_count(day, req.role)
                if needed <= 0:
                    continue

                if req.role == Role.TEAM_LEAD and not ledger.has_manager_on(day):
                    self._record_unmet(day, req.role, needed, UnmetReason.NO_MANAGER_PRESENT)
                    continue

                ledger, placed = self._fill_slot(ledger, day, req.role, needed, constraints)
                if placed < needed:
                    self._record_unmet(day, req.role, needed - placed, UnmetReason.NO_ELIGIBLE_EMPLOYEE)

        return ledger

    def phase_two(self, ledger: AssignmentLedger, constraints: WeekConstraints) -> AssignmentLedger:
        """Fill open capacity on priority days, visited in random order."""
        days = [d for d in constraints.week.days if d.weekday() in self.rules.priority_weekdays]
        self.rng.shuffle(days)
        logger.debug(f"Phase 2 day order: {[d.isoformat() for d in days]}")

        for day in days:
            requirements = constraints.requirements_for(day)
            # Round-robin one shift per role per pass so no single role soaks up staff
            progress = True
            while progress:
                progress = False
                for req in requirements:
                    if not self._has_open_capacity(ledger, req, day, constraints):
                        continue
                    if req.role == Role.TEAM_LEAD and not ledger.has_manager_on(day):
                        continue
                    shift = self._find_shift(ledger, day, req.role, constraints, enforce_location_budget=True)
                    if shift is None:
                        continue
                    ledger = ledger.add(shift)
                    progress = True

        return ledger

    def _has_open_capacity(
        self,
        ledger: AssignmentLedger,
        req: RoleRequirement,
        day: date,
        constraints: WeekConstraints,
    ) -> bool:
        return ledger.role_count(day, req.role) < constraints.capacity(req, day)

    def _fill_slot(
        self,
        ledger: AssignmentLedger,
        day: date,
        role: Role,
        needed: int,
        constraints: WeekConstraints,
    ) -> tuple[AssignmentLedger, int]:
        placed = 0
        for _ in range(needed):
            shift = self._find_shift(ledger, day, role, constraints)
            if shift is None:
                break
            ledger = ledger.add(shift)
            placed += 1
        return ledger, placed

    def _find_shift(
        self,
        ledger: AssignmentLedger,
        day: date,
        role: Role,
        constraints: WeekConstraints,
        enforce_location_budget: bool = False,
    ) -> Optional[Shift]:
        """First workable (employee, shift kind) pair for a slot, or None."""
        week = constraints.week
        for employee in self._candidates(ledger, day, role):
            for kind in self._kind_order(ledger, employee, day, role):
                start, end = shift_window(kind, day)
                shift = Shift(
                    employee_id=employee.id,
                    location_id=self.context.location_id,
                    start_datetime=start,
                    end_datetime=end,
                    role=role,
                    source=ShiftSource.GENERATED,
                )
                if enforce_location_budget and not self._within_location_budget(ledger, shift, constraints):
                    return None
                can_work, reason = self.availability.can_employee_work_shift(employee, shift, week, ledger)
                if can_work:
                    return shift
                logger.debug(f"Employee {employee.id} cannot take {kind.value} on {day}: {reason}")
        return None

    def _candidates(self, ledger: AssignmentLedger, day: date, role: Role) -> list[Employee]:
        """
        Eligible, available employees for a slot.

        Shuffled first so the stable sort below leaves ties in random order:
        exact role matches before substitutes, then fewest shifts this week.
        """
        week = self.context.week
        eligible = eligible_roles_for_slot(role)
        pool = [
            e for e in self.employees
            if e.role in eligible
            and not ledger.works_on(e.id, day)
            and self.availability.is_available(e, day, ledger)
        ]
        self.rng.shuffle(pool)
        pool.sort(key=lambda e: (e.role != role, ledger.shift_count(e.id, week)))
        return pool

    def _kind_order(
        self,
        ledger: AssignmentLedger,
        employee: Employee,
        day: date,
        role: Role,
    ) -> list[ShiftKind]:
        """
        Shift kinds to try for this employee, thinnest coverage first.

        Leadership kinds are counted across the whole tier so managers rotate
        through opener, mid and closer rather than repeating one pattern.
        """
        kinds = list(shift_kinds_for(role))
        group = LEADERSHIP_ROLES if is_leadership(role) else {role}
        coverage = ledger.kind_coverage(day, group)
        worked = ledger.employee_kinds(employee.id, self.context.week)
        tiebreak = {kind: self.rng.random() for kind in kinds}
        return sorted(kinds, key=lambda k: (coverage[k], worked[k], tiebreak[k]))

    def _within_location_budget(
        self,
        ledger: AssignmentLedger,
        shift: Shift,
        constraints: WeekConstraints,
    ) -> bool:
        budget = constraints.weekly_hours_budget
        if budget is None:
            return True
        week = constraints.week
        used = sum(
            self.rules.paid_hours(s) for s in ledger.shifts
            if s.location_id == self.context.location_id and week.contains(s.work_date)
        )
        return used + self.rules.paid_hours(shift) <= budget

    def _record_unmet(self, day: date, role: Role, shortfall: int, reason: UnmetReason):
        logger.warning(
            f"Unmet requirement at location {self.context.location_id} on {day}: "
            f"{role.value} short by {shortfall} ({reason.value})"
        )
        self.unmet.append(UnmetRequirement(
            location_id=self.context.location_id,
            day=day,
            role=role,
            shortfall=shortfall,
            reason=reason,
        ))


def solve_schedule(
    context: ScheduleContext,
    rng: Optional[random.Random] = None,
    rules: Optional[SchedulingRules] = None,
) -> ScheduleResult:
    """
    Main entry point for schedule generation.

    Args:
        context: ScheduleContext with all required data
        rng: random source for tie-breaking and Phase 2 day order
        rules: scheduling constants; defaults to application settings

    Returns:
        ScheduleResult with existing and generated shifts plus unmet slots
    """
    generator = TwoPhaseGenerator(context, rng=rng, rules=rules)
    return generator.solve()
