import random
import pytest
from collections import Counter
from datetime import date, time, timedelta

from storeshift.services.scheduling.availability import weekly_hours_budget
from storeshift.services.scheduling.constraints import ConstraintSet, classify_shift
from storeshift.services.scheduling.errors import ConfigurationError, InvalidRangeError
from storeshift.services.scheduling.roles import Role, is_manager
from storeshift.services.scheduling.types import (
    Location,
    RoleRequirement,
    ScheduleContext,
    ScheduleResult,
    ScheduleWeek,
    ShiftSource,
    TimeOffRequest,
    UnmetReason,
)
from storeshift.services.scheduling.solver import TwoPhaseGenerator, solve_schedule

from conftest import (
    get_test_sunday,
    get_thanksgiving_sunday,
    make_context,
    make_employee,
    make_shift,
)


def role_of(shift, context):
    if shift.role is not None:
        return shift.role
    return next(e.role for e in context.employees if e.id == shift.employee_id)


def count_role(result, context, day, role):
    return sum(
        1 for s in result.shifts
        if s.location_id == context.location_id and s.work_date == day and role_of(s, context) == role
    )


def assert_invariants(context: ScheduleContext, result: ScheduleResult, rules):
    week = context.week

    # existing shifts come first, untouched
    assert result.shifts[:len(context.existing_shifts)] == context.existing_shifts
    assert result.shifts[len(context.existing_shifts):] == result.new_shifts

    # no double booking
    by_employee = {}
    for s in result.shifts:
        by_employee.setdefault(s.employee_id, []).append(s)
    for shifts in by_employee.values():
        for i, a in enumerate(shifts):
            for b in shifts[i + 1:]:
                assert not a.overlaps(b)

    resolved = ConstraintSet(context.location, context.role_requirements, context.station_limits, rules).resolve(week)
    unmet_keys = {(u.day, u.role) for u in result.unmet_requirements}
    for day in week.days:
        # minimum coverage or flagged
        for req in resolved.requirements_for(day):
            if count_role(result, context, day, req.role) < req.min_count:
                assert (day, req.role) in unmet_keys

        # station limits
        for role in (Role.APPAREL_PROCESSOR, Role.DONATION_PRICER):
            limit = resolved.station_limit(role, day)
            assert count_role(result, context, day, role) <= limit

    # hours budget
    for emp in context.employees:
        hours = sum(rules.paid_hours(s) for s in result.shifts if s.employee_id == emp.id and week.contains(s.work_date))
        assert hours <= weekly_hours_budget(emp, week, rules)

    # leadership dependency
    for s in result.new_shifts:
        if s.role == Role.TEAM_LEAD:
            assert any(
                is_manager(role_of(m, context)) for m in result.shifts
                if m.location_id == s.location_id and m.work_date == s.work_date
            )


class TestScenarios:

    def test_full_production_coverage(self, production_staff, production_requirements, rules):
        context = make_context(production_staff, production_requirements)
        result = solve_schedule(context, rng=random.Random(7), rules=rules)

        assert len(result.phase_one_shifts) == 21
        assert len(result.new_shifts) == 21
        assert result.unmet_requirements == []
        assert result.success is True
        for day in context.week.days:
            assert count_role(result, context, day, Role.APPAREL_PROCESSOR) == 2
            assert count_role(result, context, day, Role.DONATION_PRICER) == 1
        assert_invariants(context, result, rules)

    def test_single_apparel_processor(self, production_staff, production_requirements, rules):
        staff = [make_employee(1, "APPROC", max_weekly_hours=56)] + production_staff[4:]
        context = make_context(staff, production_requirements)
        result = solve_schedule(context, rng=random.Random(7), rules=rules)

        assert len(result.unmet_requirements) == 7
        for unmet in result.unmet_requirements:
            assert unmet.role == Role.APPAREL_PROCESSOR
            assert unmet.shortfall == 1
            assert unmet.reason == UnmetReason.NO_ELIGIBLE_EMPLOYEE
            assert unmet.location_id == 1
        assert {u.day for u in result.unmet_requirements} == set(context.week.days)

        for day in context.week.days:
            assert count_role(result, context, day, Role.APPAREL_PROCESSOR) == 1
            assert count_role(result, context, day, Role.DONATION_PRICER) == 1
        assert result.success is False
        assert_invariants(context, result, rules)

    def test_no_opening_after_late_manual_close(self, rules):
        monday = get_test_sunday() + timedelta(days=1)
        tuesday = monday + timedelta(days=1)
        existing = [make_shift(1, monday, time(15, 0), time(23, 0))]
        context = make_context(
            [make_employee(1, "CASHSLS", max_weekly_hours=60)],
            [RoleRequirement(location_id=1, role=Role.CASHIER, min_count=1)],
            existing=existing,
        )
        result = solve_schedule(context, rng=random.Random(3), rules=rules)

        tuesday_shifts = [s for s in result.new_shifts if s.work_date == tuesday]
        assert len(tuesday_shifts) == 1
        assert tuesday_shifts[0].start_datetime - existing[0].end_datetime >= timedelta(hours=12)
        assert not any(s.work_date == monday for s in result.new_shifts)
        assert result.unmet_requirements == []
        assert_invariants(context, result, rules)

    def test_thanksgiving_week_budget(self, rules):
        start = get_thanksgiving_sunday()
        thanksgiving = date(2025, 11, 27)
        context = make_context(
            [make_employee(1, "CASHSLS", hire_date=date(2019, 6, 1))],
            [RoleRequirement(location_id=1, role=Role.CASHIER, min_count=1)],
            start=start,
        )
        result = solve_schedule(context, rng=random.Random(5), rules=rules)

        # closed on the holiday, 40h less 8h holiday deduction = four 8h shifts
        assert not any(s.work_date == thanksgiving for s in result.shifts)
        assert len(result.new_shifts) == 4
        assert sum(rules.paid_hours(s) for s in result.new_shifts) == 32
        assert len(result.unmet_requirements) == 2
        assert thanksgiving not in {u.day for u in result.unmet_requirements}
        assert_invariants(context, result, rules)

    def test_team_lead_without_manager(self, rules):
        context = make_context(
            [make_employee(1, "STLDWKR")],
            [RoleRequirement(location_id=1, role=Role.TEAM_LEAD, min_count=1)],
        )
        result = solve_schedule(context, rng=random.Random(1), rules=rules)

        assert result.new_shifts == []
        assert len(result.unmet_requirements) == 7
        assert all(u.reason == UnmetReason.NO_MANAGER_PRESENT for u in result.unmet_requirements)


class TestLeadership:

    def test_team_lead_follows_manager_days(self, rules):
        # manager only works Mondays
        manager = make_employee(1, "STSUPER", non_working_days=frozenset({1, 2, 3, 4, 5, 6}))
        context = make_context(
            [manager, make_employee(2, "STLDWKR"), make_employee(3, "WVLDWRK")],
            [
                RoleRequirement(location_id=1, role=Role.TEAM_LEAD, min_count=1),
                RoleRequirement(location_id=1, role=Role.STORE_MANAGER, min_count=1),
            ],
        )
        result = solve_schedule(context, rng=random.Random(2), rules=rules)
        monday = get_test_sunday() + timedelta(days=1)

        lead_days = {s.work_date for s in result.new_shifts if s.role == Role.TEAM_LEAD}
        assert lead_days == {monday}
        reasons = Counter((u.role, u.reason) for u in result.unmet_requirements)
        assert reasons[(Role.STORE_MANAGER, UnmetReason.NO_ELIGIBLE_EMPLOYEE)] == 6
        assert reasons[(Role.TEAM_LEAD, UnmetReason.NO_MANAGER_PRESENT)] == 6

    def test_existing_manager_shift_enables_team_lead(self, rules):
        tuesday = get_test_sunday() + timedelta(days=2)
        existing = [make_shift(9, tuesday, time(8, 0), time(16, 30), role=Role.ASSISTANT_MANAGER)]
        context = make_context(
            [make_employee(2, "STLDWKR")],
            [RoleRequirement(location_id=1, role=Role.TEAM_LEAD, min_count=1, day_of_week=1)],
            existing=existing,
        )
        result = solve_schedule(context, rng=random.Random(2), rules=rules)
        assert [s.work_date for s in result.new_shifts] == [tuesday]

    def test_assistant_managers_cover_store_manager_slot(self, rules):
        context = make_context(
            [make_employee(1, "STASSTSP"), make_employee(2, "WVSTAST")],
            [RoleRequirement(location_id=1, role=Role.STORE_MANAGER, min_count=1)],
        )
        result = solve_schedule(context, rng=random.Random(4), rules=rules)
        assert len(result.new_shifts) == 7
        assert all(s.role == Role.STORE_MANAGER for s in result.new_shifts)
        assert result.unmet_requirements == []

    def test_exact_role_preferred_over_substitute(self, rules):
        context = make_context(
            [make_employee(1, "STSUPER", max_weekly_hours=56), make_employee(2, "STASSTSP", max_weekly_hours=56)],
            [
                RoleRequirement(location_id=1, role=Role.STORE_MANAGER, min_count=1),
                RoleRequirement(location_id=1, role=Role.ASSISTANT_MANAGER, min_count=1),
            ],
        )
        result = solve_schedule(context, rng=random.Random(9), rules=rules)
        for s in result.new_shifts:
            expected = 1 if s.role == Role.STORE_MANAGER else 2
            assert s.employee_id == expected

    def test_manager_shift_kinds_rotate(self, rules):
        context = make_context(
            [make_employee(1, "STSUPER", max_weekly_hours=56),
             make_employee(2, "STASSTSP", max_weekly_hours=56),
             make_employee(3, "STLDWKR", max_weekly_hours=56)],
            [
                RoleRequirement(location_id=1, role=Role.STORE_MANAGER, min_count=1),
                RoleRequirement(location_id=1, role=Role.ASSISTANT_MANAGER, min_count=1),
                RoleRequirement(location_id=1, role=Role.TEAM_LEAD, min_count=1),
            ],
        )
        result = solve_schedule(context, rng=random.Random(6), rules=rules)
        for emp_id in (1, 2, 3):
            kinds = {classify_shift(s) for s in result.new_shifts if s.employee_id == emp_id}
            assert len(kinds) >= 2


class TestPhaseOne:

    def test_days_processed_sunday_to_saturday(self, production_staff, production_requirements, rules):
        context = make_context(production_staff, production_requirements)
        result = solve_schedule(context, rng=random.Random(8), rules=rules)
        dates = [s.work_date for s in result.phase_one_shifts]
        assert dates == sorted(dates)

    def test_days_run_sunday_first(self, rules):
        # a Monday-start week still fills its Sunday first
        context = make_context(
            [make_employee(1, "CASHSLS", max_weekly_hours=60)],
            [RoleRequirement(location_id=1, role=Role.CASHIER, min_count=1)],
            start=date(2025, 1, 20),
        )
        result = solve_schedule(context, rng=random.Random(2), rules=rules)
        assert [s.work_date.weekday() for s in result.phase_one_shifts] == [6, 0, 1, 2, 3, 4, 5]

    def test_only_this_weeks_shifts_count_toward_fairness(self, rules):
        sunday = get_test_sunday()
        monday = sunday + timedelta(days=1)
        existing = [
            # employee 1 worked the Saturday before and the Sunday after the week
            make_shift(1, sunday - timedelta(days=1), time(8, 0), time(16, 30)),
            make_shift(1, sunday + timedelta(days=7), time(10, 0), time(18, 30)),
            # employee 2 already works Wednesday this week
            make_shift(2, sunday + timedelta(days=3), time(8, 0), time(16, 30)),
        ]
        context = make_context(
            [make_employee(1, "CASHSLS"), make_employee(2, "CASHSLS")],
            [RoleRequirement(location_id=1, role=Role.CASHIER, min_count=1, day_of_week=0)],
            existing=existing,
        )
        for seed in range(5):
            result = solve_schedule(context, rng=random.Random(seed), rules=rules)
            assert [(s.employee_id, s.work_date) for s in result.new_shifts] == [(1, monday)]

    def test_same_seed_same_phase_one(self, full_store_staff, full_store_requirements, rules):
        context = make_context(full_store_staff, full_store_requirements)
        first = solve_schedule(context, rng=random.Random(11), rules=rules)
        second = solve_schedule(context, rng=random.Random(11), rules=rules)
        assert first.phase_one_shifts == second.phase_one_shifts
        assert first.new_shifts == second.new_shifts

    def test_existing_shifts_preserved(self, production_staff, production_requirements, rules):
        monday = get_test_sunday() + timedelta(days=1)
        existing = [make_shift(1, monday, time(9, 0), time(17, 0))]
        context = make_context(production_staff, production_requirements, existing=existing)
        result = solve_schedule(context, rng=random.Random(7), rules=rules)

        assert result.shifts[0] is existing[0]
        assert count_role(result, context, monday, Role.APPAREL_PROCESSOR) == 2
        assert not any(s.employee_id == 1 and s.work_date == monday for s in result.new_shifts)
        assert all(s.source == ShiftSource.GENERATED for s in result.new_shifts)

    def test_station_limit_caps_minimum(self, production_staff, rules):
        context = make_context(
            production_staff,
            [RoleRequirement(location_id=1, role=Role.APPAREL_PROCESSOR, min_count=3)],
        )
        result = solve_schedule(context, rng=random.Random(7), rules=rules)
        for day in context.week.days:
            assert count_role(result, context, day, Role.APPAREL_PROCESSOR) == 2
        assert len(result.unmet_requirements) == 7
        assert all(u.reason == UnmetReason.STATION_LIMIT and u.shortfall == 1 for u in result.unmet_requirements)

    def test_missing_role_reported_per_day(self, production_staff, rules):
        context = make_context(
            production_staff,
            [RoleRequirement(location_id=1, role=Role.CUSTODIAN, min_count=1)],
        )
        result = solve_schedule(context, rng=random.Random(7), rules=rules)
        assert result.new_shifts == []
        assert [u.day for u in result.unmet_requirements] == context.week.days

    def test_time_off_respected(self, rules):
        monday = get_test_sunday() + timedelta(days=1)
        context = make_context(
            [make_employee(1, "CASHSLS"), make_employee(2, "CASHSLS")],
            [RoleRequirement(location_id=1, role=Role.CASHIER, min_count=1)],
            time_off=[TimeOffRequest(employee_id=1, start_date=monday, end_date=monday + timedelta(days=2))],
        )
        result = solve_schedule(context, rng=random.Random(7), rules=rules)
        off_days = {monday, monday + timedelta(days=1), monday + timedelta(days=2)}
        assert not any(s.employee_id == 1 and s.work_date in off_days for s in result.new_shifts)

    def test_employees_from_other_locations_ignored(self, rules):
        context = make_context(
            [make_employee(1, "CASHSLS", location_id=2)],
            [RoleRequirement(location_id=1, role=Role.CASHIER, min_count=1)],
        )
        result = solve_schedule(context, rng=random.Random(7), rules=rules)
        assert result.new_shifts == []


class TestPhaseTwo:

    def test_fills_priority_days_to_capacity(self, rules):
        context = make_context(
            [make_employee(i, "CASHSLS") for i in range(1, 5)],
            [RoleRequirement(location_id=1, role=Role.CASHIER, min_count=1, max_count=3)],
        )
        result = solve_schedule(context, rng=random.Random(7), rules=rules)

        assert len(result.phase_one_shifts) == 7
        assert len(result.phase_two_shifts) == 6
        assert all(s.work_date.weekday() in (4, 5, 6) for s in result.phase_two_shifts)
        for day in context.week.days:
            expected = 3 if day.weekday() in (4, 5, 6) else 1
            assert count_role(result, context, day, Role.CASHIER) == expected
        assert_invariants(context, result, rules)

    def test_location_budget_stops_enrichment(self, rules):
        context = make_context(
            [make_employee(i, "CASHSLS") for i in range(1, 5)],
            [RoleRequirement(location_id=1, role=Role.CASHIER, min_count=1, max_count=3)],
            location=Location(id=1, name="Store A", weekly_hours_budget=56),
        )
        result = solve_schedule(context, rng=random.Random(7), rules=rules)
        assert len(result.phase_one_shifts) == 7
        assert result.phase_two_shifts == []


class TestProperties:

    @pytest.mark.parametrize("seed", [0, 1, 2, 3, 42, 1234])
    def test_invariants_hold(self, full_store_staff, full_store_requirements, rules, seed):
        context = make_context(full_store_staff, full_store_requirements)
        result = solve_schedule(context, rng=random.Random(seed), rules=rules)
        assert_invariants(context, result, rules)

        assert not any(s.employee_id == 16 for s in result.new_shifts)  # hidden
        part_timer_days = {s.work_date for s in result.new_shifts if s.employee_id == 13}
        assert len(part_timer_days) <= 3

    @pytest.mark.parametrize("seed", [5, 6])
    def test_invariants_with_existing_shifts(self, full_store_staff, full_store_requirements, rules, seed):
        sunday = get_test_sunday()
        existing = [
            make_shift(1, sunday + timedelta(days=1), time(8, 0), time(16, 30)),
            make_shift(6, sunday + timedelta(days=4), time(9, 0), time(17, 30)),
            make_shift(11, sunday + timedelta(days=5), time(14, 0), time(22, 0)),
        ]
        context = make_context(full_store_staff, full_store_requirements, existing=existing)
        result = solve_schedule(context, rng=random.Random(seed), rules=rules)
        assert_invariants(context, result, rules)


class TestErrors:

    def test_no_requirements(self, production_staff, rules):
        context = make_context(production_staff, [])
        with pytest.raises(ConfigurationError):
            solve_schedule(context, rng=random.Random(0), rules=rules)

    def test_inverted_range(self, production_staff, production_requirements, rules):
        context = make_context(production_staff, production_requirements)
        context.week = ScheduleWeek(location_id=1, start=context.week.end, end=context.week.start)
        with pytest.raises(InvalidRangeError):
            TwoPhaseGenerator(context, rng=random.Random(0), rules=rules).solve()

    def test_disabled_location(self, production_staff, production_requirements, rules):
        context = make_context(
            production_staff, production_requirements,
            location=Location(id=1, name="Store A", scheduling_enabled=False),
        )
        with pytest.raises(ConfigurationError):
            solve_schedule(context, rng=random.Random(0), rules=rules)
