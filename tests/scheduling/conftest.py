import pytest
from datetime import date, time, timedelta
from typing import Optional

from storeshift.services.scheduling.roles import Role
from storeshift.services.scheduling.types import (
    Employee,
    EmploymentType,
    Location,
    RoleRequirement,
    ScheduleContext,
    ScheduleWeek,
    SchedulingRules,
    Shift,
    ShiftSource,
    StationLimit,
    TimeOffRequest,
)


def get_test_sunday() -> date:
    # returns a fixed Sunday for deterministic tests (no holidays that week)
    return date(2025, 1, 19)


def get_thanksgiving_sunday() -> date:
    # week of Sun 23 Nov - Sat 29 Nov 2025, Thanksgiving on the Thursday
    return date(2025, 11, 23)


def make_employee(
    id: int,
    job_code: str,
    employment_type: EmploymentType = EmploymentType.FULL_TIME,
    max_weekly_hours: float = 40,
    location_id: int = 1,
    **kwargs,
) -> Employee:
    return Employee(
        id=id,
        location_id=location_id,
        job_code=job_code,
        employment_type=employment_type,
        max_weekly_hours=max_weekly_hours,
        name=kwargs.pop("name", f"Employee {id}"),
        **kwargs,
    )


def make_shift(
    employee_id: int,
    day: date,
    start: time,
    end: time,
    role: Optional[Role] = None,
    location_id: int = 1,
) -> Shift:
    return Shift.from_times(employee_id, location_id, day, start, end, role=role, source=ShiftSource.MANUAL)


def make_context(
    employees: list[Employee],
    requirements: list[RoleRequirement],
    existing: Optional[list[Shift]] = None,
    time_off: Optional[list[TimeOffRequest]] = None,
    station_limits: Optional[list[StationLimit]] = None,
    start: Optional[date] = None,
    location: Optional[Location] = None,
) -> ScheduleContext:
    start = start or get_test_sunday()
    location = location or Location(id=1, name="Store A")
    return ScheduleContext(
        location=location,
        week=ScheduleWeek(location_id=location.id, start=start, end=start + timedelta(days=6)),
        employees=employees,
        time_off_requests=time_off or [],
        role_requirements=requirements,
        station_limits=station_limits or [],
        existing_shifts=existing or [],
    )


@pytest.fixture
def rules() -> SchedulingRules:
    return SchedulingRules()


@pytest.fixture
def store_a() -> Location:
    return Location(id=1, name="Store A")


@pytest.fixture
def week() -> ScheduleWeek:
    start = get_test_sunday()
    return ScheduleWeek(location_id=1, start=start, end=start + timedelta(days=6))


@pytest.fixture
def production_requirements() -> list[RoleRequirement]:
    # 2 apparel processors and 1 donation pricer every day
    return [
        RoleRequirement(location_id=1, role=Role.APPAREL_PROCESSOR, min_count=2, id=1),
        RoleRequirement(location_id=1, role=Role.DONATION_PRICER, min_count=1, id=2),
    ]


@pytest.fixture
def production_staff() -> list[Employee]:
    # 4 apparel processors (one on a variant code) and 2 pricers
    return [
        make_employee(1, "APPROC"),
        make_employee(2, "APPROC"),
        make_employee(3, "APWV"),
        make_employee(4, "APPROC"),
        make_employee(5, "DONPRI"),
        make_employee(6, "DONPRWV"),
    ]


@pytest.fixture
def full_store_staff() -> list[Employee]:
    return [
        make_employee(1, "STSUPER"),
        make_employee(2, "STASSTSP"),
        make_employee(3, "WVSTAST"),
        make_employee(4, "STLDWKR"),
        make_employee(5, "WVLDWRK"),
        make_employee(6, "APPROC"),
        make_employee(7, "APPROC"),
        make_employee(8, "APWV"),
        make_employee(9, "DONPRI"),
        make_employee(10, "DONPRI"),
        make_employee(11, "CASHSLS"),
        make_employee(12, "CSHSLSWV"),
        make_employee(13, "CASHSLS", EmploymentType.PART_TIME, max_weekly_hours=24, allowed_days=3),
        make_employee(14, "DONDOOR", EmploymentType.PART_TIME, max_weekly_hours=20),
        make_employee(15, "WVDON"),
        make_employee(16, "CASHSLS", hidden_from_schedule=True),
    ]


@pytest.fixture
def full_store_requirements() -> list[RoleRequirement]:
    return [
        RoleRequirement(location_id=1, role=Role.STORE_MANAGER, min_count=1),
        RoleRequirement(location_id=1, role=Role.TEAM_LEAD, min_count=1, max_count=2),
        RoleRequirement(location_id=1, role=Role.APPAREL_PROCESSOR, min_count=1, max_count=2),
        RoleRequirement(location_id=1, role=Role.DONATION_PRICER, min_count=1),
        RoleRequirement(location_id=1, role=Role.CASHIER, min_count=1, max_count=3),
        RoleRequirement(location_id=1, role=Role.DONOR_GREETER, min_count=1, max_count=2),
    ]
