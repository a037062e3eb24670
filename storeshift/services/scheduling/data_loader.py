"""
Data loader for scheduling service.
Fetches all relevant data from the database and converts to internal types.
The result is a snapshot: the engine never reads the database again mid-run.
"""

import logging
from datetime import date, datetime, timedelta, time
from typing import Optional

from sqlalchemy import select, and_, or_, func
from sqlalchemy.orm import Session

from storeshift.db.models.locations import Locations
from storeshift.db.models.employees import Employees
from storeshift.db.models.time_off_requests import TimeOffRequests, TimeOffStatus as DBTimeOffStatus
from storeshift.db.models.role_requirements import RoleRequirements, StationLimits
from storeshift.db.models.shifts import Shifts, ShiftStatus

from .constraints import build_week
from .errors import LocationNotFoundError
from .roles import to_role
from .types import (
    Employee,
    EmploymentType,
    Location,
    TimeOffRequest,
    TimeOffStatus,
    RoleRequirement,
    StationLimit,
    Shift,
    ShiftSource,
    ScheduleContext,
    ScheduleWeek,
    SchedulingRules,
)


logger = logging.getLogger(__name__)


def parse_weekdays(value: Optional[str]) -> frozenset[int]:
    """'0,6' -> {0, 6}; blank -> empty."""
    if not value:
        return frozenset()
    return frozenset(int(part) for part in value.split(",") if part.strip())


def load_location(db: Session, location_id: int) -> Location:
    row = db.get(Locations, location_id)
    if row is None:
        raise LocationNotFoundError(f"Location {location_id} not found")
    return Location(
        id=row.id,
        name=row.name,
        active=row.active,
        scheduling_enabled=row.scheduling_enabled,
        weekly_hours_budget=row.weekly_hours_budget,
    )


def load_employees(db: Session, location_id: int) -> list[Employee]:
    """Load active employees whose home location is location_id."""

    stmt = select(Employees).where(
        and_(
            Employees.location_id == location_id,
            Employees.active == True
        )
    )
    rows = db.execute(stmt).scalars().all()

    return [
        Employee(
            id=emp.id,
            location_id=emp.location_id,
            job_code=emp.job_code,
            employment_type=EmploymentType(emp.employment_type.value),
            max_weekly_hours=emp.max_weekly_hours,
            allowed_days=emp.allowed_days,
            hidden_from_schedule=emp.hidden_from_schedule,
            name=emp.name,
            hire_date=emp.hire_date,
            non_working_days=parse_weekdays(emp.non_working_days),
        )
        for emp in rows
    ]


def load_time_off_requests(
    db: Session,
    employee_ids: list[int],
    week: ScheduleWeek
) -> list[TimeOffRequest]:
    """Load approved time off requests that overlap with the schedule week."""

    if not employee_ids:
        return []

    stmt = select(TimeOffRequests).where(
        and_(
            TimeOffRequests.employee_id.in_(employee_ids),
            TimeOffRequests.status == DBTimeOffStatus.APPROVED,
            TimeOffRequests.start_date <= week.end,
            TimeOffRequests.end_date >= week.start,
        )
    )
    rows = db.execute(stmt).scalars().all()

    return [
        TimeOffRequest(
            employee_id=r.employee_id,
            start_date=r.start_date,
            end_date=r.end_date,
            status=TimeOffStatus(r.status.value),
            paid_hours=r.paid_hours,
        )
        for r in rows
    ]


def load_role_requirements(db: Session, location_id: int) -> list[RoleRequirement]:
    """Load active role requirements for a location."""

    stmt = select(RoleRequirements).where(
        and_(
            RoleRequirements.location_id == location_id,
            RoleRequirements.active == True
        )
    )
    rows = db.execute(stmt).scalars().all()

    requirements = []
    for r in rows:
        role = to_role(r.role_code)
        if role is None:
            logger.warning(f"Skipping requirement {r.id}: unrecognised role code '{r.role_code}'")
            continue
        requirements.append(RoleRequirement(
            id=r.id,
            location_id=r.location_id,
            role=role,
            min_count=r.min_count,
            max_count=r.max_count,
            day_of_week=r.day_of_week,
        ))
    return requirements


def load_station_limits(db: Session, location_id: int) -> list[StationLimit]:
    stmt = select(StationLimits).where(StationLimits.location_id == location_id)
    rows = db.execute(stmt).scalars().all()

    limits = []
    for r in rows:
        role = to_role(r.role_code)
        if role is None:
            logger.warning(f"Skipping station limit {r.id}: unrecognised role code '{r.role_code}'")
            continue
        limits.append(StationLimit(
            location_id=r.location_id,
            role=role,
            max_count=r.max_count,
            day_of_week=r.day_of_week,
        ))
    return limits


def _shift_window_filter(week: ScheduleWeek):
    # One day either side so rest gaps across the week boundary are visible
    start_dt = datetime.combine(week.start - timedelta(days=1), time.min)
    end_dt = datetime.combine(week.end + timedelta(days=2), time.min)
    return and_(
        Shifts.status != ShiftStatus.CANCELLED,
        Shifts.start_datetime >= start_dt,
        Shifts.start_datetime < end_dt,
    )


def load_existing_shifts(
    db: Session,
    location_id: int,
    employee_ids: list[int],
    week: ScheduleWeek
) -> list[Shift]:
    """
    Load non-cancelled shifts at the location, plus shifts the roster holds
    elsewhere, around the week (for conflict detection).
    """
    ownership = Shifts.location_id == location_id
    if employee_ids:
        ownership = or_(ownership, Shifts.employee_id.in_(employee_ids))

    stmt = (
        select(Shifts)
        .where(and_(ownership, _shift_window_filter(week)))
        .order_by(Shifts.start_datetime, Shifts.id)
    )
    rows = db.execute(stmt).scalars().all()

    return [
        Shift(
            employee_id=s.employee_id,
            location_id=s.location_id,
            start_datetime=s.start_datetime.replace(tzinfo=None),
            end_datetime=s.end_datetime.replace(tzinfo=None),
            role=to_role(s.role_code) if s.role_code else None,
            source=ShiftSource(s.source.value),
        )
        for s in rows
    ]


def count_location_shifts(db: Session, location_id: int, week: ScheduleWeek) -> int:
    """Non-cancelled shifts at the location starting inside the week."""
    start_dt = datetime.combine(week.start, time.min)
    end_dt = datetime.combine(week.end + timedelta(days=1), time.min)
    stmt = select(func.count(Shifts.id)).where(
        and_(
            Shifts.location_id == location_id,
            Shifts.status != ShiftStatus.CANCELLED,
            Shifts.start_datetime >= start_dt,
            Shifts.start_datetime < end_dt,
        )
    )
    return db.execute(stmt).scalar_one()


def load_schedule_context(
    db: Session,
    location_id: int,
    week_start: date,
    week_end: Optional[date] = None,
    rules: Optional[SchedulingRules] = None,
) -> ScheduleContext:
    """
    Load all data needed to generate a schedule for a location/week.

    Raises:
        InvalidRangeError: inverted or over-long range
        LocationNotFoundError: no such location
    """
    week = build_week(location_id, week_start, week_end, rules)
    location = load_location(db, location_id)

    employees = load_employees(db, location_id)
    employee_ids = [e.id for e in employees]

    return ScheduleContext(
        location=location,
        week=week,
        employees=employees,
        time_off_requests=load_time_off_requests(db, employee_ids, week),
        role_requirements=load_role_requirements(db, location_id),
        station_limits=load_station_limits(db, location_id),
        existing_shifts=load_existing_shifts(db, location_id, employee_ids, week),
    )
