"""
Schedule generator - main orchestration layer.

This module provides the high-level API for generating schedules,
combining data loading, solving, validation and the batch write of new
shifts into a single flow.
"""

import logging
import random
from datetime import date
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storeshift.db.models.shifts import Shifts, ShiftStatus, ShiftSource as DBShiftSource

from .data_loader import count_location_shifts, load_schedule_context
from .errors import PersistenceError
from .solver import solve_schedule
from .types import ScheduleContext, ScheduleResult, SchedulingRules
from .validator import validate_schedule


logger = logging.getLogger(__name__)


def generate_schedule(
    db: Session,
    location_id: int,
    week_start: date,
    week_end: Optional[date] = None,
    rng: Optional[random.Random] = None,
    rules: Optional[SchedulingRules] = None,
) -> ScheduleResult:
    """
    Generate a schedule for a location for a given week.

    main entry point for schedule generation. This function:
    1. Loads a snapshot of all relevant data from the database
    2. Runs the two-phase generator
    3. Validates the combined schedule
    Nothing is written; call persist_generated_shifts to save the result.

    Args:
        db: Database session
        location_id: The location to generate a schedule for
        week_start: First day of the range
        week_end: Last day of the range (inclusive); defaults to a full week
        rng: random source; pass random.Random(seed) for repeatable output

    Returns:
        ScheduleResult containing:
        - shifts: existing shifts followed by new ones
        - new_shifts / phase_one_shifts / phase_two_shifts
        - unmet_requirements: (location, day, role, shortfall, reason) records
        - warnings: validator findings for the week

    Raises:
        InvalidRangeError, ConfigurationError, LocationNotFoundError

    Example:
        result = generate_schedule(db, location_id=1, week_start=date(2025, 11, 23))
        if result.unmet_requirements:
            print(f"Unmet: {result.unmet_requirements}")
    """
    context = load_schedule_context(db, location_id, week_start, week_end, rules)
    return generate_schedule_from_context(context, rng=rng, rules=rules)


def generate_schedule_from_context(
    context: ScheduleContext,
    rng: Optional[random.Random] = None,
    rules: Optional[SchedulingRules] = None,
) -> ScheduleResult:
    """
    Generate a schedule from a pre-loaded context.

    Useful for testing or when you want to manipulate the context
    before solving.
    """
    result = solve_schedule(context, rng=rng, rules=rules)
    result.warnings = validate_schedule(context, result.shifts, rules)
    logger.info(
        f"Location {context.location_id}: {len(result.new_shifts)} new shifts, "
        f"{len(result.unmet_requirements)} unmet, {len(result.warnings)} warnings"
    )
    return result


def persist_generated_shifts(
    db: Session,
    context: ScheduleContext,
    result: ScheduleResult,
) -> list[Shifts]:
    """
    Write all new shifts in one transaction.

    The location's shift count for the week must still match the snapshot the
    run was generated from; otherwise another writer got there first and the
    whole batch is rejected.

    Raises:
        PersistenceError: nothing was committed
    """
    week = context.week
    expected = sum(
        1 for s in context.existing_shifts
        if s.location_id == context.location_id and week.contains(s.work_date)
    )

    try:
        current = count_location_shifts(db, context.location_id, week)
        if current != expected:
            raise PersistenceError(
                f"Schedule for location {context.location_id} {week.start} to {week.end} "
                f"changed since it was generated ({expected} shifts, now {current}); regenerate and retry"
            )

        rows = [
            Shifts(
                location_id=shift.location_id,
                employee_id=shift.employee_id,
                start_datetime=shift.start_datetime,
                end_datetime=shift.end_datetime,
                role_code=shift.role.value if shift.role else None,
                status=ShiftStatus.DRAFT,
                source=DBShiftSource(shift.source.value),
            )
            for shift in result.new_shifts
        ]
        db.add_all(rows)
        db.commit()
    except PersistenceError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to save generated shifts for location {context.location_id}: {e}")
        raise PersistenceError(f"Failed to save generated shifts: {e}") from e

    for row in rows:
        db.refresh(row)
    logger.info(f"Saved {len(rows)} generated shifts for location {context.location_id}")
    return rows
