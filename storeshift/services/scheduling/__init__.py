"""
Scheduling service package.

Usage:
    import random
    from datetime import date
    from storeshift.services.scheduling import generate_schedule

    # Simple usage - load data and solve in one call
    result = generate_schedule(db, location_id=1, week_start=date(2025, 11, 23))

    # Or load context separately for inspection/testing
    from storeshift.services.scheduling import load_schedule_context, generate_schedule_from_context

    context = load_schedule_context(db, location_id=1, week_start=date(2025, 11, 23))
    result = generate_schedule_from_context(context, rng=random.Random(42))
    persist_generated_shifts(db, context, result)
"""

from .types import (
    Employee,
    EmploymentType,
    Location,
    TimeOffRequest,
    TimeOffStatus,
    RoleRequirement,
    StationLimit,
    Shift,
    ShiftKind,
    ShiftSource,
    ScheduleWeek,
    ScheduleContext,
    ScheduleResult,
    SchedulingRules,
    UnmetReason,
    UnmetRequirement,
    ValidationWarning,
    WarningKind,
)
from .roles import Role, canonicalize, equivalent_codes, job_title
from .errors import (
    SchedulingError,
    ConfigurationError,
    InvalidRangeError,
    PersistenceError,
    LocationNotFoundError,
)
from .data_loader import load_schedule_context
from .generator import generate_schedule, generate_schedule_from_context, persist_generated_shifts
from .solver import TwoPhaseGenerator, solve_schedule
from .validator import ScheduleValidator, validate_schedule

__all__ = [
    # Types
    "Employee",
    "EmploymentType",
    "Location",
    "TimeOffRequest",
    "TimeOffStatus",
    "RoleRequirement",
    "StationLimit",
    "Shift",
    "ShiftKind",
    "ShiftSource",
    "ScheduleWeek",
    "ScheduleContext",
    "ScheduleResult",
    "SchedulingRules",
    "UnmetReason",
    "UnmetRequirement",
    "ValidationWarning",
    "WarningKind",
    # Roles
    "Role",
    "canonicalize",
    "equivalent_codes",
    "job_title",
    # Errors
    "SchedulingError",
    "ConfigurationError",
    "InvalidRangeError",
    "PersistenceError",
    "LocationNotFoundError",
    # Main entry points
    "generate_schedule",
    "generate_schedule_from_context",
    "persist_generated_shifts",
    # Lower-level functions
    "load_schedule_context",
    "solve_schedule",
    "TwoPhaseGenerator",
    "ScheduleValidator",
    "validate_schedule",
]
