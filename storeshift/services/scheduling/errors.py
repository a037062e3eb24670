"""
Scheduling error taxonomy.
Unmet requirements and validation warnings are result data, not errors.
"""

from typing import Optional


class SchedulingError(Exception):
    pass


class ConfigurationError(SchedulingError):
    """A location cannot be scheduled as configured."""
    pass


class InvalidRangeError(SchedulingError):
    """The requested date range is inverted or longer than supported."""
    pass


class PersistenceError(SchedulingError):
    """The batch write of generated shifts failed."""

    def __init__(self, message: str, committed_shifts: Optional[list] = None):
        super().__init__(message)
        self.committed_shifts = committed_shifts or []


class LocationNotFoundError(SchedulingError):
    """No location exists with the requested id."""
    pass
