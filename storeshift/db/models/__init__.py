from storeshift.db.database import Base

# Import models
from storeshift.db.models.locations import Locations
from storeshift.db.models.employees import Employees, EmploymentType
from storeshift.db.models.shifts import Shifts, ShiftStatus, ShiftSource
from storeshift.db.models.time_off_requests import TimeOffRequests, TimeOffStatus
from storeshift.db.models.role_requirements import RoleRequirements, StationLimits

__all__ = [
    "Base",
    # Models
    "Locations",
    "Employees",
    "Shifts",
    "TimeOffRequests",
    "RoleRequirements",
    "StationLimits",
    # Enums
    "EmploymentType",
    "TimeOffStatus",
    "ShiftStatus",
    "ShiftSource",
]
