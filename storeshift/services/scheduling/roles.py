"""
Role catalog.
Maps raw job codes (including store-specific variant spellings) onto the
fixed set of roles used by the scheduler.
"""

from enum import Enum
from typing import Optional


class Role(str, Enum):
    STORE_MANAGER = "STSUPER"
    ASSISTANT_MANAGER = "STASSTSP"
    TEAM_LEAD = "STLDWKR"
    APPAREL_PROCESSOR = "APPROC"
    DONATION_PRICER = "DONPRI"
    CASHIER = "CASHSLS"
    DONOR_GREETER = "DONDOOR"
    CUSTODIAN = "CUST"
    PART_TIME_STAFF = "PART"


# variant code -> standard code
CODE_EQUIVALENTS: dict[str, str] = {
    "APWV": "APPROC",
    "DONPRWV": "DONPRI",
    "CSHSLSWV": "CASHSLS",
    "WVDON": "DONDOOR",
    "WVSTMNG": "STSUPER",
    "STRSUPER": "STSUPER",
    "WVSTAST": "STASSTSP",
    "WVLDWRK": "STLDWKR",
}

JOB_TITLES: dict[str, str] = {
    "APPROC": "Apparel Processor",
    "DONPRI": "Donation Pricing",
    "CASHSLS": "Cashier",
    "DONDOOR": "Donor Greeter",
    "STSUPER": "Store Manager",
    "STASSTSP": "Assistant Manager",
    "STLDWKR": "Team Lead",
    "CUST": "Custodian",
    "PART": "Part-Time Staff",
}

MANAGER_ROLES = frozenset({Role.STORE_MANAGER, Role.ASSISTANT_MANAGER})
LEADERSHIP_ROLES = frozenset({Role.STORE_MANAGER, Role.ASSISTANT_MANAGER, Role.TEAM_LEAD})
PRODUCTION_STATION_ROLES = frozenset({Role.APPAREL_PROCESSOR, Role.DONATION_PRICER})

# Roles whose employees may fill a slot for the key role, in preference order.
# Only the two manager tiers stand in for each other.
SLOT_SUBSTITUTES: dict[Role, tuple[Role, ...]] = {
    Role.STORE_MANAGER: (Role.STORE_MANAGER, Role.ASSISTANT_MANAGER),
    Role.ASSISTANT_MANAGER: (Role.ASSISTANT_MANAGER, Role.STORE_MANAGER),
}

# Processing order inside a day: managers before team leads so the
# leadership dependency can see them.
ROLE_ORDER: tuple[Role, ...] = tuple(Role)


def canonicalize(code: str) -> str:
    """
    Return the standard job code for a raw code.

    Lookup is case-insensitive. Codes missing from the equivalence table are
    returned exactly as given, so the function is total and idempotent.
    """
    if not code:
        return code
    upper = code.upper()
    if upper in CODE_EQUIVALENTS:
        return CODE_EQUIVALENTS[upper]
    if upper in JOB_TITLES:
        return upper
    return code


def to_role(code: str) -> Optional[Role]:
    """Resolve a raw or standard code to a Role, or None if unrecognised."""
    canonical = canonicalize(code)
    try:
        return Role(canonical)
    except ValueError:
        return None


def equivalent_codes(role: Role) -> set[str]:
    """All raw codes (standard + variants) that canonicalize to role."""
    codes = {role.value}
    codes.update(variant for variant, standard in CODE_EQUIVALENTS.items() if standard == role.value)
    return codes


def job_title(code: str) -> str:
    if not code:
        return ""
    return JOB_TITLES.get(canonicalize(code).upper(), code)


def eligible_roles_for_slot(role: Role) -> tuple[Role, ...]:
    return SLOT_SUBSTITUTES.get(role, (role,))


def is_production_station(role: Optional[Role]) -> bool:
    return role in PRODUCTION_STATION_ROLES


def is_manager(role: Optional[Role]) -> bool:
    return role in MANAGER_ROLES


def is_leadership(role: Optional[Role]) -> bool:
    return role in LEADERSHIP_ROLES
