"""
Domain: sales representatives and system users.

A Rep's identifier is the identity-provider account id; the profile and the
account are one-to-one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple

from .time import require_utc_timestamp


class Role(str, Enum):
    REP = "rep"
    ADMIN = "admin"
    OWNER = "owner"

    @property
    def is_admin(self) -> bool:
        """Admins and owners see and aggregate over every record."""
        return self is not Role.REP


def parse_postcodes(raw: str) -> Tuple[str, ...]:
    """Split a comma-separated postcode list, dropping blanks."""

    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True, slots=True)
class Rep:
    """
    Sales representative profile with service area and travel limits.

    Supports:
    - Service postcodes used when assigning new enquiries
    - Max travel time (hours) and distance (miles)
    - An external calendar reference for booking surveys
    """

    rep_id: str
    name: str
    email: str
    mobile: str
    region: str
    role: Role = Role.REP
    status: str = "active"  # active, inactive

    postcodes: Tuple[str, ...] = field(default_factory=tuple)
    max_travel_time: Decimal = Decimal("0")
    max_travel_miles: Decimal = Decimal("0")
    calendar_id: Optional[str] = None

    created_at: Optional[datetime] = None
    created_by: Optional[str] = None

    def __post_init__(self) -> None:
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)

    def is_active(self) -> bool:
        return self.status == "active"

    def covers_postcode(self, postcode: str) -> bool:
        """True if `postcode` starts with one of the rep's service postcodes (case-insensitive)."""
        target = postcode.replace(" ", "").upper()
        return any(target.startswith(code.replace(" ", "").upper()) for code in self.postcodes)


__all__ = ["Role", "Rep", "parse_postcodes"]
