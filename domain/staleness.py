"""
Domain: contact staleness ("traffic light") buckets.

Staleness is measured in days since the customer was last contacted, or since
they were created if nobody has contacted them yet. Days are fractional; a
customer contacted 2 days and 1 hour ago is already past the green window.

Buckets are defined strictly as:
  - GREEN:  days <= 2
  - YELLOW: 2 < days <= 5
  - ORANGE: 5 < days <= 12
  - RED:    12 < days <= 20
  - BLACK:  days > 20
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from .time import days_between, require_utc_timestamp


class StalenessBucket(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    ORANGE = "orange"
    RED = "red"
    BLACK = "black"

    @staticmethod
    def for_days(days: float) -> "StalenessBucket":
        """
        Resolve a bucket from a day count since last contact.

        Every non-negative day count maps to exactly one bucket.
        """

        if days < 0:
            # A last-contact time in the future indicates inconsistent inputs.
            raise ValueError("days since contact must be >= 0")

        if days <= 2:
            return StalenessBucket.GREEN
        if days <= 5:
            return StalenessBucket.YELLOW
        if days <= 12:
            return StalenessBucket.ORANGE
        if days <= 20:
            return StalenessBucket.RED
        return StalenessBucket.BLACK


@dataclass(frozen=True, slots=True)
class ContactAge:
    """
    Value object for contact recency evaluation.

    All timestamps must be passed explicitly; no implicit 'now' is used.
    """

    created_at: datetime
    last_contacted: Optional[datetime]
    as_of: datetime

    def reference(self) -> datetime:
        return self.last_contacted if self.last_contacted is not None else self.created_at

    def days(self) -> float:
        require_utc_timestamp("as_of", self.as_of)
        return days_between(self.reference(), self.as_of)

    def bucket(self) -> StalenessBucket:
        return StalenessBucket.for_days(self.days())


__all__ = ["StalenessBucket", "ContactAge"]
