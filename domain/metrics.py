"""
Domain: dashboard rollups over customers (pure, read-only).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from .customer import CLOSED_STATUSES, Customer, CustomerStatus


def pipeline_value(customers: Sequence[Customer]) -> Decimal:
    """Sum of estimated values of customers whose deal is still open."""

    return sum(
        (c.estimated_value for c in customers if c.status not in CLOSED_STATUSES),
        Decimal("0"),
    )


def conversion_rate(customers: Sequence[Customer]) -> int:
    """Whole-percent share of customers in `sold` status (0 for an empty set, halves round up)."""

    if not customers:
        return 0
    sold = sum(1 for c in customers if c.status is CustomerStatus.SOLD)
    rate = Decimal(100 * sold) / Decimal(len(customers))
    return int(rate.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True, slots=True)
class DashboardMetrics:
    total_customers: int
    my_customers: int
    pipeline_value: Decimal
    conversion_rate: int

    @staticmethod
    def of(customers: Sequence[Customer], *, my_customers: int) -> "DashboardMetrics":
        return DashboardMetrics(
            total_customers=len(customers),
            my_customers=my_customers,
            pipeline_value=pipeline_value(customers),
            conversion_rate=conversion_rate(customers),
        )


__all__ = ["pipeline_value", "conversion_rate", "DashboardMetrics"]
