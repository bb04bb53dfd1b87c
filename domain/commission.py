"""
Domain: two-stage sales commissions.

Rules implemented here:
- Commission is 5% of the total sale price.
- It is paid in two equal halves: the deposit half when the customer's deposit
  is received, the final half when installation completes.
- deposit_commission + final_commission == commission_amount exactly; the
  final half is derived from the total so the two can never drift apart.
- A commission is created with its deposit half already paid (the deposit is
  what creates it). The final half flips from unpaid to paid exactly once.

Stages, derived from the two paid flags:
  - AWAITING_DEPOSIT:      deposit not paid (not produced by `Commission.create`)
  - AWAITING_INSTALLATION: deposit paid, final not paid
  - COMPLETE:              both paid
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional
from uuid import UUID

from .money import Amount, require_positive_amount
from .time import require_utc_timestamp

COMMISSION_RATE = Decimal("0.05")
DEPOSIT_SHARE = Decimal("0.5")


class CommissionStage(str, Enum):
    AWAITING_DEPOSIT = "Awaiting Deposit"
    AWAITING_INSTALLATION = "Awaiting Installation"
    COMPLETE = "Complete"


@dataclass(frozen=True, slots=True)
class Commission:
    """
    Commission record for one sale of one customer.

    All timestamps must be passed explicitly.
    """

    commission_id: UUID
    customer_id: UUID
    rep_id: Optional[str]
    total_sale_price: Decimal
    commission_amount: Decimal
    deposit_commission: Decimal
    final_commission: Decimal
    created_at: datetime
    deposit_paid: bool = True
    deposit_paid_date: Optional[datetime] = None
    final_paid: bool = False
    final_paid_date: Optional[datetime] = None

    def __post_init__(self) -> None:
        require_utc_timestamp("created_at", self.created_at)
        if self.deposit_paid_date is not None:
            require_utc_timestamp("deposit_paid_date", self.deposit_paid_date)
        if self.final_paid_date is not None:
            require_utc_timestamp("final_paid_date", self.final_paid_date)
        if self.deposit_commission + self.final_commission != self.commission_amount:
            raise ValueError("deposit_commission + final_commission must equal commission_amount")

    @staticmethod
    def create(
        *,
        commission_id: UUID,
        customer_id: UUID,
        rep_id: Optional[str],
        total_sale_price: Amount,
        created_at: datetime,
    ) -> "Commission":
        """
        Build the commission for a sale whose deposit was received at `created_at`.

        Raises InvalidAmountError unless `total_sale_price` is a positive finite number.
        """

        price = require_positive_amount("total_sale_price", total_sale_price)
        commission_amount = price * COMMISSION_RATE
        deposit_commission = commission_amount * DEPOSIT_SHARE
        return Commission(
            commission_id=commission_id,
            customer_id=customer_id,
            rep_id=rep_id,
            total_sale_price=price,
            commission_amount=commission_amount,
            deposit_commission=deposit_commission,
            final_commission=commission_amount - deposit_commission,
            created_at=created_at,
            deposit_paid=True,
            deposit_paid_date=created_at,
            final_paid=False,
        )

    @property
    def stage(self) -> CommissionStage:
        if not self.deposit_paid:
            return CommissionStage.AWAITING_DEPOSIT
        if not self.final_paid:
            return CommissionStage.AWAITING_INSTALLATION
        return CommissionStage.COMPLETE

    def final_released(self, at: datetime) -> "Commission":
        """Return a copy with the final half released at `at`."""

        require_utc_timestamp("at", at)
        if self.final_paid:
            raise ValueError("Final commission has already been released")
        return replace(self, final_paid=True, final_paid_date=at)


@dataclass(frozen=True, slots=True)
class CommissionRollup:
    """
    Totals over a set of commissions.

    - total:     sum of commission_amount
    - pending:   sum of final_commission not yet released
    - completed: sum of commission_amount whose final half is released
    """

    total: Decimal
    pending: Decimal
    completed: Decimal

    @staticmethod
    def of(commissions: Iterable[Commission]) -> "CommissionRollup":
        total = Decimal("0")
        pending = Decimal("0")
        completed = Decimal("0")
        for comm in commissions:
            total += comm.commission_amount
            if comm.final_paid:
                completed += comm.commission_amount
            else:
                pending += comm.final_commission
        return CommissionRollup(total=total, pending=pending, completed=completed)


__all__ = [
    "COMMISSION_RATE",
    "DEPOSIT_SHARE",
    "CommissionStage",
    "Commission",
    "CommissionRollup",
]
