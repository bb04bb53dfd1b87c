"""
Commission engine service.

Handles:
- Creating the commission for a sale (deposit half paid on creation)
- Releasing the final half when installation completes
- Role-scoped commission statements with rolled-up totals
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence, Tuple
from uuid import UUID, uuid4

from domain.commission import Commission, CommissionRollup
from domain.context import OperationContext
from domain.money import Amount
from repositories.commission_repository import (
    commission_insert,
    commission_update,
    list_commissions,
    list_commissions_by_customer,
    list_commissions_by_rep,
)
from repositories.store import DocumentStore, Update

logger = logging.getLogger(__name__)


def build_commission(
    *,
    customer_id: UUID,
    rep_id: Optional[str],
    total_sale_price: Amount,
    created_at: datetime,
) -> Commission:
    """Pure construction; raises InvalidAmountError for a non-positive or non-finite price."""

    return Commission.create(
        commission_id=uuid4(),
        customer_id=customer_id,
        rep_id=rep_id,
        total_sale_price=total_sale_price,
        created_at=created_at,
    )


def create_commission(
    store: DocumentStore,
    ctx: OperationContext,
    customer_id: UUID,
    rep_id: Optional[str],
    total_sale_price: Amount,
) -> Commission:
    commission = build_commission(
        customer_id=customer_id,
        rep_id=rep_id,
        total_sale_price=total_sale_price,
        created_at=ctx.now(),
    )
    store.commit([commission_insert(commission)])
    logger.info(
        "Commission created",
        extra={"customer_id": str(customer_id), "rep_id": rep_id, "commission_amount": str(commission.commission_amount)},
    )
    return commission


def plan_final_release(
    store: DocumentStore, customer_id: UUID, at: datetime
) -> Tuple[List[Commission], List[Update]]:
    """
    Released copies of every commission for `customer_id` whose final half is
    unpaid, with the conditional updates that persist them.

    Each update is conditional on final_paid still being false, so a release
    racing another release fails instead of landing twice.
    """

    unpaid = [c for c in list_commissions_by_customer(store, customer_id) if not c.final_paid]
    if len(unpaid) > 1:
        logger.warning(
            f"Customer {customer_id} has {len(unpaid)} unpaid commissions; releasing all of them",
            extra={"customer_id": str(customer_id), "commission_count": len(unpaid)},
        )
    released = [c.final_released(at) for c in unpaid]
    return released, [commission_update(before, after) for before, after in zip(unpaid, released)]


def release_final(store: DocumentStore, ctx: OperationContext, customer_id: UUID) -> List[Commission]:
    """
    Release the final half of every unpaid commission for a customer.

    A customer with no unpaid commission is a no-op (installation without a
    recorded sale is a valid state), so calling this twice is safe.
    """

    released, writes = plan_final_release(store, customer_id, ctx.now())
    if not writes:
        logger.info("No unpaid commission to release", extra={"customer_id": str(customer_id)})
        return []

    store.commit(writes)
    logger.info(
        "Final commission released",
        extra={"customer_id": str(customer_id), "commission_count": len(released)},
    )
    return released


def commissions_for(store: DocumentStore, ctx: OperationContext) -> List[Commission]:
    """Commissions visible to the actor: all for admins, own for reps; oldest first."""

    commissions = list_commissions(store) if ctx.is_admin else list_commissions_by_rep(store, ctx.actor_id)
    return sorted(commissions, key=lambda c: c.created_at)


def rollup(commissions: Sequence[Commission]) -> CommissionRollup:
    return CommissionRollup.of(commissions)


@dataclass(frozen=True, slots=True)
class CommissionStatement:
    commissions: List[Commission]
    totals: CommissionRollup


def commission_statement(store: DocumentStore, ctx: OperationContext) -> CommissionStatement:
    commissions = commissions_for(store, ctx)
    return CommissionStatement(commissions=commissions, totals=rollup(commissions))


__all__ = [
    "build_commission",
    "create_commission",
    "plan_final_release",
    "release_final",
    "commissions_for",
    "rollup",
    "CommissionStatement",
    "commission_statement",
]
