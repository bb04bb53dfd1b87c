"""
Customer lifecycle service.

Handles:
- Registering enquiries (with a welcome-call task when a rep is assigned)
- Recording the deposit: customer -> sold plus the commission, in one commit
- Signing off installation: customer -> installed plus the final commission
  release, in one commit
- Pre-sale pipeline moves, disqualification, contact and reassignment
- Role-scoped listing and search

Every mutation returns the effects (activity entries, rep notifications) for
the caller to run after the commit.
"""

from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID, uuid4

from domain.commission import Commission
from domain.context import OperationContext
from domain.customer import Customer, CustomerFilter, CustomerStatus, NewCustomer, filter_customers
from domain.effects import Effect, LogActivity, NotifyRep, Outcome
from domain.errors import NotFoundError, PermissionDeniedError, ValidationError
from domain.money import Amount, format_currency
from domain.task import TaskType
from repositories.commission_repository import commission_insert
from repositories.customer_repository import (
    customer_insert,
    customer_update,
    get_customer_by_id,
    list_customers,
    list_customers_for_rep,
)
from repositories.rep_repository import get_rep_by_id
from repositories.store import DocumentStore
from repositories.task_repository import task_insert
from services.commission_service import build_commission, plan_final_release
from services.task_service import build_auto_task

logger = logging.getLogger(__name__)


def _require_customer(store: DocumentStore, customer_id: UUID) -> Customer:
    customer = get_customer_by_id(store, customer_id)
    if customer is None:
        raise NotFoundError("Customer", customer_id)
    return customer


def _rep_name(store: DocumentStore, rep_id: str) -> str:
    rep = get_rep_by_id(store, rep_id)
    if rep is None:
        raise NotFoundError("Rep", rep_id)
    return rep.name


def create_customer(
    store: DocumentStore,
    ctx: OperationContext,
    fields: NewCustomer,
    rep_id: Optional[str] = None,
) -> Outcome[Customer]:
    """
    Register a new enquiry.

    Process:
    1. Validate required fields (name, email, mobile, postcode)
    2. Look up the estimated value and BUS grant eligibility
    3. If a rep is assigned, build a welcome-call task for them due the next day
    4. Commit customer and task together

    Raises:
        ValidationError: a required field is blank
        NotFoundError: `rep_id` does not name a rep
    """

    fields.validate()
    rep_name = _rep_name(store, rep_id) if rep_id else None
    now = ctx.now()

    customer = Customer.register(
        customer_id=uuid4(),
        fields=fields,
        created_at=now,
        created_by=ctx.actor_id,
        rep_id=rep_id,
        rep_name=rep_name,
    )

    writes = [customer_insert(customer)]
    if rep_id:
        welcome = build_auto_task(
            customer_id=customer.customer_id,
            rep_id=rep_id,
            task_type=TaskType.WELCOME_CALL,
            title=TaskType.WELCOME_CALL.title,
            created_at=now,
        )
        writes.append(task_insert(welcome))

    store.commit(writes)
    logger.info(
        f"Customer created: {customer.name}",
        extra={"customer_id": str(customer.customer_id), "rep_id": rep_id, "actor_id": ctx.actor_id},
    )

    return Outcome(
        value=customer,
        effects=(LogActivity(title=f"New customer: {customer.name}", description=f"Created by {ctx.display_name}"),),
    )


def mark_sold(store: DocumentStore, ctx: OperationContext, customer_id: UUID, deposit_amount: Amount) -> Outcome[Commission]:
    """
    Record the customer's deposit: the only way into `sold`.

    The customer update and the commission insert are committed together, and
    the update is conditional on the status read here, so two clients racing
    to mark the same sale cannot both create a commission.

    Raises:
        NotFoundError: no such customer
        InvalidTransitionError: the customer is already sold or installed
        InvalidAmountError: the amount is not a positive finite number
        PersistenceError / ConcurrencyConflictError: the commit failed
    """

    customer = _require_customer(store, customer_id)
    now = ctx.now()

    commission = build_commission(
        customer_id=customer.customer_id,
        rep_id=customer.assigned_rep_id,
        total_sale_price=deposit_amount,
        created_at=now,
    )
    sold = customer.sold(commission.total_sale_price, now)

    store.commit([customer_update(customer, sold), commission_insert(commission)])
    logger.info(
        f"Deposit received: {customer.name}",
        extra={
            "customer_id": str(customer_id),
            "commission_id": str(commission.commission_id),
            "commission_amount": str(commission.commission_amount),
        },
    )

    effects: List[Effect] = []
    if customer.assigned_rep_id:
        effects.append(
            NotifyRep(
                rep_id=customer.assigned_rep_id,
                subject="Commission Alert: Deposit Received",
                body=(
                    f"Congratulations! Deposit received for {customer.name}.\n\n"
                    f"Sale Value: {format_currency(commission.total_sale_price)}\n"
                    f"Your Commission (5% total): {format_currency(commission.commission_amount)}\n\n"
                    f"50% now due to you: {format_currency(commission.deposit_commission)}\n"
                    f"Payment date: End of week {now:%d/%m/%Y}\n\n"
                    f"Remaining 50% due when installation completed."
                ),
            )
        )
    effects.append(
        LogActivity(
            title=f"Deposit received: {customer.name}",
            description=(
                f"Amount: {format_currency(commission.total_sale_price)}, "
                f"Commission: {format_currency(commission.deposit_commission)}"
            ),
        )
    )
    return Outcome(value=commission, effects=tuple(effects))


def mark_installed(store: DocumentStore, ctx: OperationContext, customer_id: UUID) -> Outcome[List[Commission]]:
    """
    Sign off installation and release the final commission half.

    Every unpaid commission for the customer is released in the same commit as
    the status change. A customer with no commission is still marked installed.

    Raises:
        NotFoundError: no such customer
        InvalidTransitionError: the customer is already installed
    """

    customer = _require_customer(store, customer_id)
    now = ctx.now()

    installed = customer.installed(now)
    released, release_writes = plan_final_release(store, customer_id, now)

    store.commit([customer_update(customer, installed), *release_writes])
    logger.info(
        f"Installation completed: {customer.name}",
        extra={"customer_id": str(customer_id), "commission_count": len(released)},
    )

    effects: List[Effect] = []
    for comm in released:
        recipient = customer.assigned_rep_id or comm.rep_id
        if not recipient:
            continue
        effects.append(
            NotifyRep(
                rep_id=recipient,
                subject="Ready to Invoice: Final Commission Available",
                body=(
                    f"Installation completed for {customer.name}.\n\n"
                    f"Total Commission: {format_currency(comm.commission_amount)}\n"
                    f"First payment (deposit): {format_currency(comm.deposit_commission)} (already paid)\n"
                    f"Final payment due: {format_currency(comm.final_commission)}"
                ),
            )
        )
    effects.append(
        LogActivity(title=f"Installation completed: {customer.name}", description="Final commission ready to invoice")
    )
    return Outcome(value=released, effects=tuple(effects))


def advance_status(
    store: DocumentStore, ctx: OperationContext, customer_id: UUID, status: CustomerStatus
) -> Outcome[Customer]:
    """Move a pre-sale customer forward (qualified, booked, visited) or to not_sold."""

    customer = _require_customer(store, customer_id)
    updated = customer.advanced(status)

    store.commit([customer_update(customer, updated)])
    logger.info(
        f"Customer status updated: {customer.status.value} -> {status.value}",
        extra={"customer_id": str(customer_id), "actor_id": ctx.actor_id},
    )
    return Outcome(
        value=updated,
        effects=(
            LogActivity(
                title=f"Status updated: {customer.name}",
                description=f"{customer.status.label} to {status.label}",
            ),
        ),
    )


def disqualify(store: DocumentStore, ctx: OperationContext, customer_id: UUID) -> Outcome[Customer]:
    return advance_status(store, ctx, customer_id, CustomerStatus.NOT_SOLD)


def record_contact(store: DocumentStore, ctx: OperationContext, customer_id: UUID) -> Customer:
    """Stamp `last_contacted` with now, resetting the customer's staleness."""

    customer = _require_customer(store, customer_id)
    contacted = customer.contacted(ctx.now())
    store.commit([customer_update(customer, contacted)])
    return contacted


def assign_rep(store: DocumentStore, ctx: OperationContext, customer_id: UUID, rep_id: str) -> Outcome[Customer]:
    """
    Reassign a customer (admins and owners only) and give the new rep a
    welcome-call task, committed together.

    Assigning a customer to the rep they already have changes nothing.
    """

    if not ctx.is_admin:
        raise PermissionDeniedError("Only admins can reassign customers")
    if not rep_id:
        raise ValidationError("rep_id is required")

    customer = _require_customer(store, customer_id)
    if customer.assigned_rep_id == rep_id:
        logger.info("Customer already assigned to rep", extra={"customer_id": str(customer_id), "rep_id": rep_id})
        return Outcome(value=customer, effects=())
    rep_name = _rep_name(store, rep_id)
    now = ctx.now()

    reassigned = customer.reassigned(rep_id, rep_name)
    welcome = build_auto_task(
        customer_id=customer.customer_id,
        rep_id=rep_id,
        task_type=TaskType.WELCOME_CALL,
        title=TaskType.WELCOME_CALL.title,
        created_at=now,
    )
    store.commit([customer_update(customer, reassigned), task_insert(welcome)])
    logger.info("Customer reassigned", extra={"customer_id": str(customer_id), "rep_id": rep_id})

    return Outcome(
        value=reassigned,
        effects=(LogActivity(title=f"Customer assigned: {customer.name}", description=f"Assigned to {rep_name}"),),
    )


def get_customer(store: DocumentStore, customer_id: UUID) -> Customer:
    return _require_customer(store, customer_id)


def customers_for(store: DocumentStore, ctx: OperationContext) -> List[Customer]:
    """All customers for admins and owners; assigned customers for reps."""

    if ctx.is_admin:
        return list_customers(store)
    return list_customers_for_rep(store, ctx.actor_id)


def search_customers(store: DocumentStore, ctx: OperationContext, criteria: CustomerFilter) -> List[Customer]:
    return filter_customers(customers_for(store, ctx), criteria)


__all__ = [
    "create_customer",
    "mark_sold",
    "mark_installed",
    "advance_status",
    "disqualify",
    "record_contact",
    "assign_rep",
    "get_customer",
    "customers_for",
    "search_customers",
]
