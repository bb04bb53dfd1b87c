"""
Tests for `services/customer_service.py`.

Covers contract rules:
- Registering an enquiry with a rep also schedules a welcome call due next day.
- Recording a deposit marks the customer sold and creates the commission in
  one commit, notifies the rep and logs an activity.
- A customer cannot be sold twice, so no duplicate commission can be created.
- Installation releases the final commission half exactly once.
- Listing and search are scoped: reps only see their own customers.
- Reassignment is admin-only.
"""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from domain.commission import CommissionStage
from domain.customer import CustomerFilter, CustomerStatus, NewCustomer
from domain.effects import LogActivity, NotifyRep
from domain.errors import (
    ConcurrencyConflictError,
    InvalidAmountError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from repositories.commission_repository import list_commissions, list_commissions_by_customer
from repositories.customer_repository import get_customer_by_id
from repositories.store import CUSTOMERS, InMemoryStore, Update
from repositories.task_repository import list_tasks, list_tasks_for_customer
from services import customer_service
from services.commission_service import release_final


def test_create_customer_with_rep_schedules_welcome_call(store, admin_ctx, clock, enquiry) -> None:
    outcome = customer_service.create_customer(store, admin_ctx, enquiry, rep_id="rep-1")
    customer = outcome.value

    assert customer.status is CustomerStatus.ENQUIRY
    assert customer.estimated_value == Decimal("25000")
    assert customer.bus_grant_eligible is True
    assert customer.assigned_rep_name == "Sam Jones"
    assert get_customer_by_id(store, customer.customer_id) == customer

    tasks = list_tasks_for_customer(store, customer.customer_id)
    assert len(tasks) == 1
    assert tasks[0].title == "Welcome Call"
    assert tasks[0].assigned_rep_id == "rep-1"
    assert tasks[0].created_by == "system"
    assert tasks[0].due_date == clock.now + timedelta(days=1)

    assert outcome.activities == (LogActivity(title="New customer: Jane Smith", description="Created by Pat Admin"),)
    assert outcome.notifications == ()


def test_create_customer_without_rep_has_no_task(store, admin_ctx, enquiry) -> None:
    customer_service.create_customer(store, admin_ctx, enquiry)

    assert list_tasks(store) == []


def test_create_customer_missing_field_writes_nothing(store, admin_ctx) -> None:
    fields = NewCustomer(name="Jane", email="", mobile="07000", postcode="BS1")

    with pytest.raises(ValidationError):
        customer_service.create_customer(store, admin_ctx, fields, rep_id="rep-1")

    assert store.list_all(CUSTOMERS) == []
    assert list_tasks(store) == []


def test_create_customer_unknown_rep(store, admin_ctx, enquiry) -> None:
    with pytest.raises(NotFoundError):
        customer_service.create_customer(store, admin_ctx, enquiry, rep_id="nobody")

    assert store.list_all(CUSTOMERS) == []


def test_mark_sold_creates_commission(store, admin_ctx, enquiry) -> None:
    customer = customer_service.create_customer(store, admin_ctx, enquiry, rep_id="rep-1").value

    outcome = customer_service.mark_sold(store, admin_ctx, customer.customer_id, Decimal("20000"))
    commission = outcome.value

    assert commission.commission_amount == Decimal("1000")
    assert commission.deposit_commission == Decimal("500")
    assert commission.final_commission == Decimal("500")
    assert commission.rep_id == "rep-1"
    assert commission.stage is CommissionStage.AWAITING_INSTALLATION

    sold = get_customer_by_id(store, customer.customer_id)
    assert sold.status is CustomerStatus.SOLD
    assert sold.deposit_amount == Decimal("20000")
    assert sold.estimated_value == Decimal("25000")

    (notification,) = outcome.notifications
    assert notification.rep_id == "rep-1"
    assert notification.subject == "Commission Alert: Deposit Received"
    assert "£500.00" in notification.body
    assert outcome.activities == (
        LogActivity(title="Deposit received: Jane Smith", description="Amount: £20,000.00, Commission: £500.00"),
    )


def test_mark_sold_without_rep_does_not_notify(store, admin_ctx, enquiry) -> None:
    customer = customer_service.create_customer(store, admin_ctx, enquiry).value

    outcome = customer_service.mark_sold(store, admin_ctx, customer.customer_id, 1000)

    assert outcome.value.rep_id is None
    assert not any(isinstance(e, NotifyRep) for e in outcome.effects)


def test_mark_sold_twice_rejected(store, admin_ctx, enquiry) -> None:
    customer = customer_service.create_customer(store, admin_ctx, enquiry, rep_id="rep-1").value
    customer_service.mark_sold(store, admin_ctx, customer.customer_id, Decimal("20000"))

    with pytest.raises(InvalidTransitionError):
        customer_service.mark_sold(store, admin_ctx, customer.customer_id, Decimal("20000"))

    assert len(list_commissions_by_customer(store, customer.customer_id)) == 1


@pytest.mark.parametrize("amount", [0, -5, "abc"])
def test_mark_sold_invalid_amount_changes_nothing(store, admin_ctx, enquiry, amount) -> None:
    customer = customer_service.create_customer(store, admin_ctx, enquiry).value

    with pytest.raises(InvalidAmountError):
        customer_service.mark_sold(store, admin_ctx, customer.customer_id, amount)

    assert get_customer_by_id(store, customer.customer_id).status is CustomerStatus.ENQUIRY
    assert list_commissions(store) == []


def test_mark_sold_unknown_customer(store, admin_ctx) -> None:
    with pytest.raises(NotFoundError):
        customer_service.mark_sold(store, admin_ctx, uuid4(), Decimal("100"))


class _RacingStore(InMemoryStore):
    """Lets another writer mark the customer sold between our read and our commit."""

    def __init__(self) -> None:
        super().__init__()
        self.race_customer_id = None

    def commit(self, writes) -> None:
        if self.race_customer_id is not None:
            customer_id, self.race_customer_id = self.race_customer_id, None
            super().commit([Update(CUSTOMERS, customer_id, {"status": "sold"})])
        super().commit(writes)


def test_concurrent_sale_creates_one_commission(admin_ctx, enquiry) -> None:
    store = _RacingStore()
    customer = customer_service.create_customer(store, admin_ctx, enquiry).value
    store.race_customer_id = str(customer.customer_id)

    with pytest.raises(ConcurrencyConflictError):
        customer_service.mark_sold(store, admin_ctx, customer.customer_id, Decimal("20000"))

    assert list_commissions(store) == []


def test_mark_installed_releases_final_half(store, admin_ctx, clock, enquiry) -> None:
    customer = customer_service.create_customer(store, admin_ctx, enquiry, rep_id="rep-1").value
    customer_service.mark_sold(store, admin_ctx, customer.customer_id, Decimal("20000"))
    clock.advance(days=30)

    outcome = customer_service.mark_installed(store, admin_ctx, customer.customer_id)

    (released,) = outcome.value
    assert released.final_paid is True
    assert released.final_paid_date == clock.now
    assert released.stage is CommissionStage.COMPLETE
    assert get_customer_by_id(store, customer.customer_id).status is CustomerStatus.INSTALLED

    (notification,) = outcome.notifications
    assert notification.subject == "Ready to Invoice: Final Commission Available"
    assert outcome.activities[0].title == "Installation completed: Jane Smith"


def test_mark_installed_twice_rejected(store, admin_ctx, enquiry) -> None:
    customer = customer_service.create_customer(store, admin_ctx, enquiry).value
    customer_service.mark_installed(store, admin_ctx, customer.customer_id)

    with pytest.raises(InvalidTransitionError):
        customer_service.mark_installed(store, admin_ctx, customer.customer_id)


def test_installation_without_sale_releases_nothing(store, admin_ctx, enquiry) -> None:
    customer = customer_service.create_customer(store, admin_ctx, enquiry, rep_id="rep-1").value

    outcome = customer_service.mark_installed(store, admin_ctx, customer.customer_id)

    assert outcome.value == []
    assert outcome.notifications == ()


def test_release_final_is_idempotent(store, admin_ctx, enquiry) -> None:
    customer = customer_service.create_customer(store, admin_ctx, enquiry).value
    customer_service.mark_sold(store, admin_ctx, customer.customer_id, Decimal("10000"))

    first = release_final(store, admin_ctx, customer.customer_id)
    second = release_final(store, admin_ctx, customer.customer_id)

    assert len(first) == 1
    assert second == []
    (commission,) = list_commissions_by_customer(store, customer.customer_id)
    assert commission.final_paid_date == first[0].final_paid_date


def test_advance_status_and_disqualify(store, admin_ctx, enquiry) -> None:
    customer = customer_service.create_customer(store, admin_ctx, enquiry).value

    outcome = customer_service.advance_status(store, admin_ctx, customer.customer_id, CustomerStatus.BOOKED)
    assert outcome.value.status is CustomerStatus.BOOKED
    assert outcome.activities[0].description == "Initial Enquiry to Survey Booked"

    with pytest.raises(InvalidTransitionError):
        customer_service.advance_status(store, admin_ctx, customer.customer_id, CustomerStatus.QUALIFIED)

    assert customer_service.disqualify(store, admin_ctx, customer.customer_id).value.status is CustomerStatus.NOT_SOLD

    # A lost deal can still be won back with a deposit.
    customer_service.mark_sold(store, admin_ctx, customer.customer_id, Decimal("5000"))
    assert get_customer_by_id(store, customer.customer_id).status is CustomerStatus.SOLD


def test_record_contact_resets_staleness(store, admin_ctx, clock, enquiry) -> None:
    customer = customer_service.create_customer(store, admin_ctx, enquiry).value
    clock.advance(days=10)

    contacted = customer_service.record_contact(store, admin_ctx, customer.customer_id)

    assert contacted.last_contacted == clock.now
    assert get_customer_by_id(store, customer.customer_id).last_contacted == clock.now


def test_customers_are_scoped_by_role(store, admin_ctx, rep_ctx, other_rep_ctx, enquiry) -> None:
    customer_service.create_customer(store, admin_ctx, enquiry, rep_id="rep-1")
    customer_service.create_customer(store, admin_ctx, enquiry, rep_id="rep-2")
    customer_service.create_customer(store, admin_ctx, enquiry)

    assert len(customer_service.customers_for(store, admin_ctx)) == 3
    assert [c.assigned_rep_id for c in customer_service.customers_for(store, rep_ctx)] == ["rep-1"]
    assert [c.assigned_rep_id for c in customer_service.customers_for(store, other_rep_ctx)] == ["rep-2"]


def test_search_customers_filters_within_scope(store, admin_ctx, rep_ctx, enquiry) -> None:
    customer_service.create_customer(store, admin_ctx, enquiry, rep_id="rep-1")
    customer_service.create_customer(
        store, admin_ctx, NewCustomer(name="Bob Jones", email="bob@example.com", mobile="07999", postcode="BS2"),
        rep_id="rep-2",
    )

    assert len(customer_service.search_customers(store, admin_ctx, CustomerFilter(search="JONES"))) == 1
    assert customer_service.search_customers(store, rep_ctx, CustomerFilter(search="jones")) == []


def test_assign_rep_requires_admin(store, admin_ctx, rep_ctx, enquiry) -> None:
    customer = customer_service.create_customer(store, admin_ctx, enquiry, rep_id="rep-1").value

    with pytest.raises(PermissionDeniedError):
        customer_service.assign_rep(store, rep_ctx, customer.customer_id, "rep-2")

    outcome = customer_service.assign_rep(store, admin_ctx, customer.customer_id, "rep-2")

    assert outcome.value.assigned_rep_id == "rep-2"
    assert outcome.value.assigned_rep_name == "Alex Brown"
    assert sorted(t.assigned_rep_id for t in list_tasks_for_customer(store, customer.customer_id)) == ["rep-1", "rep-2"]


def test_assign_rep_to_current_rep_changes_nothing(store, admin_ctx, enquiry, monkeypatch) -> None:
    customer = customer_service.create_customer(store, admin_ctx, enquiry, rep_id="rep-1").value
    commits = []
    monkeypatch.setattr(store, "commit", commits.append)

    outcome = customer_service.assign_rep(store, admin_ctx, customer.customer_id, "rep-1")

    assert outcome.value == customer
    assert outcome.effects == ()
    assert commits == []
    assert len(list_tasks_for_customer(store, customer.customer_id)) == 1
