"""
Tests for `services/task_service.py`.

Covers contract rules:
- Manual tasks require customer, type, due date and rep; the customer must exist.
- A manual task notifies its rep.
- Completion stamps completed_at and is not guarded against repeats.
- Listings are scoped by role; the urgent list only holds open tasks due soon.
"""

from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import pytest

from domain.errors import NotFoundError, ValidationError
from domain.task import TaskStatus, TaskType
from repositories.task_repository import get_task_by_id
from services import customer_service, task_service
from services.task_service import NewTask


@pytest.fixture
def customer(store, admin_ctx, enquiry):
    return customer_service.create_customer(store, admin_ctx, enquiry).value


def test_build_auto_task_defaults_due_to_next_day(clock) -> None:
    task = task_service.build_auto_task(
        customer_id=uuid4(),
        rep_id="rep-1",
        task_type=TaskType.BUS_GRANT,
        title="BUS Grant Application",
        created_at=clock.now,
    )

    assert task.due_date == clock.now + timedelta(days=1)
    assert task.status is TaskStatus.NOT_STARTED
    assert task.created_by == "system"
    assert task.description == "Submit BUS grant application for eligible properties"


def test_create_auto_task_persists(store, admin_ctx, customer) -> None:
    task = task_service.create_auto_task(
        store, admin_ctx, customer.customer_id, "rep-2", TaskType.GENERATE_QUOTE, "Generate Quote"
    )

    assert get_task_by_id(store, task.task_id) == task


def test_create_manual_task_notifies_rep(store, admin_ctx, clock, customer) -> None:
    due = clock.now + timedelta(days=3)

    outcome = task_service.create_manual_task(
        store,
        admin_ctx,
        NewTask(customer_id=customer.customer_id, task_type="book_heat_loss", due_date=due, rep_id="rep-1",
                description="  Call before noon "),
    )
    task = outcome.value

    assert task.title == "Book Heat Loss Survey"
    assert task.description == "Call before noon"
    assert task.created_by == "admin-1"
    assert get_task_by_id(store, task.task_id) == task
    (notification,) = outcome.notifications
    assert notification.rep_id == "rep-1"
    assert "Book Heat Loss Survey" in notification.subject


@pytest.mark.parametrize("missing", ["customer_id", "task_type", "due_date", "rep_id"])
def test_create_manual_task_requires_fields(store, admin_ctx, clock, customer, missing) -> None:
    values = dict(customer_id=customer.customer_id, task_type="welcome_call", due_date=clock.now, rep_id="rep-1")
    values[missing] = None

    with pytest.raises(ValidationError):
        task_service.create_manual_task(store, admin_ctx, NewTask(**values))


def test_create_manual_task_unknown_type(store, admin_ctx, clock, customer) -> None:
    with pytest.raises(ValidationError):
        task_service.create_manual_task(
            store, admin_ctx,
            NewTask(customer_id=customer.customer_id, task_type="site_visit", due_date=clock.now, rep_id="rep-1"),
        )


def test_create_manual_task_unknown_customer(store, admin_ctx, clock) -> None:
    with pytest.raises(NotFoundError):
        task_service.create_manual_task(
            store, admin_ctx, NewTask(customer_id=uuid4(), task_type="welcome_call", due_date=clock.now, rep_id="rep-1")
        )


def test_complete_task(store, admin_ctx, rep_ctx, clock, customer) -> None:
    task = task_service.create_auto_task(store, admin_ctx, customer.customer_id, "rep-1", TaskType.WELCOME_CALL, "Welcome Call")
    clock.advance(hours=2)

    completed = task_service.complete_task(store, rep_ctx, task.task_id)

    assert completed.status is TaskStatus.COMPLETED
    assert completed.completed_at == clock.now

    clock.advance(hours=1)
    again = task_service.complete_task(store, rep_ctx, task.task_id)
    assert again.completed_at == clock.now


def test_complete_unknown_task(store, rep_ctx) -> None:
    with pytest.raises(NotFoundError):
        task_service.complete_task(store, rep_ctx, uuid4())


def test_tasks_scoped_and_urgent(store, admin_ctx, rep_ctx, clock, customer) -> None:
    soon = task_service.create_auto_task(store, admin_ctx, customer.customer_id, "rep-1", TaskType.WELCOME_CALL, "Welcome Call")
    later = task_service.create_auto_task(
        store, admin_ctx, customer.customer_id, "rep-1", TaskType.GENERATE_QUOTE, "Generate Quote",
        due_date=clock.now + timedelta(days=10),
    )
    task_service.create_auto_task(store, admin_ctx, customer.customer_id, "rep-2", TaskType.BUS_GRANT, "BUS Grant Application")

    assert len(task_service.tasks_for(store, admin_ctx)) == 3
    assert [t.task_id for t in task_service.tasks_for(store, rep_ctx)] == [soon.task_id, later.task_id]
    assert [t.task_id for t in task_service.urgent_tasks(store, rep_ctx)] == [soon.task_id]

    task_service.complete_task(store, rep_ctx, soon.task_id)
    assert task_service.urgent_tasks(store, rep_ctx) == []
