"""
Task engine service.

Creates system and manual follow-up tasks, completes them, and lists them for
the acting principal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from domain.context import OperationContext
from domain.effects import NotifyRep, Outcome
from domain.errors import NotFoundError, ValidationError
from domain.task import (
    SYSTEM_AUTHOR,
    Task,
    TaskStatus,
    TaskType,
    describe_task_type,
    sort_by_due_date,
    urgent_for,
)
from domain.time import ONE_DAY, require_utc_timestamp
from repositories.customer_repository import get_customer_by_id
from repositories.store import DocumentStore
from repositories.task_repository import (
    get_task_by_id,
    list_tasks,
    list_tasks_for_rep,
    task_insert,
    task_update,
)

logger = logging.getLogger(__name__)


def build_auto_task(
    *,
    customer_id: UUID,
    rep_id: str,
    task_type: TaskType,
    title: str,
    created_at: datetime,
    due_date: Optional[datetime] = None,
) -> Task:
    """
    System-authored task, due a day after `created_at` unless `due_date` is given.

    Pure; callers commit it alongside the change that triggered it.
    """

    return Task(
        task_id=uuid4(),
        customer_id=customer_id,
        assigned_rep_id=rep_id,
        type=task_type,
        title=title,
        description=describe_task_type(task_type),
        status=TaskStatus.NOT_STARTED,
        due_date=due_date if due_date is not None else created_at + ONE_DAY,
        created_at=created_at,
        created_by=SYSTEM_AUTHOR,
    )


def create_auto_task(
    store: DocumentStore,
    ctx: OperationContext,
    customer_id: UUID,
    rep_id: str,
    task_type: TaskType,
    title: str,
    due_date: Optional[datetime] = None,
) -> Task:
    task = build_auto_task(
        customer_id=customer_id,
        rep_id=rep_id,
        task_type=task_type,
        title=title,
        created_at=ctx.now(),
        due_date=due_date,
    )
    store.commit([task_insert(task)])
    logger.info(f"Auto task created: {task.type.value}", extra={"task_id": str(task.task_id), "rep_id": rep_id})
    return task


@dataclass(frozen=True, slots=True)
class NewTask:
    """Fields of a manually scheduled task (as submitted by a rep or admin)."""

    customer_id: Optional[UUID]
    task_type: Optional[str]
    due_date: Optional[datetime]
    rep_id: Optional[str]
    description: str = ""
    title: Optional[str] = None


def create_manual_task(store: DocumentStore, ctx: OperationContext, fields: NewTask) -> Outcome[Task]:
    """
    Schedule a task by hand and notify the assigned rep.

    Raises:
        ValidationError: customer, type, due date or rep missing, or type unknown
        NotFoundError: the customer does not exist
    """

    missing = [
        label
        for label, value in (
            ("customer_id", fields.customer_id),
            ("type", fields.task_type),
            ("due_date", fields.due_date),
            ("rep_id", fields.rep_id),
        )
        if not value
    ]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    try:
        task_type = TaskType(fields.task_type)
    except ValueError:
        raise ValidationError(f"Unknown task type: {fields.task_type!r}") from None
    require_utc_timestamp("due_date", fields.due_date)

    if get_customer_by_id(store, fields.customer_id) is None:
        raise NotFoundError("Customer", fields.customer_id)

    task = Task(
        task_id=uuid4(),
        customer_id=fields.customer_id,
        assigned_rep_id=fields.rep_id,
        type=task_type,
        title=fields.title or task_type.title,
        description=fields.description.strip(),
        status=TaskStatus.NOT_STARTED,
        due_date=fields.due_date,
        created_at=ctx.now(),
        created_by=ctx.actor_id,
    )
    store.commit([task_insert(task)])
    logger.info(f"Manual task created: {task.title}", extra={"task_id": str(task.task_id), "rep_id": task.assigned_rep_id})

    return Outcome(
        value=task,
        effects=(
            NotifyRep(
                rep_id=task.assigned_rep_id,
                subject=f"New task assigned: {task.title}",
                body=f"A new task has been assigned to you: {task.title}, due {task.due_date:%d/%m/%Y}.",
            ),
        ),
    )


def complete_task(store: DocumentStore, ctx: OperationContext, task_id: UUID) -> Task:
    """
    Mark a task completed.

    Not guarded: completing an already completed task only rewrites completed_at.
    """

    task = get_task_by_id(store, task_id)
    if task is None:
        raise NotFoundError("Task", task_id)

    completed = task.completed(ctx.now())
    store.commit([task_update(task, completed)])
    logger.info("Task completed", extra={"task_id": str(task_id), "actor_id": ctx.actor_id})
    return completed


def tasks_for(store: DocumentStore, ctx: OperationContext) -> List[Task]:
    """Tasks visible to the actor (all for admins), ordered by due date."""

    tasks = list_tasks(store) if ctx.is_admin else list_tasks_for_rep(store, ctx.actor_id)
    return sort_by_due_date(tasks)


def urgent_tasks(store: DocumentStore, ctx: OperationContext) -> List[Task]:
    """Open tasks for the actor (or unassigned) due within a day or overdue."""

    return urgent_for(list_tasks(store), ctx.actor_id, ctx.now())


__all__ = [
    "build_auto_task",
    "create_auto_task",
    "NewTask",
    "create_manual_task",
    "complete_task",
    "tasks_for",
    "urgent_tasks",
]
