"""
Task repository (persistence).

Maps Task entities to rows and queries them by assigned rep.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional
from uuid import UUID

from domain.task import Task, TaskStatus, TaskType
from repositories.serialization import diff_update, parse_optional_datetime, parse_utc_datetime, to_iso_utc, to_iso_utc_or_none
from repositories.store import TASKS, DocumentStore, Insert, Update


def task_to_row(task: Task) -> dict[str, Any]:
    return {
        "id": str(task.task_id),
        "customer_id": str(task.customer_id),
        "assigned_rep_id": task.assigned_rep_id,
        "type": task.type.value,
        "title": task.title,
        "description": task.description,
        "status": task.status.value,
        "due_date_utc": to_iso_utc(task.due_date, name="due_date"),
        "created_at_utc": to_iso_utc(task.created_at, name="created_at"),
        "created_by": task.created_by,
        "completed_at_utc": to_iso_utc_or_none(task.completed_at, name="completed_at"),
        "notes": task.notes,
    }


def row_to_task(row: Mapping[str, Any]) -> Task:
    return Task(
        task_id=UUID(str(row["id"])),
        customer_id=UUID(str(row["customer_id"])),
        assigned_rep_id=str(row.get("assigned_rep_id") or ""),
        type=TaskType(str(row["type"])),
        title=row.get("title") or "",
        description=row.get("description") or "",
        status=TaskStatus(str(row["status"])),
        due_date=parse_utc_datetime(row["due_date_utc"]),
        created_at=parse_utc_datetime(row["created_at_utc"]),
        created_by=str(row.get("created_by") or ""),
        completed_at=parse_optional_datetime(row.get("completed_at_utc")),
        notes=row.get("notes") or "",
    )


def task_insert(task: Task) -> Insert:
    return Insert(collection=TASKS, record=task_to_row(task))


def task_update(before: Task, after: Task) -> Update:
    # Completion is last-write-wins: completing twice only moves completed_at.
    return diff_update(TASKS, task_to_row(before), task_to_row(after))


def get_task_by_id(store: DocumentStore, task_id: UUID) -> Optional[Task]:
    row = store.get(TASKS, str(task_id))
    return row_to_task(row) if row is not None else None


def list_tasks(store: DocumentStore) -> List[Task]:
    return [row_to_task(row) for row in store.list_all(TASKS)]


def list_tasks_for_rep(store: DocumentStore, rep_id: str) -> List[Task]:
    return [row_to_task(row) for row in store.find_by(TASKS, "assigned_rep_id", rep_id)]


def list_tasks_for_customer(store: DocumentStore, customer_id: UUID) -> List[Task]:
    return [row_to_task(row) for row in store.find_by(TASKS, "customer_id", str(customer_id))]


__all__ = [
    "task_to_row",
    "row_to_task",
    "task_insert",
    "task_update",
    "get_task_by_id",
    "list_tasks",
    "list_tasks_for_rep",
    "list_tasks_for_customer",
]
