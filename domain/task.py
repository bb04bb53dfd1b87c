"""
Domain: follow-up tasks.

A Task is bound to exactly one customer and one rep. It starts `not_started`
and is closed by a single explicit completion; it is never reopened.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Mapping, Optional, Union
from uuid import UUID

from .time import days_between, require_utc_timestamp

SYSTEM_AUTHOR = "system"


class TaskType(str, Enum):
    WELCOME_CALL = "welcome_call"
    BUS_GRANT = "bus_grant"
    BOOK_HEAT_LOSS = "book_heat_loss"
    COMPLETE_HEAT_LOSS = "complete_heat_loss"
    GENERATE_QUOTE = "generate_quote"
    BOOK_INSTALLATION = "book_installation"
    COMPLETE_INSTALLATION = "complete_installation"

    @property
    def title(self) -> str:
        return _TITLES[self]


_TITLES: Mapping[TaskType, str] = {
    TaskType.WELCOME_CALL: "Welcome Call",
    TaskType.BUS_GRANT: "BUS Grant Application",
    TaskType.BOOK_HEAT_LOSS: "Book Heat Loss Survey",
    TaskType.COMPLETE_HEAT_LOSS: "Complete Heat Loss Survey",
    TaskType.GENERATE_QUOTE: "Generate Quote",
    TaskType.BOOK_INSTALLATION: "Book Installation",
    TaskType.COMPLETE_INSTALLATION: "Complete Installation",
}

TASK_DESCRIPTIONS: Mapping[TaskType, str] = {
    TaskType.WELCOME_CALL: "Call customer to introduce yourself and discuss their requirements",
    TaskType.BUS_GRANT: "Submit BUS grant application for eligible properties",
    TaskType.BOOK_HEAT_LOSS: "Schedule heat loss survey with customer",
    TaskType.COMPLETE_HEAT_LOSS: "Complete heat loss survey and analysis",
    TaskType.GENERATE_QUOTE: "Generate and send quotation to customer",
    TaskType.BOOK_INSTALLATION: "Schedule installation date with customer",
    TaskType.COMPLETE_INSTALLATION: "Complete installation and obtain customer sign-off",
}


def describe_task_type(task_type: Union[TaskType, str]) -> str:
    """Standard description for a task type; empty for types outside the table."""

    try:
        return TASK_DESCRIPTIONS[TaskType(task_type)]
    except ValueError:
        return ""


class TaskStatus(str, Enum):
    NOT_STARTED = "not_started"
    COMPLETED = "completed"


class TaskUrgency(str, Enum):
    OVERDUE = "overdue"
    URGENT = "urgent"
    NORMAL = "normal"


@dataclass(frozen=True, slots=True)
class Task:
    task_id: UUID
    customer_id: UUID
    assigned_rep_id: str
    type: TaskType
    title: str
    description: str
    status: TaskStatus
    due_date: datetime
    created_at: datetime
    created_by: str
    completed_at: Optional[datetime] = None
    notes: str = ""

    def __post_init__(self) -> None:
        require_utc_timestamp("due_date", self.due_date)
        require_utc_timestamp("created_at", self.created_at)
        if self.completed_at is not None:
            require_utc_timestamp("completed_at", self.completed_at)

    @property
    def is_completed(self) -> bool:
        return self.status is TaskStatus.COMPLETED

    def completed(self, at: datetime) -> "Task":
        """
        Return the task marked completed at `at`.

        Completing twice just moves `completed_at`; nothing else hangs off completion.
        """

        require_utc_timestamp("at", at)
        return replace(self, status=TaskStatus.COMPLETED, completed_at=at)

    def days_until_due(self, now: datetime) -> int:
        """Whole days until due, rounded up (a task due in 3 hours is 1 day away)."""

        return math.ceil(days_between(now, self.due_date))

    def urgency(self, now: datetime) -> TaskUrgency:
        if self.due_date < now and not self.is_completed:
            return TaskUrgency.OVERDUE
        if self.days_until_due(now) <= 1:
            return TaskUrgency.URGENT
        return TaskUrgency.NORMAL


def sort_by_due_date(tasks: Iterable[Task]) -> List[Task]:
    return sorted(tasks, key=lambda t: t.due_date)


def urgent_for(tasks: Iterable[Task], rep_id: str, now: datetime) -> List[Task]:
    """
    Open tasks for the dashboard's urgent list.

    Includes tasks assigned to `rep_id` (or to nobody) that are due within a day
    or already overdue.
    """

    return sort_by_due_date(
        t
        for t in tasks
        if not t.is_completed
        and (not t.assigned_rep_id or t.assigned_rep_id == rep_id)
        and t.days_until_due(now) <= 1
    )


__all__ = [
    "SYSTEM_AUTHOR",
    "TaskType",
    "TASK_DESCRIPTIONS",
    "describe_task_type",
    "TaskStatus",
    "TaskUrgency",
    "Task",
    "sort_by_due_date",
    "urgent_for",
]
