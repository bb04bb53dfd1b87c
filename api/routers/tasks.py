"""
Tasks API Endpoints.

Endpoints for scheduling, listing and completing follow-up tasks.
"""

from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends

from api.dependencies import get_context, get_dispatcher, get_store, run_effects
from api.models import TaskCreateRequest, TaskResponse
from domain.context import OperationContext
from repositories.store import DocumentStore
from services import task_service
from services.notification_service import EffectDispatcher

router = APIRouter()


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a submitted due date to UTC; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@router.get("/tasks", response_model=List[TaskResponse], summary="List Tasks")
def list_tasks(
    ctx: OperationContext = Depends(get_context),
    store: DocumentStore = Depends(get_store),
):
    """Tasks visible to the caller, soonest due first, each with its urgency."""
    now = ctx.now()
    return [TaskResponse.from_domain(t, now) for t in task_service.tasks_for(store, ctx)]


@router.get("/tasks/urgent", response_model=List[TaskResponse], summary="Urgent Tasks")
def list_urgent_tasks(
    ctx: OperationContext = Depends(get_context),
    store: DocumentStore = Depends(get_store),
):
    now = ctx.now()
    return [TaskResponse.from_domain(t, now) for t in task_service.urgent_tasks(store, ctx)]


@router.post("/tasks", response_model=TaskResponse, status_code=201, summary="Schedule Task")
def create_task(
    request: TaskCreateRequest,
    background_tasks: BackgroundTasks,
    ctx: OperationContext = Depends(get_context),
    store: DocumentStore = Depends(get_store),
    dispatcher: EffectDispatcher = Depends(get_dispatcher),
):
    fields = task_service.NewTask(
        customer_id=request.customer_id,
        task_type=request.type,
        due_date=_as_utc(request.due_date),
        rep_id=request.rep_id,
        description=request.description,
    )
    outcome = task_service.create_manual_task(store, ctx, fields)
    run_effects(dispatcher, ctx, outcome, background_tasks)
    return TaskResponse.from_domain(outcome.value, ctx.now())


@router.post("/tasks/{task_id}/complete", response_model=TaskResponse, summary="Complete Task")
def complete_task(
    task_id: UUID,
    ctx: OperationContext = Depends(get_context),
    store: DocumentStore = Depends(get_store),
):
    return TaskResponse.from_domain(task_service.complete_task(store, ctx, task_id), ctx.now())
