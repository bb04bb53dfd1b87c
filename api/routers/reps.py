"""
Reps API Endpoints.

Rep profiles for assignment dropdowns, and adding a profile for an account the
identity provider has already created.
"""

from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from api.dependencies import get_context, get_dispatcher, get_store, run_effects
from api.models import RepCreateRequest, RepResponse
from domain.context import OperationContext
from repositories.store import DocumentStore
from services.notification_service import EffectDispatcher
from services.rep_service import NewRep, create_rep, reps_covering

router = APIRouter()


@router.get("/reps", response_model=List[RepResponse], summary="List Reps")
def list_reps(
    postcode: Optional[str] = Query(None, description="Only reps whose service area covers this postcode"),
    ctx: OperationContext = Depends(get_context),
    store: DocumentStore = Depends(get_store),
):
    return [RepResponse.from_domain(r) for r in reps_covering(store, postcode)]


@router.post("/reps", response_model=RepResponse, status_code=201, summary="Add Rep")
def add_rep(
    request: RepCreateRequest,
    background_tasks: BackgroundTasks,
    ctx: OperationContext = Depends(get_context),
    store: DocumentStore = Depends(get_store),
    dispatcher: EffectDispatcher = Depends(get_dispatcher),
):
    outcome = create_rep(
        store,
        ctx,
        NewRep(
            rep_id=request.rep_id,
            name=request.name,
            email=request.email,
            mobile=request.mobile,
            region=request.region,
            postcodes=request.postcodes,
            max_travel_time=request.max_travel_time,
            max_travel_miles=request.max_travel_miles,
            calendar_id=request.calendar_id,
        ),
    )
    run_effects(dispatcher, ctx, outcome, background_tasks)
    return RepResponse.from_domain(outcome.value)
