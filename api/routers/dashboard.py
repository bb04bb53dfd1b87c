"""
Dashboard API Endpoints.

Pipeline metrics and the recent-activity feed. Both are point-in-time reads;
clients re-fetch when the dashboard is shown.
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_context, get_store
from api.models import ActivityResponse, DashboardResponse
from domain.context import OperationContext
from repositories.store import DocumentStore
from services.activity_service import DEFAULT_FEED_SIZE, recent_activity
from services.metrics_service import dashboard_metrics

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse, summary="Dashboard Metrics")
def get_dashboard(
    ctx: OperationContext = Depends(get_context),
    store: DocumentStore = Depends(get_store),
):
    """Total customers, my customers, pipeline value and conversion rate, scoped by role."""
    return DashboardResponse.from_domain(dashboard_metrics(store, ctx))


@router.get("/activities", response_model=List[ActivityResponse], summary="Activity Feed")
def get_activity_feed(
    limit: int = Query(DEFAULT_FEED_SIZE, ge=1, le=100, description="Number of entries to return"),
    ctx: OperationContext = Depends(get_context),
    store: DocumentStore = Depends(get_store),
):
    return [ActivityResponse.from_domain(a) for a in recent_activity(store, limit)]
