"""
Dashboard metrics service.

Pulled on demand; never pushed. Admins and owners aggregate over every
customer, reps over the customers assigned to them.
"""

from __future__ import annotations

from domain.context import OperationContext
from domain.metrics import DashboardMetrics
from repositories.store import DocumentStore
from services.customer_service import customers_for


def dashboard_metrics(store: DocumentStore, ctx: OperationContext) -> DashboardMetrics:
    """
    Point-in-time dashboard figures for the acting principal.

    For admins "my customers" is the whole book, for reps their assigned ones.

    Example:
        metrics = dashboard_metrics(store, ctx)
        print(f"Pipeline: {format_currency(metrics.pipeline_value)}, {metrics.conversion_rate}% converted")
    """

    customers = customers_for(store, ctx)
    return DashboardMetrics.of(customers, my_customers=len(customers))


__all__ = ["dashboard_metrics"]
