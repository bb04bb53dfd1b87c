"""
Tests for `services/commission_service.py` and `services/metrics_service.py`.

Covers contract rules:
- Commission statements are scoped: reps see their own, admins see all.
- Statement totals follow the rollup rules.
- Releasing with several unpaid commissions releases all of them and warns.
- Dashboard metrics aggregate over the caller's customers.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from repositories.commission_repository import commission_insert
from services import customer_service
from services.commission_service import build_commission, commission_statement, release_final
from services.metrics_service import dashboard_metrics


def test_commission_statement_is_scoped(store, admin_ctx, rep_ctx, enquiry) -> None:
    mine = customer_service.create_customer(store, admin_ctx, enquiry, rep_id="rep-1").value
    theirs = customer_service.create_customer(store, admin_ctx, enquiry, rep_id="rep-2").value
    customer_service.mark_sold(store, admin_ctx, mine.customer_id, Decimal("20000"))
    customer_service.mark_sold(store, admin_ctx, theirs.customer_id, Decimal("10000"))
    customer_service.mark_installed(store, admin_ctx, theirs.customer_id)

    rep_statement = commission_statement(store, rep_ctx)
    admin_statement = commission_statement(store, admin_ctx)

    assert [c.rep_id for c in rep_statement.commissions] == ["rep-1"]
    assert rep_statement.totals.total == Decimal("1000")
    assert rep_statement.totals.pending == Decimal("500")
    assert rep_statement.totals.completed == Decimal("0")

    assert len(admin_statement.commissions) == 2
    assert admin_statement.totals.total == Decimal("1500")
    assert admin_statement.totals.pending == Decimal("500")
    assert admin_statement.totals.completed == Decimal("500")


def test_release_final_releases_every_unpaid_commission(store, admin_ctx, enquiry, caplog) -> None:
    customer = customer_service.create_customer(store, admin_ctx, enquiry, rep_id="rep-1").value
    customer_service.mark_sold(store, admin_ctx, customer.customer_id, Decimal("20000"))
    # A second commission for the same customer, e.g. imported from an older system.
    store.commit([
        commission_insert(
            build_commission(
                customer_id=customer.customer_id,
                rep_id="rep-1",
                total_sale_price=Decimal("4000"),
                created_at=admin_ctx.now(),
            )
        )
    ])

    with caplog.at_level(logging.WARNING, logger="services.commission_service"):
        released = release_final(store, admin_ctx, customer.customer_id)

    assert len(released) == 2
    assert all(c.final_paid for c in released)
    assert "2 unpaid commissions" in caplog.text


def test_dashboard_metrics(store, admin_ctx, rep_ctx, enquiry) -> None:
    first = customer_service.create_customer(store, admin_ctx, enquiry, rep_id="rep-1").value
    customer_service.create_customer(store, admin_ctx, enquiry, rep_id="rep-1")
    customer_service.create_customer(store, admin_ctx, enquiry, rep_id="rep-2")
    customer_service.mark_sold(store, admin_ctx, first.customer_id, Decimal("30000"))

    admin_metrics = dashboard_metrics(store, admin_ctx)
    rep_metrics = dashboard_metrics(store, rep_ctx)

    assert admin_metrics.total_customers == 3
    assert admin_metrics.pipeline_value == Decimal("50000")
    assert admin_metrics.conversion_rate == 33

    assert rep_metrics.total_customers == 2
    assert rep_metrics.my_customers == 2
    assert rep_metrics.pipeline_value == Decimal("25000")
    assert rep_metrics.conversion_rate == 50


def test_dashboard_metrics_empty(store, rep_ctx) -> None:
    metrics = dashboard_metrics(store, rep_ctx)

    assert metrics.total_customers == 0
    assert metrics.pipeline_value == Decimal("0")
    assert metrics.conversion_rate == 0
