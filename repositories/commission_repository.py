"""
Commission repository (persistence).

This module provides *only* persistence mapping for the Commission domain
entity. It does not enforce business rules (rates, stage changes); it maps
records and queries them by customer and by rep.
"""

from __future__ import annotations

from typing import Any, List, Mapping
from uuid import UUID

from domain.commission import Commission
from repositories.serialization import (
    diff_update,
    parse_money,
    parse_optional_datetime,
    parse_utc_datetime,
    to_iso_utc,
    to_iso_utc_or_none,
    to_money,
)
from repositories.store import COMMISSIONS, DocumentStore, Insert, Update


def commission_to_row(commission: Commission) -> dict[str, Any]:
    return {
        "id": str(commission.commission_id),
        "customer_id": str(commission.customer_id),
        "rep_id": commission.rep_id,
        "total_sale_price": to_money(commission.total_sale_price),
        "commission_amount": to_money(commission.commission_amount),
        "deposit_commission": to_money(commission.deposit_commission),
        "final_commission": to_money(commission.final_commission),
        "deposit_paid": commission.deposit_paid,
        "deposit_paid_date_utc": to_iso_utc_or_none(commission.deposit_paid_date, name="deposit_paid_date"),
        "final_paid": commission.final_paid,
        "final_paid_date_utc": to_iso_utc_or_none(commission.final_paid_date, name="final_paid_date"),
        "created_at_utc": to_iso_utc(commission.created_at, name="created_at"),
    }


def row_to_commission(row: Mapping[str, Any]) -> Commission:
    """Convert a stored row into a Commission."""

    return Commission(
        commission_id=UUID(str(row["id"])),
        customer_id=UUID(str(row["customer_id"])),
        rep_id=row.get("rep_id") or None,
        total_sale_price=parse_money(row["total_sale_price"]),
        commission_amount=parse_money(row["commission_amount"]),
        deposit_commission=parse_money(row["deposit_commission"]),
        final_commission=parse_money(row["final_commission"]),
        deposit_paid=bool(row.get("deposit_paid", False)),
        deposit_paid_date=parse_optional_datetime(row.get("deposit_paid_date_utc")),
        final_paid=bool(row.get("final_paid", False)),
        final_paid_date=parse_optional_datetime(row.get("final_paid_date_utc")),
        created_at=parse_utc_datetime(row["created_at_utc"]),
    )


def commission_insert(commission: Commission) -> Insert:
    return Insert(collection=COMMISSIONS, record=commission_to_row(commission))


def commission_update(before: Commission, after: Commission) -> Update:
    """Partial update conditional on `before`'s final_paid flag, so a release lands once."""

    return diff_update(COMMISSIONS, commission_to_row(before), commission_to_row(after), expect=("final_paid",))


def list_commissions_by_customer(store: DocumentStore, customer_id: UUID) -> List[Commission]:
    """
    Retrieve all commission records for a given customer.

    Returns:
        List[Commission] (possibly empty)
    """

    return [row_to_commission(row) for row in store.find_by(COMMISSIONS, "customer_id", str(customer_id))]


def list_commissions_by_rep(store: DocumentStore, rep_id: str) -> List[Commission]:
    return [row_to_commission(row) for row in store.find_by(COMMISSIONS, "rep_id", rep_id)]


def list_commissions(store: DocumentStore) -> List[Commission]:
    return [row_to_commission(row) for row in store.list_all(COMMISSIONS)]


__all__ = [
    "commission_to_row",
    "row_to_commission",
    "commission_insert",
    "commission_update",
    "list_commissions_by_customer",
    "list_commissions_by_rep",
    "list_commissions",
]
