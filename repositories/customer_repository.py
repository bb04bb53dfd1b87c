"""
Customer repository (persistence).

This module provides *only* persistence mapping for the Customer domain entity.
No business rules (status transitions, staleness, commissions) belong here.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional
from uuid import UUID

from domain.customer import Customer, CustomerStatus
from repositories.serialization import (
    diff_update,
    parse_optional_datetime,
    parse_optional_money,
    parse_money,
    parse_utc_datetime,
    to_iso_utc,
    to_iso_utc_or_none,
    to_money,
)
from repositories.store import CUSTOMERS, DocumentStore, Insert, Update


def customer_to_row(customer: Customer) -> dict[str, Any]:
    """Convert a domain Customer to a row payload."""

    return {
        "id": str(customer.customer_id),
        "name": customer.name,
        "email": customer.email,
        "mobile": customer.mobile,
        "postcode": customer.postcode,
        "address": customer.address,
        "notes": customer.notes,

        # Property attributes
        "property_type": customer.property_type,
        "heating_system": customer.heating_system,
        "installation_type": customer.installation_type,
        "estimated_value": to_money(customer.estimated_value),
        "bus_grant_eligible": customer.bus_grant_eligible,

        # Pipeline
        "status": customer.status.value,
        "assigned_rep_id": customer.assigned_rep_id,
        "assigned_rep_name": customer.assigned_rep_name,
        "created_by": customer.created_by,
        "created_at_utc": to_iso_utc(customer.created_at, name="created_at"),
        "last_contacted_utc": to_iso_utc_or_none(customer.last_contacted, name="last_contacted"),

        # Sale and installation
        "deposit_received": customer.deposit_received,
        "deposit_amount": to_money(customer.deposit_amount),
        "deposit_received_date_utc": to_iso_utc_or_none(customer.deposit_received_date, name="deposit_received_date"),
        "installation_completed_date_utc": to_iso_utc_or_none(
            customer.installation_completed_date, name="installation_completed_date"
        ),
    }


def row_to_customer(row: Mapping[str, Any]) -> Customer:
    """Convert a stored row into a domain Customer."""

    return Customer(
        customer_id=UUID(str(row["id"])),
        name=str(row["name"]),
        email=str(row["email"]),
        mobile=str(row["mobile"]),
        postcode=str(row["postcode"]),
        address=row.get("address") or "",
        notes=row.get("notes") or "",
        property_type=row.get("property_type") or "",
        heating_system=row.get("heating_system") or "",
        installation_type=row.get("installation_type") or "",
        estimated_value=parse_money(row.get("estimated_value")),
        bus_grant_eligible=bool(row.get("bus_grant_eligible", False)),
        status=CustomerStatus(str(row["status"])),
        assigned_rep_id=row.get("assigned_rep_id") or None,
        assigned_rep_name=row.get("assigned_rep_name"),
        created_by=row.get("created_by"),
        created_at=parse_utc_datetime(row["created_at_utc"]),
        last_contacted=parse_optional_datetime(row.get("last_contacted_utc")),
        deposit_received=bool(row.get("deposit_received", False)),
        deposit_amount=parse_optional_money(row.get("deposit_amount")),
        deposit_received_date=parse_optional_datetime(row.get("deposit_received_date_utc")),
        installation_completed_date=parse_optional_datetime(row.get("installation_completed_date_utc")),
    )


def customer_insert(customer: Customer) -> Insert:
    return Insert(collection=CUSTOMERS, record=customer_to_row(customer))


def customer_update(before: Customer, after: Customer) -> Update:
    """Partial update from `before` to `after`, conditional on `before`'s status."""

    return diff_update(CUSTOMERS, customer_to_row(before), customer_to_row(after), expect=("status",))


def get_customer_by_id(store: DocumentStore, customer_id: UUID) -> Optional[Customer]:
    """
    Retrieve a single customer by id.

    Returns:
        Customer or None if not found
    """

    row = store.get(CUSTOMERS, str(customer_id))
    return row_to_customer(row) if row is not None else None


def list_customers(store: DocumentStore) -> List[Customer]:
    return [row_to_customer(row) for row in store.list_all(CUSTOMERS)]


def list_customers_for_rep(store: DocumentStore, rep_id: str) -> List[Customer]:
    """Customers whose assigned rep is `rep_id` ("my customers")."""

    return [row_to_customer(row) for row in store.find_by(CUSTOMERS, "assigned_rep_id", rep_id)]


__all__ = [
    "customer_to_row",
    "row_to_customer",
    "customer_insert",
    "customer_update",
    "get_customer_by_id",
    "list_customers",
    "list_customers_for_rep",
]
