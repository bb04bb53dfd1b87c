"""
Rep repository for sales representative profiles.

Provides functions to map, query and insert rep profiles. The rep id is the
identity-provider account id.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, List, Mapping, Optional

from domain.rep import Rep, Role
from repositories.serialization import parse_optional_datetime, to_iso_utc_or_none
from repositories.store import REPS, DocumentStore, Insert


def rep_to_row(rep: Rep) -> dict[str, Any]:
    return {
        "id": rep.rep_id,
        "name": rep.name,
        "email": rep.email,
        "mobile": rep.mobile,
        "region": rep.region,
        "role": rep.role.value,
        "status": rep.status,
        "postcodes": list(rep.postcodes),
        "max_travel_time": str(rep.max_travel_time),
        "max_travel_miles": str(rep.max_travel_miles),
        "calendar_id": rep.calendar_id,
        "created_at_utc": to_iso_utc_or_none(rep.created_at, name="created_at"),
        "created_by": rep.created_by,
    }


def row_to_rep(row: Mapping[str, Any]) -> Rep:
    return Rep(
        rep_id=str(row["id"]),
        name=str(row.get("name") or ""),
        email=str(row.get("email") or ""),
        mobile=str(row.get("mobile") or ""),
        region=str(row.get("region") or ""),
        role=Role(str(row.get("role") or Role.REP.value)),
        status=str(row.get("status") or "active"),
        postcodes=tuple(row.get("postcodes") or ()),
        max_travel_time=Decimal(str(row.get("max_travel_time") or "0")),
        max_travel_miles=Decimal(str(row.get("max_travel_miles") or "0")),
        calendar_id=row.get("calendar_id") or None,
        created_at=parse_optional_datetime(row.get("created_at_utc")),
        created_by=row.get("created_by"),
    )


def rep_insert(rep: Rep) -> Insert:
    return Insert(collection=REPS, record=rep_to_row(rep))


def get_rep_by_id(store: DocumentStore, rep_id: str) -> Optional[Rep]:
    """
    Get a rep by their identity-provider id.

    Returns:
        Rep or None if not found
    """

    row = store.get(REPS, rep_id)
    return row_to_rep(row) if row is not None else None


def get_rep_by_email(store: DocumentStore, email: str) -> Optional[Rep]:
    rows = store.find_by(REPS, "email", email)
    return row_to_rep(rows[0]) if rows else None


def list_reps(store: DocumentStore) -> List[Rep]:
    return [row_to_rep(row) for row in store.list_all(REPS)]


__all__ = ["rep_to_row", "row_to_rep", "rep_insert", "get_rep_by_id", "get_rep_by_email", "list_reps"]
