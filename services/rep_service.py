"""
Rep profile service.

The identity provider creates the login; this service stores the matching rep
profile under the same id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from domain.context import OperationContext
from domain.effects import LogActivity, Outcome
from domain.errors import PermissionDeniedError, ValidationError
from domain.rep import Rep, Role, parse_postcodes
from repositories.rep_repository import get_rep_by_id, list_reps, rep_insert
from repositories.store import DocumentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class NewRep:
    rep_id: str
    name: str
    email: str
    mobile: str
    region: str
    postcodes: str = ""
    max_travel_time: str = "0"
    max_travel_miles: str = "0"
    calendar_id: Optional[str] = None


def _travel_limit(label: str, value: str) -> Decimal:
    try:
        limit = Decimal(str(value or "0"))
    except InvalidOperation:
        raise ValidationError(f"{label} must be a number, got {value!r}") from None
    if not limit.is_finite() or limit < 0:
        raise ValidationError(f"{label} must be a non-negative number, got {value!r}")
    return limit


def create_rep(store: DocumentStore, ctx: OperationContext, fields: NewRep) -> Outcome[Rep]:
    """
    Store a rep profile (admins and owners only).

    Raises:
        PermissionDeniedError: the actor is a rep
        ValidationError: a required field is blank, a travel limit is invalid,
            or a profile already exists for the id
    """

    if not ctx.is_admin:
        raise PermissionDeniedError("Only admins can add reps")

    missing = [
        label
        for label, value in (
            ("rep_id", fields.rep_id),
            ("name", fields.name),
            ("email", fields.email),
            ("mobile", fields.mobile),
            ("region", fields.region),
        )
        if not (value or "").strip()
    ]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    if get_rep_by_id(store, fields.rep_id) is not None:
        raise ValidationError(f"A rep profile already exists for {fields.rep_id}")

    rep = Rep(
        rep_id=fields.rep_id.strip(),
        name=fields.name.strip(),
        email=fields.email.strip(),
        mobile=fields.mobile.strip(),
        region=fields.region.strip(),
        role=Role.REP,
        status="active",
        postcodes=parse_postcodes(fields.postcodes or ""),
        max_travel_time=_travel_limit("max_travel_time", fields.max_travel_time),
        max_travel_miles=_travel_limit("max_travel_miles", fields.max_travel_miles),
        calendar_id=(fields.calendar_id or "").strip() or None,
        created_at=ctx.now(),
        created_by=ctx.actor_id,
    )
    store.commit([rep_insert(rep)])
    logger.info(f"Rep added: {rep.name}", extra={"rep_id": rep.rep_id, "region": rep.region})

    return Outcome(value=rep, effects=(LogActivity(title=f"New rep added: {rep.name}", description=f"Region: {rep.region}"),))


def reps_covering(store: DocumentStore, postcode: Optional[str] = None) -> List[Rep]:
    """Active reps, optionally only those whose service area covers `postcode`."""

    reps = [r for r in list_reps(store) if r.is_active()]
    if postcode:
        reps = [r for r in reps if r.covers_postcode(postcode)]
    return sorted(reps, key=lambda r: r.name)


__all__ = ["NewRep", "create_rep", "reps_covering"]
