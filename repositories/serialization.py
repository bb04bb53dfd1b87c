"""
Row serialization helpers shared by the repositories.

Timestamps are stored as ISO-8601 UTC strings and money as decimal strings.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

from domain.time import require_utc_timestamp
from repositories.store import Update


def to_iso_utc(dt: datetime, *, name: str) -> str:
    """Serialize a UTC datetime to ISO-8601 (timezone-aware, offset 0)."""

    require_utc_timestamp(name, dt)
    return dt.astimezone(timezone.utc).isoformat()


def to_iso_utc_or_none(dt: Optional[datetime], *, name: str) -> Optional[str]:
    return to_iso_utc(dt, name=name) if dt is not None else None


def parse_utc_datetime(value: Any) -> datetime:
    """
    Parse a stored timestamp into a timezone-aware UTC datetime.

    Supabase commonly returns ISO-8601 strings, sometimes with a trailing 'Z'.
    """

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        # Python's fromisoformat doesn't consistently accept 'Z' across versions.
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise TypeError(f"Unsupported timestamp type: {type(value)!r}")

    # A naive timestamp from the backend is interpreted as UTC so that the
    # domain model's UTC invariant is satisfied.
    if dt.tzinfo is None or dt.utcoffset() is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_optional_datetime(value: Any) -> Optional[datetime]:
    return parse_utc_datetime(value) if value else None


def to_money(value: Optional[Decimal]) -> Optional[str]:
    return str(value) if value is not None else None


def parse_money(value: Any) -> Decimal:
    return Decimal(str(value)) if value is not None and value != "" else Decimal("0")


def parse_optional_money(value: Any) -> Optional[Decimal]:
    return Decimal(str(value)) if value is not None and value != "" else None


def diff_update(
    collection: str,
    before: Mapping[str, Any],
    after: Mapping[str, Any],
    *,
    expect: Iterable[str] = (),
) -> Update:
    """
    Build a partial Update carrying only the fields that changed.

    Fields named in `expect` are sent as preconditions with their `before` values.
    """

    changed = {k: v for k, v in after.items() if k != "id" and before.get(k) != v}
    return Update(
        collection=collection,
        record_id=str(after["id"]),
        fields=changed,
        expected={k: before.get(k) for k in expect},
    )


__all__ = [
    "to_iso_utc",
    "to_iso_utc_or_none",
    "parse_utc_datetime",
    "parse_optional_datetime",
    "to_money",
    "parse_money",
    "parse_optional_money",
    "diff_update",
]
