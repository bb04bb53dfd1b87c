"""
Activity repository (persistence).

Activities are insert-only; there is no update helper.
"""

from __future__ import annotations

from typing import Any, List, Mapping
from uuid import UUID

from domain.activity import Activity
from repositories.serialization import parse_utc_datetime, to_iso_utc
from repositories.store import ACTIVITIES, DocumentStore, Insert


def activity_to_row(activity: Activity) -> dict[str, Any]:
    return {
        "id": str(activity.activity_id),
        "title": activity.title,
        "description": activity.description,
        "created_at_utc": to_iso_utc(activity.created_at, name="created_at"),
        "created_by": activity.created_by,
    }


def row_to_activity(row: Mapping[str, Any]) -> Activity:
    return Activity(
        activity_id=UUID(str(row["id"])),
        title=str(row["title"]),
        description=str(row.get("description") or ""),
        created_at=parse_utc_datetime(row["created_at_utc"]),
        created_by=str(row.get("created_by") or ""),
    )


def activity_insert(activity: Activity) -> Insert:
    return Insert(collection=ACTIVITIES, record=activity_to_row(activity))


def list_recent_activities(store: DocumentStore, limit: int) -> List[Activity]:
    """The `limit` most recent activities, newest first."""

    return [row_to_activity(row) for row in store.latest(ACTIVITIES, "created_at_utc", limit)]


__all__ = ["activity_to_row", "row_to_activity", "activity_insert", "list_recent_activities"]
