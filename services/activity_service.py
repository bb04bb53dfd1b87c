"""
Activity log service.

Appends audit entries and reads the dashboard feed. Appending always succeeds
unless the store itself fails.
"""

from __future__ import annotations

import logging
from typing import List
from uuid import uuid4

from domain.activity import Activity
from domain.context import OperationContext
from domain.errors import ValidationError
from repositories.activity_repository import activity_insert, list_recent_activities
from repositories.store import DocumentStore

logger = logging.getLogger(__name__)

DEFAULT_FEED_SIZE = 10


def append_activity(store: DocumentStore, ctx: OperationContext, title: str, description: str) -> Activity:
    """Append an immutable entry attributed to the acting principal."""

    if not title.strip():
        raise ValidationError("Activity title must not be empty")

    activity = Activity(
        activity_id=uuid4(),
        title=title,
        description=description,
        created_at=ctx.now(),
        created_by=ctx.actor_id,
    )
    store.commit([activity_insert(activity)])
    logger.debug("Activity appended", extra={"activity_title": title, "actor_id": ctx.actor_id})
    return activity


def recent_activity(store: DocumentStore, limit: int = DEFAULT_FEED_SIZE) -> List[Activity]:
    """The most recent `limit` entries, newest first."""

    return list_recent_activities(store, limit)


__all__ = ["DEFAULT_FEED_SIZE", "append_activity", "recent_activity"]
