"""
Domain: activity log entries.

Append-only audit trail. Entries are immutable and are never updated or deleted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from .time import require_utc_timestamp


@dataclass(frozen=True, slots=True)
class Activity:
    activity_id: UUID
    title: str
    description: str
    created_at: datetime
    created_by: str

    def __post_init__(self) -> None:
        require_utc_timestamp("created_at", self.created_at)


__all__ = ["Activity"]
