"""
Domain: side effects requested by core operations.

Operations never deliver notifications or write the audit log themselves; they
return the effects to perform, and the caller executes them once the state
change has been committed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Tuple, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class LogActivity:
    """Append an entry to the activity log."""

    title: str
    description: str


@dataclass(frozen=True, slots=True)
class NotifyRep:
    """Best-effort message to a sales rep."""

    rep_id: str
    subject: str
    body: str


Effect = Union[LogActivity, NotifyRep]


@dataclass(frozen=True, slots=True)
class Outcome(Generic[T]):
    """The value an operation produced plus the effects it asks for."""

    value: T
    effects: Tuple[Effect, ...] = field(default_factory=tuple)

    @property
    def activities(self) -> Tuple[LogActivity, ...]:
        return tuple(e for e in self.effects if isinstance(e, LogActivity))

    @property
    def notifications(self) -> Tuple[NotifyRep, ...]:
        return tuple(e for e in self.effects if isinstance(e, NotifyRep))


__all__ = ["LogActivity", "NotifyRep", "Effect", "Outcome"]
