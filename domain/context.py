"""
Domain: the acting principal of a core operation.

Identity is resolved by the external identity provider; the core only needs the
principal's id and role, plus a clock so that timestamps are injectable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from .rep import Role
from .time import require_utc_timestamp, utc_now


@dataclass(frozen=True, slots=True)
class OperationContext:
    actor_id: str
    role: Role
    actor_name: Optional[str] = None
    clock: Callable[[], datetime] = field(default=utc_now, compare=False)

    @property
    def is_admin(self) -> bool:
        return self.role.is_admin

    @property
    def display_name(self) -> str:
        return self.actor_name or self.actor_id

    def now(self) -> datetime:
        value = self.clock()
        require_utc_timestamp("now", value)
        return value


__all__ = ["OperationContext"]
