"""
Document store contract (persistence).

The core persists to named collections of records keyed by `id`. Stores offer
point lookup, equality queries on one field, and an atomic `commit` of a batch
of inserts and partial updates.

Optimistic concurrency:
- An `Update` may carry `expected` field values. If the stored record does not
  hold those values at commit time, the whole commit fails with
  ConcurrencyConflictError and nothing is written.
- An `Update` with no fields writes nothing; it only checks its `expected`
  values.

`InMemoryStore` implements the contract in-process for tests and local runs.
"""

from __future__ import annotations

import copy
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Union

from domain.errors import ConcurrencyConflictError, PersistenceError

CUSTOMERS = "customers"
REPS = "reps"
TASKS = "tasks"
COMMISSIONS = "commissions"
ACTIVITIES = "activities"
NOTIFICATIONS = "notifications"

Record = Dict[str, Any]


@dataclass(frozen=True, slots=True)
class Insert:
    collection: str
    record: Mapping[str, Any]

    @property
    def record_id(self) -> str:
        return str(self.record["id"])


@dataclass(frozen=True, slots=True)
class Update:
    collection: str
    record_id: str
    fields: Mapping[str, Any]
    expected: Mapping[str, Any] = field(default_factory=dict)


Write = Union[Insert, Update]


class DocumentStore(Protocol):
    def get(self, collection: str, record_id: str) -> Optional[Record]:
        ...

    def find_by(self, collection: str, field_name: str, value: Any) -> List[Record]:
        ...

    def list_all(self, collection: str) -> List[Record]:
        ...

    def latest(self, collection: str, order_by: str, limit: int) -> List[Record]:
        """The `limit` records with the greatest `order_by`, newest first."""
        ...

    def commit(self, writes: Sequence[Write]) -> None:
        ...


class InMemoryStore:
    """
    Process-local store with the same atomicity and precondition rules as the
    database-backed store. Records are deep-copied in and out.
    """

    def __init__(self) -> None:
        self._collections: Dict[str, Dict[str, Record]] = {}
        self._lock = threading.Lock()

    def _table(self, collection: str) -> Dict[str, Record]:
        return self._collections.setdefault(collection, {})

    def get(self, collection: str, record_id: str) -> Optional[Record]:
        with self._lock:
            row = self._table(collection).get(str(record_id))
            return copy.deepcopy(row) if row is not None else None

    def find_by(self, collection: str, field_name: str, value: Any) -> List[Record]:
        with self._lock:
            return [copy.deepcopy(row) for row in self._table(collection).values() if row.get(field_name) == value]

    def list_all(self, collection: str) -> List[Record]:
        with self._lock:
            return [copy.deepcopy(row) for row in self._table(collection).values()]

    def latest(self, collection: str, order_by: str, limit: int) -> List[Record]:
        rows = self.list_all(collection)
        rows.sort(key=lambda row: row.get(order_by) or "", reverse=True)
        return rows[:limit]

    def commit(self, writes: Sequence[Write]) -> None:
        with self._lock:
            # Validate every write against current state before applying any.
            pending: Dict[tuple[str, str], Record] = {}
            for write in writes:
                key = (write.collection, write.record_id)
                current = pending.get(key, self._table(write.collection).get(write.record_id))

                if isinstance(write, Insert):
                    if current is not None:
                        raise PersistenceError(f"Duplicate id in {write.collection}: {write.record_id}")
                    pending[key] = copy.deepcopy(dict(write.record))
                    continue

                if current is None:
                    raise PersistenceError(f"No record in {write.collection} with id {write.record_id}")
                for name, value in write.expected.items():
                    if current.get(name) != value:
                        raise ConcurrencyConflictError(
                            f"{write.collection}/{write.record_id}: expected {name}={value!r}, "
                            f"found {current.get(name)!r}"
                        )
                updated = dict(current)
                updated.update(copy.deepcopy(dict(write.fields)))
                pending[key] = updated

            for (collection, record_id), row in pending.items():
                self._table(collection)[record_id] = row


__all__ = [
    "CUSTOMERS",
    "REPS",
    "TASKS",
    "COMMISSIONS",
    "ACTIVITIES",
    "NOTIFICATIONS",
    "Record",
    "Insert",
    "Update",
    "Write",
    "DocumentStore",
    "InMemoryStore",
]
