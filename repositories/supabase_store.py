"""
Supabase-backed document store (persistence).

Each collection is a table with an `id` text primary key and one column per
record field. Reads and single writes go straight to the table. A commit with
more than one write is sent to the `apply_crm_writes` database function (see
sql/apply_crm_writes.sql), which locks the affected rows, checks every
expected value and applies all writes in one transaction.

The store never retries; failures surface as PersistenceError.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from postgrest.exceptions import APIError

from domain.errors import ConcurrencyConflictError, PersistenceError
from repositories.store import Insert, Record, Update, Write

logger = logging.getLogger(__name__)

# Raised by apply_crm_writes when an expected value no longer matches.
_SERIALIZATION_FAILURE = "40001"


def _rows(response: Any, action: str) -> List[Record]:
    error = getattr(response, "error", None)
    if error:
        raise PersistenceError(f"Failed to {action}: {error}")
    return list(getattr(response, "data", None) or [])


def _write_to_payload(write: Write) -> Dict[str, Any]:
    if isinstance(write, Insert):
        return {"op": "insert", "collection": write.collection, "id": write.record_id, "record": dict(write.record)}
    return {
        "op": "update",
        "collection": write.collection,
        "id": write.record_id,
        "fields": dict(write.fields),
        "expected": dict(write.expected),
    }


class SupabaseStore:
    def __init__(self, client: Any = None) -> None:
        if client is None:
            from repositories.client import get_supabase

            client = get_supabase()
        self._client = client

    def get(self, collection: str, record_id: str) -> Optional[Record]:
        try:
            response = self._client.table(collection).select("*").eq("id", str(record_id)).limit(1).execute()
        except APIError as e:
            raise PersistenceError(f"Failed to fetch {collection}/{record_id}: {e}") from e
        rows = _rows(response, f"fetch {collection}/{record_id}")
        return rows[0] if rows else None

    def find_by(self, collection: str, field_name: str, value: Any) -> List[Record]:
        try:
            query = self._client.table(collection).select("*")
            query = query.is_(field_name, "null") if value is None else query.eq(field_name, value)
            response = query.execute()
        except APIError as e:
            raise PersistenceError(f"Failed to query {collection} by {field_name}: {e}") from e
        return _rows(response, f"query {collection} by {field_name}")

    def list_all(self, collection: str) -> List[Record]:
        try:
            response = self._client.table(collection).select("*").execute()
        except APIError as e:
            raise PersistenceError(f"Failed to list {collection}: {e}") from e
        return _rows(response, f"list {collection}")

    def latest(self, collection: str, order_by: str, limit: int) -> List[Record]:
        try:
            response = (
                self._client.table(collection)
                .select("*")
                .order(order_by, desc=True)
                .limit(limit)
                .execute()
            )
        except APIError as e:
            raise PersistenceError(f"Failed to list latest {collection}: {e}") from e
        return _rows(response, f"list latest {collection}")

    def commit(self, writes: Sequence[Write]) -> None:
        if not writes:
            return
        if len(writes) == 1:
            self._apply_single(writes[0])
            return

        payload = [_write_to_payload(w) for w in writes]
        try:
            response = self._client.rpc("apply_crm_writes", {"p_writes": payload}).execute()
        except APIError as e:
            if getattr(e, "code", None) == _SERIALIZATION_FAILURE:
                raise ConcurrencyConflictError(f"Commit rejected: {e.message}") from e
            raise PersistenceError(f"Failed to commit {len(writes)} writes: {e}") from e
        _rows(response, f"commit {len(writes)} writes")
        logger.debug("Committed batch", extra={"writes": len(writes)})

    def _apply_single(self, write: Write) -> None:
        try:
            if isinstance(write, Insert):
                response = self._client.table(write.collection).insert(dict(write.record)).execute()
                _rows(response, f"insert into {write.collection}")
                return
            if not write.fields:
                self._check_expected(write)
                return

            query = self._client.table(write.collection).update(dict(write.fields)).eq("id", write.record_id)
            for name, value in write.expected.items():
                query = query.is_(name, "null") if value is None else query.eq(name, value)
            response = query.execute()
        except APIError as e:
            raise PersistenceError(f"Failed to write {write.collection}/{write.record_id}: {e}") from e

        if _rows(response, f"update {write.collection}/{write.record_id}"):
            return
        # Nothing matched: either the record is gone or a precondition failed.
        if self.get(write.collection, write.record_id) is None:
            raise PersistenceError(f"No record in {write.collection} with id {write.record_id}")
        raise ConcurrencyConflictError(
            f"{write.collection}/{write.record_id} changed since it was read (expected {dict(write.expected)!r})"
        )

    def _check_expected(self, write: Update) -> None:
        current = self.get(write.collection, write.record_id)
        if current is None:
            raise PersistenceError(f"No record in {write.collection} with id {write.record_id}")
        for name, value in write.expected.items():
            if current.get(name) != value:
                raise ConcurrencyConflictError(
                    f"{write.collection}/{write.record_id}: expected {name}={value!r}, found {current.get(name)!r}"
                )


__all__ = ["SupabaseStore"]
