"""
Tests for `repositories/supabase_store.py` against a mocked Supabase client.

Covers contract rules:
- Single writes go straight to the table; multi-write commits go through the
  apply_crm_writes database function.
- An update matching no rows is a ConcurrencyConflictError when the record
  exists, and a PersistenceError when it does not.
- APIError from PostgREST surfaces as PersistenceError, or as
  ConcurrencyConflictError for serialization failures.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from postgrest.exceptions import APIError

from domain.errors import ConcurrencyConflictError, PersistenceError
from repositories.store import CUSTOMERS, Insert, Update
from repositories.supabase_store import SupabaseStore


def _response(data):
    response = MagicMock()
    response.data = data
    response.error = None
    return response


def _client() -> MagicMock:
    client = MagicMock()
    # Every chained query builder call returns the same builder.
    builder = client.table.return_value
    for name in ("select", "eq", "is_", "limit", "order", "insert", "update"):
        getattr(builder, name).return_value = builder
    return client


def test_get_returns_first_row() -> None:
    client = _client()
    client.table.return_value.execute.return_value = _response([{"id": "a", "status": "enquiry"}])

    assert SupabaseStore(client).get(CUSTOMERS, "a") == {"id": "a", "status": "enquiry"}
    client.table.assert_called_with(CUSTOMERS)
    client.table.return_value.eq.assert_called_with("id", "a")


def test_get_missing_returns_none() -> None:
    client = _client()
    client.table.return_value.execute.return_value = _response([])

    assert SupabaseStore(client).get(CUSTOMERS, "a") is None


def test_find_by_none_uses_is_null() -> None:
    client = _client()
    client.table.return_value.execute.return_value = _response([])

    SupabaseStore(client).find_by(CUSTOMERS, "assigned_rep_id", None)

    client.table.return_value.is_.assert_called_with("assigned_rep_id", "null")


def test_single_insert_goes_to_table() -> None:
    client = _client()
    client.table.return_value.execute.return_value = _response([{"id": "a"}])

    SupabaseStore(client).commit([Insert(CUSTOMERS, {"id": "a"})])

    client.table.return_value.insert.assert_called_once_with({"id": "a"})
    client.rpc.assert_not_called()


def test_conditional_update_conflict() -> None:
    client = _client()
    # First execute: the update matches nothing; second: the record still exists.
    client.table.return_value.execute.side_effect = [_response([]), _response([{"id": "a", "status": "sold"}])]

    with pytest.raises(ConcurrencyConflictError):
        SupabaseStore(client).commit([Update(CUSTOMERS, "a", {"status": "sold"}, expected={"status": "enquiry"})])

    client.table.return_value.eq.assert_any_call("status", "enquiry")


def test_update_of_missing_record() -> None:
    client = _client()
    client.table.return_value.execute.side_effect = [_response([]), _response([])]

    with pytest.raises(PersistenceError) as excinfo:
        SupabaseStore(client).commit([Update(CUSTOMERS, "a", {"status": "sold"})])

    assert not isinstance(excinfo.value, ConcurrencyConflictError)


def test_batch_commit_uses_rpc() -> None:
    client = _client()
    client.rpc.return_value.execute.return_value = _response(None)

    SupabaseStore(client).commit([
        Update(CUSTOMERS, "a", {"status": "sold"}, expected={"status": "enquiry"}),
        Insert("commissions", {"id": "c"}),
    ])

    name, params = client.rpc.call_args.args
    assert name == "apply_crm_writes"
    assert params["p_writes"] == [
        {"op": "update", "collection": CUSTOMERS, "id": "a", "fields": {"status": "sold"}, "expected": {"status": "enquiry"}},
        {"op": "insert", "collection": "commissions", "id": "c", "record": {"id": "c"}},
    ]


def test_batch_serialization_failure_is_conflict() -> None:
    client = _client()
    client.rpc.return_value.execute.side_effect = APIError({"message": "expected status", "code": "40001"})

    with pytest.raises(ConcurrencyConflictError):
        SupabaseStore(client).commit([Insert(CUSTOMERS, {"id": "a"}), Insert(CUSTOMERS, {"id": "b"})])


def test_api_error_is_persistence_error() -> None:
    client = _client()
    client.table.return_value.execute.side_effect = APIError({"message": "boom", "code": "500"})

    with pytest.raises(PersistenceError):
        SupabaseStore(client).list_all(CUSTOMERS)


def test_update_without_fields_only_reads() -> None:
    client = _client()
    client.table.return_value.execute.return_value = _response([{"id": "a", "status": "sold"}])
    store = SupabaseStore(client)

    store.commit([Update(CUSTOMERS, "a", {}, expected={"status": "sold"})])
    with pytest.raises(ConcurrencyConflictError):
        store.commit([Update(CUSTOMERS, "a", {}, expected={"status": "enquiry"})])

    client.table.return_value.update.assert_not_called()
