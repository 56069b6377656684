# =============================================================================
# tests/test_supabase_client.py - Supabase Wrapper & JWKS Tests
# =============================================================================
# SDK calls are isolated with unittest.mock; no network access.
#
# Run with: pytest tests/test_supabase_client.py -v
# =============================================================================

from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest

from app.auth import dependencies as auth_deps
from lib.supabase_client import (
    SupabaseClient,
    SupabaseClientError,
    is_not_found_error,
    is_unique_violation,
)


@pytest.fixture
def mock_client(monkeypatch):
    """A MagicMock standing in for the supabase-py Client."""
    client = MagicMock()
    monkeypatch.setattr(SupabaseClient, "_instance", client)
    return client


class TestErrorClassification:
    """Tests for the PostgREST/Postgres error helpers."""

    def test_no_rows(self):
        assert is_not_found_error(Exception("{'code': 'PGRST116', 'message': 'JSON object requested'}"))
        assert not is_not_found_error(Exception("connection reset"))

    def test_unique_violation(self):
        assert is_unique_violation(Exception("{'code': '23505'}"))
        assert is_unique_violation(Exception('duplicate key value violates unique constraint "customers_email_key"'))
        assert not is_unique_violation(Exception("{'code': '23503'}"))


class TestLookups:
    """Tests for the shared lookup helpers."""

    def test_fetch_by_id_returns_row(self, mock_client):
        row_id = uuid4()
        query = mock_client.table.return_value.select.return_value.eq.return_value.single.return_value
        query.execute.return_value = MagicMock(data={"id": str(row_id)})

        row = SupabaseClient.fetch_by_id("orders", row_id)

        assert row == {"id": str(row_id)}
        mock_client.table.assert_called_once_with("orders")
        mock_client.table.return_value.select.return_value.eq.assert_called_once_with("id", str(row_id))

    def test_no_rows_is_none(self, mock_client):
        query = mock_client.table.return_value.select.return_value.eq.return_value.single.return_value
        query.execute.side_effect = Exception("PGRST116: 0 rows")

        assert SupabaseClient.fetch_by_id("orders", uuid4()) is None
        assert SupabaseClient.exists("orders", uuid4()) is False

    def test_other_errors_wrapped(self, mock_client):
        query = mock_client.table.return_value.select.return_value.eq.return_value.single.return_value
        query.execute.side_effect = Exception("timeout")

        with pytest.raises(SupabaseClientError) as exc_info:
            SupabaseClient.fetch_one_by("customers", "email", "a@example.com")

        assert exc_info.value.code == "FETCH_FAILED"
        assert exc_info.value.details["table"] == "customers"

    def test_existing_ids(self, mock_client):
        query = mock_client.table.return_value.select.return_value.in_.return_value
        query.execute.return_value = MagicMock(data=[{"id": "a"}])

        assert SupabaseClient.fetch_existing_ids("catalog_items", ["a", "b"]) == {"a"}

    def test_existing_ids_empty_skips_query(self, mock_client):
        assert SupabaseClient.fetch_existing_ids("catalog_items", []) == set()
        mock_client.table.assert_not_called()

    def test_client_init_failure(self, monkeypatch):
        monkeypatch.setattr(SupabaseClient, "_instance", None)

        with patch("lib.supabase_client.create_client", side_effect=Exception("bad url")):
            with pytest.raises(SupabaseClientError) as exc_info:
                SupabaseClient.get_client()

        assert exc_info.value.code == "CLIENT_INIT_FAILED"


class TestJwks:
    """Tests for the cached JWKS fetch."""

    @pytest.fixture(autouse=True)
    def reset_cache(self, monkeypatch):
        monkeypatch.setattr(auth_deps, "_jwks_cache", {})
        monkeypatch.setattr(auth_deps, "_jwks_cache_time", 0)

    def test_fetch_is_cached(self):
        response = MagicMock()
        response.json.return_value = {"keys": [{"kid": "k1"}]}

        with patch("app.auth.dependencies.httpx.get", return_value=response) as get:
            first = auth_deps._fetch_jwks()
            second = auth_deps._fetch_jwks()

        assert first == second == {"keys": [{"kid": "k1"}]}
        get.assert_called_once()
        assert get.call_args.args[0].endswith("/auth/v1/.well-known/jwks.json")

    def test_failure_without_cache(self):
        with patch("app.auth.dependencies.httpx.get", side_effect=Exception("offline")):
            assert auth_deps._fetch_jwks() == {"keys": []}

    def test_failure_serves_stale_keys(self, monkeypatch):
        monkeypatch.setattr(auth_deps, "_jwks_cache", {"keys": [{"kid": "old"}]})

        with patch("app.auth.dependencies.httpx.get", side_effect=Exception("offline")):
            assert auth_deps._fetch_jwks() == {"keys": [{"kid": "old"}]}
