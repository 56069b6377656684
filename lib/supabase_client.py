# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single service-role client
# and provides shared lookup helpers used by every service:
# - Row lookups by id or by column (PGRST116 -> None)
# - Existence checks for foreign-key style validation
# - Error classification (not found, unique violation)
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   order = SupabaseClient.fetch_by_id("orders", order_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST / Postgres error codes we react to
NO_ROWS_CODE = "PGRST116"
UNIQUE_VIOLATION_CODE = "23505"


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Carries a machine-readable code and an actionable suggestion so callers
    can surface something more useful than the raw SDK message.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


def is_not_found_error(error: Exception) -> bool:
    """Check if an SDK error is PostgREST's 'no rows returned' error."""
    return NO_ROWS_CODE in str(error)


def is_unique_violation(error: Exception) -> bool:
    """Check if an SDK error is a Postgres unique constraint violation."""
    message = str(error)
    return UNIQUE_VIOLATION_CODE in message or "duplicate key" in message


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one service-role client instance is shared
    across the application. All methods are class methods for easy access
    without instantiation.

    Example:
        order = SupabaseClient.fetch_by_id("orders", order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        Role checks happen in the API layer instead.

        Returns:
            Client: Supabase client instance

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def create_auth_client(cls) -> Client:
        """
        Create a fresh anon-key client for password sign-in.

        A new client is created per call because sign-in stores the session
        on the client instance, and that must not leak between requests.
        """
        try:
            return create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to create Supabase auth client: {e}",
                code="CLIENT_INIT_FAILED",
                suggestion="Check SUPABASE_URL and SUPABASE_ANON_KEY in your .env file"
            )

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_by_id(
        cls,
        table: str,
        row_id: str | UUID,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """
        Fetch a single row by primary key.

        Args:
            table: Table name
            row_id: Row UUID
            columns: Column list for the select

        Returns:
            Row dict, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        return cls.fetch_one_by(table, "id", row_id, columns=columns)

    @classmethod
    def fetch_one_by(
        cls,
        table: str,
        column: str,
        value: Any,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """
        Fetch a single row where `column` equals `value`.

        Returns:
            Row dict, or None if no row matches

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        if isinstance(value, UUID):
            value = cls._normalize_uuid(value)

        try:
            response = (
                client.table(table)
                .select(columns)
                .eq(column, value)
                .single()
                .execute()
            )

            return response.data

        except Exception as e:
            if is_not_found_error(e):  # PostgREST code for no rows
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch from {table}: {e}",
                code="FETCH_FAILED",
                suggestion=f"Check that the {table} table is accessible",
                details={"table": table, column: str(value)}
            )

    @classmethod
    def exists(cls, table: str, row_id: str | UUID) -> bool:
        """Check whether a row with the given id exists."""
        return cls.fetch_by_id(table, row_id, columns="id") is not None

    @classmethod
    def fetch_existing_ids(cls, table: str, row_ids: list[str]) -> set[str]:
        """
        Return the subset of `row_ids` that exist in `table`.

        Used to validate batches of references with one query.
        """
        if not row_ids:
            return set()

        client = cls.get_client()

        try:
            response = (
                client.table(table)
                .select("id")
                .in_("id", list(row_ids))
                .execute()
            )
            return {str(row["id"]) for row in response.data or []}

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to validate ids in {table}: {e}",
                code="FETCH_FAILED",
                details={"table": table, "ids": list(row_ids)}
            )
