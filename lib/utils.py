# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

import secrets
import string
import time
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

BASE36_ALPHABET = string.digits + string.ascii_uppercase


# =============================================================================
# UUID Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Handles both string and UUID objects, ensuring consistent string output.

    Example:
        order_id = normalize_uuid(uuid_obj)  # "550e8400-..."
        order_id = normalize_uuid("550e8400-...")  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


def is_valid_uuid(value: Any) -> bool:
    """Check whether a value parses as a UUID."""
    if isinstance(value, UUID):
        return True
    try:
        UUID(str(value))
        return True
    except (ValueError, TypeError):
        return False


# =============================================================================
# Time Utilities
# =============================================================================

def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Current UTC time in ISO 8601, the format stored in timestamp columns."""
    return utc_now().isoformat()


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """
    Parse a database timestamp into an aware datetime.

    Naive values are assumed to be UTC.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# =============================================================================
# Identifiers
# =============================================================================

def to_base36(number: int) -> str:
    """Encode a non-negative integer in base 36 (0-9, A-Z)."""
    if number < 0:
        raise ValueError("to_base36 only supports non-negative integers")
    if number == 0:
        return "0"

    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_order_number(timestamp_ms: int | None = None) -> str:
    """
    Generate a human-readable order number.

    Format: ORD-{base36 millisecond timestamp}-{3 random base36 chars}

    Example:
        generate_order_number()  # "ORD-LZ4K2M1A-7QX"
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(3))
    return f"ORD-{to_base36(timestamp_ms)}-{suffix}"


def search_filter(columns: list[str], term: str) -> str:
    """
    Build a PostgREST `or` filter matching `term` in any of `columns`.

    Characters with meaning in the filter grammar are stripped from the term.

    Example:
        search_filter(["name", "sku"], "jersey")
        # "name.ilike.%jersey%,sku.ilike.%jersey%"
    """
    cleaned = "".join(ch for ch in term if ch not in ",()%*\"\\").strip()
    return ",".join(f"{column}.ilike.%{cleaned}%" for column in columns)


# =============================================================================
# Money
# =============================================================================

def to_money(value: Any) -> float:
    """
    Coerce a numeric column value to a float rounded to cents.

    Postgres NUMERIC columns come back from PostgREST as numbers or strings.
    """
    if value is None or value == "":
        return 0.0
    return round(float(value), 2)
