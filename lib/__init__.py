# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Typed Supabase wrapper for database operations
# - utils.py: Shared utilities (UUIDs, timestamps, order numbers, money)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import (
    SupabaseClient,
    SupabaseClientError,
    is_not_found_error,
    is_unique_violation,
)
from lib.utils import (
    generate_order_number,
    is_valid_uuid,
    normalize_uuid,
    to_money,
    utc_now_iso,
)

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    "is_not_found_error",
    "is_unique_violation",
    # Utils
    "generate_order_number",
    "is_valid_uuid",
    "normalize_uuid",
    "to_money",
    "utc_now_iso",
]
