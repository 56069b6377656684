# =============================================================================
# core/services/stats_service.py - Dashboard Statistics
# =============================================================================
# Aggregates for the admin/sales dashboard.
#
# PostgREST caps every response at its max-rows setting, so totals come from
# count="exact" queries and anything summed or grouped in Python is read in
# pages until the table is exhausted.
# =============================================================================

import logging
from collections import Counter
from typing import Any, Callable

from app.exceptions import DatabaseError
from core.models.catalog import CatalogItemStatus
from core.models.order import OrderStatus
from lib.supabase_client import SupabaseClient
from lib.utils import to_money, utc_now

logger = logging.getLogger(__name__)

PAGE_SIZE = 1000

QueryFilter = Callable[[Any], Any]


def _count(table: str, apply: QueryFilter | None = None) -> int:
    """Exact row count, optionally filtered."""
    client = SupabaseClient.get_client()
    try:
        query = client.table(table).select("id", count="exact")
        if apply:
            query = apply(query)
        response = query.limit(1).execute()
        return response.count or 0
    except Exception as e:
        logger.error(f"Failed to count {table} for stats: {e}")
        raise DatabaseError(f"count {table} statistics", str(e))


def _select_all(table: str, columns: str, apply: QueryFilter | None = None) -> list[dict[str, Any]]:
    """
    Read every matching row, one page at a time.

    Pages advance by the number of rows actually returned, so a server cap
    smaller than PAGE_SIZE still reaches the end of the table.
    """
    client = SupabaseClient.get_client()
    rows: list[dict[str, Any]] = []
    start = 0

    try:
        while True:
            query = client.table(table).select(columns)
            if apply:
                query = apply(query)
            batch = query.order("id").range(start, start + PAGE_SIZE - 1).execute().data or []
            if not batch:
                break
            rows.extend(batch)
            start += len(batch)
    except Exception as e:
        logger.error(f"Failed to load {table} for stats: {e}")
        raise DatabaseError(f"load {table} statistics", str(e))

    return rows


class StatsService:
    """Service for dashboard statistics."""

    @staticmethod
    def order_stats() -> dict[str, Any]:
        """
        Order counts by status and revenue.

        pending_orders counts every order that is neither completed nor
        cancelled; total_revenue sums completed orders only.
        """
        total = _count("orders")

        by_status: dict[str, int] = {}
        for status in OrderStatus:
            count = _count("orders", lambda q, value=status.value: q.eq("status", value))
            if count:
                by_status[status.value] = count

        completed = by_status.get(OrderStatus.COMPLETED.value, 0)
        cancelled = by_status.get(OrderStatus.CANCELLED.value, 0)

        completed_rows = _select_all(
            "orders", "id,total_amount", lambda q: q.eq("status", OrderStatus.COMPLETED.value)
        )
        revenue = sum(to_money(o.get("total_amount")) for o in completed_rows)

        return {
            "total_orders": total,
            "orders_by_status": by_status,
            "pending_orders": total - completed - cancelled,
            "completed_orders": completed,
            "total_revenue": round(revenue, 2),
        }

    @staticmethod
    def customer_stats() -> dict[str, Any]:
        month_start = utc_now().replace(day=1, hour=0, minute=0, second=0, microsecond=0)

        return {
            "total_customers": _count("customers"),
            "new_this_month": _count("customers", lambda q: q.gte("created_at", month_start.isoformat())),
        }

    @staticmethod
    def catalog_stats() -> dict[str, Any]:
        categories = _select_all("catalog_items", "id,category")
        return {
            "total_items": _count("catalog_items"),
            "active_items": _count("catalog_items", lambda q: q.eq("status", CatalogItemStatus.ACTIVE.value)),
            "by_category": dict(Counter(i.get("category") or "Uncategorized" for i in categories)),
        }
