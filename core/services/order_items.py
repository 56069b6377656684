# =============================================================================
# core/services/order_items.py - Order Item Totals & Reconciliation
# =============================================================================
# Pure functions (no database access) behind order item writes:
# - Row building with the total_price default (quantity * unit_price)
# - Order total computation
# - PATCH reconciliation: which stored items to delete, update, or insert
#
# Keeping this free of Supabase calls lets the rules be tested directly.
# =============================================================================

from dataclasses import dataclass, field
from typing import Any, Iterable

from core.models.order import OrderItemCreate, OrderItemInput
from lib.utils import to_money

# Columns compared when deciding whether an item update changed anything
TRACKED_ITEM_FIELDS = (
    "catalog_item_id",
    "product_name",
    "description",
    "quantity",
    "unit_price",
    "total_price",
    "color",
    "size",
    "fabric",
    "customization",
    "specifications",
    "status",
)


@dataclass
class ItemChangePlan:
    """
    Result of reconciling requested items against stored items.

    Attributes:
        to_delete: Stored rows absent from the request
        to_update: (stored row, new column values) pairs
        to_insert: Column values for new rows (without order_id)
    """
    to_delete: list[dict[str, Any]] = field(default_factory=list)
    to_update: list[tuple[dict[str, Any], dict[str, Any]]] = field(default_factory=list)
    to_insert: list[dict[str, Any]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.to_delete or self.to_update or self.to_insert)


def item_total(quantity: int, unit_price: float, total_price: float | None = None) -> float:
    """
    Line total for an item.

    An explicit total_price wins (it may include discounts); otherwise
    quantity * unit_price, rounded to cents.
    """
    if total_price is not None:
        return to_money(total_price)
    return to_money(quantity * unit_price)


def item_values(item: OrderItemCreate) -> dict[str, Any]:
    """Column values for an item, with total_price filled in."""
    values = item.model_dump(mode="json", exclude={"id"})
    values["total_price"] = item_total(item.quantity, item.unit_price, item.total_price)
    values["unit_price"] = to_money(item.unit_price)
    return values


def build_item_rows(items: Iterable[OrderItemCreate], order_id: str) -> list[dict[str, Any]]:
    """Insert payloads for a batch of items belonging to one order."""
    rows = []
    for item in items:
        row = item_values(item)
        row["order_id"] = order_id
        rows.append(row)
    return rows


def order_total(rows: Iterable[dict[str, Any]]) -> float:
    """Sum of total_price across item rows (or item payloads)."""
    return to_money(sum(to_money(row.get("total_price")) for row in rows))


def referenced_catalog_ids(items: Iterable[OrderItemCreate]) -> list[str]:
    """Distinct catalog_item_ids referenced by the items, in request order."""
    seen: dict[str, None] = {}
    for item in items:
        if item.catalog_item_id is not None:
            seen.setdefault(str(item.catalog_item_id), None)
    return list(seen)


def changed_fields(stored: dict[str, Any], values: dict[str, Any]) -> dict[str, tuple[Any, Any]]:
    """
    Fields whose value differs between a stored row and new values.

    Money columns are compared after rounding so "12.50" == 12.5.

    Returns:
        {field: (old, new)}
    """
    changes = {}
    for name in TRACKED_ITEM_FIELDS:
        if name not in values:
            continue
        old, new = stored.get(name), values[name]
        if name in ("unit_price", "total_price"):
            if to_money(old) == to_money(new):
                continue
        elif old == new or (old is not None and new is not None and str(old) == str(new)):
            continue
        changes[name] = (old, new)
    return changes


def plan_item_changes(
    stored_items: list[dict[str, Any]],
    requested_items: list[OrderItemInput],
) -> ItemChangePlan:
    """
    Reconcile the requested item list against what is stored.

    Rules:
    - A stored item whose id is not in the request is deleted.
    - A requested item whose id matches a stored item is updated.
    - A requested item with no id, or an id we don't know, is inserted
      (the client-supplied id is dropped; the database assigns a new one).

    An empty request list therefore deletes every stored item.
    """
    stored_by_id = {str(row["id"]): row for row in stored_items}
    plan = ItemChangePlan()
    kept_ids: set[str] = set()

    for item in requested_items:
        values = item_values(item)
        item_id = str(item.id) if item.id is not None else None

        if item_id and item_id in stored_by_id and item_id not in kept_ids:
            kept_ids.add(item_id)
            plan.to_update.append((stored_by_id[item_id], values))
        else:
            plan.to_insert.append(values)

    plan.to_delete = [row for row_id, row in stored_by_id.items() if row_id not in kept_ids]
    return plan
