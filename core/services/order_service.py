# =============================================================================
# core/services/order_service.py - Order Business Logic
# =============================================================================
# Handles order + line item operations:
# - Create an order with its items (compensating delete if items fail)
# - Partial updates with per-field audit entries
# - PATCH item reconciliation (delete / update / insert) and total recompute
# - Listing with filters, pagination and customer scoping
#
# Supabase exposes no client-side transactions, so multi-step writes are
# sequential. Every step that can leave partial state is logged.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import (
    ConflictError,
    DatabaseError,
    InvalidReferenceError,
    OrderItemsUpdateError,
    OrderNotFoundError,
)
from core.models.audit import AuditAction, AuditEntry
from core.models.order import OrderCreate, OrderItemCreate, OrderItemInput, OrderUpdate
from core.services.audit_service import AuditService
from core.services.order_items import (
    build_item_rows,
    changed_fields,
    order_total,
    plan_item_changes,
    referenced_catalog_ids,
)
from lib.supabase_client import SupabaseClient, is_unique_violation
from lib.utils import generate_order_number, normalize_uuid, search_filter, utc_now_iso

logger = logging.getLogger(__name__)

TABLE = "orders"
ITEMS_TABLE = "order_items"

# Columns that are NOT NULL in the database; a null in an update is ignored
NON_NULLABLE_FIELDS = frozenset({
    "order_number",
    "customer_id",
    "status",
    "priority",
    "total_amount",
    "payment_status",
    "rush_order",
})


def _order_number_conflict(order_number: str) -> ConflictError:
    return ConflictError(
        message=f"Order number already exists: {order_number}",
        code="ORDER_NUMBER_EXISTS",
        suggestion="Omit order_number to have one generated",
        details={"order_number": order_number},
    )


class OrderService:
    """
    Service for order management operations.

    Provides a clean interface between API routes and database.
    """

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @staticmethod
    def list_orders(
        status: str | None = None,
        customer_id: str | None = None,
        priority: str | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 20,
        customer_ids: list[str] | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List orders, newest first.

        Args:
            customer_ids: When not None, restrict to these customers (used to
                scope customer logins to their own orders)

        Returns:
            Tuple of (orders, total matching count)
        """
        if customer_ids is not None and not customer_ids:
            return [], 0

        client = SupabaseClient.get_client()
        offset = (page - 1) * limit

        try:
            query = client.table(TABLE).select("*", count="exact")
            if status:
                query = query.eq("status", status)
            if customer_id:
                query = query.eq("customer_id", customer_id)
            if priority:
                query = query.eq("priority", priority)
            if customer_ids is not None:
                query = query.in_("customer_id", customer_ids)
            if search:
                query = query.or_(search_filter(["order_number", "notes"], search))

            response = (
                query.order("created_at", desc=True)
                .range(offset, offset + limit - 1)
                .execute()
            )
            orders = response.data or []
            total = response.count if response.count is not None else len(orders)
            return orders, total

        except Exception as e:
            logger.error(f"Failed to list orders: {e}")
            raise DatabaseError("list orders", str(e))

    @staticmethod
    def get_order(
        order_id: str | UUID,
        customer_ids: list[str] | None = None,
    ) -> dict[str, Any]:
        """
        Get an order by ID.

        Args:
            customer_ids: If provided, the order must belong to one of them

        Raises:
            OrderNotFoundError: If the order doesn't exist or is out of scope
        """
        order = SupabaseClient.fetch_by_id(TABLE, order_id)

        if not order:
            raise OrderNotFoundError(str(order_id))

        # Don't reveal that the order exists - return not found
        if customer_ids is not None and str(order.get("customer_id")) not in customer_ids:
            raise OrderNotFoundError(str(order_id))

        return order

    @staticmethod
    def get_order_items(order_id: str | UUID) -> list[dict[str, Any]]:
        """Line items of an order, oldest first."""
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table(ITEMS_TABLE)
                .select("*")
                .eq("order_id", normalize_uuid(order_id))
                .order("created_at")
                .execute()
            )
            return response.data or []

        except Exception as e:
            logger.error(f"Failed to fetch items for order {order_id}: {e}")
            raise DatabaseError("fetch order items", str(e))

    @staticmethod
    def get_order_with_items(
        order_id: str | UUID,
        customer_ids: list[str] | None = None,
    ) -> dict[str, Any]:
        order = OrderService.get_order(order_id, customer_ids=customer_ids)
        return {"order": order, "items": OrderService.get_order_items(order["id"])}

    # -------------------------------------------------------------------------
    # Reference validation
    # -------------------------------------------------------------------------

    @staticmethod
    def validate_customer(customer_id: str | UUID) -> None:
        if not SupabaseClient.exists("customers", customer_id):
            raise InvalidReferenceError("customer", str(customer_id), "customer_id")

    @staticmethod
    def validate_catalog_items(items: list[OrderItemCreate]) -> None:
        """
        Check every referenced catalog_item_id exists.

        Raises:
            InvalidReferenceError: For the first missing catalog item
        """
        wanted = referenced_catalog_ids(items)
        if not wanted:
            return
        found = SupabaseClient.fetch_existing_ids("catalog_items", wanted)
        for catalog_item_id in wanted:
            if catalog_item_id not in found:
                raise InvalidReferenceError("catalog item", catalog_item_id, "items.catalog_item_id")

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    @staticmethod
    def create_order(
        payload: OrderCreate,
        user_id: str | UUID | None = None,
        default_salesperson_id: str | UUID | None = None,
    ) -> dict[str, Any]:
        """
        Create an order and its line items.

        Steps:
        1. Validate customer and catalog references
        2. Insert the order (generated order_number, computed total)
        3. Insert the items; on failure delete the order again

        Returns:
            {"order": order, "items": items}

        Raises:
            InvalidReferenceError: Unknown customer or catalog item
            ConflictError: Duplicate order_number
            DatabaseError: If an insert fails
        """
        OrderService.validate_customer(payload.customer_id)
        OrderService.validate_catalog_items(payload.items)

        data = payload.model_dump(mode="json", exclude={"items"})
        data["order_number"] = data.get("order_number") or generate_order_number()
        if not data.get("salesperson_id") and default_salesperson_id:
            data["salesperson_id"] = normalize_uuid(default_salesperson_id)

        item_rows = build_item_rows(payload.items, order_id="")
        if data.get("total_amount") is None:
            data["total_amount"] = order_total(item_rows)

        client = SupabaseClient.get_client()

        # 1. Order row
        try:
            response = client.table(TABLE).insert(data).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise _order_number_conflict(data["order_number"])
            logger.error(f"Failed to create order: {e}")
            raise DatabaseError("create order", str(e))

        if not response.data:
            raise DatabaseError("create order", "Insert returned no data")
        order = response.data[0]
        order_id = str(order["id"])

        # 2. Item rows
        for row in item_rows:
            row["order_id"] = order_id
        try:
            items_response = client.table(ITEMS_TABLE).insert(item_rows).execute()
            items = items_response.data or []
        except Exception as e:
            logger.error(f"Failed to create items for order {order_id}: {e}")
            OrderService._compensate_order_insert(order_id)
            raise DatabaseError("create order items", str(e))

        logger.info(f"Created order {order['order_number']} ({order_id}) with {len(items)} item(s)")

        AuditService.log_change(AuditEntry(
            order_id=order_id,
            user_id=user_id,
            action=AuditAction.ORDER_CREATED,
            new_value={"order_number": order["order_number"], "total_amount": order.get("total_amount")},
            changes_summary=f"Order {order['order_number']} created with {len(items)} item(s)",
        ))

        return {"order": order, "items": items}

    @staticmethod
    def _compensate_order_insert(order_id: str) -> None:
        """Undo an order insert whose items failed. Never raises."""
        client = SupabaseClient.get_client()
        try:
            client.table(TABLE).delete().eq("id", order_id).execute()
            logger.warning(f"Rolled back order {order_id} after item insert failure")
        except Exception as e:
            logger.error(f"Rollback of order {order_id} failed, manual cleanup needed: {e}")

    # -------------------------------------------------------------------------
    # Update
    # -------------------------------------------------------------------------

    @staticmethod
    def write_fields(order_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        client = SupabaseClient.get_client()

        try:
            response = client.table(TABLE).update(changes).eq("id", order_id).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise _order_number_conflict(str(changes.get("order_number")))
            logger.error(f"Failed to update order {order_id}: {e}")
            raise DatabaseError("update order", str(e))

        if not response.data:
            raise OrderNotFoundError(order_id)
        return response.data[0]

    @staticmethod
    def update_order(
        order_id: str | UUID,
        payload: OrderUpdate,
        user_id: str | UUID | None = None,
        reconcile_items: bool = True,
    ) -> dict[str, Any]:
        """
        Partially update an order and, optionally, reconcile its items.

        Args:
            reconcile_items: Honour payload.items (PATCH). PUT passes False.

        Returns:
            {"order": order, "items": items}

        Raises:
            OrderNotFoundError: If the order doesn't exist
            InvalidReferenceError: Unknown customer or catalog item (checked
                before anything is written)
            OrderItemsUpdateError: Order fields saved but item writes failed
        """
        order_id_str = normalize_uuid(order_id)
        before = OrderService.get_order(order_id_str)

        changes = {
            key: value
            for key, value in payload.field_changes().items()
            if not (value is None and key in NON_NULLABLE_FIELDS)
        }
        requested_items = payload.items if reconcile_items else None

        if changes.get("customer_id"):
            OrderService.validate_customer(changes["customer_id"])
        if requested_items:
            OrderService.validate_catalog_items(requested_items)

        changes["updated_at"] = utc_now_iso()
        order = OrderService.write_fields(order_id_str, changes)
        AuditService.log_order_changes(order_id_str, user_id, before, changes)
        logger.info(f"Updated order {order_id_str}: {sorted(k for k in changes if k != 'updated_at')}")

        if requested_items is None:
            return {"order": order, "items": OrderService.get_order_items(order_id_str)}

        try:
            items, total = OrderService.reconcile_items(order_id_str, requested_items, user_id)
            order = OrderService.write_fields(order_id_str, {"total_amount": total, "updated_at": utc_now_iso()})
        except Exception as e:
            logger.error(f"Order {order_id_str} updated but items update failed: {e}")
            raise OrderItemsUpdateError(order, str(e))

        return {"order": order, "items": items}

    @staticmethod
    def reconcile_items(
        order_id: str,
        requested_items: list[OrderItemInput],
        user_id: str | UUID | None = None,
    ) -> tuple[list[dict[str, Any]], float]:
        """
        Apply the requested item list: deletes, then updates, then inserts.

        Returns:
            Tuple of (items re-read in created_at order, recomputed total)
        """
        stored = OrderService.get_order_items(order_id)
        plan = plan_item_changes(stored, requested_items)
        client = SupabaseClient.get_client()

        if plan.to_delete:
            ids = [str(row["id"]) for row in plan.to_delete]
            client.table(ITEMS_TABLE).delete().in_("id", ids).execute()
            for row in plan.to_delete:
                AuditService.log_item_change(order_id, user_id, AuditAction.ITEM_REMOVED, row, old_item=row)

        for stored_row, values in plan.to_update:
            if not changed_fields(stored_row, values):
                continue
            item_id = str(stored_row["id"])
            client.table(ITEMS_TABLE).update(values).eq("id", item_id).eq("order_id", order_id).execute()
            AuditService.log_item_change(
                order_id, user_id, AuditAction.ITEM_UPDATED, {**stored_row, **values}, old_item=stored_row
            )

        if plan.to_insert:
            rows = [{**values, "order_id": order_id} for values in plan.to_insert]
            response = client.table(ITEMS_TABLE).insert(rows).execute()
            for row in response.data or []:
                AuditService.log_item_change(order_id, user_id, AuditAction.ITEM_ADDED, row)

        logger.info(
            f"Reconciled items for order {order_id}: -{len(plan.to_delete)} "
            f"~{len(plan.to_update)} +{len(plan.to_insert)}"
        )

        items = OrderService.get_order_items(order_id)
        return items, order_total(items)

    # -------------------------------------------------------------------------
    # Items
    # -------------------------------------------------------------------------

    @staticmethod
    def add_item(
        order_id: str | UUID,
        item: OrderItemCreate,
        user_id: str | UUID | None = None,
    ) -> dict[str, Any]:
        """
        Add one line item and recompute the order total.

        Returns:
            {"item": item, "order": updated order}
        """
        order_id_str = normalize_uuid(order_id)
        OrderService.get_order(order_id_str)
        OrderService.validate_catalog_items([item])

        row = build_item_rows([item], order_id_str)[0]
        client = SupabaseClient.get_client()

        try:
            response = client.table(ITEMS_TABLE).insert(row).execute()
        except Exception as e:
            logger.error(f"Failed to add item to order {order_id_str}: {e}")
            raise DatabaseError("add order item", str(e))

        if not response.data:
            raise DatabaseError("add order item", "Insert returned no data")
        created = response.data[0]

        AuditService.log_item_change(order_id_str, user_id, AuditAction.ITEM_ADDED, created)
        order = OrderService.recalculate_total(order_id_str)
        return {"item": created, "order": order}

    @staticmethod
    def recalculate_total(order_id: str | UUID) -> dict[str, Any]:
        """Set total_amount to the sum of the order's item totals."""
        order_id_str = normalize_uuid(order_id)
        total = order_total(OrderService.get_order_items(order_id_str))
        return OrderService.write_fields(order_id_str, {"total_amount": total, "updated_at": utc_now_iso()})

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    @staticmethod
    def delete_order(order_id: str | UUID, user_id: str | UUID | None = None) -> None:
        """
        Delete an order and its items.

        The audit entry is written first; it may be removed with the order if
        the audit table cascades, which is acceptable.
        """
        order_id_str = normalize_uuid(order_id)
        order = OrderService.get_order(order_id_str)

        AuditService.log_change(AuditEntry(
            order_id=order_id_str,
            user_id=user_id,
            action=AuditAction.ORDER_DELETED,
            old_value={"order_number": order.get("order_number"), "status": order.get("status")},
            changes_summary=f"Order {order.get('order_number')} deleted",
        ))

        client = SupabaseClient.get_client()
        try:
            client.table(ITEMS_TABLE).delete().eq("order_id", order_id_str).execute()
            client.table(TABLE).delete().eq("id", order_id_str).execute()
        except Exception as e:
            logger.error(f"Failed to delete order {order_id_str}: {e}")
            raise DatabaseError("delete order", str(e))

        logger.info(f"Deleted order {order_id_str}")
