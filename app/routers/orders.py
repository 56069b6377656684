# =============================================================================
# app/routers/orders.py - Order Endpoints
# =============================================================================
# Order CRUD plus line items.
#
# Access:
# - read: every role; customers only see orders of their own customer records
# - create / PUT / add item: admin, salesperson
# - PATCH: admin, salesperson, designer, manufacturer
# - delete: admin
# =============================================================================

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from app.auth import AuthUser
from app.dependencies import AdminUser, AnyRoleUser, PaginationDep, SalesUser, StaffUser
from core.models.order import OrderCreate, OrderItemCreate, OrderPriority, OrderStatus, OrderUpdate
from core.models.user import Role
from core.services.customer_service import CustomerService
from core.services.order_service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter()

OrderId = Annotated[UUID, Path(description="Order UUID")]


def customer_scope(user: AuthUser) -> list[str] | None:
    """Customer ids a customer login may see (None = unrestricted)."""
    if user.is_admin or user.role is not Role.CUSTOMER:
        return None
    return CustomerService.customer_ids_for_user(user.id)


# =============================================================================
# Endpoints
# =============================================================================

@router.get("")
async def list_orders(
    user: AnyRoleUser,
    pagination: PaginationDep,
    status: Annotated[OrderStatus | None, Query(description="Filter by status")] = None,
    customer_id: Annotated[UUID | None, Query(description="Filter by customer")] = None,
    priority: Annotated[OrderPriority | None, Query(description="Filter by priority")] = None,
    search: Annotated[str | None, Query(description="Match order number or notes")] = None,
):
    """List orders, newest first."""
    orders, total = OrderService.list_orders(
        status=status.value if status else None,
        customer_id=str(customer_id) if customer_id else None,
        priority=priority.value if priority else None,
        search=search,
        page=pagination.page,
        limit=pagination.limit,
        customer_ids=customer_scope(user),
    )
    return {"orders": orders, "pagination": pagination.block(total)}


@router.get("/{order_id}")
async def get_order(order_id: OrderId, user: AnyRoleUser):
    """Get an order with its line items."""
    result = OrderService.get_order_with_items(order_id, customer_ids=customer_scope(user))
    return {"success": True, **result}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(request: OrderCreate, user: SalesUser):
    """
    Create an order with at least one line item.

    - order_number is generated when omitted
    - item total_price defaults to quantity * unit_price
    - total_amount defaults to the sum of item totals
    - a salesperson creating an order becomes its salesperson
    """
    result = OrderService.create_order(
        request,
        user_id=user.id,
        default_salesperson_id=user.id if user.role is Role.SALESPERSON else None,
    )
    return {"success": True, **result}


@router.put("/{order_id}")
async def replace_order_fields(order_id: OrderId, request: OrderUpdate, user: SalesUser):
    """Update order fields. Line items are not touched; use PATCH for those."""
    result = OrderService.update_order(order_id, request, user_id=user.id, reconcile_items=False)
    return {"success": True, **result}


@router.patch("/{order_id}")
async def update_order(order_id: OrderId, request: OrderUpdate, user: StaffUser):
    """
    Partially update an order.

    Accepts snake_case or camelCase field names. When `items` is sent, the
    stored items are reconciled against it:
    - stored items missing from the list are deleted
    - items whose `id` matches a stored item are updated
    - items without a known `id` are inserted

    total_amount is then recomputed from the items.
    """
    result = OrderService.update_order(order_id, request, user_id=user.id)
    return {"success": True, **result}


@router.delete("/{order_id}")
async def delete_order(order_id: OrderId, user: AdminUser):
    OrderService.delete_order(order_id, user_id=user.id)
    return {"success": True, "message": "Order deleted successfully"}


@router.get("/{order_id}/items")
async def list_order_items(order_id: OrderId, user: StaffUser):
    OrderService.get_order(order_id)
    items = OrderService.get_order_items(order_id)
    return {"success": True, "items": items}


@router.post("/{order_id}/items", status_code=status.HTTP_201_CREATED)
async def add_order_item(order_id: OrderId, request: OrderItemCreate, user: SalesUser):
    """Add one line item; the order total is recomputed."""
    result = OrderService.add_item(order_id, request, user_id=user.id)
    return {"success": True, **result}
