# =============================================================================
# core/models/order.py - Order & Order Item Schemas
# =============================================================================
# These models define the API contract for order operations:
# - OrderCreate / OrderItemCreate: POST /orders
# - OrderUpdate / OrderItemInput: PUT and PATCH /orders/{id}
# - Enums for order, item, priority and payment states
#
# The web client historically sent camelCase keys on PATCH, so update models
# accept both spellings (e.g. `assignedDesignerId` or `assigned_designer_id`).
# Dumps always use the snake_case column names.
# =============================================================================

from datetime import date
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class OrderStatus(str, Enum):
    """
    Order lifecycle.

    Flow: draft -> pending_design -> design_in_progress -> design_review
          -> design_approved -> pending_production -> in_production -> completed
    Any state may move to cancelled.
    """
    DRAFT = "draft"
    PENDING_DESIGN = "pending_design"
    DESIGN_IN_PROGRESS = "design_in_progress"
    DESIGN_REVIEW = "design_review"
    DESIGN_APPROVED = "design_approved"
    PENDING_PRODUCTION = "pending_production"
    IN_PRODUCTION = "in_production"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses that count as "open" for dashboards
CLOSED_ORDER_STATUSES = (OrderStatus.COMPLETED, OrderStatus.CANCELLED)


class OrderPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class OrderItemStatus(str, Enum):
    PENDING = "pending"
    DESIGNING = "designing"
    APPROVED = "approved"
    IN_PRODUCTION = "in_production"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


def _either(snake: str, camel: str) -> AliasChoices:
    return AliasChoices(snake, camel)


# =============================================================================
# Order Items
# =============================================================================

class OrderItemCreate(BaseModel):
    """
    A line item submitted with a new order.

    total_price defaults to quantity * unit_price when omitted.
    """
    model_config = ConfigDict(populate_by_name=True)

    catalog_item_id: UUID | None = Field(default=None, validation_alias=_either("catalog_item_id", "catalogItemId"))
    product_name: str = Field(..., min_length=1, max_length=255, validation_alias=_either("product_name", "productName"))
    description: str | None = None
    quantity: int = Field(..., ge=1)
    unit_price: float = Field(..., ge=0, validation_alias=_either("unit_price", "unitPrice"))
    total_price: float | None = Field(default=None, ge=0, validation_alias=_either("total_price", "totalPrice"))
    color: str | None = None
    size: str | None = None
    fabric: str | None = None
    customization: str | None = None
    specifications: dict[str, Any] | None = None
    status: OrderItemStatus = OrderItemStatus.PENDING


class OrderItemInput(OrderItemCreate):
    """
    A line item in a PATCH request.

    Items with an `id` matching a stored item are updated; items without one
    (or with an unknown id) are inserted.
    """
    id: UUID | None = None


# =============================================================================
# Orders
# =============================================================================

class OrderCreate(BaseModel):
    """
    Schema for creating an order with its line items.

    Example:
        {
            "customer_id": "550e8400-e29b-41d4-a716-446655440000",
            "priority": "high",
            "items": [
                {"product_name": "Home Jersey", "quantity": 20, "unit_price": 42.5, "size": "M"}
            ]
        }
    """
    model_config = ConfigDict(populate_by_name=True)

    customer_id: UUID = Field(..., validation_alias=_either("customer_id", "customerId"))
    order_number: str | None = Field(default=None, max_length=100, validation_alias=_either("order_number", "orderNumber"))
    status: OrderStatus = OrderStatus.DRAFT
    priority: OrderPriority = OrderPriority.MEDIUM
    total_amount: float | None = Field(default=None, ge=0, validation_alias=_either("total_amount", "totalAmount"))
    notes: str | None = None
    internal_notes: str | None = Field(default=None, validation_alias=_either("internal_notes", "internalNotes"))
    customer_requirements: str | None = Field(default=None, validation_alias=_either("customer_requirements", "customerRequirements"))
    salesperson_id: UUID | None = Field(default=None, validation_alias=_either("salesperson_id", "salespersonId"))
    assigned_designer_id: UUID | None = Field(default=None, validation_alias=_either("assigned_designer_id", "assignedDesignerId"))
    assigned_manufacturer_id: UUID | None = Field(default=None, validation_alias=_either("assigned_manufacturer_id", "assignedManufacturerId"))
    delivery_address: str | None = Field(default=None, validation_alias=_either("delivery_address", "deliveryAddress"))
    delivery_instructions: str | None = Field(default=None, validation_alias=_either("delivery_instructions", "deliveryInstructions"))
    rush_order: bool = Field(default=False, validation_alias=_either("rush_order", "rushOrder"))
    estimated_delivery_date: date | None = Field(default=None, validation_alias=_either("estimated_delivery_date", "estimatedDeliveryDate"))
    logo_url: str | None = Field(default=None, validation_alias=_either("logo_url", "logoUrl"))
    company_name: str | None = Field(default=None, validation_alias=_either("company_name", "companyName"))
    metadata: dict[str, Any] = Field(default_factory=dict)
    items: list[OrderItemCreate] = Field(..., min_length=1, description="At least one line item")


class OrderUpdate(BaseModel):
    """
    Partial order update (PUT and PATCH).

    Only keys present in the request are written; sending null for an
    assignment field unassigns it. `items` is only honoured by PATCH.
    """
    model_config = ConfigDict(populate_by_name=True)

    order_number: str | None = Field(default=None, max_length=100, validation_alias=_either("order_number", "orderNumber"))
    customer_id: UUID | None = Field(default=None, validation_alias=_either("customer_id", "customerId"))
    status: OrderStatus | None = None
    priority: OrderPriority | None = None
    total_amount: float | None = Field(default=None, ge=0, validation_alias=_either("total_amount", "totalAmount"))
    payment_status: PaymentStatus | None = Field(default=None, validation_alias=_either("payment_status", "paymentStatus"))
    notes: str | None = None
    internal_notes: str | None = Field(default=None, validation_alias=_either("internal_notes", "internalNotes"))
    customer_requirements: str | None = Field(default=None, validation_alias=_either("customer_requirements", "customerRequirements"))
    salesperson_id: UUID | None = Field(default=None, validation_alias=_either("salesperson_id", "salespersonId"))
    assigned_designer_id: UUID | None = Field(default=None, validation_alias=_either("assigned_designer_id", "assignedDesignerId"))
    assigned_manufacturer_id: UUID | None = Field(default=None, validation_alias=_either("assigned_manufacturer_id", "assignedManufacturerId"))
    delivery_address: str | None = Field(default=None, validation_alias=_either("delivery_address", "deliveryAddress"))
    delivery_instructions: str | None = Field(default=None, validation_alias=_either("delivery_instructions", "deliveryInstructions"))
    rush_order: bool | None = Field(default=None, validation_alias=_either("rush_order", "rushOrder"))
    estimated_delivery_date: date | None = Field(default=None, validation_alias=_either("estimated_delivery_date", "estimatedDeliveryDate"))
    actual_delivery_date: date | None = Field(default=None, validation_alias=_either("actual_delivery_date", "actualDeliveryDate"))
    logo_url: str | None = Field(default=None, validation_alias=_either("logo_url", "logoUrl"))
    company_name: str | None = Field(default=None, validation_alias=_either("company_name", "companyName"))
    metadata: dict[str, Any] | None = None
    items: list[OrderItemInput] | None = None

    def field_changes(self) -> dict[str, Any]:
        """Column values to write, excluding `items`."""
        return self.model_dump(mode="json", exclude_unset=True, exclude={"items"})
