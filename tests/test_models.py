# =============================================================================
# tests/test_models.py - Pydantic Model Tests
# =============================================================================
# Unit tests for the request schemas to ensure:
# - Valid data is accepted and parsed correctly
# - Invalid data raises ValidationError
# - Default values work as expected
# - camelCase aliases are accepted where clients send them
#
# Run with: pytest tests/test_models.py -v
# =============================================================================

from uuid import uuid4

import pytest
from pydantic import ValidationError

from core.models import (
    CatalogItemCreate,
    CatalogItemStatus,
    CustomerCreate,
    InvitationAccept,
    InvitationCreate,
    ManualAuditEntryRequest,
    OrderCreate,
    OrderItemCreate,
    OrderPriority,
    OrderStatus,
    OrderUpdate,
    Role,
    TaskType,
    UserCreate,
    VARIANT_SPECS,
    VariantName,
)


# =============================================================================
# Order Models
# =============================================================================

class TestOrderCreate:
    """Tests for OrderCreate."""

    def test_defaults(self):
        order = OrderCreate(
            customer_id=uuid4(),
            items=[{"product_name": "Jersey", "quantity": 1, "unit_price": 10}],
        )

        assert order.status == OrderStatus.DRAFT
        assert order.priority == OrderPriority.MEDIUM
        assert order.rush_order is False
        assert order.total_amount is None
        assert order.order_number is None

    def test_requires_at_least_one_item(self):
        with pytest.raises(ValidationError):
            OrderCreate(customer_id=uuid4(), items=[])

    def test_requires_customer(self):
        with pytest.raises(ValidationError):
            OrderCreate(items=[{"product_name": "Jersey", "quantity": 1, "unit_price": 10}])

    def test_accepts_camel_case(self):
        customer_id = uuid4()
        order = OrderCreate.model_validate({
            "customerId": str(customer_id),
            "rushOrder": True,
            "items": [{"productName": "Jersey", "quantity": 2, "unitPrice": 9.5}],
        })

        assert order.customer_id == customer_id
        assert order.rush_order is True
        assert order.items[0].product_name == "Jersey"
        assert order.items[0].unit_price == 9.5


class TestOrderItemCreate:
    """Tests for OrderItemCreate validation."""

    @pytest.mark.parametrize("field,value", [
        ("quantity", 0),
        ("unit_price", -1),
        ("total_price", -0.01),
        ("product_name", ""),
    ])
    def test_rejects_invalid_values(self, field, value):
        data = {"product_name": "Jersey", "quantity": 1, "unit_price": 10, field: value}
        with pytest.raises(ValidationError):
            OrderItemCreate(**data)

    def test_rejects_non_uuid_catalog_item(self):
        with pytest.raises(ValidationError):
            OrderItemCreate(product_name="Jersey", quantity=1, unit_price=1, catalog_item_id="not-a-uuid")


class TestOrderUpdate:
    """Tests for OrderUpdate.field_changes."""

    def test_only_sent_fields_are_changes(self):
        update = OrderUpdate.model_validate({"status": "pending_design", "internalNotes": "call back"})

        assert update.field_changes() == {"status": "pending_design", "internal_notes": "call back"}

    def test_explicit_null_is_kept(self):
        """Sending null for an assignment unassigns it."""
        update = OrderUpdate.model_validate({"assignedDesignerId": None})

        assert update.field_changes() == {"assigned_designer_id": None}

    def test_items_are_not_field_changes(self):
        update = OrderUpdate.model_validate({
            "notes": "x",
            "items": [{"product_name": "Cap", "quantity": 1, "unit_price": 5}],
        })

        assert "items" not in update.field_changes()
        assert len(update.items) == 1

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            OrderUpdate(status="shipped")


# =============================================================================
# Other Models
# =============================================================================

class TestCustomerCreate:
    """Tests for CustomerCreate."""

    def test_country_default(self):
        customer = CustomerCreate(first_name="Ana", last_name="Lopez", email="ana@example.com")
        assert customer.country == "United States"

    def test_invalid_email_rejected(self):
        with pytest.raises(ValidationError):
            CustomerCreate(first_name="Ana", last_name="Lopez", email="not-an-email")


class TestCatalogItemCreate:
    """Tests for CatalogItemCreate defaults."""

    def test_defaults(self):
        item = CatalogItemCreate(name="Hoodie", category="Outerwear", sku="HD-1")

        assert item.sport == "All Around Item"
        assert item.base_price == 0
        assert item.unit_cost == 0
        assert item.status == CatalogItemStatus.ACTIVE
        assert item.eta_days == "7"

    def test_sku_required(self):
        with pytest.raises(ValidationError):
            CatalogItemCreate(name="Hoodie", category="Outerwear")


class TestRoleParsing:
    """Tests for Role.parse."""

    @pytest.mark.parametrize("raw,expected", [
        ("admin", Role.ADMIN),
        ("Designer", Role.DESIGNER),
        ("wizard", Role.CUSTOMER),
        (None, Role.CUSTOMER),
    ])
    def test_parse(self, raw, expected):
        assert Role.parse(raw) is expected


class TestUserAndInvitationModels:
    """Tests for account-related schemas."""

    def test_user_password_min_length(self):
        with pytest.raises(ValidationError):
            UserCreate(email="a@b.co", password="short", first_name="A", last_name="B")

    def test_invitation_role_default(self):
        invitation = InvitationCreate(email="new@threadcraft.example.com", first_name="N", last_name="U")
        assert invitation.role == Role.CUSTOMER

    def test_accept_password_min_length(self):
        with pytest.raises(ValidationError):
            InvitationAccept(password="1234567")


class TestManualAuditEntryRequest:
    """Tests for manual audit entries."""

    def test_unknown_action_rejected(self):
        with pytest.raises(ValidationError):
            ManualAuditEntryRequest(order_id=uuid4(), action="MADE_UP", changes_summary="x")

    def test_known_action_accepted(self):
        entry = ManualAuditEntryRequest(order_id=uuid4(), action="PAYMENT_RECEIVED", changes_summary="Paid")
        assert entry.action.value == "PAYMENT_RECEIVED"


class TestTaskAndImageConstants:
    """Tests for task type helpers and variant specs."""

    def test_task_type_tables(self):
        assert TaskType.DESIGN.table == "design_tasks"
        assert TaskType.DESIGN.assignee_column == "designer_id"
        assert TaskType.PRODUCTION.table == "production_tasks"
        assert TaskType.PRODUCTION.assignee_column == "manufacturer_id"

    def test_variant_specs(self):
        specs = {spec.name: (spec.size, spec.quality) for spec in VARIANT_SPECS}

        assert specs == {
            VariantName.THUMBNAIL: ((150, 150), 80),
            VariantName.MEDIUM: ((400, 400), 85),
            VariantName.LARGE: ((800, 800), 90),
            VariantName.ORIGINAL: (None, 95),
        }
