# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - user.py: Roles and user profile schemas
# - customer.py: Customer CRUD schemas
# - catalog.py: Catalog item schemas
# - order.py: Order, order item, status and priority schemas
# - audit.py: Order audit log actions and entries
# - invitation.py: User invitation schemas
# - task.py: Design/production task schemas
# - image.py: Image variant specs, production image and mockup records
#
# These models define the "contract" between API and clients.
# =============================================================================

from .user import (
    Role,
    SALES_ROLES,
    STAFF_ROLES,
    UserCreate,
    UserProfile,
    UserUpdate,
)
from .customer import CustomerCreate, CustomerUpdate
from .catalog import CatalogItemCreate, CatalogItemStatus, CatalogItemUpdate
from .order import (
    CLOSED_ORDER_STATUSES,
    OrderCreate,
    OrderItemCreate,
    OrderItemInput,
    OrderItemStatus,
    OrderPriority,
    OrderStatus,
    OrderUpdate,
    PaymentStatus,
)
from .audit import (
    ASSIGNMENT_ACTIONS,
    ITEM_ACTIONS,
    AuditAction,
    AuditEntry,
    AuditStats,
    ManualAuditEntryRequest,
)
from .invitation import InvitationAccept, InvitationCreate, InvitationStatus
from .task import (
    DesignTaskCreate,
    ProductionTaskCreate,
    TaskPriority,
    TaskStatus,
    TaskType,
    TaskUpdate,
)
from .image import (
    GALLERY_KEY,
    MOCKUP_VARIANT_SPECS,
    VARIANT_SPECS,
    CatalogMockup,
    ProductionImage,
    VariantName,
    VariantSpec,
)

__all__ = [
    # User
    "Role",
    "SALES_ROLES",
    "STAFF_ROLES",
    "UserCreate",
    "UserProfile",
    "UserUpdate",
    # Customer
    "CustomerCreate",
    "CustomerUpdate",
    # Catalog
    "CatalogItemCreate",
    "CatalogItemStatus",
    "CatalogItemUpdate",
    # Order
    "CLOSED_ORDER_STATUSES",
    "OrderCreate",
    "OrderItemCreate",
    "OrderItemInput",
    "OrderItemStatus",
    "OrderPriority",
    "OrderStatus",
    "OrderUpdate",
    "PaymentStatus",
    # Audit
    "ASSIGNMENT_ACTIONS",
    "ITEM_ACTIONS",
    "AuditAction",
    "AuditEntry",
    "AuditStats",
    "ManualAuditEntryRequest",
    # Invitation
    "InvitationAccept",
    "InvitationCreate",
    "InvitationStatus",
    # Task
    "DesignTaskCreate",
    "ProductionTaskCreate",
    "TaskPriority",
    "TaskStatus",
    "TaskType",
    "TaskUpdate",
    # Image
    "GALLERY_KEY",
    "MOCKUP_VARIANT_SPECS",
    "VARIANT_SPECS",
    "CatalogMockup",
    "ProductionImage",
    "VariantName",
    "VariantSpec",
]
