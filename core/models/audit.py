# =============================================================================
# core/models/audit.py - Order Audit Log Schemas
# =============================================================================
# Every meaningful change to an order is recorded in order_audit_log:
# who did it, what changed (field, old value, new value), and a short
# human-readable summary for the activity feed.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class AuditAction(str, Enum):
    """Known audit actions. Stored as their upper-case string value."""
    ORDER_CREATED = "ORDER_CREATED"
    ORDER_UPDATED = "ORDER_UPDATED"
    ORDER_DELETED = "ORDER_DELETED"
    STATUS_CHANGED = "STATUS_CHANGED"
    PRIORITY_CHANGED = "PRIORITY_CHANGED"

    DESIGNER_ASSIGNED = "DESIGNER_ASSIGNED"
    DESIGNER_UNASSIGNED = "DESIGNER_UNASSIGNED"
    MANUFACTURER_ASSIGNED = "MANUFACTURER_ASSIGNED"
    MANUFACTURER_UNASSIGNED = "MANUFACTURER_UNASSIGNED"
    SALESPERSON_ASSIGNED = "SALESPERSON_ASSIGNED"

    ITEM_ADDED = "ITEM_ADDED"
    ITEM_UPDATED = "ITEM_UPDATED"
    ITEM_REMOVED = "ITEM_REMOVED"

    CUSTOMER_UPDATED = "CUSTOMER_UPDATED"
    NOTES_UPDATED = "NOTES_UPDATED"

    PRODUCTION_STARTED = "PRODUCTION_STARTED"
    PRODUCTION_COMPLETED = "PRODUCTION_COMPLETED"
    QUALITY_CHECK_PASSED = "QUALITY_CHECK_PASSED"
    QUALITY_CHECK_FAILED = "QUALITY_CHECK_FAILED"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"

    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"
    REFUND_ISSUED = "REFUND_ISSUED"

    FILE_UPLOADED = "FILE_UPLOADED"
    FILE_DELETED = "FILE_DELETED"

    MESSAGE_SENT = "MESSAGE_SENT"
    EMAIL_SENT = "EMAIL_SENT"


# Actions counted together in audit stats
ASSIGNMENT_ACTIONS = frozenset({
    AuditAction.DESIGNER_ASSIGNED,
    AuditAction.DESIGNER_UNASSIGNED,
    AuditAction.MANUFACTURER_ASSIGNED,
    AuditAction.MANUFACTURER_UNASSIGNED,
    AuditAction.SALESPERSON_ASSIGNED,
})
ITEM_ACTIONS = frozenset({
    AuditAction.ITEM_ADDED,
    AuditAction.ITEM_UPDATED,
    AuditAction.ITEM_REMOVED,
})


class AuditEntry(BaseModel):
    """
    One change to record.

    old_value / new_value hold arbitrary JSON (status strings, ids, item dicts).
    """
    order_id: UUID
    user_id: UUID | None = None
    action: AuditAction
    entity_type: str = "order"
    entity_id: str | None = None
    field_name: str | None = None
    old_value: Any = None
    new_value: Any = None
    changes_summary: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class ManualAuditEntryRequest(BaseModel):
    """Admin request to add an entry by hand (e.g. an offline phone call)."""
    order_id: UUID
    action: AuditAction
    changes_summary: str = Field(..., min_length=1, max_length=1000)
    field_name: str | None = None
    old_value: Any = None
    new_value: Any = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class AuditStats(BaseModel):
    """Summary of an order's audit trail."""
    total_changes: int = 0
    status_changes: int = 0
    assignments: int = 0
    item_changes: int = 0
    last_activity: datetime | None = None
    unique_users: int = 0
