# =============================================================================
# app/routers/audit.py - Order Audit Trail Endpoints
# =============================================================================
# Read the audit trail of an order, the recent activity feed, and let
# admins add entries by hand.
# =============================================================================

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from app.dependencies import AdminUser, SalesUser, StaffUser
from app.exceptions import BadRequestError, DatabaseError
from core.models.audit import AuditEntry, ManualAuditEntryRequest
from core.services.audit_service import (
    DEFAULT_ACTIVITY_HOURS,
    DEFAULT_ACTIVITY_LIMIT,
    DEFAULT_HISTORY_LIMIT,
    AuditService,
)
from core.services.order_service import OrderService
from lib.utils import is_valid_uuid

logger = logging.getLogger(__name__)

router = APIRouter()

OrderId = Annotated[UUID, Path(description="Order UUID")]


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/orders/{order_id}/history")
async def get_order_history(
    order_id: OrderId,
    user: StaffUser,
    limit: Annotated[int, Query(ge=1, le=500)] = DEFAULT_HISTORY_LIMIT,
):
    """Audit entries of an order, newest first."""
    history = AuditService.get_order_history(order_id, limit=limit)
    return {"order_id": str(order_id), "history": history, "total": len(history)}


@router.get("/orders/{order_id}/stats")
async def get_order_audit_stats(order_id: OrderId, user: StaffUser):
    stats = AuditService.get_order_stats(order_id)
    return {"order_id": str(order_id), "stats": stats.model_dump(mode="json")}


@router.get("/recent-activity")
async def get_recent_activity(
    user: SalesUser,
    hours: Annotated[int, Query(description="Look-back window (1-168)")] = DEFAULT_ACTIVITY_HOURS,
    limit: Annotated[int, Query(description="Max entries (1-200)")] = DEFAULT_ACTIVITY_LIMIT,
    order_ids: Annotated[str | None, Query(description="Comma-separated order UUIDs")] = None,
):
    """
    Audit entries across orders within the last `hours` hours.

    Out-of-range hours/limit values are clamped rather than rejected.
    """
    ids = None
    if order_ids:
        ids = [value.strip() for value in order_ids.split(",") if value.strip()]
        invalid = [value for value in ids if not is_valid_uuid(value)]
        if invalid:
            raise BadRequestError(
                f"Invalid order id(s): {', '.join(invalid)}",
                code="INVALID_ORDER_IDS",
                details={"order_ids": invalid},
            )

    activity = AuditService.get_recent_activity(hours_back=hours, limit=limit, order_ids=ids)
    return {"activity": activity, "total": len(activity)}


@router.post("/manual-entry", status_code=status.HTTP_201_CREATED)
async def create_manual_entry(request: ManualAuditEntryRequest, user: AdminUser):
    """Add an audit entry by hand (e.g. for an offline change)."""
    OrderService.get_order(request.order_id)

    entry = AuditService.log_change(AuditEntry(
        order_id=request.order_id,
        user_id=user.id,
        action=request.action,
        field_name=request.field_name,
        old_value=request.old_value,
        new_value=request.new_value,
        changes_summary=request.changes_summary,
        metadata={**request.metadata, "manual_entry": True},
    ))
    if entry is None:
        raise DatabaseError("create audit entry", "Insert failed")

    logger.info(f"Admin {user.id} added manual {request.action.value} entry to order {request.order_id}")
    return {"success": True, "entry": entry}
