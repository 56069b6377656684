# =============================================================================
# core/services/audit_service.py - Order Audit Trail
# =============================================================================
# Records and queries order_audit_log entries.
#
# Writing an audit entry must never break the operation being audited, so
# every log_* method swallows database errors (logging them) and returns None
# on failure. Read methods raise DatabaseError like any other service.
#
# Usage:
#   from core.services.audit_service import AuditService
#   AuditService.log_status_change(order_id, user_id, "draft", "pending_design")
# =============================================================================

import logging
from datetime import timedelta
from typing import Any
from uuid import UUID

from app.exceptions import DatabaseError
from core.models.audit import (
    ASSIGNMENT_ACTIONS,
    ITEM_ACTIONS,
    AuditAction,
    AuditEntry,
    AuditStats,
)
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, parse_timestamp, utc_now, utc_now_iso

logger = logging.getLogger(__name__)

TABLE = "order_audit_log"

DEFAULT_HISTORY_LIMIT = 50
DEFAULT_ACTIVITY_HOURS = 24
MAX_ACTIVITY_HOURS = 168
DEFAULT_ACTIVITY_LIMIT = 100
MAX_ACTIVITY_LIMIT = 200

# Assignment field -> (assigned action, unassigned action)
ASSIGNMENT_FIELDS: dict[str, tuple[AuditAction, AuditAction]] = {
    "assigned_designer_id": (AuditAction.DESIGNER_ASSIGNED, AuditAction.DESIGNER_UNASSIGNED),
    "assigned_manufacturer_id": (AuditAction.MANUFACTURER_ASSIGNED, AuditAction.MANUFACTURER_UNASSIGNED),
    "salesperson_id": (AuditAction.SALESPERSON_ASSIGNED, AuditAction.SALESPERSON_ASSIGNED),
}


def _entry_row(entry: AuditEntry) -> dict[str, Any]:
    row = entry.model_dump(mode="json")
    row["timestamp"] = utc_now_iso()
    return row


class AuditService:
    """
    Service for the order audit trail.

    All methods are static; the database client is the shared singleton.
    """

    # -------------------------------------------------------------------------
    # Writes (never raise)
    # -------------------------------------------------------------------------

    @staticmethod
    def log_change(entry: AuditEntry) -> dict[str, Any] | None:
        """
        Insert one audit entry.

        Returns:
            The inserted row, or None if the insert failed
        """
        try:
            client = SupabaseClient.get_client()
            response = client.table(TABLE).insert(_entry_row(entry)).execute()
            if response.data:
                logger.debug(f"Audit {entry.action.value} for order {entry.order_id}")
                return response.data[0]
            return None
        except Exception as e:
            logger.error(f"Failed to write audit entry {entry.action.value} for order {entry.order_id}: {e}")
            return None

    @staticmethod
    def log_bulk_changes(entries: list[AuditEntry]) -> list[dict[str, Any]]:
        """
        Insert several audit entries in one request.

        Returns:
            Inserted rows (empty list on failure)
        """
        if not entries:
            return []
        try:
            client = SupabaseClient.get_client()
            response = client.table(TABLE).insert([_entry_row(e) for e in entries]).execute()
            return response.data or []
        except Exception as e:
            logger.error(f"Failed to write {len(entries)} audit entries: {e}")
            return []

    @staticmethod
    def log_status_change(
        order_id: str | UUID,
        user_id: str | UUID | None,
        old_status: str | None,
        new_status: str,
        reason: str | None = None,
    ) -> dict[str, Any] | None:
        summary = f"Status changed from {old_status or 'none'} to {new_status}"
        if reason:
            summary += f" ({reason})"
        return AuditService.log_change(AuditEntry(
            order_id=order_id,
            user_id=user_id,
            action=AuditAction.STATUS_CHANGED,
            field_name="status",
            old_value=old_status,
            new_value=new_status,
            changes_summary=summary,
        ))

    @staticmethod
    def log_assignment(
        order_id: str | UUID,
        user_id: str | UUID | None,
        field_name: str,
        old_assignee: str | None,
        new_assignee: str | None,
    ) -> dict[str, Any] | None:
        """
        Record an assignment change for designer, manufacturer or salesperson.

        Clearing the field is recorded as *_UNASSIGNED.
        """
        assigned, unassigned = ASSIGNMENT_FIELDS[field_name]
        role = field_name.replace("assigned_", "").replace("_id", "")
        if new_assignee:
            action = assigned
            summary = f"{role.capitalize()} assigned"
        else:
            action = unassigned
            summary = f"{role.capitalize()} unassigned"
        return AuditService.log_change(AuditEntry(
            order_id=order_id,
            user_id=user_id,
            action=action,
            field_name=field_name,
            old_value=old_assignee,
            new_value=new_assignee,
            changes_summary=summary,
        ))

    @staticmethod
    def log_item_change(
        order_id: str | UUID,
        user_id: str | UUID | None,
        action: AuditAction,
        item: dict[str, Any],
        old_item: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        verb = {
            AuditAction.ITEM_ADDED: "added",
            AuditAction.ITEM_UPDATED: "updated",
            AuditAction.ITEM_REMOVED: "removed",
        }.get(action, action.value.lower())
        name = item.get("product_name") or "item"
        return AuditService.log_change(AuditEntry(
            order_id=order_id,
            user_id=user_id,
            action=action,
            entity_type="order_item",
            entity_id=str(item["id"]) if item.get("id") else None,
            old_value=old_item,
            new_value=None if action == AuditAction.ITEM_REMOVED else item,
            changes_summary=f"Item {verb}: {name}",
        ))

    @staticmethod
    def log_field_update(
        order_id: str | UUID,
        user_id: str | UUID | None,
        field_name: str,
        old_value: Any,
        new_value: Any,
        action: AuditAction = AuditAction.ORDER_UPDATED,
    ) -> dict[str, Any] | None:
        return AuditService.log_change(AuditEntry(
            order_id=order_id,
            user_id=user_id,
            action=action,
            field_name=field_name,
            old_value=old_value,
            new_value=new_value,
            changes_summary=f"{field_name.replace('_', ' ').capitalize()} updated",
        ))

    @staticmethod
    def log_order_changes(
        order_id: str | UUID,
        user_id: str | UUID | None,
        before: dict[str, Any],
        changes: dict[str, Any],
    ) -> None:
        """
        Record one entry per changed order field.

        Status, priority, notes and assignments get their specific actions;
        everything else is ORDER_UPDATED. Unchanged values are skipped.
        """
        for field_name, new_value in changes.items():
            if field_name == "updated_at":
                continue
            old_value = before.get(field_name)
            if old_value == new_value or (
                old_value is not None and new_value is not None and str(old_value) == str(new_value)
            ):
                continue

            if field_name == "status":
                AuditService.log_status_change(order_id, user_id, old_value, new_value)
            elif field_name in ASSIGNMENT_FIELDS:
                AuditService.log_assignment(order_id, user_id, field_name, old_value, new_value)
            elif field_name == "priority":
                AuditService.log_field_update(
                    order_id, user_id, field_name, old_value, new_value, AuditAction.PRIORITY_CHANGED
                )
            elif field_name in ("notes", "internal_notes"):
                AuditService.log_field_update(
                    order_id, user_id, field_name, old_value, new_value, AuditAction.NOTES_UPDATED
                )
            else:
                AuditService.log_field_update(order_id, user_id, field_name, old_value, new_value)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @staticmethod
    def get_order_history(order_id: str | UUID, limit: int = DEFAULT_HISTORY_LIMIT) -> list[dict[str, Any]]:
        """Audit entries for an order, newest first."""
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table(TABLE)
                .select("*")
                .eq("order_id", normalize_uuid(order_id))
                .order("timestamp", desc=True)
                .limit(limit)
                .execute()
            )
            return response.data or []
        except Exception as e:
            logger.error(f"Failed to fetch audit history for order {order_id}: {e}")
            raise DatabaseError("fetch audit history", str(e))

    @staticmethod
    def get_recent_activity(
        hours_back: int = DEFAULT_ACTIVITY_HOURS,
        limit: int = DEFAULT_ACTIVITY_LIMIT,
        order_ids: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        """
        Audit entries across orders within the last `hours_back` hours.

        hours_back is clamped to 1..168 and limit to 1..200.
        """
        hours_back = max(1, min(hours_back, MAX_ACTIVITY_HOURS))
        limit = max(1, min(limit, MAX_ACTIVITY_LIMIT))
        since = (utc_now() - timedelta(hours=hours_back)).isoformat()

        client = SupabaseClient.get_client()
        try:
            query = client.table(TABLE).select("*").gte("timestamp", since)
            if order_ids:
                query = query.in_("order_id", [normalize_uuid(o) for o in order_ids])
            response = query.order("timestamp", desc=True).limit(limit).execute()
            return response.data or []
        except Exception as e:
            logger.error(f"Failed to fetch recent activity: {e}")
            raise DatabaseError("fetch recent activity", str(e))

    @staticmethod
    def get_order_stats(order_id: str | UUID) -> AuditStats:
        """Counts over an order's whole audit trail."""
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table(TABLE)
                .select("action, user_id, timestamp")
                .eq("order_id", normalize_uuid(order_id))
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to fetch audit stats for order {order_id}: {e}")
            raise DatabaseError("fetch audit stats", str(e))

        return AuditService.summarize(response.data or [])

    @staticmethod
    def summarize(entries: list[dict[str, Any]]) -> AuditStats:
        """Build AuditStats from raw audit rows."""
        stats = AuditStats(total_changes=len(entries))
        users: set[str] = set()
        timestamps = []

        for entry in entries:
            action = entry.get("action")
            if action == AuditAction.STATUS_CHANGED.value:
                stats.status_changes += 1
            elif action in {a.value for a in ASSIGNMENT_ACTIONS}:
                stats.assignments += 1
            elif action in {a.value for a in ITEM_ACTIONS}:
                stats.item_changes += 1
            if entry.get("user_id"):
                users.add(str(entry["user_id"]))
            if entry.get("timestamp"):
                timestamps.append(parse_timestamp(entry["timestamp"]))

        stats.unique_users = len(users)
        stats.last_activity = max(timestamps) if timestamps else None
        return stats
