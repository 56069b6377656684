# =============================================================================
# core/services/task_service.py - Design & Production Tasks
# =============================================================================
# Design and production tasks share one shape, differing only in table and
# assignee column (designer_id vs manufacturer_id). TaskType carries both.
#
# The manufacturing queue is the list of open production tasks ordered by
# priority (urgent first) then due date (earliest first, undated last).
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import DatabaseError, InvalidReferenceError, ResourceNotFoundError
from core.models.audit import AuditAction, AuditEntry
from core.models.task import (
    DesignTaskCreate,
    ProductionTaskCreate,
    TaskPriority,
    TaskStatus,
    TaskType,
    TaskUpdate,
)
from core.services.audit_service import AuditService
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now_iso

logger = logging.getLogger(__name__)

PRIORITY_RANK = {
    TaskPriority.URGENT.value: 0,
    TaskPriority.HIGH.value: 1,
    TaskPriority.NORMAL.value: 2,
    TaskPriority.LOW.value: 3,
}
QUEUE_STATUSES = [TaskStatus.PENDING.value, TaskStatus.IN_PROGRESS.value]


def queue_sort_key(task: dict[str, Any]) -> tuple:
    """Sort key for the manufacturing queue."""
    rank = PRIORITY_RANK.get(task.get("priority") or TaskPriority.NORMAL.value, len(PRIORITY_RANK))
    due = task.get("due_date")
    return (rank, due is None, due or "", task.get("created_at") or "")


class TaskService:
    """Service for design/production task operations."""

    @staticmethod
    def list_tasks(
        task_type: TaskType,
        status: TaskStatus | None = None,
        assignee_id: str | UUID | None = None,
        order_id: str | UUID | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[dict[str, Any]], int]:
        client = SupabaseClient.get_client()
        offset = (page - 1) * limit

        try:
            query = client.table(task_type.table).select("*", count="exact")
            if status:
                query = query.eq("status", status.value)
            if assignee_id:
                query = query.eq(task_type.assignee_column, normalize_uuid(assignee_id))
            if order_id:
                query = query.eq("order_id", normalize_uuid(order_id))
            response = (
                query.order("created_at", desc=True)
                .range(offset, offset + limit - 1)
                .execute()
            )
            tasks = response.data or []
            total = response.count if response.count is not None else len(tasks)
            return tasks, total

        except Exception as e:
            logger.error(f"Failed to list {task_type.value} tasks: {e}")
            raise DatabaseError(f"list {task_type.value} tasks", str(e))

    @staticmethod
    def get_task(
        task_type: TaskType,
        task_id: str | UUID,
        assignee_id: str | UUID | None = None,
    ) -> dict[str, Any]:
        """
        Get a task by ID.

        Args:
            assignee_id: If provided, the task must be assigned to this user

        Raises:
            ResourceNotFoundError: If missing or assigned to someone else
        """
        task = SupabaseClient.fetch_by_id(task_type.table, task_id)
        if not task:
            raise ResourceNotFoundError(f"{task_type.value} task", str(task_id))
        if assignee_id and str(task.get(task_type.assignee_column)) != normalize_uuid(assignee_id):
            raise ResourceNotFoundError(f"{task_type.value} task", str(task_id))
        return task

    @staticmethod
    def create_task(
        task_type: TaskType,
        payload: DesignTaskCreate | ProductionTaskCreate,
    ) -> dict[str, Any]:
        """
        Create a task for an existing order.

        Raises:
            InvalidReferenceError: If the order doesn't exist
        """
        if not SupabaseClient.exists("orders", payload.order_id):
            raise InvalidReferenceError("order", str(payload.order_id), "order_id")

        data = payload.model_dump(mode="json")
        data["status"] = TaskStatus.PENDING.value
        client = SupabaseClient.get_client()

        try:
            response = client.table(task_type.table).insert(data).execute()
        except Exception as e:
            logger.error(f"Failed to create {task_type.value} task: {e}")
            raise DatabaseError(f"create {task_type.value} task", str(e))

        if not response.data:
            raise DatabaseError(f"create {task_type.value} task", "Insert returned no data")

        task = response.data[0]
        logger.info(f"Created {task_type.value} task {task['id']} for order {data['order_id']}")
        return task

    @staticmethod
    def update_task(
        task_type: TaskType,
        task_id: str | UUID,
        payload: TaskUpdate,
        user_id: str | UUID | None = None,
        restrict_to_assignee: bool = False,
    ) -> dict[str, Any]:
        """
        Partially update a task.

        Status transitions stamp timestamps:
        - production in_progress -> start_date (if unset)
        - completed -> completed_at (design) / completed_date (production)

        Args:
            restrict_to_assignee: Designers/manufacturers may only update
                their own tasks
        """
        task_id_str = normalize_uuid(task_id)
        task = TaskService.get_task(
            task_type, task_id_str, assignee_id=user_id if restrict_to_assignee else None
        )

        changes = payload.model_dump(mode="json", exclude_unset=True)
        if "assignee_id" in changes:
            changes[task_type.assignee_column] = changes.pop("assignee_id")
        if task_type is TaskType.DESIGN:
            changes.pop("priority", None)

        now = utc_now_iso()
        new_status = changes.get("status")
        if new_status == TaskStatus.COMPLETED.value:
            changes["completed_at" if task_type is TaskType.DESIGN else "completed_date"] = now
        if (
            task_type is TaskType.PRODUCTION
            and new_status == TaskStatus.IN_PROGRESS.value
            and not task.get("start_date")
        ):
            changes["start_date"] = now
        changes["updated_at"] = now

        client = SupabaseClient.get_client()
        try:
            response = client.table(task_type.table).update(changes).eq("id", task_id_str).execute()
        except Exception as e:
            logger.error(f"Failed to update {task_type.value} task {task_id_str}: {e}")
            raise DatabaseError(f"update {task_type.value} task", str(e))

        updated = response.data[0] if response.data else {**task, **changes}

        if task_type is TaskType.PRODUCTION and new_status and new_status != task.get("status"):
            TaskService._audit_production_status(updated, user_id, new_status)

        logger.info(f"Updated {task_type.value} task {task_id_str}: {sorted(k for k in changes if k != 'updated_at')}")
        return updated

    @staticmethod
    def _audit_production_status(task: dict[str, Any], user_id: str | UUID | None, status: str) -> None:
        action = {
            TaskStatus.IN_PROGRESS.value: AuditAction.PRODUCTION_STARTED,
            TaskStatus.COMPLETED.value: AuditAction.PRODUCTION_COMPLETED,
        }.get(status)
        if action is None or not task.get("order_id"):
            return
        AuditService.log_change(AuditEntry(
            order_id=task["order_id"],
            user_id=user_id,
            action=action,
            entity_type="production_task",
            entity_id=str(task["id"]),
            field_name="status",
            new_value=status,
            changes_summary=f"Production task {status.replace('_', ' ')}",
        ))

    @staticmethod
    def manufacturing_queue(manufacturer_id: str | UUID | None = None) -> list[dict[str, Any]]:
        """Open production tasks in work order."""
        client = SupabaseClient.get_client()

        try:
            query = (
                client.table(TaskType.PRODUCTION.table)
                .select("*")
                .in_("status", QUEUE_STATUSES)
            )
            if manufacturer_id:
                query = query.eq("manufacturer_id", normalize_uuid(manufacturer_id))
            response = query.execute()
        except Exception as e:
            logger.error(f"Failed to load manufacturing queue: {e}")
            raise DatabaseError("load manufacturing queue", str(e))

        tasks = sorted(response.data or [], key=queue_sort_key)
        return [{**task, "queue_position": position} for position, task in enumerate(tasks, start=1)]

    @staticmethod
    def append_progress_image(task_type: TaskType, task_id: str, record: dict[str, Any]) -> None:
        """Append an image record to a task's progress_images list."""
        task = TaskService.get_task(task_type, task_id)
        images = list(task.get("progress_images") or [])
        images.append(record)

        client = SupabaseClient.get_client()
        client.table(task_type.table).update(
            {"progress_images": images, "updated_at": utc_now_iso()}
        ).eq("id", normalize_uuid(task_id)).execute()
