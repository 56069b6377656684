# =============================================================================
# app/routers/tasks.py - Design & Production Task Endpoints
# =============================================================================
# Three routers, mounted separately in main.py:
# - design_router        -> /api/design-tasks
# - production_router    -> /api/production-tasks
# - manufacturing_router -> /api/manufacturing
#
# Designers and manufacturers only see (and update) tasks assigned to them.
# =============================================================================

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status

from app.auth import AuthUser, require_roles
from app.dependencies import PaginationDep, SalesUser
from core.models.task import DesignTaskCreate, ProductionTaskCreate, TaskStatus, TaskType, TaskUpdate
from core.models.user import Role
from core.services.task_service import TaskService

logger = logging.getLogger(__name__)

design_router = APIRouter()
production_router = APIRouter()
manufacturing_router = APIRouter()

TaskId = Annotated[UUID, Path(description="Task UUID")]
DesignUser = Annotated[AuthUser, Depends(require_roles(Role.SALESPERSON, Role.DESIGNER))]
ProductionUser = Annotated[AuthUser, Depends(require_roles(Role.SALESPERSON, Role.MANUFACTURER))]
QueueUser = Annotated[AuthUser, Depends(require_roles(Role.MANUFACTURER))]


def _own_tasks_only(user: AuthUser, assignee_role: Role) -> bool:
    return not user.is_admin and user.role is assignee_role


def _list(
    task_type: TaskType,
    assignee_role: Role,
    user: AuthUser,
    pagination,
    status_filter: TaskStatus | None,
    assignee_id: UUID | None,
    order_id: UUID | None,
) -> dict:
    if _own_tasks_only(user, assignee_role):
        assignee_id = user.id
    tasks, total = TaskService.list_tasks(
        task_type,
        status=status_filter,
        assignee_id=assignee_id,
        order_id=order_id,
        page=pagination.page,
        limit=pagination.limit,
    )
    return {"tasks": tasks, "pagination": pagination.block(total)}


# =============================================================================
# Design Tasks
# =============================================================================

@design_router.get("")
async def list_design_tasks(
    user: DesignUser,
    pagination: PaginationDep,
    status: Annotated[TaskStatus | None, Query()] = None,
    designer_id: Annotated[UUID | None, Query()] = None,
    order_id: Annotated[UUID | None, Query()] = None,
):
    return _list(TaskType.DESIGN, Role.DESIGNER, user, pagination, status, designer_id, order_id)


@design_router.post("", status_code=status.HTTP_201_CREATED)
async def create_design_task(request: DesignTaskCreate, user: SalesUser):
    task = TaskService.create_task(TaskType.DESIGN, request)
    return {"success": True, "task": task}


@design_router.patch("/{task_id}")
async def update_design_task(task_id: TaskId, request: TaskUpdate, user: DesignUser):
    """Update a design task. Status `completed` stamps completed_at."""
    task = TaskService.update_task(
        TaskType.DESIGN,
        task_id,
        request,
        user_id=user.id,
        restrict_to_assignee=_own_tasks_only(user, Role.DESIGNER),
    )
    return {"success": True, "task": task}


# =============================================================================
# Production Tasks
# =============================================================================

@production_router.get("")
async def list_production_tasks(
    user: ProductionUser,
    pagination: PaginationDep,
    status: Annotated[TaskStatus | None, Query()] = None,
    manufacturer_id: Annotated[UUID | None, Query()] = None,
    order_id: Annotated[UUID | None, Query()] = None,
):
    return _list(TaskType.PRODUCTION, Role.MANUFACTURER, user, pagination, status, manufacturer_id, order_id)


@production_router.post("", status_code=status.HTTP_201_CREATED)
async def create_production_task(request: ProductionTaskCreate, user: SalesUser):
    task = TaskService.create_task(TaskType.PRODUCTION, request)
    return {"success": True, "task": task}


@production_router.patch("/{task_id}")
async def update_production_task(task_id: TaskId, request: TaskUpdate, user: ProductionUser):
    """
    Update a production task.

    Status `in_progress` stamps start_date (first time only); `completed`
    stamps completed_date. Both are recorded in the order's audit trail.
    """
    task = TaskService.update_task(
        TaskType.PRODUCTION,
        task_id,
        request,
        user_id=user.id,
        restrict_to_assignee=_own_tasks_only(user, Role.MANUFACTURER),
    )
    return {"success": True, "task": task}


# =============================================================================
# Manufacturing Queue
# =============================================================================

@manufacturing_router.get("/queue")
async def get_manufacturing_queue(user: QueueUser):
    """Open production tasks, most urgent first, then by due date."""
    manufacturer_id = user.id if _own_tasks_only(user, Role.MANUFACTURER) else None
    queue = TaskService.manufacturing_queue(manufacturer_id)
    return {"queue": queue, "total": len(queue)}
