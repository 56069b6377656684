# =============================================================================
# core/models/task.py - Design & Production Task Schemas
# =============================================================================
# Design tasks track artwork for an order (owned by a designer).
# Production tasks track manufacturing (owned by a manufacturer) and feed
# the manufacturing queue.
# =============================================================================

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskType(str, Enum):
    DESIGN = "design"
    PRODUCTION = "production"

    @property
    def table(self) -> str:
        return f"{self.value}_tasks"

    @property
    def assignee_column(self) -> str:
        return "designer_id" if self is TaskType.DESIGN else "manufacturer_id"


class TaskPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class DesignTaskCreate(BaseModel):
    order_id: UUID
    designer_id: UUID | None = None
    description: str | None = None
    requirements: str | None = None
    due_date: datetime | None = None
    notes: str | None = None


class ProductionTaskCreate(BaseModel):
    order_id: UUID
    manufacturer_id: UUID | None = None
    description: str | None = None
    priority: TaskPriority = TaskPriority.NORMAL
    due_date: datetime | None = None
    notes: str | None = None


class TaskUpdate(BaseModel):
    """
    Partial update shared by design and production tasks.

    `assignee_id` maps to designer_id or manufacturer_id depending on task type.
    """
    status: TaskStatus | None = None
    assignee_id: UUID | None = None
    priority: TaskPriority | None = None
    description: str | None = None
    due_date: datetime | None = None
    notes: str | None = Field(default=None, max_length=5000)
