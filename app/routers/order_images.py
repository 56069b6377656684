# =============================================================================
# app/routers/order_images.py - Production Image Endpoints
# =============================================================================
# Progress photos attached to an order while it is being made.
# Mounted under /api/orders: /api/orders/{order_id}/images/production
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile, status

from app.auth import AuthUser, require_roles
from app.dependencies import StaffUser
from core.models.task import TaskType
from core.models.user import Role
from core.services.catalog_image_service import ImageUpload
from core.services.order_image_service import DEFAULT_STAGE, OrderImageService

router = APIRouter()

OrderId = Annotated[UUID, Path(description="Order UUID")]
ImageRemover = Annotated[AuthUser, Depends(require_roles(Role.MANUFACTURER, Role.SALESPERSON))]


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/{order_id}/images/production", status_code=status.HTTP_201_CREATED)
async def upload_production_image(
    order_id: OrderId,
    user: StaffUser,
    image: Annotated[UploadFile, File(description="JPEG, PNG or WebP, up to 10MB")],
    stage: Annotated[str, Form(max_length=50)] = DEFAULT_STAGE,
    caption: Annotated[str | None, Form(max_length=500)] = None,
    task_type: Annotated[TaskType | None, Form()] = None,
    task_id: Annotated[UUID | None, Form()] = None,
):
    """
    Upload a production progress photo.

    Photos over 2MB are downscaled to fit 1920x1920 and stored as JPEG.
    When task_id is given the photo is also added to that task.
    """
    upload = ImageUpload(
        filename=image.filename or "image",
        content_type=image.content_type,
        content=await image.read(),
    )
    record = OrderImageService.upload_production_image(
        order_id,
        upload,
        stage=stage,
        caption=caption,
        task_type=task_type,
        task_id=task_id,
        user_id=user.id,
    )
    return {"success": True, "image": record}


@router.get("/{order_id}/images/production")
async def list_production_images(order_id: OrderId, user: StaffUser):
    images = OrderImageService.list_production_images(order_id)
    return {"success": True, "images": images, "total": len(images)}


@router.delete("/{order_id}/images/production/{image_id}")
async def delete_production_image(
    order_id: OrderId,
    image_id: Annotated[UUID, Path(description="Production image UUID")],
    user: ImageRemover,
):
    record = OrderImageService.delete_production_image(order_id, image_id, user_id=user.id)
    return {"success": True, "deleted": record["id"]}
