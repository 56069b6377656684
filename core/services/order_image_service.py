# =============================================================================
# core/services/order_image_service.py - Production Progress Photos
# =============================================================================
# Manufacturers and designers attach progress photos to an order. Files go to
# the uploads bucket under orders/{order_id}/production/; the metadata record
# is appended to orders.production_images (and to the task's progress_images
# when a task is named).
# =============================================================================

import logging
import re
import uuid
from typing import Any
from uuid import UUID

from app.config import settings
from app.exceptions import ResourceNotFoundError
from core.models.audit import AuditAction, AuditEntry
from core.models.image import ProductionImage
from core.models.task import TaskType
from core.services.audit_service import AuditService
from core.services.catalog_image_service import ImageUpload
from core.services.image_service import PRODUCTION_IMAGE_TYPES, ImageService
from core.services.order_service import OrderService
from core.services.storage_service import StorageService
from core.services.task_service import TaskService
from lib.utils import normalize_uuid, utc_now, utc_now_iso

logger = logging.getLogger(__name__)

DEFAULT_STAGE = "in_progress"


def _safe_stage(stage: str | None) -> str:
    cleaned = re.sub(r"[^a-z0-9_-]+", "-", (stage or DEFAULT_STAGE).lower()).strip("-")
    return cleaned or DEFAULT_STAGE


class OrderImageService:
    """Service for order production images."""

    @staticmethod
    def upload_production_image(
        order_id: str | UUID,
        upload: ImageUpload,
        stage: str | None = None,
        caption: str | None = None,
        task_type: TaskType | None = None,
        task_id: str | UUID | None = None,
        user_id: str | UUID | None = None,
    ) -> dict[str, Any]:
        """
        Store a production photo and record it on the order.

        Steps:
        1. Validate type/size and that the order (and task) exist
        2. Downscale photos over the resize threshold
        3. Upload to storage, then append the record to the order
           (the object is removed again if the order write fails)
        4. Append to the task's progress_images, if a task was named

        Returns:
            The stored image record
        """
        order_id_str = normalize_uuid(order_id)
        order = OrderService.get_order(order_id_str)

        ImageService.validate_upload(
            filename=upload.filename,
            content_type=upload.content_type,
            size=len(upload.content),
            allowed_types=PRODUCTION_IMAGE_TYPES,
            max_bytes=settings.max_image_size_bytes,
        )

        task_id_str = normalize_uuid(task_id) if task_id else None
        if task_id_str:
            TaskService.get_task(task_type or TaskType.PRODUCTION, task_id_str)

        processed = ImageService.prepare_production_image(
            upload.content, upload.filename, upload.content_type.lower()
        )

        image_id = str(uuid.uuid4())
        stage = _safe_stage(stage)
        filename = f"{utc_now().strftime('%Y-%m-%d')}_{stage}_{image_id[:8]}{processed.extension}"
        storage_path = f"orders/{order_id_str}/production/{filename}"
        bucket = settings.UPLOADS_BUCKET

        StorageService.upload_bytes(bucket, storage_path, processed.data, processed.content_type)
        url = StorageService.get_public_url(bucket, storage_path)

        record = ProductionImage(
            id=image_id,
            url=url,
            storage_path=storage_path,
            filename=filename,
            original_name=upload.filename,
            size=len(processed.data),
            mime_type=processed.content_type,
            caption=caption,
            stage=stage,
            task_type=(task_type or TaskType.PRODUCTION) if task_id_str else task_type,
            task_id=task_id_str,
            uploaded_by=user_id,
            uploaded_at=utc_now(),
        ).model_dump(mode="json")

        images = list(order.get("production_images") or [])
        images.append(record)
        try:
            OrderService.write_fields(order_id_str, {"production_images": images, "updated_at": utc_now_iso()})
        except Exception:
            logger.warning(f"Order {order_id_str} update failed; removing uploaded image {storage_path}")
            StorageService.delete_files(bucket, [storage_path])
            raise

        if task_id_str:
            try:
                TaskService.append_progress_image(task_type or TaskType.PRODUCTION, task_id_str, record)
            except Exception as e:
                logger.error(f"Image {image_id} saved on order but not on task {task_id_str}: {e}")

        AuditService.log_change(AuditEntry(
            order_id=order_id_str,
            user_id=user_id,
            action=AuditAction.FILE_UPLOADED,
            entity_type="production_image",
            entity_id=image_id,
            new_value={"filename": filename, "stage": stage, "url": url},
            changes_summary=f"Production image uploaded ({stage})",
        ))

        logger.info(f"Uploaded production image {image_id} for order {order_id_str} ({record['size']} bytes)")
        return record

    @staticmethod
    def list_production_images(order_id: str | UUID) -> list[dict[str, Any]]:
        """Production images of an order, newest first."""
        order = OrderService.get_order(order_id)
        images = list(order.get("production_images") or [])
        return sorted(images, key=lambda image: image.get("uploaded_at") or "", reverse=True)

    @staticmethod
    def delete_production_image(
        order_id: str | UUID,
        image_id: str | UUID,
        user_id: str | UUID | None = None,
    ) -> dict[str, Any]:
        """
        Remove a production image record and its storage object.

        Raises:
            ResourceNotFoundError: If the order has no image with this id
        """
        order_id_str = normalize_uuid(order_id)
        image_id_str = normalize_uuid(image_id)
        order = OrderService.get_order(order_id_str)

        images = list(order.get("production_images") or [])
        record = next((image for image in images if str(image.get("id")) == image_id_str), None)
        if record is None:
            raise ResourceNotFoundError("production image", image_id_str)

        remaining = [image for image in images if image is not record]
        OrderService.write_fields(order_id_str, {"production_images": remaining, "updated_at": utc_now_iso()})

        bucket = settings.UPLOADS_BUCKET
        path = record.get("storage_path") or StorageService.path_from_public_url(bucket, record.get("url", ""))
        if path and not StorageService.delete_files(bucket, [path]):
            logger.warning(f"Could not remove storage object {bucket}/{path}")

        AuditService.log_change(AuditEntry(
            order_id=order_id_str,
            user_id=user_id,
            action=AuditAction.FILE_DELETED,
            entity_type="production_image",
            entity_id=image_id_str,
            old_value={"filename": record.get("filename"), "stage": record.get("stage")},
            changes_summary="Production image deleted",
        ))

        logger.info(f"Deleted production image {image_id_str} from order {order_id_str}")
        return record
