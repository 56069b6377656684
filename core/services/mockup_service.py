# =============================================================================
# core/services/mockup_service.py - Catalog Design Mockups
# =============================================================================
# Designers and sales staff attach design mockups (renders, flat lays, photos
# of samples) to a catalog item. Each upload is stored in the uploads bucket
# as the untouched original plus large/medium/thumbnail JPEGs under
# catalog/{catalog_item_id}/mockups/, and recorded as a product_mockups row.
#
# Storage objects are removed again when any upload or the row insert fails.
# =============================================================================

import logging
import secrets
from typing import Any
from uuid import UUID

from app.config import settings
from app.exceptions import DatabaseError
from core.models.image import DEFAULT_MOCKUP_TYPE, DEFAULT_VIEW_ANGLE, CatalogMockup, VariantName
from core.services.catalog_image_service import ImageUpload
from core.services.catalog_service import CatalogService
from core.services.image_service import MIME_EXTENSIONS, ImageService
from core.services.storage_service import StorageService
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utc_now

logger = logging.getLogger(__name__)

TABLE = "product_mockups"


def _remove_uploaded(bucket: str, paths: list[str]) -> None:
    if paths and not StorageService.delete_files(bucket, paths):
        logger.error(f"Mockup cleanup failed, orphaned objects in {bucket}: {paths}")


class MockupService:
    """Service for catalog item design mockups."""

    @staticmethod
    def upload_mockup(
        catalog_item_id: str | UUID,
        upload: ImageUpload,
        mockup_type: str | None = None,
        view_angle: str | None = None,
        is_primary: bool = False,
        designer_notes: str | None = None,
        uploaded_by: str | None = None,
    ) -> dict[str, Any]:
        """
        Store a mockup and record it.

        Steps:
        1. Check that the catalog item exists and validate type/size
        2. Render the JPEG variants (before anything is uploaded)
        3. Upload original + variants; on failure remove what was uploaded
        4. Clear is_primary on the item's other mockups when this one is primary
        5. Insert the row with display_order = current mockup count

        Returns:
            The inserted product_mockups row

        Raises:
            CatalogItemNotFoundError: If the catalog item doesn't exist
            InvalidFileTypeError / FileTooLargeError / ImageProcessingError
            StorageUploadError: If an object upload fails
            DatabaseError: If the row can't be written
        """
        item_id = normalize_uuid(catalog_item_id)
        CatalogService.get_item(item_id)

        content_type = (upload.content_type or "").lower()
        ImageService.validate_upload(
            filename=upload.filename,
            content_type=content_type,
            size=len(upload.content),
            allowed_types=settings.allowed_image_types_list,
            max_bytes=settings.max_image_size_bytes,
        )
        variants = ImageService.generate_mockup_variants(upload.content, upload.filename)

        bucket = settings.UPLOADS_BUCKET
        now = utc_now()
        base = f"catalog/{item_id}/mockups/{now.strftime('%Y-%m-%d')}_{secrets.token_hex(8)}"

        files = [(f"{base}_original{MIME_EXTENSIONS.get(content_type, '.jpg')}", upload.content, content_type)]
        files += [(f"{base}_{v.variant.value}{v.extension}", v.data, v.content_type) for v in variants]

        uploaded: list[str] = []
        urls: list[str] = []
        try:
            for path, data, file_type in files:
                StorageService.upload_bytes(bucket, path, data, file_type)
                uploaded.append(path)
                urls.append(StorageService.get_public_url(bucket, path))
        except Exception:
            logger.warning(f"Mockup upload failed for catalog item {item_id}; removing {len(uploaded)} object(s)")
            _remove_uploaded(bucket, uploaded)
            raise

        by_variant = dict(zip(["original"] + [v.variant.value for v in variants], urls))

        client = SupabaseClient.get_client()
        try:
            if is_primary:
                client.table(TABLE).update({"is_primary": False}).eq("catalog_item_id", item_id).execute()

            existing = client.table(TABLE).select("id", count="exact").eq("catalog_item_id", item_id).limit(1).execute()

            record = CatalogMockup(
                catalog_item_id=item_id,
                image_url=by_variant[VariantName.LARGE.value],
                medium_url=by_variant[VariantName.MEDIUM.value],
                thumbnail_url=by_variant[VariantName.THUMBNAIL.value],
                original_url=by_variant["original"],
                storage_paths=uploaded,
                mockup_type=mockup_type or DEFAULT_MOCKUP_TYPE,
                view_angle=view_angle or DEFAULT_VIEW_ANGLE,
                is_primary=is_primary,
                display_order=existing.count or 0,
                designer_notes=designer_notes,
                uploaded_by=uploaded_by,
                uploaded_at=now,
            ).model_dump(mode="json")

            response = client.table(TABLE).insert(record).execute()
        except Exception as e:
            logger.error(f"Failed to save mockup for catalog item {item_id}: {e}")
            _remove_uploaded(bucket, uploaded)
            raise DatabaseError("save mockup record", str(e))

        mockup = response.data[0]
        logger.info(f"Uploaded mockup {mockup['id']} for catalog item {item_id} ({len(uploaded)} objects)")
        return mockup

    @staticmethod
    def list_mockups(
        catalog_item_id: str | UUID,
        mockup_type: str | None = None,
        approved_only: bool = False,
    ) -> list[dict[str, Any]]:
        """Mockups of a catalog item by display_order, newest first within a position."""
        item_id = normalize_uuid(catalog_item_id)
        client = SupabaseClient.get_client()

        try:
            query = client.table(TABLE).select("*").eq("catalog_item_id", item_id)
            if mockup_type:
                query = query.eq("mockup_type", mockup_type)
            if approved_only:
                query = query.eq("client_approved", True)

            response = query.order("display_order").order("created_at", desc=True).execute()
            return response.data or []

        except Exception as e:
            logger.error(f"Failed to list mockups for catalog item {item_id}: {e}")
            raise DatabaseError("list mockups", str(e))
