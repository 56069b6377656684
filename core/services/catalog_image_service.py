# =============================================================================
# core/services/catalog_image_service.py - Catalog Image Variant Pipeline
# =============================================================================
# Turns uploaded product photos into WebP variants stored in the
# catalog-images bucket and records their public URLs on the catalog item.
#
# Pipeline per request:
# 1. Validate count, MIME type and size of every file (before any work)
# 2. For each file: render variants, upload each one
#    - if any variant upload fails, the file's uploaded variants are removed
#      and the file is reported as failed
# 3. First successful file -> primary variants; later files -> gallery
# 4. Merge into catalog_items.image_variants and set image_url to the
#    primary medium variant (all uploads are removed if this write fails)
# =============================================================================

import logging
import re
import time
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any
from uuid import UUID

from app.config import settings
from app.exceptions import BadRequestError, ImageProcessingError, ThreadCraftException, TooManyFilesError
from core.models.image import GALLERY_KEY, VariantName
from core.services.catalog_service import CatalogService
from core.services.image_service import ImageService
from core.services.storage_service import StorageService
from lib.utils import normalize_uuid

logger = logging.getLogger(__name__)

ALL_VARIANT_KEYS = [v.value for v in VariantName] + [GALLERY_KEY]


@dataclass
class ImageUpload:
    """An uploaded file read into memory."""
    filename: str
    content_type: str | None
    content: bytes


@dataclass
class UploadedFile:
    urls: dict[str, str]
    paths: list[str]
    processed_bytes: int


def safe_basename(filename: str) -> str:
    """
    Filesystem/URL safe stem of an uploaded filename.

    Example:
        safe_basename("Home Jersey (Front).PNG")  # "home-jersey-front"
    """
    stem = PurePath(filename or "").stem.lower()
    stem = re.sub(r"[^a-z0-9]+", "-", stem).strip("-")
    return stem[:50] or "image"


def merge_variants(
    existing: dict[str, Any] | None,
    primary: dict[str, str] | None,
    gallery: list[str],
) -> dict[str, Any]:
    """
    Merge newly uploaded variant URLs into an item's image_variants.

    Primary variant URLs replace the stored ones; gallery URLs are appended
    (without duplicates).
    """
    merged: dict[str, Any] = dict(existing or {})
    if primary:
        merged.update(primary)

    current_gallery = list(merged.get(GALLERY_KEY) or [])
    for url in gallery:
        if url not in current_gallery:
            current_gallery.append(url)
    if current_gallery:
        merged[GALLERY_KEY] = current_gallery

    return merged


class CatalogImageService:
    """Service for catalog image upload and removal."""

    @staticmethod
    def validate_files(files: list[ImageUpload]) -> None:
        """
        Validate a batch before processing anything.

        Raises:
            BadRequestError: If no files were sent
            TooManyFilesError: If more than MAX_IMAGES_PER_UPLOAD files were sent
            InvalidFileTypeError / FileTooLargeError: For the first bad file
        """
        if not files:
            raise BadRequestError("No images uploaded", code="NO_FILES")
        if len(files) > settings.MAX_IMAGES_PER_UPLOAD:
            raise TooManyFilesError(len(files), settings.MAX_IMAGES_PER_UPLOAD)

        for upload in files:
            ImageService.validate_upload(
                filename=upload.filename,
                content_type=upload.content_type,
                size=len(upload.content),
                allowed_types=settings.allowed_image_types_list,
                max_bytes=settings.max_image_size_bytes,
            )

    @staticmethod
    def upload_file_variants(
        catalog_item_id: str,
        upload: ImageUpload,
        timestamp_ms: int,
    ) -> UploadedFile:
        """
        Render and upload every variant of one file.

        All-or-nothing per file: on any failure the variants already uploaded
        for this file are removed before the error is re-raised.
        """
        bucket = settings.CATALOG_IMAGES_BUCKET
        variants = ImageService.generate_variants(upload.content, upload.filename)
        basename = safe_basename(upload.filename)

        urls: dict[str, str] = {}
        paths: list[str] = []

        try:
            for variant in variants:
                path = f"{catalog_item_id}/{variant.variant.value}-{basename}-{timestamp_ms}{variant.extension}"
                StorageService.upload_bytes(bucket, path, variant.data, variant.content_type)
                paths.append(path)
                urls[variant.variant.value] = StorageService.get_public_url(bucket, path)
        except Exception as e:
            logger.warning(
                f"Variant upload failed for {upload.filename}; rolling back {len(paths)} uploaded variant(s): {e}"
            )
            if paths and not StorageService.delete_files(bucket, paths):
                logger.error(f"Rollback failed, orphaned objects in {bucket}: {paths}")
            raise

        return UploadedFile(urls=urls, paths=paths, processed_bytes=sum(v.size for v in variants))

    @staticmethod
    def upload_images(catalog_item_id: str | UUID, files: list[ImageUpload]) -> dict[str, Any]:
        """
        Run the variant pipeline for a batch of images.

        Returns:
            {
                "image_variants": merged variants,
                "image_url": primary medium URL,
                "failed": [{"filename", "error"}],
                "statistics": {...}
            }

        Raises:
            CatalogItemNotFoundError: If the catalog item doesn't exist
            ImageProcessingError (500): If every file failed
        """
        item_id = normalize_uuid(catalog_item_id)
        item = CatalogService.get_item(item_id)
        CatalogImageService.validate_files(files)

        primary: dict[str, str] | None = None
        gallery: list[str] = []
        failed: list[dict[str, str]] = []
        uploaded_paths: list[str] = []
        processed_bytes = 0

        for index, upload in enumerate(files):
            # Distinct timestamps keep paths unique within one request
            timestamp_ms = int(time.time() * 1000) + index
            try:
                result = CatalogImageService.upload_file_variants(item_id, upload, timestamp_ms)
            except ThreadCraftException as e:
                failed.append({"filename": upload.filename, "error": e.message})
                continue
            except Exception as e:
                logger.error(f"Unexpected error processing {upload.filename}: {e}")
                failed.append({"filename": upload.filename, "error": str(e)})
                continue

            uploaded_paths.extend(result.paths)
            processed_bytes += result.processed_bytes
            if primary is None:
                primary = result.urls
            else:
                gallery.append(result.urls[VariantName.MEDIUM.value])

        if primary is None:
            raise ImageProcessingError(
                filename=", ".join(f.filename for f in files),
                error="All images failed to process",
                status_code=500,
                code="IMAGE_PROCESSING_FAILED",
            )

        merged = merge_variants(item.get("image_variants"), primary, gallery)
        image_url = merged.get(VariantName.MEDIUM.value)

        try:
            updated = CatalogService.write_fields(item_id, {"image_variants": merged, "image_url": image_url})
        except Exception:
            logger.warning(f"Catalog update failed; removing {len(uploaded_paths)} uploaded variant(s)")
            StorageService.delete_files(settings.CATALOG_IMAGES_BUCKET, uploaded_paths)
            raise

        succeeded = len(files) - len(failed)
        logger.info(
            f"Catalog item {item_id}: processed {succeeded}/{len(files)} image(s), "
            f"{len(uploaded_paths)} variant(s) uploaded"
        )

        return {
            "catalog_item_id": item_id,
            "image_variants": updated.get("image_variants", merged),
            "image_url": updated.get("image_url", image_url),
            "failed": failed,
            "statistics": {
                "files_processed": succeeded,
                "files_failed": len(failed),
                "variants_uploaded": len(uploaded_paths),
                "original_bytes": sum(len(f.content) for f in files),
                "processed_bytes": processed_bytes,
            },
        }

    @staticmethod
    def get_images(catalog_item_id: str | UUID) -> dict[str, Any]:
        item = CatalogService.get_item(catalog_item_id)
        return {
            "catalog_item_id": normalize_uuid(catalog_item_id),
            "image_variants": item.get("image_variants") or {},
            "image_url": item.get("image_url"),
        }

    @staticmethod
    def delete_variants(
        catalog_item_id: str | UUID,
        variants: list[str] | None = None,
    ) -> dict[str, Any]:
        """
        Remove variants (all of them when `variants` is empty).

        The catalog row is updated first; storage objects are removed after,
        so a storage failure leaves orphaned files rather than broken URLs.

        Raises:
            BadRequestError: If an unknown variant name is requested
        """
        item_id = normalize_uuid(catalog_item_id)
        item = CatalogService.get_item(item_id)
        bucket = settings.CATALOG_IMAGES_BUCKET

        names = variants or ALL_VARIANT_KEYS
        unknown = [name for name in names if name not in ALL_VARIANT_KEYS]
        if unknown:
            raise BadRequestError(
                f"Unknown image variant(s): {', '.join(unknown)}",
                code="INVALID_VARIANT",
                details={"allowed": ALL_VARIANT_KEYS},
            )

        current: dict[str, Any] = dict(item.get("image_variants") or {})
        removed: list[str] = []
        paths: list[str] = []

        for name in names:
            if name not in current:
                continue
            value = current.pop(name)
            removed.append(name)
            for url in value if isinstance(value, list) else [value]:
                path = StorageService.path_from_public_url(bucket, url)
                if path:
                    paths.append(path)

        image_url = item.get("image_url")
        if VariantName.MEDIUM.value in removed:
            image_url = None

        updated = CatalogService.write_fields(item_id, {"image_variants": current, "image_url": image_url})

        if paths and not StorageService.delete_files(bucket, paths):
            logger.warning(f"Could not remove storage objects for catalog item {item_id}: {paths}")

        logger.info(f"Removed variants {removed} from catalog item {item_id}")
        return {
            "catalog_item_id": item_id,
            "removed_variants": removed,
            "deleted_paths": paths,
            "image_variants": updated.get("image_variants", current),
            "image_url": updated.get("image_url", image_url),
        }
