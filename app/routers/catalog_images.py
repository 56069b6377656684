# =============================================================================
# app/routers/catalog_images.py - Catalog Image Variant Endpoints
# =============================================================================
# Upload product photos as WebP variants (thumbnail/medium/large/original)
# and remove them again. Admin and salesperson only.
# =============================================================================

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, File, Path, Query, UploadFile, status

from app.dependencies import SalesUser
from core.services.catalog_image_service import CatalogImageService, ImageUpload

logger = logging.getLogger(__name__)

router = APIRouter()

CatalogItemId = Annotated[UUID, Path(description="Catalog item UUID")]


async def read_uploads(files: list[UploadFile]) -> list[ImageUpload]:
    """Read multipart files into memory."""
    uploads = []
    for file in files:
        uploads.append(ImageUpload(
            filename=file.filename or "image",
            content_type=file.content_type,
            content=await file.read(),
        ))
    return uploads


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/catalog/{catalog_item_id}/images", status_code=status.HTTP_201_CREATED)
async def upload_catalog_images(
    catalog_item_id: CatalogItemId,
    user: SalesUser,
    images: Annotated[list[UploadFile], File(description="1-10 JPEG/PNG/GIF/WebP images")],
):
    """
    Upload catalog images.

    Each file is converted into thumbnail (150x150), medium (400x400),
    large (800x800) and original WebP variants. The first file becomes the
    primary image; later files are added to the gallery.

    Files that fail are listed in `failed`; the request only fails (500) if
    every file failed.
    """
    uploads = await read_uploads(images)
    logger.info(f"User {user.id} uploading {len(uploads)} image(s) to catalog item {catalog_item_id}")
    result = CatalogImageService.upload_images(catalog_item_id, uploads)
    return {"success": True, **result}


@router.get("/catalog/{catalog_item_id}/images")
async def get_catalog_images(catalog_item_id: CatalogItemId, user: SalesUser):
    return CatalogImageService.get_images(catalog_item_id)


@router.delete("/catalog/{catalog_item_id}/images")
async def delete_catalog_images(
    catalog_item_id: CatalogItemId,
    user: SalesUser,
    variants: Annotated[
        str | None,
        Query(description="Comma-separated variant names (default: all)", examples=["thumbnail,medium"]),
    ] = None,
):
    """Delete some or all image variants of a catalog item."""
    names = [name.strip() for name in variants.split(",") if name.strip()] if variants else None
    result = CatalogImageService.delete_variants(catalog_item_id, names)
    return {"success": True, **result}
