# =============================================================================
# app/routers/catalog_mockups.py - Catalog Design Mockup Endpoints
# =============================================================================
# Mounted under /api/catalog: /api/catalog/{catalog_item_id}/mockups
# Upload is limited to admin, salesperson and designer; any signed-in user
# can list.
# =============================================================================

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Path, Query, UploadFile, status

from app.auth import AuthUser, require_roles
from app.dependencies import CurrentUser
from core.models.image import DEFAULT_MOCKUP_TYPE, DEFAULT_VIEW_ANGLE
from core.models.user import Role
from core.services.catalog_image_service import ImageUpload
from core.services.mockup_service import MockupService

logger = logging.getLogger(__name__)

router = APIRouter()

CatalogItemId = Annotated[UUID, Path(description="Catalog item UUID")]
MockupUploader = Annotated[AuthUser, Depends(require_roles(Role.SALESPERSON, Role.DESIGNER))]


@router.post("/{catalog_item_id}/mockups", status_code=status.HTTP_201_CREATED)
async def upload_mockup(
    catalog_item_id: CatalogItemId,
    user: MockupUploader,
    mockup: Annotated[UploadFile, File(description="JPEG/PNG/GIF/WebP mockup, up to 10MB")],
    mockup_type: Annotated[str, Form(max_length=50)] = DEFAULT_MOCKUP_TYPE,
    view_angle: Annotated[str, Form(max_length=50)] = DEFAULT_VIEW_ANGLE,
    is_primary: Annotated[bool, Form()] = False,
    designer_notes: Annotated[str | None, Form(max_length=2000)] = None,
):
    """
    Upload a design mockup for a catalog item.

    Stores the original file plus large (1200px), medium (600px) and
    thumbnail (300x300) JPEGs. Marking it primary clears the flag on the
    item's other mockups.
    """
    upload = ImageUpload(
        filename=mockup.filename or "mockup",
        content_type=mockup.content_type,
        content=await mockup.read(),
    )
    logger.info(f"User {user.id} uploading mockup to catalog item {catalog_item_id}")
    record = MockupService.upload_mockup(
        catalog_item_id,
        upload,
        mockup_type=mockup_type,
        view_angle=view_angle,
        is_primary=is_primary,
        designer_notes=designer_notes,
        uploaded_by=user.email or str(user.id),
    )
    return {"success": True, "mockup": record}


@router.get("/{catalog_item_id}/mockups")
async def list_mockups(
    catalog_item_id: CatalogItemId,
    user: CurrentUser,
    mockup_type: Annotated[str | None, Query(max_length=50)] = None,
    approved_only: bool = False,
):
    mockups = MockupService.list_mockups(catalog_item_id, mockup_type=mockup_type, approved_only=approved_only)
    return {"success": True, "mockups": mockups, "total": len(mockups)}
