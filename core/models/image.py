# =============================================================================
# core/models/image.py - Image Variant & Production Image Schemas
# =============================================================================
# Catalog images are stored as a fixed set of WebP variants. The variant
# URLs live on catalog_items.image_variants as:
#   {"thumbnail": url, "medium": url, "large": url, "original": url,
#    "gallery": [medium urls of additional images]}
#
# Production images are progress photos kept on orders.production_images.
#
# Design mockups are rows of product_mockups with JPEG variant URLs.
# =============================================================================

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel

from .task import TaskType


class VariantName(str, Enum):
    THUMBNAIL = "thumbnail"
    MEDIUM = "medium"
    LARGE = "large"
    ORIGINAL = "original"


GALLERY_KEY = "gallery"


@dataclass(frozen=True)
class VariantSpec:
    """
    Target size and quality for one variant (size None = keep original).

    fit "cover" center-crops to exactly `size`; "inside" shrinks to fit
    within `size` keeping the aspect ratio and never enlarges.
    """
    name: VariantName
    size: tuple[int, int] | None
    quality: int
    fit: str = "cover"


VARIANT_SPECS: tuple[VariantSpec, ...] = (
    VariantSpec(VariantName.THUMBNAIL, (150, 150), 80),
    VariantSpec(VariantName.MEDIUM, (400, 400), 85),
    VariantSpec(VariantName.LARGE, (800, 800), 90),
    VariantSpec(VariantName.ORIGINAL, None, 95),
)


class ProductionImage(BaseModel):
    """One entry of orders.production_images (and task progress_images)."""
    id: UUID
    url: str
    storage_path: str
    filename: str
    original_name: str
    size: int
    mime_type: str
    caption: str | None = None
    stage: str
    task_type: TaskType | None = None
    task_id: UUID | None = None
    uploaded_by: UUID | None = None
    uploaded_at: datetime


# Design mockups are JPEG: large/medium keep the aspect ratio, the thumbnail
# is a square crop. The untouched upload is stored alongside as the original.
MOCKUP_VARIANT_SPECS: tuple[VariantSpec, ...] = (
    VariantSpec(VariantName.LARGE, (1200, 1200), 85, fit="inside"),
    VariantSpec(VariantName.MEDIUM, (600, 600), 85, fit="inside"),
    VariantSpec(VariantName.THUMBNAIL, (300, 300), 80),
)

DEFAULT_MOCKUP_TYPE = "product_render"
DEFAULT_VIEW_ANGLE = "front"


class CatalogMockup(BaseModel):
    """A row of product_mockups: one design mockup of a catalog item."""
    catalog_item_id: UUID
    image_url: str
    medium_url: str
    thumbnail_url: str
    original_url: str
    storage_paths: list[str]
    mockup_type: str = DEFAULT_MOCKUP_TYPE
    view_angle: str = DEFAULT_VIEW_ANGLE
    is_primary: bool = False
    client_approved: bool = False
    display_order: int = 0
    designer_notes: str | None = None
    uploaded_by: str | None = None
    uploaded_at: datetime
