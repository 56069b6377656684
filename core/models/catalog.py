# =============================================================================
# core/models/catalog.py - Catalog Item Schemas
# =============================================================================
# A catalog item is a sellable product template. Orders copy its name and
# price into line items; the item itself keeps pricing, build info, and the
# WebP image variants generated on upload.
# =============================================================================

from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

DEFAULT_SPORT = "All Around Item"
DEFAULT_ETA_DAYS = "7"


class CatalogItemStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DISCONTINUED = "discontinued"


class CatalogItemCreate(BaseModel):
    """Schema for creating a catalog item."""
    name: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1, max_length=100)
    sport: str = Field(default=DEFAULT_SPORT, max_length=100)
    sku: str = Field(..., min_length=1, max_length=100)
    base_price: float = Field(default=0.0, ge=0)
    unit_cost: float = Field(default=0.0, ge=0)
    status: CatalogItemStatus = CatalogItemStatus.ACTIVE
    base_image_url: str | None = None
    measurement_chart_url: str | None = None
    has_measurements: bool = False
    measurement_instructions: str | None = None
    eta_days: str = Field(default=DEFAULT_ETA_DAYS, max_length=10)
    preferred_manufacturer_id: UUID | None = None
    fabric_id: UUID | None = None
    build_instructions: str | None = None
    tags: list[str] = Field(default_factory=list)
    specifications: dict[str, Any] = Field(default_factory=dict)


class CatalogItemUpdate(BaseModel):
    """Partial catalog item update."""
    name: str | None = Field(default=None, min_length=1, max_length=255)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    sport: str | None = Field(default=None, max_length=100)
    sku: str | None = Field(default=None, min_length=1, max_length=100)
    base_price: float | None = Field(default=None, ge=0)
    unit_cost: float | None = Field(default=None, ge=0)
    status: CatalogItemStatus | None = None
    base_image_url: str | None = None
    measurement_chart_url: str | None = None
    has_measurements: bool | None = None
    measurement_instructions: str | None = None
    eta_days: str | None = Field(default=None, max_length=10)
    preferred_manufacturer_id: UUID | None = None
    fabric_id: UUID | None = None
    build_instructions: str | None = None
    tags: list[str] | None = None
    specifications: dict[str, Any] | None = None
