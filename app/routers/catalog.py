# =============================================================================
# app/routers/catalog.py - Catalog Endpoints
# =============================================================================
# Product templates. Any signed-in user may read; admins and salespeople
# write; only admins delete.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from app.dependencies import AdminUser, CurrentUser, SalesUser
from core.models.catalog import CatalogItemCreate, CatalogItemStatus, CatalogItemUpdate
from core.services.catalog_service import CatalogService

router = APIRouter()

CatalogItemId = Annotated[UUID, Path(description="Catalog item UUID")]


# =============================================================================
# Endpoints
# =============================================================================

@router.get("")
async def list_catalog_items(
    user: CurrentUser,
    category: Annotated[str | None, Query()] = None,
    sport: Annotated[str | None, Query()] = None,
    status: Annotated[CatalogItemStatus | None, Query()] = None,
    search: Annotated[str | None, Query(description="Match name or SKU")] = None,
):
    items = CatalogService.list_items(
        category=category,
        sport=sport,
        status=status.value if status else None,
        search=search,
    )
    return {"items": items, "total": len(items)}


@router.get("/validate-sku")
async def validate_sku(
    user: SalesUser,
    sku: Annotated[str, Query(min_length=1)],
    exclude_id: Annotated[UUID | None, Query(alias="excludeId")] = None,
):
    """
    Check whether a SKU is free.

    Pass excludeId when editing so the item's own SKU counts as available.
    """
    return {"sku": sku, "available": CatalogService.is_sku_available(sku, exclude_id)}


@router.get("/{item_id}")
async def get_catalog_item(item_id: CatalogItemId, user: CurrentUser):
    return CatalogService.get_item(item_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_catalog_item(request: CatalogItemCreate, user: SalesUser):
    return CatalogService.create_item(request)


@router.patch("/{item_id}")
async def update_catalog_item(item_id: CatalogItemId, request: CatalogItemUpdate, user: SalesUser):
    return CatalogService.update_item(item_id, request)


@router.delete("/{item_id}")
async def delete_catalog_item(item_id: CatalogItemId, user: AdminUser):
    CatalogService.delete_item(item_id)
    return {"success": True, "message": "Catalog item deleted successfully"}
