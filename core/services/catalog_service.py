# =============================================================================
# core/services/catalog_service.py - Catalog Item Business Logic
# =============================================================================
# Handles catalog item CRUD and SKU uniqueness checks.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import CatalogItemNotFoundError, ConflictError, DatabaseError
from core.models.catalog import CatalogItemCreate, CatalogItemUpdate
from lib.supabase_client import SupabaseClient, is_unique_violation
from lib.utils import normalize_uuid, search_filter, utc_now_iso

logger = logging.getLogger(__name__)

TABLE = "catalog_items"


def _sku_conflict(sku: str) -> ConflictError:
    return ConflictError(
        message=f"SKU already exists: {sku}",
        code="SKU_EXISTS",
        suggestion="Choose a different SKU (use GET /catalog/validate-sku to check availability)",
        details={"sku": sku},
    )


class CatalogService:
    """Service for catalog item operations."""

    @staticmethod
    def list_items(
        category: str | None = None,
        sport: str | None = None,
        status: str | None = None,
        search: str | None = None,
    ) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()

        try:
            query = client.table(TABLE).select("*")
            if category:
                query = query.eq("category", category)
            if sport:
                query = query.eq("sport", sport)
            if status:
                query = query.eq("status", status)
            if search:
                query = query.or_(search_filter(["name", "sku"], search))

            response = query.order("created_at", desc=True).execute()
            return response.data or []

        except Exception as e:
            logger.error(f"Failed to list catalog items: {e}")
            raise DatabaseError("list catalog items", str(e))

    @staticmethod
    def get_item(item_id: str | UUID) -> dict[str, Any]:
        """
        Get a catalog item by ID.

        Raises:
            CatalogItemNotFoundError: If the item doesn't exist
        """
        item = SupabaseClient.fetch_by_id(TABLE, item_id)
        if not item:
            raise CatalogItemNotFoundError(str(item_id))
        return item

    @staticmethod
    def is_sku_available(sku: str, exclude_id: str | UUID | None = None) -> bool:
        """Check whether no other item uses this SKU."""
        client = SupabaseClient.get_client()

        try:
            query = client.table(TABLE).select("id").eq("sku", sku.strip())
            if exclude_id:
                query = query.neq("id", normalize_uuid(exclude_id))
            response = query.limit(1).execute()
            return not response.data

        except Exception as e:
            logger.error(f"Failed to validate SKU {sku}: {e}")
            raise DatabaseError("validate SKU", str(e))

    @staticmethod
    def create_item(payload: CatalogItemCreate) -> dict[str, Any]:
        """
        Create a catalog item.

        Raises:
            ConflictError: If the SKU is already used
        """
        data = payload.model_dump(mode="json")
        data["sku"] = data["sku"].strip()

        if not CatalogService.is_sku_available(data["sku"]):
            raise _sku_conflict(data["sku"])

        client = SupabaseClient.get_client()
        try:
            response = client.table(TABLE).insert(data).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise _sku_conflict(data["sku"])
            logger.error(f"Failed to create catalog item: {e}")
            raise DatabaseError("create catalog item", str(e))

        if not response.data:
            raise DatabaseError("create catalog item", "Insert returned no data")

        item = response.data[0]
        logger.info(f"Created catalog item: {item['id']} ({item['sku']})")
        return item

    @staticmethod
    def update_item(item_id: str | UUID, payload: CatalogItemUpdate) -> dict[str, Any]:
        """
        Partially update a catalog item.

        Raises:
            CatalogItemNotFoundError: If the item doesn't exist
            ConflictError: If the new SKU belongs to another item
        """
        item_id_str = normalize_uuid(item_id)
        CatalogService.get_item(item_id_str)

        changes = payload.model_dump(mode="json", exclude_unset=True)
        if changes.get("sku"):
            changes["sku"] = changes["sku"].strip()
            if not CatalogService.is_sku_available(changes["sku"], exclude_id=item_id_str):
                raise _sku_conflict(changes["sku"])

        return CatalogService.write_fields(item_id_str, changes)

    @staticmethod
    def write_fields(item_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        """Write column values to an existing item and return the updated row."""
        changes = {**changes, "updated_at": utc_now_iso()}
        client = SupabaseClient.get_client()

        try:
            response = client.table(TABLE).update(changes).eq("id", item_id).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise _sku_conflict(changes.get("sku", ""))
            logger.error(f"Failed to update catalog item {item_id}: {e}")
            raise DatabaseError("update catalog item", str(e))

        if not response.data:
            raise CatalogItemNotFoundError(item_id)

        logger.info(f"Updated catalog item {item_id}: {sorted(changes)}")
        return response.data[0]

    @staticmethod
    def delete_item(item_id: str | UUID) -> None:
        item_id_str = normalize_uuid(item_id)
        client = SupabaseClient.get_client()

        try:
            response = client.table(TABLE).delete().eq("id", item_id_str).execute()
        except Exception as e:
            logger.error(f"Failed to delete catalog item {item_id_str}: {e}")
            raise DatabaseError("delete catalog item", str(e))

        if not response.data:
            raise CatalogItemNotFoundError(item_id_str)
        logger.info(f"Deleted catalog item: {item_id_str}")
