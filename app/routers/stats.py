# =============================================================================
# app/routers/stats.py - Dashboard Statistics Endpoints
# =============================================================================

from fastapi import APIRouter

from app.dependencies import SalesUser
from core.services.stats_service import StatsService

router = APIRouter()


@router.get("/orders")
async def get_order_stats(user: SalesUser):
    """Order counts by status, open vs completed, and completed revenue."""
    return StatsService.order_stats()


@router.get("/customers")
async def get_customer_stats(user: SalesUser):
    return StatsService.customer_stats()


@router.get("/catalog")
async def get_catalog_stats(user: SalesUser):
    return StatsService.catalog_stats()
