# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Mounted under /api: /api/health, /api/health/ready, /api/health/live
#
# Readiness means the orders table answers and both image buckets
# (CATALOG_IMAGES_BUCKET, UPLOADS_BUCKET) exist in Supabase Storage.
# =============================================================================

import logging

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from lib.supabase_client import SupabaseClient
from lib.utils import utc_now_iso

logger = logging.getLogger(__name__)

router = APIRouter()

API_VERSION = "1.0.0"
HEALTHY = "healthy"


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    environment: str
    version: str


class ChecksResponse(BaseModel):
    database: str
    storage: str


class ReadinessResponse(BaseModel):
    status: str
    checks: ChecksResponse
    timestamp: str


class LivenessResponse(BaseModel):
    status: str
    timestamp: str


def _unhealthy(reason: object) -> str:
    return f"unhealthy: {str(reason)[:50]}"


def check_database() -> str:
    try:
        SupabaseClient.get_client().table("orders").select("id").limit(1).execute()
        return HEALTHY
    except Exception as e:
        logger.warning(f"Readiness: orders table unreachable: {e}")
        return _unhealthy(e)


def check_buckets() -> str:
    """Both image buckets must be present."""
    try:
        names = {bucket.name for bucket in SupabaseClient.get_client().storage.list_buckets()}
    except Exception as e:
        logger.warning(f"Readiness: bucket listing failed: {e}")
        return _unhealthy(e)

    missing = [b for b in (settings.CATALOG_IMAGES_BUCKET, settings.UPLOADS_BUCKET) if b not in names]
    if missing:
        logger.warning(f"Readiness: missing storage bucket(s) {missing}")
        return _unhealthy(f"missing bucket {', '.join(missing)}")
    return HEALTHY


@router.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(
        status=HEALTHY,
        timestamp=utc_now_iso(),
        environment=settings.ENVIRONMENT,
        version=API_VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check():
    checks = ChecksResponse(database=check_database(), storage=check_buckets())
    ready = checks.database == HEALTHY and checks.storage == HEALTHY

    return ReadinessResponse(
        status="ready" if ready else "degraded",
        checks=checks,
        timestamp=utc_now_iso(),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    return LivenessResponse(status="alive", timestamp=utc_now_iso())
