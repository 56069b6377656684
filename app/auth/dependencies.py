# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication and role checks.
#
# Supports both:
# - ES256 (new Supabase JWT signing keys) via JWKS
# - HS256 (legacy Supabase JWT secret), only when SUPABASE_JWT_SECRET is set
#
# Usage:
#   from app.auth import require_roles, AuthUser
#   from core.models.user import Role
#
#   @router.post("/")
#   async def create(user: AuthUser = Depends(require_roles(Role.SALESPERSON))):
#       ...
# =============================================================================

import logging
import time
from typing import Any, Optional
from uuid import UUID

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from app.auth.models import AuthUser
from app.config import settings
from app.exceptions import InsufficientRoleError
from core.models.user import Role

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor; missing headers are turned into 401 below
security = HTTPBearer(auto_error=False)

# Cache for JWKS keys
_jwks_cache: dict = {}
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 3600  # 1 hour

AUDIENCE = "authenticated"
ASYMMETRIC_ALGORITHMS = ("ES256", "RS256")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _get_jwks_url() -> str:
    """Get the JWKS URL from Supabase URL."""
    supabase_url = settings.SUPABASE_URL.rstrip('/')
    return f"{supabase_url}/auth/v1/.well-known/jwks.json"


def _fetch_jwks() -> dict:
    """Fetch JWKS from Supabase with caching."""
    global _jwks_cache, _jwks_cache_time

    current_time = time.time()

    if _jwks_cache and (current_time - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    try:
        jwks_url = _get_jwks_url()
        response = httpx.get(jwks_url, timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        _jwks_cache_time = current_time
        logger.debug(f"Fetched JWKS from {jwks_url}")
        return _jwks_cache
    except Exception as e:
        logger.warning(f"Failed to fetch JWKS: {e}")
        # Stale keys beat no keys
        if _jwks_cache:
            return _jwks_cache
        return {"keys": []}


def _get_signing_key(token: str) -> tuple[Any, str]:
    """
    Get the appropriate signing key for a token.

    HS256 is only accepted when SUPABASE_JWT_SECRET is configured, and
    asymmetric tokens must name a kid present in the project JWKS.

    Returns:
        Tuple of (key, algorithm) to use for verification

    Raises:
        JWTError: If no usable key exists for the token
    """
    unverified_header = jwt.get_unverified_header(token)

    alg = unverified_header.get("alg", "HS256")
    kid = unverified_header.get("kid")

    if alg == "HS256":
        if not settings.SUPABASE_JWT_SECRET:
            raise JWTError("HS256 tokens are not accepted: SUPABASE_JWT_SECRET is not configured")
        return settings.SUPABASE_JWT_SECRET, "HS256"

    if alg not in ASYMMETRIC_ALGORITHMS:
        raise JWTError(f"Unsupported signing algorithm: {alg}")

    if kid:
        for key in _fetch_jwks().get("keys", []):
            if key.get("kid") == kid:
                return key, alg

    raise JWTError(f"No signing key found for kid={kid}")


def role_from_claims(payload: dict[str, Any]) -> tuple[Role, bool]:
    """
    Resolve (role, is_super_admin) from JWT claims.

    Lookup order: app_metadata.role, user_metadata.role, then customer.
    A super admin flag in either metadata block makes the user an admin.
    """
    app_metadata = payload.get("app_metadata") or {}
    user_metadata = payload.get("user_metadata") or {}

    is_super_admin = bool(app_metadata.get("is_super_admin") or user_metadata.get("is_super_admin"))
    if is_super_admin:
        return Role.ADMIN, True

    raw_role = app_metadata.get("role") or user_metadata.get("role")
    return Role.parse(raw_role), False


def decode_token(token: str) -> AuthUser:
    """
    Verify a Supabase access token and build the AuthUser.

    Raises:
        HTTPException: 401 if token is invalid or expired
    """
    try:
        signing_key, algorithm = _get_signing_key(token)
        payload = jwt.decode(
            token,
            signing_key,
            algorithms=[algorithm],
            audience=AUDIENCE,
        )
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized(f"Invalid token: {str(e)}")

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("JWT token missing 'sub' claim")
        raise _unauthorized("Invalid token: missing user ID")

    try:
        user_uuid = UUID(user_id)
    except (ValueError, TypeError):
        logger.warning(f"Invalid UUID in token: {user_id}")
        raise _unauthorized("Invalid token: malformed user ID")

    role, is_super_admin = role_from_claims(payload)
    logger.debug(f"Authenticated user: {user_id} ({role.value})")
    return AuthUser(id=user_uuid, email=payload.get("email"), role=role, is_super_admin=is_super_admin)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> AuthUser:
    """
    Extract and validate user from Supabase JWT token.

    This dependency:
    1. Extracts the Bearer token from the Authorization header
    2. Verifies the JWT signature (supports ES256 and HS256)
    3. Validates the token hasn't expired
    4. Returns an AuthUser with the user's ID, email and role

    Raises:
        HTTPException: 401 if the header is missing or the token is invalid
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Not authenticated")
    return decode_token(credentials.credentials)


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[AuthUser]:
    """
    Optionally get the current user from JWT token.

    Returns None if no token is provided (or it is invalid), instead of
    raising an error.
    """
    if credentials is None:
        return None

    try:
        return await get_current_user(credentials)
    except HTTPException:
        return None


def require_roles(*roles: Role):
    """
    Build a dependency that only lets the given roles through.

    Admins always pass.

    Usage:
        @router.delete("/{id}")
        async def delete(user: AuthUser = Depends(require_roles(Role.ADMIN))):
            ...
    """
    allowed = [role.value for role in roles]

    async def dependency(user: AuthUser = Depends(get_current_user)) -> AuthUser:
        if user.is_admin or user.role in roles:
            return user
        logger.warning(f"User {user.id} with role {user.role.value} denied (requires {allowed})")
        raise InsufficientRoleError(user.role.value, allowed)

    return dependency
