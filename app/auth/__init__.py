# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Provides JWT-based authentication using Supabase Auth, plus role checks.
#
# Usage:
#   from app.auth import require_roles, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(require_roles(Role.ADMIN))):
#       return {"user_id": user.id}
# =============================================================================

from app.auth.dependencies import get_current_user, get_current_user_optional, require_roles
from app.auth.models import AuthUser, UserResponse

__all__ = [
    "get_current_user",
    "get_current_user_optional",
    "require_roles",
    "AuthUser",
    "UserResponse",
]
