# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from core.models.user import Role


class AuthUser(BaseModel):
    """
    Authenticated user extracted from Supabase JWT.

    This is the minimal user info available from the token itself,
    without querying the database. The role comes from app_metadata
    (set server-side) or user_metadata (set at account creation).
    """
    model_config = ConfigDict(frozen=True)

    id: UUID
    email: Optional[str] = None
    role: Role = Role.CUSTOMER
    is_super_admin: bool = False

    @property
    def is_admin(self) -> bool:
        return self.is_super_admin or self.role is Role.ADMIN


class UserResponse(BaseModel):
    """
    Current user for /auth/me.

    Includes profile data from user_profiles when the row exists.
    """
    id: UUID
    email: Optional[str] = None
    role: Role
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    user: dict[str, Any]
    role: Role
