# =============================================================================
# core/models/user.py - User & Role Schemas
# =============================================================================
# Roles gate every endpoint. A user's role lives in two places:
# - user_profiles.role (source of truth for admin screens)
# - auth user_metadata.role (copied into the JWT, read by the API)
# =============================================================================

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class Role(str, Enum):
    """
    User roles.

    - admin: full access, always passes role checks
    - salesperson: customers, catalog, orders
    - designer: design tasks, order updates
    - manufacturer: production tasks, production images
    - customer: read-only access to their own orders
    """
    ADMIN = "admin"
    SALESPERSON = "salesperson"
    DESIGNER = "designer"
    MANUFACTURER = "manufacturer"
    CUSTOMER = "customer"

    @classmethod
    def parse(cls, value: str | None, default: "Role | None" = None) -> "Role":
        """Parse a role string leniently, falling back to `default` (customer)."""
        try:
            return cls(str(value).lower())
        except ValueError:
            return default or cls.CUSTOMER


# Convenience groupings used by routers
STAFF_ROLES = (Role.ADMIN, Role.SALESPERSON, Role.DESIGNER, Role.MANUFACTURER)
SALES_ROLES = (Role.ADMIN, Role.SALESPERSON)


class UserCreate(BaseModel):
    """Admin request to create a user account + profile."""
    email: EmailStr
    password: str = Field(..., min_length=8, description="Initial password")
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    role: Role = Role.CUSTOMER
    username: str | None = Field(default=None, max_length=100)
    phone: str | None = None
    company: str | None = None


class UserUpdate(BaseModel):
    """Partial profile update. Only fields that are set are written."""
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    username: str | None = Field(default=None, max_length=100)
    role: Role | None = None
    phone: str | None = None
    company: str | None = None
    is_active: bool | None = None


class UserProfile(BaseModel):
    """Row shape of user_profiles as returned to clients."""
    id: UUID
    email: str | None = None
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    role: Role = Role.CUSTOMER
    phone: str | None = None
    company: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
