# =============================================================================
# core/models/customer.py - Customer Schemas
# =============================================================================

from typing import Any
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

DEFAULT_COUNTRY = "United States"


class CustomerCreate(BaseModel):
    """
    Schema for creating a customer.

    Example:
        {
            "first_name": "Jordan",
            "last_name": "Reyes",
            "email": "jordan@rivercityfc.org",
            "company": "River City FC"
        }
    """
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str | None = Field(default=None, max_length=50)
    company: str | None = Field(default=None, max_length=255)
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = Field(default=None, max_length=20)
    country: str = DEFAULT_COUNTRY
    user_id: UUID | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class CustomerUpdate(BaseModel):
    """Partial customer update."""
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=50)
    company: str | None = Field(default=None, max_length=255)
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = Field(default=None, max_length=20)
    country: str | None = None
    user_id: UUID | None = None
    metadata: dict[str, Any] | None = None
