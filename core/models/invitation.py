# =============================================================================
# core/models/invitation.py - User Invitation Schemas
# =============================================================================

from enum import Enum

from pydantic import BaseModel, EmailStr, Field

from .user import Role


class InvitationStatus(str, Enum):
    """
    Invitation lifecycle.

    Flow: pending -> accepted | expired | cancelled
    """
    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class InvitationCreate(BaseModel):
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    role: Role = Role.CUSTOMER


class InvitationAccept(BaseModel):
    password: str = Field(..., min_length=8, description="Password for the new account")
