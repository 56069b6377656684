# =============================================================================
# app/routers/invitations.py - User Invitation Endpoints
# =============================================================================
# Admins create, list and cancel invitations. Verifying and accepting a
# token is public: the invitee has no account yet.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from app.dependencies import AdminUser
from core.models.invitation import InvitationAccept, InvitationCreate, InvitationStatus
from core.services.invitation_service import InvitationService

router = APIRouter()

Token = Annotated[str, Path(min_length=1, max_length=128, description="Invitation token")]


# =============================================================================
# Admin Endpoints
# =============================================================================

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_invitation(request: InvitationCreate, user: AdminUser):
    """
    Invite someone by email.

    Returns the invitation including `invitation_url`, the registration
    link to send to the invitee.
    """
    invitation = InvitationService.create_invitation(request, invited_by=user.id)
    return {"success": True, "invitation": invitation}


@router.get("")
async def list_invitations(
    user: AdminUser,
    status: Annotated[InvitationStatus | None, Query(description="Filter by status")] = None,
):
    invitations = InvitationService.list_invitations(status)
    return {"invitations": invitations, "total": len(invitations)}


@router.delete("/{invitation_id}")
async def cancel_invitation(
    invitation_id: Annotated[UUID, Path(description="Invitation UUID")],
    user: AdminUser,
):
    invitation = InvitationService.cancel_invitation(invitation_id)
    return {"success": True, "invitation": invitation}


# =============================================================================
# Public Endpoints
# =============================================================================

@router.get("/verify/{token}")
async def verify_invitation(token: Token):
    """
    Check an invitation token before showing the registration form.

    404 for unknown/used tokens, 400 INVITATION_EXPIRED when expired.
    """
    invitation = InvitationService.verify_token(token)
    return {
        "valid": True,
        "email": invitation["email"],
        "first_name": invitation.get("first_name"),
        "last_name": invitation.get("last_name"),
        "role": invitation.get("role"),
    }


@router.post("/accept/{token}", status_code=status.HTTP_201_CREATED)
async def accept_invitation(token: Token, request: InvitationAccept):
    """Create the account for an invitation and mark it accepted."""
    profile = InvitationService.accept_invitation(token, request.password)
    return {"success": True, "user": profile}
