# =============================================================================
# core/services/invitation_service.py - User Invitations
# =============================================================================
# Admins invite people by email. Each invitation carries a random token
# that the web client turns into a registration link:
#   {CLIENT_URL}/register?token=<token>
#
# Flow: create (pending) -> verify (public) -> accept (public, creates the
# account) | cancel (admin) | expire (on verify/accept after expires_at)
# =============================================================================

import logging
import secrets
from datetime import timedelta
from typing import Any
from uuid import UUID

from app.config import settings
from app.exceptions import (
    ConflictError,
    DatabaseError,
    InvitationExpiredError,
    InvitationNotFoundError,
)
from core.models.invitation import InvitationCreate, InvitationStatus
from core.models.user import UserCreate
from core.services.user_service import UserService
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, parse_timestamp, utc_now, utc_now_iso

logger = logging.getLogger(__name__)

TABLE = "user_invitations"
TOKEN_BYTES = 32


def invitation_url(token: str) -> str:
    return f"{settings.CLIENT_URL.rstrip('/')}/register?token={token}"


class InvitationService:
    """Service for invitation operations."""

    @staticmethod
    def create_invitation(payload: InvitationCreate, invited_by: str | UUID) -> dict[str, Any]:
        """
        Create a pending invitation.

        Raises:
            ConflictError: USER_EXISTS if an account has the email,
                INVITATION_EXISTS if a pending invitation does
        """
        email = payload.email.strip().lower()

        if UserService.email_exists(email):
            raise ConflictError(
                message=f"A user with this email already exists: {email}",
                code="USER_EXISTS",
                details={"email": email},
            )

        client = SupabaseClient.get_client()
        try:
            pending = (
                client.table(TABLE)
                .select("id")
                .eq("email", email)
                .eq("status", InvitationStatus.PENDING.value)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to check pending invitations for {email}: {e}")
            raise DatabaseError("check pending invitations", str(e))

        if pending.data:
            raise ConflictError(
                message=f"A pending invitation already exists for {email}",
                code="INVITATION_EXISTS",
                suggestion="Cancel the existing invitation before sending a new one",
                details={"email": email, "invitation_id": pending.data[0]["id"]},
            )

        token = secrets.token_hex(TOKEN_BYTES)
        data = {
            "email": email,
            "first_name": payload.first_name,
            "last_name": payload.last_name,
            "role": payload.role.value,
            "token": token,
            "status": InvitationStatus.PENDING.value,
            "expires_at": (utc_now() + timedelta(days=settings.INVITATION_EXPIRY_DAYS)).isoformat(),
            "invited_by": normalize_uuid(invited_by),
        }

        try:
            response = client.table(TABLE).insert(data).execute()
        except Exception as e:
            logger.error(f"Failed to create invitation for {email}: {e}")
            raise DatabaseError("create invitation", str(e))

        invitation = response.data[0] if response.data else data
        logger.info(f"Created invitation for {email} as {payload.role.value}")
        return {**invitation, "invitation_url": invitation_url(token)}

    @staticmethod
    def list_invitations(status: InvitationStatus | None = None) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()

        try:
            query = client.table(TABLE).select("*")
            if status:
                query = query.eq("status", status.value)
            response = query.order("created_at", desc=True).execute()
            return response.data or []
        except Exception as e:
            logger.error(f"Failed to list invitations: {e}")
            raise DatabaseError("list invitations", str(e))

    @staticmethod
    def verify_token(token: str) -> dict[str, Any]:
        """
        Resolve a token to a usable invitation.

        An expired pending invitation is marked `expired` as a side effect.

        Raises:
            InvitationNotFoundError: Unknown token or not pending
            InvitationExpiredError: Past expires_at
        """
        invitation = SupabaseClient.fetch_one_by(TABLE, "token", token)
        if not invitation or invitation.get("status") != InvitationStatus.PENDING.value:
            raise InvitationNotFoundError("token")

        expires_at = parse_timestamp(invitation.get("expires_at"))
        if expires_at is not None and expires_at <= utc_now():
            InvitationService._set_status(invitation["id"], InvitationStatus.EXPIRED)
            logger.info(f"Invitation {invitation['id']} expired")
            raise InvitationExpiredError(expires_at.isoformat())

        return invitation

    @staticmethod
    def accept_invitation(token: str, password: str) -> dict[str, Any]:
        """
        Create the invited user's account and mark the invitation accepted.

        Returns:
            The created user profile
        """
        invitation = InvitationService.verify_token(token)

        profile = UserService.create_user(UserCreate(
            email=invitation["email"],
            password=password,
            first_name=invitation["first_name"],
            last_name=invitation["last_name"],
            role=invitation.get("role") or "customer",
        ))

        InvitationService._set_status(
            invitation["id"], InvitationStatus.ACCEPTED, accepted_at=utc_now_iso()
        )
        logger.info(f"Invitation {invitation['id']} accepted by user {profile.get('id')}")
        return profile

    @staticmethod
    def cancel_invitation(invitation_id: str | UUID) -> dict[str, Any]:
        invitation_id_str = normalize_uuid(invitation_id)
        if not SupabaseClient.exists(TABLE, invitation_id_str):
            raise InvitationNotFoundError(invitation_id_str)
        return InvitationService._set_status(invitation_id_str, InvitationStatus.CANCELLED)

    @staticmethod
    def _set_status(invitation_id: str, status: InvitationStatus, **extra: Any) -> dict[str, Any]:
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table(TABLE)
                .update({"status": status.value, **extra})
                .eq("id", invitation_id)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to set invitation {invitation_id} to {status.value}: {e}")
            raise DatabaseError("update invitation", str(e))
        return response.data[0] if response.data else {"id": invitation_id, "status": status.value}
