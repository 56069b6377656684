# =============================================================================
# core/services/user_service.py - User Account Management
# =============================================================================
# Admin operations over Supabase Auth users and their user_profiles rows.
#
# An account is two records: the auth user (credentials, user_metadata.role
# which ends up in the JWT) and the profile row (names, role, contact info).
# Creation writes both; if the profile insert fails the auth user is deleted.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import BadRequestError, ConflictError, DatabaseError, UserNotFoundError
from core.models.user import Role, UserCreate, UserUpdate
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, search_filter, utc_now_iso

logger = logging.getLogger(__name__)

TABLE = "user_profiles"
SEARCH_COLUMNS = ["first_name", "last_name", "username", "email"]
AUTH_USERS_PER_PAGE = 1000


def _user_exists(email: str) -> ConflictError:
    return ConflictError(
        message=f"A user with this email already exists: {email}",
        code="USER_EXISTS",
        suggestion="Use a different email address or edit the existing user",
        details={"email": email},
    )


class UserService:
    """Service for user account operations (admin only)."""

    @staticmethod
    def list_users(
        page: int = 1,
        limit: int = 20,
        search: str | None = None,
        role: Role | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        client = SupabaseClient.get_client()
        offset = (page - 1) * limit

        try:
            query = client.table(TABLE).select("*", count="exact")
            if role:
                query = query.eq("role", role.value)
            if search:
                query = query.or_(search_filter(SEARCH_COLUMNS, search))
            response = (
                query.order("created_at", desc=True)
                .range(offset, offset + limit - 1)
                .execute()
            )
            users = response.data or []
            total = response.count if response.count is not None else len(users)
            return users, total

        except Exception as e:
            logger.error(f"Failed to list users: {e}")
            raise DatabaseError("list users", str(e))

    @staticmethod
    def get_user(user_id: str | UUID) -> dict[str, Any]:
        profile = SupabaseClient.fetch_by_id(TABLE, user_id)
        if not profile:
            raise UserNotFoundError(str(user_id))
        return profile

    @staticmethod
    def get_profile(user_id: str | UUID) -> dict[str, Any] | None:
        """Profile row or None (used by /auth/me where a missing row is normal)."""
        return SupabaseClient.fetch_by_id(TABLE, user_id)

    @staticmethod
    def email_exists(email: str) -> bool:
        """
        Check whether an account already uses this email.

        Looks at profiles first, then at auth users (profiles can lag behind
        auth when an account was created outside this API). Auth users are
        listed page by page until a match or an empty page.
        """
        email = email.strip().lower()
        if SupabaseClient.fetch_one_by(TABLE, "email", email, columns="id"):
            return True

        client = SupabaseClient.get_client()
        page = 1
        while True:
            try:
                auth_users = client.auth.admin.list_users(page=page, per_page=AUTH_USERS_PER_PAGE)
            except Exception as e:
                logger.error(f"Failed to list auth users (page {page}): {e}")
                raise DatabaseError("check existing users", str(e))

            if not auth_users:
                return False
            if any((getattr(u, "email", "") or "").lower() == email for u in auth_users):
                return True
            page += 1

    @staticmethod
    def create_user(payload: UserCreate) -> dict[str, Any]:
        """
        Create an auth user and its profile.

        Raises:
            ConflictError: If the email is already registered
            DatabaseError: If either write fails (auth user is rolled back)
        """
        email = payload.email.strip().lower()
        if UserService.email_exists(email):
            raise _user_exists(email)

        client = SupabaseClient.get_client()

        # 1. Auth user
        try:
            response = client.auth.admin.create_user({
                "email": email,
                "password": payload.password,
                "email_confirm": True,
                "user_metadata": {
                    "role": payload.role.value,
                    "first_name": payload.first_name,
                    "last_name": payload.last_name,
                },
            })
            auth_user = response.user
        except Exception as e:
            if "already" in str(e).lower():
                raise _user_exists(email)
            logger.error(f"Failed to create auth user for {email}: {e}")
            raise DatabaseError("create user account", str(e))

        user_id = str(auth_user.id)

        # 2. Profile row
        profile = {
            "id": user_id,
            "email": email,
            "first_name": payload.first_name,
            "last_name": payload.last_name,
            "role": payload.role.value,
            "username": payload.username,
            "phone": payload.phone,
            "company": payload.company,
            "is_active": True,
        }
        try:
            result = client.table(TABLE).insert(profile).execute()
        except Exception as e:
            logger.error(f"Profile insert failed for {user_id}, removing auth user: {e}")
            UserService._compensate_auth_user(user_id)
            raise DatabaseError("create user profile", str(e))

        logger.info(f"Created user {user_id} with role {payload.role.value}")
        return result.data[0] if result.data else profile

    @staticmethod
    def _compensate_auth_user(user_id: str) -> None:
        """Delete an auth user created moments ago. Never raises."""
        client = SupabaseClient.get_client()
        try:
            client.auth.admin.delete_user(user_id)
            logger.warning(f"Rolled back auth user {user_id}")
        except Exception as e:
            logger.error(f"Rollback of auth user {user_id} failed, manual cleanup needed: {e}")

    @staticmethod
    def update_user(user_id: str | UUID, payload: UserUpdate) -> dict[str, Any]:
        """
        Update a profile. Role changes are mirrored into auth user_metadata
        so new tokens carry the new role.
        """
        user_id_str = normalize_uuid(user_id)
        UserService.get_user(user_id_str)

        changes = payload.model_dump(mode="json", exclude_unset=True)
        changes["updated_at"] = utc_now_iso()
        client = SupabaseClient.get_client()

        try:
            response = client.table(TABLE).update(changes).eq("id", user_id_str).execute()
        except Exception as e:
            logger.error(f"Failed to update user {user_id_str}: {e}")
            raise DatabaseError("update user", str(e))

        if not response.data:
            raise UserNotFoundError(user_id_str)

        if payload.role is not None:
            try:
                client.auth.admin.update_user_by_id(
                    user_id_str, {"user_metadata": {"role": payload.role.value}}
                )
            except Exception as e:
                logger.warning(f"Profile role updated but auth metadata sync failed for {user_id_str}: {e}")

        logger.info(f"Updated user {user_id_str}: {sorted(k for k in changes if k != 'updated_at')}")
        return response.data[0]

    @staticmethod
    def delete_user(user_id: str | UUID, acting_user_id: str | UUID) -> None:
        """
        Delete an account (auth user + profile).

        Raises:
            BadRequestError: If an admin tries to delete themselves
            UserNotFoundError: If the profile doesn't exist
        """
        user_id_str = normalize_uuid(user_id)
        if user_id_str == normalize_uuid(acting_user_id):
            raise BadRequestError("You cannot delete your own account", code="CANNOT_DELETE_SELF")

        UserService.get_user(user_id_str)
        client = SupabaseClient.get_client()

        try:
            client.auth.admin.delete_user(user_id_str)
            # No-op when the profile FK cascades from auth.users
            client.table(TABLE).delete().eq("id", user_id_str).execute()
        except Exception as e:
            logger.error(f"Failed to delete user {user_id_str}: {e}")
            raise DatabaseError("delete user", str(e))

        logger.info(f"Deleted user {user_id_str}")
