# =============================================================================
# app/routers/users.py - User Account Endpoints
# =============================================================================
# Admin management of accounts (Supabase Auth user + user_profiles row).
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from app.dependencies import AdminUser, PaginationDep
from core.models.user import Role, UserCreate, UserUpdate
from core.services.user_service import UserService

router = APIRouter()

UserId = Annotated[UUID, Path(description="User UUID")]


@router.get("")
async def list_users(
    user: AdminUser,
    pagination: PaginationDep,
    search: Annotated[str | None, Query(description="Match name, username or email")] = None,
    role: Annotated[Role | None, Query(description="Filter by role")] = None,
):
    users, total = UserService.list_users(
        page=pagination.page,
        limit=pagination.limit,
        search=search,
        role=role,
    )
    return {"users": users, "pagination": pagination.block(total)}


@router.get("/{user_id}")
async def get_user(user_id: UserId, user: AdminUser):
    return UserService.get_user(user_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(request: UserCreate, user: AdminUser):
    """
    Create an account.

    The auth user is created with a confirmed email; if the profile insert
    then fails the auth user is deleted again.
    """
    profile = UserService.create_user(request)
    return {"success": True, "user": profile}


@router.patch("/{user_id}")
async def update_user(user_id: UserId, request: UserUpdate, user: AdminUser):
    """Update a profile. Role changes take effect on the user's next token."""
    profile = UserService.update_user(user_id, request)
    return {"success": True, "user": profile}


@router.delete("/{user_id}")
async def delete_user(user_id: UserId, user: AdminUser):
    UserService.delete_user(user_id, acting_user_id=user.id)
    return {"success": True, "message": "User deleted successfully"}
