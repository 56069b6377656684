# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# API endpoints for authentication-related operations.
#
# Login goes through Supabase Auth with the anon key; the returned access
# token is what every other endpoint expects as its Bearer token.
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user, role_from_claims
from app.auth.models import AuthUser, LoginRequest, LoginResponse, UserResponse
from app.exceptions import InvalidCredentialsError
from core.services.user_service import UserService
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest) -> LoginResponse:
    """
    Sign in with email and password.

    Returns:
        LoginResponse: access/refresh tokens, the auth user and their role

    Raises:
        401: INVALID_CREDENTIALS
    """
    client = SupabaseClient.create_auth_client()

    try:
        response = client.auth.sign_in_with_password({
            "email": request.email,
            "password": request.password,
        })
    except Exception as e:
        logger.warning(f"Login failed for {request.email}: {e}")
        raise InvalidCredentialsError()

    session = getattr(response, "session", None)
    auth_user = getattr(response, "user", None)
    if session is None or auth_user is None:
        logger.warning(f"Login returned no session for {request.email}")
        raise InvalidCredentialsError()

    role, _ = role_from_claims({
        "app_metadata": getattr(auth_user, "app_metadata", None) or {},
        "user_metadata": getattr(auth_user, "user_metadata", None) or {},
    })

    logger.info(f"User {auth_user.id} logged in ({role.value})")
    return LoginResponse(
        access_token=session.access_token,
        refresh_token=getattr(session, "refresh_token", None),
        expires_in=getattr(session, "expires_in", None),
        user={
            "id": str(auth_user.id),
            "email": getattr(auth_user, "email", None),
            "user_metadata": getattr(auth_user, "user_metadata", None) or {},
        },
        role=role,
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    user: AuthUser = Depends(get_current_user)
) -> UserResponse:
    """
    Get the current authenticated user's profile.

    Falls back to token data when no user_profiles row exists yet.
    The role always comes from the token, which is what the API enforces.
    """
    try:
        profile = UserService.get_profile(user.id)
    except Exception as e:
        logger.warning(f"Could not fetch user profile: {e}")
        profile = None

    if profile:
        return UserResponse(**{**profile, "email": profile.get("email") or user.email, "role": user.role})

    return UserResponse(id=user.id, email=user.email, role=user.role)


@router.get("/verify")
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """
    Verify that the current token is valid.

    Raises:
        401: If token is invalid or expired
    """
    return {
        "valid": True,
        "user_id": str(user.id),
        "email": user.email,
        "role": user.role.value,
    }
