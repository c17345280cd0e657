# routers/auth.py
from fastapi import APIRouter, Depends, status

from core.dependencies import get_user_directory
from core.security import (
    get_current_user,
    issue_token_pair,
    oauth2_scheme,
    refresh_access_token,
    revoke_tokens,
)
from models.user import User
from schemas.auth import (
    AccessTokenResponse,
    LoginRequest,
    LogoutRequest,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
)
from services.user_directory import UserDirectory
from utils.user_helpers import to_profile_read

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
)
async def register(
    payload: RegisterRequest,
    users: UserDirectory = Depends(get_user_directory),
) -> MessageResponse:
    await users.register(payload)
    return MessageResponse(message="register success")


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Exchange username and password for access and refresh tokens",
)
async def login(
    payload: LoginRequest,
    users: UserDirectory = Depends(get_user_directory),
) -> TokenResponse:
    user = await users.authenticate(payload.username, payload.password)
    access_token, refresh_token = issue_token_pair(user.id)
    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        user_profile=to_profile_read(user),
    )


@router.post(
    "/refresh",
    response_model=AccessTokenResponse,
    summary="Get a new access token for a registered refresh token",
)
async def refresh(payload: RefreshRequest) -> AccessTokenResponse:
    return AccessTokenResponse(access_token=refresh_access_token(payload.refresh_token))


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Revoke the current access token and drop the refresh token",
)
async def logout(
    payload: LogoutRequest,
    token: str = Depends(oauth2_scheme),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    revoke_tokens(token, payload.refresh_token)
    return MessageResponse(message="Logged out successfully")
