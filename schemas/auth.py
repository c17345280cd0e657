from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field

from schemas.user import ProfileRead


class RegisterRequest(BaseModel):
    username: str = Field(..., max_length=64)
    password: str = Field(..., max_length=128)
    nickname: str = Field(..., max_length=64)
    birth_date: date
    gender: str = Field(..., max_length=16)
    location: Optional[str] = Field(None, max_length=128)
    about: Optional[str] = None


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    """
    Response on successful login.
    """
    access_token: str
    refresh_token: str
    token_type: Literal["bearer"] = "bearer"
    user_profile: ProfileRead


class RefreshRequest(BaseModel):
    refresh_token: str


class AccessTokenResponse(BaseModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"


class LogoutRequest(BaseModel):
    refresh_token: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
