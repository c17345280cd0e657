from typing import Optional
from datetime import datetime, date

from pydantic import BaseModel, ConfigDict, Field


class ProfileRead(BaseModel):
    user_id: str = Field(..., description="User id")
    nickname: str = Field(..., description="Display name")
    birth_date: date = Field(..., description="Birth date (YYYY-MM-DD)")
    gender: str = Field(..., description="Gender")
    location: Optional[str] = Field(None, description="Location used to prefer nearby candidates")
    about: Optional[str] = Field(None, description="About me")
    profile_picture_path: Optional[str] = Field(None, description="Storage key of the profile picture")
    created_at: datetime = Field(..., description="Account creation time")

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdate(BaseModel):
    nickname: Optional[str] = Field(None, min_length=1, max_length=64)
    birth_date: Optional[date] = None
    gender: Optional[str] = Field(None, min_length=1, max_length=16)
    location: Optional[str] = Field(None, max_length=128)
    about: Optional[str] = None


class NicknameRead(BaseModel):
    nickname: str


class PicturePathRead(BaseModel):
    profile_picture_path: Optional[str] = None
