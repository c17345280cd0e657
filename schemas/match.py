from typing import Literal, Optional

from pydantic import BaseModel, Field

from schemas.message import MessageRead
from schemas.user import ProfileRead


class SwipeRequest(BaseModel):
    status: Literal["like", "pass"] = Field(..., description="Decision about the target user")


class CandidateRead(BaseModel):
    user_id: str = Field("", description="Candidate id; empty when nobody is left to show")
    profile: Optional[ProfileRead] = None


class FriendRead(BaseModel):
    friend_id: str
    friend_nickname: str
    friend_latest_message: Optional[MessageRead] = None
    friend_profile_picture: Optional[str] = Field(None, description="Base64-encoded picture bytes")
    mime_type: Optional[str] = None


class FriendshipRead(BaseModel):
    is_friend: bool
