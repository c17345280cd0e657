from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MessageCreate(BaseModel):
    message: str = Field(..., description="Message text")


class MessageRead(BaseModel):
    id: str
    from_user_id: str
    to_user_id: str
    message: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
