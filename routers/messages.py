# routers/messages.py
from typing import List, Optional

from fastapi import APIRouter, Depends, status

from core.dependencies import get_match_engine, get_message_store
from core.errors import PermissionDenied
from core.security import get_current_user
from models.user import User
from schemas.message import MessageCreate, MessageRead
from services.match_engine import MatchEngine
from services.message_store import MessageStore

router = APIRouter(prefix="/messages", tags=["messages"])


@router.post(
    "/{to_user_id}",
    response_model=MessageRead,
    status_code=status.HTTP_201_CREATED,
    summary="Send a message to a friend",
)
async def send_message(
    to_user_id: str,
    payload: MessageCreate,
    messages: MessageStore = Depends(get_message_store),
    engine: MatchEngine = Depends(get_match_engine),
    current_user: User = Depends(get_current_user),
) -> MessageRead:
    if not await engine.is_friend(current_user.id, to_user_id):
        raise PermissionDenied("You can only message users who liked you back")
    message = await messages.send_message(current_user.id, to_user_id, payload.message)
    return MessageRead.model_validate(message)


@router.get(
    "/{other_user_id}",
    response_model=List[MessageRead],
    summary="Conversation with another user, newest first",
)
async def message_history(
    other_user_id: str,
    messages: MessageStore = Depends(get_message_store),
    current_user: User = Depends(get_current_user),
) -> List[MessageRead]:
    history = await messages.get_history(current_user.id, other_user_id)
    return [MessageRead.model_validate(m) for m in history]


@router.get(
    "/{other_user_id}/latest",
    response_model=Optional[MessageRead],
    summary="Most recent message with another user",
)
async def latest_message(
    other_user_id: str,
    messages: MessageStore = Depends(get_message_store),
    current_user: User = Depends(get_current_user),
) -> Optional[MessageRead]:
    latest = await messages.get_latest_message(current_user.id, other_user_id)
    return MessageRead.model_validate(latest) if latest else None
