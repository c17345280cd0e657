# routers/matches.py
from typing import List

from fastapi import APIRouter, Depends, Response, status

from core.dependencies import get_match_engine
from core.security import get_current_user
from models.user import User
from schemas.match import CandidateRead, FriendRead, FriendshipRead, SwipeRequest
from services.match_engine import MatchEngine

router = APIRouter(prefix="/matches", tags=["matches"])


@router.get(
    "/next",
    response_model=CandidateRead,
    summary="Next profile to swipe on; empty user_id when nobody is left",
)
async def next_candidate(
    engine: MatchEngine = Depends(get_match_engine),
    current_user: User = Depends(get_current_user),
) -> CandidateRead:
    return await engine.get_next_candidate(current_user.id)


@router.get(
    "/friends",
    response_model=List[FriendRead],
    summary="Users who liked you back, with their latest message and picture",
)
async def list_friends(
    engine: MatchEngine = Depends(get_match_engine),
    current_user: User = Depends(get_current_user),
) -> List[FriendRead]:
    return await engine.get_friends(current_user.id)


@router.get(
    "/friendship/{other_user_id}",
    response_model=FriendshipRead,
    summary="Whether you and another user liked each other",
)
async def check_friendship(
    other_user_id: str,
    engine: MatchEngine = Depends(get_match_engine),
    current_user: User = Depends(get_current_user),
) -> FriendshipRead:
    return FriendshipRead(is_friend=await engine.is_friend(current_user.id, other_user_id))


@router.post(
    "/{target_user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Like or pass on a user",
)
async def swipe(
    target_user_id: str,
    payload: SwipeRequest,
    engine: MatchEngine = Depends(get_match_engine),
    current_user: User = Depends(get_current_user),
):
    await engine.update_status(current_user.id, target_user_id, payload.status)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
