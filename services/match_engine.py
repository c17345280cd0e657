"""
Swipe matching: candidate selection, like/pass decisions and friendships.

A pair of users shares one ``Match`` row holding two independent
directional decisions. Two users are friends when both decisions are
``like``; friendship is derived from the row and never stored.
"""
import logging
from typing import Callable, List, Optional

from starlette.concurrency import run_in_threadpool

from core.errors import InvalidOperation, NotFound, StorageFailure, ValidationFailure
from models.match import Match, MatchStatus
from schemas.match import CandidateRead, FriendRead
from schemas.message import MessageRead
from services.match_repository import MatchRepository, PairAlreadyExists
from services.message_store import MessageStore
from services.user_directory import UserDirectory
from utils.image_tools import encode_picture
from utils.storage import PictureUnavailable, read_picture
from utils.user_helpers import to_profile_read

logger = logging.getLogger(__name__)

SWIPE_STATUSES = (MatchStatus.LIKE, MatchStatus.PASS)


class MatchEngine:

    def __init__(
        self,
        users: UserDirectory,
        messages: MessageStore,
        matches: MatchRepository,
        picture_reader: Optional[Callable[[str], tuple[bytes, str]]] = None,
    ):
        self.users = users
        self.messages = messages
        self.matches = matches
        self.picture_reader = picture_reader or read_picture

    async def _require_pair(self, first_user_id: str, second_user_id: str) -> None:
        if first_user_id == second_user_id:
            raise InvalidOperation()
        await self.users.get_user_by_id(first_user_id)
        await self.users.get_user_by_id(second_user_id)

    async def update_status(self, from_user_id: str, to_user_id: str, status: str) -> None:
        """Record ``from_user_id``'s like/pass decision about ``to_user_id``."""
        if status not in SWIPE_STATUSES:
            raise ValidationFailure(f"Cannot swipe with status {status!r}")
        status = MatchStatus(status)
        await self._require_pair(from_user_id, to_user_id)

        match = await self.matches.find_by_pair(from_user_id, to_user_id)
        if match is None:
            try:
                await self.matches.create(from_user_id, to_user_id, status)
                return
            except PairAlreadyExists:
                # the other user's first swipe landed in between
                match = await self.matches.find_by_pair(from_user_id, to_user_id)
                if match is None:
                    raise StorageFailure("Match row could not be created")

        await self.matches.set_status(match, from_user_id, status)

    async def get_next_candidate(self, user_id: str) -> CandidateRead:
        """
        Pick a random user that ``user_id`` has not decided about yet.

        Every sampled user joins the exclusion set, so the loop ends after
        at most one pass over the population. An empty ``user_id`` in the
        result means nobody is left.
        """
        user = await self.users.get_user_by_id(user_id)
        excluded = {user_id}

        while True:
            candidate = await self.users.sample_random_excluding(excluded, user.location)
            if candidate is None:
                return CandidateRead()
            excluded.add(candidate.id)

            match = await self.matches.find_by_pair(user_id, candidate.id)
            if match is None or match.outgoing_status(user_id) == MatchStatus.PENDING:
                return CandidateRead(user_id=candidate.id, profile=to_profile_read(candidate))

    async def is_friend(self, user_a_id: str, user_b_id: str) -> bool:
        await self._require_pair(user_a_id, user_b_id)
        match = await self.matches.find_by_pair(user_a_id, user_b_id)
        return match is not None and match.is_mutual_like

    async def get_friends(self, user_id: str) -> List[FriendRead]:
        """
        Friends of ``user_id`` in match creation order.

        A friend whose account is gone is skipped; a friend whose picture
        cannot be loaded is returned without one.
        """
        friends: List[FriendRead] = []
        for match in await self.matches.list_mutual_likes(user_id):
            friend = await self._build_friend(user_id, match)
            if friend is not None:
                friends.append(friend)
        return friends

    async def _build_friend(self, user_id: str, match: Match) -> Optional[FriendRead]:
        friend_id = match.other_user_id(user_id)
        try:
            nickname = await self.users.get_user_nickname_by_id(friend_id)
        except NotFound:
            logger.warning("Skipping friend %s of %s: user no longer exists", friend_id, user_id)
            return None

        latest = await self.messages.get_latest_message(user_id, friend_id)
        picture, mime_type = await self._load_picture(friend_id)

        return FriendRead(
            friend_id=friend_id,
            friend_nickname=nickname,
            friend_latest_message=MessageRead.model_validate(latest) if latest else None,
            friend_profile_picture=picture,
            mime_type=mime_type,
        )

    async def _load_picture(self, friend_id: str) -> tuple[Optional[str], Optional[str]]:
        path = await self.users.get_profile_picture_path_by_user_id(friend_id)
        if not path:
            return None, None
        try:
            data, mime_type = await run_in_threadpool(self.picture_reader, path)
        except PictureUnavailable as exc:
            logger.warning("Picture of %s unavailable: %s", friend_id, exc)
            return None, None
        return encode_picture(data), mime_type
