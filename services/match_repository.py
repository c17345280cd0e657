import logging
from typing import List, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import storage_errors
from core.id_generator import canonical_pair
from models.match import Match, MatchStatus

logger = logging.getLogger(__name__)


class PairAlreadyExists(Exception):
    """A concurrent request created the match row for this pair first."""


class MatchRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_pair(self, first_user_id: str, second_user_id: str) -> Optional[Match]:
        low, high = canonical_pair(first_user_id, second_user_id)
        stmt = select(Match).where(Match.pair_low == low, Match.pair_high == high)
        with storage_errors("find match"):
            return await self.db.scalar(stmt)

    async def create(self, from_user_id: str, to_user_id: str, status: MatchStatus) -> Match:
        match = Match(
            user_a_id=from_user_id,
            user_b_id=to_user_id,
            user_a_to_b_status=status,
            user_b_to_a_status=MatchStatus.PENDING,
        )
        self.db.add(match)
        with storage_errors("create match"):
            try:
                await self.db.commit()
            except IntegrityError as exc:
                await self.db.rollback()
                raise PairAlreadyExists(f"{from_user_id}↔{to_user_id}") from exc
            await self.db.refresh(match)
        return match

    async def set_status(self, match: Match, user_id: str, status: MatchStatus) -> Match:
        """
        Write ``user_id``'s decision into its own slot only.

        The UPDATE names a single status column, so the other user's slot is
        never overwritten by a stale read.
        """
        column = match.status_column_for(user_id)
        stmt = (
            update(Match)
            .where(Match.id == match.id)
            .values({column: status})
            .execution_options(synchronize_session=False)
        )
        with storage_errors("update match status"):
            await self.db.execute(stmt)
            await self.db.commit()
            await self.db.refresh(match)
        return match

    async def list_mutual_likes(self, user_id: str) -> List[Match]:
        """Matches of ``user_id`` where both sides liked, oldest first."""
        stmt = (
            select(Match)
            .where(
                or_(Match.user_a_id == user_id, Match.user_b_id == user_id),
                Match.user_a_to_b_status == MatchStatus.LIKE,
                Match.user_b_to_a_status == MatchStatus.LIKE,
            )
            .order_by(Match.created_at.asc(), Match.id.asc())
        )
        with storage_errors("list mutual likes"):
            result = await self.db.execute(stmt)
            return list(result.scalars().all())
