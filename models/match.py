# models/match.py
import enum
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Enum, ForeignKey, UniqueConstraint, CheckConstraint

from core.id_generator import canonical_pair
from .base import Base


class MatchStatus(str, enum.Enum):
    PENDING = "pending"
    LIKE = "like"
    PASS = "pass"


def _utcnow():
    return datetime.now(timezone.utc)


_status_type = Enum(
    MatchStatus,
    name="match_status",
    native_enum=False,
    length=8,
    values_callable=lambda statuses: [s.value for s in statuses],
)


class Match(Base):
    """
    Swipe state of one unordered pair of users.

    ``user_a_id`` is the user whose swipe created the row and never changes
    afterwards. ``pair_low``/``pair_high`` hold the sorted ids so the pair is
    unique regardless of who swiped first.
    """

    __tablename__ = "matches"

    id = Column(String(24), primary_key=True, index=True)
    user_a_id = Column(String(24), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user_b_id = Column(String(24), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    pair_low = Column(String(24), nullable=False)
    pair_high = Column(String(24), nullable=False)

    user_a_to_b_status = Column(_status_type, nullable=False, default=MatchStatus.PENDING)
    user_b_to_a_status = Column(_status_type, nullable=False, default=MatchStatus.PENDING)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("pair_low", "pair_high", name="uq_matches_pair"),
        CheckConstraint("user_a_id <> user_b_id", name="chk_matches_no_self"),
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if self.user_a_id and self.user_b_id:
            self.pair_low, self.pair_high = canonical_pair(self.user_a_id, self.user_b_id)

    def status_column_for(self, user_id: str) -> str:
        """Name of the column holding ``user_id``'s decision about the other user."""
        if user_id == self.user_a_id:
            return "user_a_to_b_status"
        if user_id == self.user_b_id:
            return "user_b_to_a_status"
        raise ValueError(f"User {user_id} is not part of match {self.id}")

    def outgoing_status(self, user_id: str) -> MatchStatus:
        return MatchStatus(getattr(self, self.status_column_for(user_id)))

    def other_user_id(self, user_id: str) -> str:
        return self.user_b_id if user_id == self.user_a_id else self.user_a_id

    @property
    def is_mutual_like(self) -> bool:
        return (
            self.user_a_to_b_status == MatchStatus.LIKE
            and self.user_b_to_a_status == MatchStatus.LIKE
        )

    def __repr__(self):
        return (
            f"<Match {self.user_a_id}({self.user_a_to_b_status})"
            f"↔{self.user_b_id}({self.user_b_to_a_status})>"
        )
