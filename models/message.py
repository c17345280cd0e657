# models/message.py
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index

from .base import Base


class Message(Base):
    __tablename__ = "messages"

    id = Column(String(24), primary_key=True, index=True)
    from_user_id = Column(String(24), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    to_user_id = Column(String(24), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    message = Column(Text, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_messages_conversation", "from_user_id", "to_user_id", "created_at"),
    )

    def __repr__(self):
        return f"<Message {self.from_user_id}→{self.to_user_id}>"
