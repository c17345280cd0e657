import logging
from typing import List, Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.errors import InvalidOperation, ValidationFailure, storage_errors
from models.message import Message
from services.user_directory import UserDirectory

logger = logging.getLogger(__name__)


class MessageStore:
    """Direct messages between two users."""

    def __init__(self, db: AsyncSession, users: UserDirectory):
        self.db = db
        self.users = users

    async def _check_pair(self, user_a_id: str, user_b_id: str) -> None:
        if user_a_id == user_b_id:
            raise InvalidOperation()
        await self.users.get_user_by_id(user_a_id)
        await self.users.get_user_by_id(user_b_id)

    @staticmethod
    def _conversation(user_a_id: str, user_b_id: str):
        return or_(
            and_(Message.from_user_id == user_a_id, Message.to_user_id == user_b_id),
            and_(Message.from_user_id == user_b_id, Message.to_user_id == user_a_id),
        )

    async def send_message(self, from_user_id: str, to_user_id: str, text: str) -> Message:
        await self._check_pair(from_user_id, to_user_id)

        text = (text or "").strip()
        if not text:
            raise ValidationFailure("Message cannot be empty")
        if len(text) > settings.MESSAGE_MAX_LENGTH:
            raise ValidationFailure(
                f"Message is longer than {settings.MESSAGE_MAX_LENGTH} characters"
            )

        message = Message(from_user_id=from_user_id, to_user_id=to_user_id, message=text)
        self.db.add(message)
        with storage_errors("send message"):
            await self.db.commit()
            await self.db.refresh(message)
        logger.debug("Message %s sent %s→%s", message.id, from_user_id, to_user_id)
        return message

    async def get_history(self, user_a_id: str, user_b_id: str) -> List[Message]:
        """All messages between the two users, newest first."""
        await self._check_pair(user_a_id, user_b_id)
        stmt = (
            select(Message)
            .where(self._conversation(user_a_id, user_b_id))
            .order_by(Message.created_at.desc(), Message.id.desc())
        )
        with storage_errors("load message history"):
            result = await self.db.execute(stmt)
            return list(result.scalars().all())

    async def get_latest_message(self, user_a_id: str, user_b_id: str) -> Optional[Message]:
        await self._check_pair(user_a_id, user_b_id)
        stmt = (
            select(Message)
            .where(self._conversation(user_a_id, user_b_id))
            .order_by(Message.created_at.desc(), Message.id.desc())
            .limit(1)
        )
        with storage_errors("load latest message"):
            return await self.db.scalar(stmt)
