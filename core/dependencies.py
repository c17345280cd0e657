from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from services.match_engine import MatchEngine
from services.match_repository import MatchRepository
from services.message_store import MessageStore
from services.user_directory import UserDirectory


def get_user_directory(db: AsyncSession = Depends(get_db)) -> UserDirectory:
    return UserDirectory(db)


def get_message_store(
    db: AsyncSession = Depends(get_db),
    users: UserDirectory = Depends(get_user_directory),
) -> MessageStore:
    return MessageStore(db, users)


def get_match_engine(
    db: AsyncSession = Depends(get_db),
    users: UserDirectory = Depends(get_user_directory),
    messages: MessageStore = Depends(get_message_store),
) -> MatchEngine:
    return MatchEngine(users, messages, MatchRepository(db))
