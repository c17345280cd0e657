# models/user.py
from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, Date, DateTime

from .base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(24), primary_key=True, index=True)
    username = Column(String(64), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    nickname = Column(String(64), nullable=False)
    birth_date = Column(Date, nullable=False)
    gender = Column(String(16), nullable=False)
    location = Column(String(128), nullable=True, index=True)
    about = Column(Text, nullable=True)
    profile_picture_path = Column(String(255), nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self):
        return f"<User id={self.id} username={self.username}>"
