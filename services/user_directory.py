"""User records and profiles: registration, lookups and candidate sampling."""
import logging
from collections.abc import Collection
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import NotFound, Unauthorized, ValidationFailure, storage_errors
from core.security import hash_password, verify_password
from models.user import User
from schemas.auth import RegisterRequest
from schemas.user import ProfileUpdate

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class UserDirectory:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(self, data: RegisterRequest) -> User:
        missing = [
            name for name in ("username", "password", "nickname", "gender")
            if not getattr(data, name).strip()
        ]
        if missing:
            raise ValidationFailure(f"Missing registration fields: {', '.join(missing)}")
        if len(data.password) < MIN_PASSWORD_LENGTH:
            raise ValidationFailure(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        username = data.username.strip()
        with storage_errors("check username"):
            exists = await self.db.scalar(select(User.id).where(User.username == username))
        if exists:
            raise ValidationFailure("Username is already taken")

        user = User(
            username=username,
            password_hash=hash_password(data.password),
            nickname=data.nickname.strip(),
            birth_date=data.birth_date,
            gender=data.gender.strip(),
            location=data.location,
            about=data.about,
        )
        self.db.add(user)
        with storage_errors("register user"):
            try:
                await self.db.commit()
            except IntegrityError:
                # lost a race for the same username
                await self.db.rollback()
                raise ValidationFailure("Username is already taken")
            await self.db.refresh(user)
        logger.info("Registered user %s", user.id)
        return user

    async def authenticate(self, username: str, password: str) -> User:
        if not username.strip() or not password.strip():
            raise ValidationFailure("Username and password are required")

        with storage_errors("load user by username"):
            user = await self.db.scalar(select(User).where(User.username == username.strip()))
        if not user or not verify_password(password, user.password_hash):
            raise Unauthorized("Incorrect username or password")
        return user

    async def get_user_by_id(self, user_id: str) -> User:
        with storage_errors("load user"):
            user = await self.db.get(User, user_id)
        if not user:
            raise NotFound(f"User {user_id} not found")
        return user

    async def get_user_nickname_by_id(self, user_id: str) -> str:
        user = await self.get_user_by_id(user_id)
        return user.nickname

    async def get_profile_picture_path_by_user_id(self, user_id: str) -> Optional[str]:
        user = await self.get_user_by_id(user_id)
        return user.profile_picture_path

    async def update_profile(self, user: User, changes: ProfileUpdate) -> User:
        for field, value in changes.model_dump(exclude_unset=True).items():
            if value is None and field in ("nickname", "birth_date", "gender"):
                raise ValidationFailure(f"{field} cannot be empty")
            setattr(user, field, value)
        with storage_errors("update profile"):
            await self.db.commit()
            await self.db.refresh(user)
        return user

    async def update_picture_path(self, user: User, path: str) -> User:
        user.profile_picture_path = path
        with storage_errors("update picture path"):
            await self.db.commit()
            await self.db.refresh(user)
        return user

    async def sample_random_excluding(
        self,
        exclude: Collection[str],
        preferred_location: Optional[str] = None,
    ) -> Optional[User]:
        """
        One uniformly random user whose id is not in ``exclude``.

        Users sharing ``preferred_location`` are tried first; when none is
        left the sample is taken from everyone else.
        """
        stmt = select(User).order_by(func.random()).limit(1)
        if exclude:
            stmt = stmt.where(User.id.not_in(list(exclude)))

        with storage_errors("sample random user"):
            if preferred_location:
                user = await self.db.scalar(stmt.where(User.location == preferred_location))
                if user:
                    return user
            return await self.db.scalar(stmt)
