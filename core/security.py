# core/security.py
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.database import get_db
from core.errors import Unauthorized, storage_errors
from models.user import User

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class TokenRegistry:
    """
    Process-wide record of issued refresh tokens and revoked access tokens.

    Entries are kept with their expiry and pruned on every insert, since an
    expired token is rejected by ``decode_token`` anyway. ``clear()`` is
    called on shutdown and between tests.
    """

    def __init__(self):
        self._refresh_tokens: dict[str, datetime] = {}
        self._revoked_access_tokens: dict[str, datetime] = {}

    @staticmethod
    def _prune(entries: dict[str, datetime], now: datetime) -> None:
        for token in [t for t, expires_at in entries.items() if expires_at <= now]:
            del entries[token]

    def register_refresh(self, token: str, expires_at: datetime) -> None:
        self._prune(self._refresh_tokens, datetime.now(timezone.utc))
        self._refresh_tokens[token] = expires_at

    def discard_refresh(self, token: str) -> None:
        self._refresh_tokens.pop(token, None)

    def has_refresh(self, token: str) -> bool:
        return token in self._refresh_tokens

    def revoke_access(self, token: str, expires_at: datetime) -> None:
        self._prune(self._revoked_access_tokens, datetime.now(timezone.utc))
        self._revoked_access_tokens[token] = expires_at

    def is_revoked(self, token: str) -> bool:
        return token in self._revoked_access_tokens

    def __len__(self) -> int:
        return len(self._refresh_tokens) + len(self._revoked_access_tokens)

    def clear(self) -> None:
        self._refresh_tokens.clear()
        self._revoked_access_tokens.clear()


token_registry = TokenRegistry()


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _create_token(user_id: str, token_type: str, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "user_id": user_id,
        "type": token_type,
        "iat": now,
        "exp": now + expires_delta,
        "jti": secrets.token_hex(8),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    delta = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _create_token(user_id, ACCESS_TOKEN_TYPE, delta)


def create_refresh_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    delta = expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    return _create_token(user_id, REFRESH_TOKEN_TYPE, delta)


def decode_token(token: str, expected_type: str) -> str:
    """Validate signature, expiry and type; return the user id the token was issued for."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise Unauthorized("Invalid or expired token")

    user_id = payload.get("user_id")
    if not user_id or payload.get("type") != expected_type:
        raise Unauthorized("Invalid token payload")
    return user_id


def token_expiry(token: str) -> datetime:
    """Expiry claim of a token this service issued; the signature is not checked."""
    try:
        claims = jwt.get_unverified_claims(token)
        return datetime.fromtimestamp(claims["exp"], timezone.utc)
    except (JWTError, KeyError, TypeError, ValueError):
        raise Unauthorized("Invalid token payload")


def issue_token_pair(user_id: str) -> tuple[str, str]:
    access_token = create_access_token(user_id)
    refresh_token = create_refresh_token(user_id)
    token_registry.register_refresh(refresh_token, token_expiry(refresh_token))
    return access_token, refresh_token


def refresh_access_token(refresh_token: str) -> str:
    if not token_registry.has_refresh(refresh_token):
        raise Unauthorized("Invalid or expired refresh token")
    user_id = decode_token(refresh_token, REFRESH_TOKEN_TYPE)
    return create_access_token(user_id)


def revoke_tokens(access_token: str, refresh_token: Optional[str] = None) -> None:
    token_registry.revoke_access(access_token, token_expiry(access_token))
    if refresh_token:
        token_registry.discard_refresh(refresh_token)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    if token_registry.is_revoked(token):
        raise Unauthorized("Token has been revoked")

    user_id = decode_token(token, ACCESS_TOKEN_TYPE)

    with storage_errors("load current user"):
        result = await db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
    if not user:
        raise Unauthorized("User not found")
    return user
