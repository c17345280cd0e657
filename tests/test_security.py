from datetime import datetime, timedelta, timezone

import pytest

from core.errors import Unauthorized
from core.security import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    TokenRegistry,
    create_access_token,
    decode_token,
    hash_password,
    issue_token_pair,
    refresh_access_token,
    revoke_tokens,
    token_expiry,
    token_registry,
    verify_password,
)


def test_password_hash_roundtrip():
    hashed = hash_password("password123")
    assert hashed != "password123"
    assert verify_password("password123", hashed)
    assert not verify_password("password124", hashed)


def test_access_token_carries_user_id():
    token = create_access_token("65f0c0ffee0000000000abcd")
    assert decode_token(token, ACCESS_TOKEN_TYPE) == "65f0c0ffee0000000000abcd"


def test_tokens_are_unique_per_issue():
    assert create_access_token("u1") != create_access_token("u1")


def test_expired_token_is_rejected():
    token = create_access_token("u1", expires_delta=timedelta(seconds=-5))
    with pytest.raises(Unauthorized):
        decode_token(token, ACCESS_TOKEN_TYPE)


def test_token_type_must_match():
    access_token, refresh_token = issue_token_pair("u1")
    with pytest.raises(Unauthorized):
        decode_token(access_token, REFRESH_TOKEN_TYPE)
    with pytest.raises(Unauthorized):
        decode_token(refresh_token, ACCESS_TOKEN_TYPE)


def test_garbage_token_is_rejected():
    with pytest.raises(Unauthorized):
        decode_token("not-a-jwt", ACCESS_TOKEN_TYPE)


def test_refresh_requires_registered_token():
    _, refresh_token = issue_token_pair("u1")
    new_access = refresh_access_token(refresh_token)
    assert decode_token(new_access, ACCESS_TOKEN_TYPE) == "u1"

    token_registry.clear()
    with pytest.raises(Unauthorized):
        refresh_access_token(refresh_token)


def test_revoke_tokens():
    access_token, refresh_token = issue_token_pair("u1")

    revoke_tokens(access_token, refresh_token)

    assert token_registry.is_revoked(access_token)
    assert not token_registry.has_refresh(refresh_token)


def test_registry_clear_resets_state():
    registry = TokenRegistry()
    later = datetime.now(timezone.utc) + timedelta(hours=1)
    registry.register_refresh("r", later)
    registry.revoke_access("a", later)

    registry.clear()

    assert not registry.has_refresh("r")
    assert not registry.is_revoked("a")


def test_registry_drops_expired_entries_on_insert():
    registry = TokenRegistry()
    now = datetime.now(timezone.utc)
    registry.register_refresh("old-refresh", now - timedelta(seconds=1))
    registry.revoke_access("old-access", now - timedelta(seconds=1))

    registry.register_refresh("new-refresh", now + timedelta(hours=1))
    registry.revoke_access("new-access", now + timedelta(hours=1))

    assert not registry.has_refresh("old-refresh")
    assert not registry.is_revoked("old-access")
    assert registry.has_refresh("new-refresh")
    assert registry.is_revoked("new-access")
    assert len(registry) == 2


def test_token_expiry_reads_exp_claim():
    token = create_access_token("u1", expires_delta=timedelta(minutes=5))
    remaining = token_expiry(token) - datetime.now(timezone.utc)
    assert timedelta(minutes=4) < remaining <= timedelta(minutes=5)

    with pytest.raises(Unauthorized):
        token_expiry("not-a-jwt")
