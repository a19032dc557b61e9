"""Unit tests for JWT verification and the current-user dependency."""

from datetime import timedelta
from uuid import uuid4

import pytest
from fastapi import HTTPException
from jose import jwt

from config.settings import settings
from src.pf_common.errors import InvalidCredentialsError
from src.pf_gateway.auth.dependencies import get_current_user_id
from src.pf_gateway.auth.jwt_handler import create_access_token, decode_access_token


def test_access_token_contains_correct_claims() -> None:
    token = create_access_token("user-123")
    payload = jwt.get_unverified_claims(token)
    assert payload["sub"] == "user-123"
    assert payload["type"] == "access"


def test_decode_valid_access_token() -> None:
    token = create_access_token("user-abc")
    assert decode_access_token(token)["sub"] == "user-abc"


def test_expired_token_raises() -> None:
    token = create_access_token("user-abc", expires_in=timedelta(seconds=-1))
    with pytest.raises(InvalidCredentialsError):
        decode_access_token(token)


def test_wrong_secret_raises() -> None:
    token = jwt.encode({"sub": "u", "type": "access"}, "other-secret", algorithm="HS256")
    with pytest.raises(InvalidCredentialsError):
        decode_access_token(token)


def test_non_access_token_raises() -> None:
    token = jwt.encode({"sub": "u", "type": "refresh"}, settings.JWT_SECRET, algorithm="HS256")
    with pytest.raises(InvalidCredentialsError):
        decode_access_token(token)


class TestGetCurrentUserId:
    async def test_returns_normalized_uuid(self) -> None:
        user_id = uuid4()
        token = create_access_token(str(user_id).upper())
        assert await get_current_user_id(token) == str(user_id)

    async def test_non_uuid_subject_is_401(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user_id(create_access_token("not-a-uuid"))
        assert exc_info.value.status_code == 401

    async def test_missing_subject_is_401(self) -> None:
        token = jwt.encode({"type": "access"}, settings.JWT_SECRET, algorithm="HS256")
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user_id(token)
        assert exc_info.value.status_code == 401

    async def test_garbage_token_is_401(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user_id("garbage")
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}
