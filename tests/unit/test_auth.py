"""Tests for bearer token verification."""

import pytest
from fastapi.security import HTTPAuthorizationCredentials

from src.api.auth import decode_access_token, get_current_user
from src.shared.exceptions import UnauthorizedError
from tests.conftest import USER_ID, make_access_token


class TestDecodeAccessToken:
    def test_valid_token(self):
        payload = decode_access_token(make_access_token())
        assert payload["sub"] == USER_ID
        assert payload["aud"] == "authenticated"

    def test_expired_token(self):
        token = make_access_token(expires_in=-60)
        with pytest.raises(UnauthorizedError, match="expired"):
            decode_access_token(token)

    def test_wrong_audience(self):
        token = make_access_token(audience="anon")
        with pytest.raises(UnauthorizedError, match="Invalid token"):
            decode_access_token(token)

    def test_wrong_secret(self):
        token = make_access_token(secret="not-the-signing-secret-at-all-0123456789")
        with pytest.raises(UnauthorizedError, match="Invalid token"):
            decode_access_token(token)

    def test_garbage(self):
        with pytest.raises(UnauthorizedError):
            decode_access_token("not-a-jwt")


class TestGetCurrentUser:
    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        with pytest.raises(UnauthorizedError, match="No authorization header"):
            await get_current_user(None)

    @pytest.mark.asyncio
    async def test_resolves_user(self):
        credentials = HTTPAuthorizationCredentials(
            scheme="Bearer", credentials=make_access_token()
        )
        user = await get_current_user(credentials)
        assert user.id == USER_ID
        assert user.email == "analyst@example.com"
        assert user.role == "authenticated"
