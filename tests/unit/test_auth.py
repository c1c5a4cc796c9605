"""
Unit tests for auth providers and the optional-session dependency.
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from jose import JWTError, jwt

from llynx.api.deps import get_optional_user
from llynx.infrastructure.auth.local_auth import LocalAuthProvider
from llynx.infrastructure.local.mock_auth import MockAuthProvider


@pytest.fixture
def jwt_settings(settings):
    return settings.model_copy(update={"AUTH_PROVIDER": "local", "LOCAL_JWT_SECRET": "test-secret"})


def _issue_token(user_id, settings, expires_minutes=60, email=None):
    """Sign a session token the way the login service does."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=expires_minutes)).timestamp()),
    }
    if email:
        payload["email"] = email
    if settings.LOCAL_JWT_ISSUER:
        payload["iss"] = settings.LOCAL_JWT_ISSUER
    return jwt.encode(payload, settings.LOCAL_JWT_SECRET, algorithm="HS256")


def _request(cookies=None):
    return SimpleNamespace(cookies=cookies or {})


class TestMockAuthProvider:
    @pytest.mark.asyncio
    async def test_token_is_user_id(self):
        user = await MockAuthProvider().verify_token("alice")
        assert user.id == "alice"

    @pytest.mark.asyncio
    async def test_email_token(self):
        user = await MockAuthProvider().verify_token("bob@example.org")
        assert user.id == "bob@example.org"
        assert user.email == "bob@example.org"

    @pytest.mark.asyncio
    async def test_empty_token_rejected(self):
        with pytest.raises(ValueError):
            await MockAuthProvider().verify_token("   ")


class TestLocalAuthProvider:
    @pytest.mark.asyncio
    async def test_round_trip(self, jwt_settings):
        token = _issue_token("user-7", jwt_settings, email="u7@example.org")

        user = await LocalAuthProvider(jwt_settings).verify_token(token)

        assert user.id == "user-7"
        assert user.email == "u7@example.org"

    @pytest.mark.asyncio
    async def test_wrong_secret_rejected(self, jwt_settings):
        token = _issue_token("user-7", jwt_settings.model_copy(update={"LOCAL_JWT_SECRET": "other"}))

        with pytest.raises(JWTError):
            await LocalAuthProvider(jwt_settings).verify_token(token)

    @pytest.mark.asyncio
    async def test_wrong_issuer_rejected(self, jwt_settings):
        token = _issue_token("user-7", jwt_settings.model_copy(update={"LOCAL_JWT_ISSUER": "elsewhere"}))

        with pytest.raises(JWTError):
            await LocalAuthProvider(jwt_settings).verify_token(token)

    @pytest.mark.asyncio
    async def test_expired_token_rejected(self, jwt_settings):
        token = _issue_token("user-7", jwt_settings, expires_minutes=-5)

        with pytest.raises(JWTError):
            await LocalAuthProvider(jwt_settings).verify_token(token)

    def test_secret_required(self, settings):
        with pytest.raises(ValueError):
            LocalAuthProvider(settings.model_copy(update={"LOCAL_JWT_SECRET": ""}))


class TestOptionalUser:
    @pytest.mark.asyncio
    async def test_bearer_header(self, settings):
        user = await get_optional_user(_request(), "Bearer alice", MockAuthProvider(), settings)
        assert user.id == "alice"

    @pytest.mark.asyncio
    async def test_cookie(self, settings):
        user = await get_optional_user(_request({"app_session": "carol"}), None, MockAuthProvider(), settings)
        assert user.id == "carol"

    @pytest.mark.asyncio
    async def test_missing_token_is_guest(self, settings):
        assert await get_optional_user(_request(), None, MockAuthProvider(), settings) is None

    @pytest.mark.asyncio
    async def test_non_bearer_scheme_is_guest(self, settings):
        assert await get_optional_user(_request(), "Basic YWxpY2U6eA==", MockAuthProvider(), settings) is None

    @pytest.mark.asyncio
    async def test_invalid_token_is_guest(self, jwt_settings):
        provider = LocalAuthProvider(jwt_settings)
        assert await get_optional_user(_request(), "Bearer not-a-jwt", provider, jwt_settings) is None

    @pytest.mark.asyncio
    async def test_disabled_provider_is_guest(self, settings):
        provider = MockAuthProvider(enabled=False)
        assert await get_optional_user(_request(), "Bearer alice", provider, settings) is None
