"""Tests for SSO cookie encoding."""

from datetime import datetime, timedelta, timezone

import pytest

from tollgate.domain.service import AuthorizationCookieService
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestAuthorizationCookieService:
    """Tests for AuthorizationCookieService."""

    @pytest.mark.asyncio
    async def test_record_first_login(self, unit_env):
        """Test a login without a cookie starts a new cookie."""
        # Arrange
        service = await unit_env.get(AuthorizationCookieService)

        # Act
        value, expires = service.record_login(None, "alice", NOW)

        # Assert
        cookie = service.read(value)
        assert cookie.users == ("alice",)
        assert expires == NOW + timedelta(hours=1)

    @pytest.mark.asyncio
    async def test_record_second_user(self, unit_env):
        """Test a second login appends the user in login order."""
        # Arrange
        service = await unit_env.get(AuthorizationCookieService)
        first, _ = service.record_login(None, "alice", NOW)

        # Act
        second, _ = service.record_login(first, "bob", NOW + timedelta(minutes=5))

        # Assert
        cookie = service.read(second)
        assert cookie.users == ("alice", "bob")
        assert cookie.nonce == 2

    @pytest.mark.asyncio
    async def test_repeat_login_is_not_duplicated(self, unit_env):
        """Test logging in again does not repeat the user."""
        service = await unit_env.get(AuthorizationCookieService)
        first, _ = service.record_login(None, "alice", NOW)

        second, _ = service.record_login(first, "ALICE", NOW)

        assert service.read(second).users == ("alice",)

    @pytest.mark.asyncio
    async def test_unreadable_cookie_is_replaced(self, unit_env):
        """Test a corrupt cookie is discarded rather than failing the login."""
        service = await unit_env.get(AuthorizationCookieService)

        value, _ = service.record_login("garbage", "bob", NOW)

        assert service.read("garbage") is None
        assert service.read(value).users == ("bob",)
