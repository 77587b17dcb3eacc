"""Tests for the session, userinfo, discovery and key set use cases."""

import pytest

from tollgate.application.usecase.oauth import (
    GetDiscoveryDocumentUseCase,
    GetKeySetUseCase,
    GetLoginContentUseCase,
    GetSessionUseCase,
    GetUserInfoUseCase,
    TokenUseCase,
)
from tollgate.domain.error import NotFoundError
from tollgate.domain.model.context import SessionRequest, TokenRequest
from tollgate.domain.model.response import OAuthTokenResponse
from tollgate.domain.provider import SessionTokenResolver
from tollgate.domain.value import OAuthErrorType
from tests.di.store import (
    ALICE,
    ALICE_EMAIL,
    ALICE_PASSWORD,
    CONFIDENTIAL_APP,
    CONFIDENTIAL_APP_SECRET,
)
from tests.harness import create_env_fixture
from tests.tokens import read_claims

# Unit test fixture
unit_env = create_env_fixture()


async def session_request(container) -> SessionRequest:
    """Log alice in and build a request carrying her session."""
    token_use_case = await container.get(TokenUseCase)
    tokens = await token_use_case.execute(
        TokenRequest.from_form(
            {
                "grant_type": "password",
                "client_id": CONFIDENTIAL_APP,
                "client_secret": CONFIDENTIAL_APP_SECRET,
                "username": ALICE,
                "password": ALICE_PASSWORD,
            }
        )
    )
    resolver = await container.get(SessionTokenResolver)
    session = await resolver.resolve_session(tokens.access_token)
    return SessionRequest(session=session)


class TestGetSessionUseCase:
    """Tests for GetSessionUseCase."""

    @pytest.mark.asyncio
    async def test_reissues_session_tokens(self, unit_env):
        use_case = await unit_env.get(GetSessionUseCase)
        request = await session_request(unit_env)

        result = await use_case.execute(request)

        assert isinstance(result, OAuthTokenResponse)
        assert read_claims(result.id_token)["name"] == ALICE
        assert read_claims(result.id_token)["aud"] == CONFIDENTIAL_APP

    @pytest.mark.asyncio
    async def test_requires_session(self, unit_env):
        use_case = await unit_env.get(GetSessionUseCase)

        result = await use_case.execute(SessionRequest())

        assert result.error == OAuthErrorType.INVALID_REQUEST


class TestGetUserInfoUseCase:
    """Tests for GetUserInfoUseCase."""

    @pytest.mark.asyncio
    async def test_returns_first_value_of_each_claim(self, unit_env):
        """Test composite principals report the primary identity's values."""
        use_case = await unit_env.get(GetUserInfoUseCase)
        request = await session_request(unit_env)

        result = await use_case.execute(request)

        assert result["name"] == ALICE
        assert result["email"] == ALICE_EMAIL

    @pytest.mark.asyncio
    async def test_requires_session(self, unit_env):
        use_case = await unit_env.get(GetUserInfoUseCase)

        result = await use_case.execute(SessionRequest())

        assert result.error == OAuthErrorType.INVALID_REQUEST


class TestMetadataUseCases:
    """Tests for discovery, key set and content use cases."""

    @pytest.mark.asyncio
    async def test_discovery_document(self, unit_env):
        use_case = await unit_env.get(GetDiscoveryDocumentUseCase)

        document = await use_case.execute()

        assert document.issuer == "http://localhost:8000/auth"
        assert document.token_endpoint == "http://localhost:8000/auth/oauth2_token"
        assert document.jwks_uri == "http://localhost:8000/auth/jwks"
        assert set(document.grant_types_supported) == {
            "password",
            "client_credentials",
            "authorization_code",
            "refresh_token",
            "x_challenge",
        }
        assert document.response_modes_supported == ["query", "fragment", "form_post"]
        assert document.id_token_signing_alg_values_supported == ["HS256"]

    @pytest.mark.asyncio
    async def test_key_set_publishes_default_key(self, unit_env):
        use_case = await unit_env.get(GetKeySetUseCase)

        key_set = await use_case.execute()

        assert [k["kid"] for k in key_set.keys] == ["default"]

    @pytest.mark.asyncio
    async def test_missing_content(self, unit_env):
        use_case = await unit_env.get(GetLoginContentUseCase)

        with pytest.raises(NotFoundError):
            await use_case.execute("logo.png")
