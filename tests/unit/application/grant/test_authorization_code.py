"""Tests for the authorization code grant."""

from urllib.parse import parse_qs, urlsplit

import pytest

from tollgate.adapter.crypto.pkce import generate_pkce_pair
from tollgate.application.usecase.oauth import AuthorizeUseCase, TokenUseCase
from tollgate.domain.model.context import AuthorizeRequest, TokenRequest
from tollgate.domain.model.response import OAuthTokenResponse
from tollgate.domain.value import OAuthErrorType
from tests.di.store import (
    ALICE,
    ALICE_PASSWORD,
    ALICE_SID,
    CONFIDENTIAL_APP,
    CONFIDENTIAL_APP_SECRET,
    PUBLIC_APP,
)
from tests.harness import create_env_fixture
from tests.tokens import read_claims

# Unit test fixture
unit_env = create_env_fixture()

REDIRECT_URI = "https://spa.example.org/callback"


async def obtain_code(container, client_id: str, **fields: str) -> str:
    use_case = await container.get(AuthorizeUseCase)
    form = {
        "client_id": client_id,
        "redirect_uri": REDIRECT_URI,
        "username": ALICE,
        "password": ALICE_PASSWORD,
        **fields,
    }
    result = await use_case.execute(AuthorizeRequest.from_form(form))
    return parse_qs(urlsplit(result.location).query)["code"][0]


class TestAuthorizationCodeGrant:
    """Tests for AuthorizationCodeGrantHandler through the token use case."""

    @pytest.mark.asyncio
    async def test_public_client_with_pkce(self, unit_env):
        """Test a public client redeems its code with the PKCE verifier."""
        # Arrange
        verifier, challenge = generate_pkce_pair()
        code = await obtain_code(
            unit_env,
            PUBLIC_APP,
            code_challenge=challenge,
            code_challenge_method="S256",
            nonce="n-42",
            scope="openid profile",
        )
        token_use_case = await unit_env.get(TokenUseCase)

        # Act
        result = await token_use_case.execute(
            TokenRequest.from_form(
                {
                    "grant_type": "authorization_code",
                    "client_id": PUBLIC_APP,
                    "code": code,
                    "code_verifier": verifier,
                }
            )
        )

        # Assert
        assert isinstance(result, OAuthTokenResponse)
        claims = read_claims(result.id_token)
        assert claims["sub"] == ALICE_SID
        assert claims["aud"] == PUBLIC_APP
        assert claims["nonce"] == "n-42"
        assert claims["scope"] == ["openid", "profile"]

    @pytest.mark.asyncio
    async def test_wrong_verifier(self, unit_env):
        _, challenge = generate_pkce_pair()
        other_verifier, _ = generate_pkce_pair()
        code = await obtain_code(
            unit_env, PUBLIC_APP, code_challenge=challenge, code_challenge_method="S256"
        )
        token_use_case = await unit_env.get(TokenUseCase)

        result = await token_use_case.execute(
            TokenRequest.from_form(
                {
                    "grant_type": "authorization_code",
                    "client_id": PUBLIC_APP,
                    "code": code,
                    "code_verifier": other_verifier,
                }
            )
        )

        assert result.error == OAuthErrorType.INVALID_GRANT

    @pytest.mark.asyncio
    async def test_public_client_without_pkce(self, unit_env):
        """Test an unauthenticated client cannot redeem a code without PKCE."""
        code = await obtain_code(unit_env, PUBLIC_APP)
        token_use_case = await unit_env.get(TokenUseCase)

        result = await token_use_case.execute(
            TokenRequest.from_form(
                {"grant_type": "authorization_code", "client_id": PUBLIC_APP, "code": code}
            )
        )

        assert result.error == OAuthErrorType.INVALID_CLIENT

    @pytest.mark.asyncio
    async def test_confidential_client_without_pkce(self, unit_env):
        code = await obtain_code(unit_env, CONFIDENTIAL_APP)
        token_use_case = await unit_env.get(TokenUseCase)

        result = await token_use_case.execute(
            TokenRequest.from_form(
                {
                    "grant_type": "authorization_code",
                    "client_id": CONFIDENTIAL_APP,
                    "client_secret": CONFIDENTIAL_APP_SECRET,
                    "code": code,
                }
            )
        )

        assert isinstance(result, OAuthTokenResponse)

    @pytest.mark.asyncio
    async def test_code_issued_to_another_client(self, unit_env):
        code = await obtain_code(unit_env, PUBLIC_APP)
        token_use_case = await unit_env.get(TokenUseCase)

        result = await token_use_case.execute(
            TokenRequest.from_form(
                {
                    "grant_type": "authorization_code",
                    "client_id": CONFIDENTIAL_APP,
                    "client_secret": CONFIDENTIAL_APP_SECRET,
                    "code": code,
                }
            )
        )

        assert result.error == OAuthErrorType.INVALID_GRANT
        assert result.error_description == "authorization code was issued to another client"

    @pytest.mark.asyncio
    async def test_garbage_code(self, unit_env):
        token_use_case = await unit_env.get(TokenUseCase)

        result = await token_use_case.execute(
            TokenRequest.from_form(
                {
                    "grant_type": "authorization_code",
                    "client_id": CONFIDENTIAL_APP,
                    "client_secret": CONFIDENTIAL_APP_SECRET,
                    "code": "garbage",
                }
            )
        )

        assert result.error == OAuthErrorType.INVALID_GRANT
