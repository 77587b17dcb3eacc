"""Tests for the token endpoint use case."""

from base64 import b64encode

import jwt
import pytest

from tollgate.application.grant import GrantHandlerRegistry, PasswordGrantHandler
from tollgate.application.usecase.oauth import TokenUseCase, parse_client_claims
from tollgate.config import OAuthSettings, PolicySettings, SessionSettings
from tollgate.domain.model.context import TokenRequest
from tollgate.domain.model.response import OAuthError, OAuthTokenResponse
from tollgate.domain.provider import (
    ApplicationIdentityProvider,
    AuditService,
    DeviceIdentityProvider,
    PolicyEnforcementService,
    RoleProvider,
)
from tollgate.domain.service import (
    ClaimMapperRegistry,
    SessionService,
    SigningCredentialService,
    TokenService,
)
from tollgate.domain.value import AuditAction, AuditOutcome, ClaimTypes, OAuthErrorType
from tollgate.persistence.inmemory import (
    InMemoryAuditService,
    InMemorySessionStore,
    InMemoryUserIdentityProvider,
)
from tests.di.store import (
    ALICE,
    ALICE_EMAIL,
    ALICE_PASSWORD,
    ALICE_SID,
    CAROL,
    CAROL_MFA_CODE,
    CAROL_PASSWORD,
    CONFIDENTIAL_APP,
    CONFIDENTIAL_APP_SECRET,
    CONFIDENTIAL_APP_SID,
    DAVE,
    DAVE_PASSWORD,
    DEVICE,
    DEVICE_SECRET,
    DEVICE_SID,
    MALLORY,
    MALLORY_PASSWORD,
    PUBLIC_APP,
    RESTRICTED_APP,
    RESTRICTED_APP_SECRET,
    seed_users,
)
from tests.harness import create_env_fixture
from tests.tokens import read_claims

# Unit test fixture
unit_env = create_env_fixture()


def password_form(**overrides: str) -> dict[str, str]:
    form = {
        "grant_type": "password",
        "client_id": CONFIDENTIAL_APP,
        "client_secret": CONFIDENTIAL_APP_SECRET,
        "username": ALICE,
        "password": ALICE_PASSWORD,
    }
    form.update(overrides)
    return form


class CountingUserIdentityProvider(InMemoryUserIdentityProvider):
    """Seeded user store that counts authentication attempts."""

    def __init__(self) -> None:
        super().__init__()
        self.calls = 0

    async def authenticate(self, username, password, mfa_code=None):
        self.calls += 1
        return await super().authenticate(username, password, mfa_code)


class TestParseClientClaims:
    """Tests for parse_client_claims."""

    def test_parses_pairs(self):
        header = b64encode(b"urn:a=1;urn:b = two ;garbage").decode()

        claims = parse_client_claims(header)

        assert [(c.type, c.value) for c in claims] == [("urn:a", "1"), ("urn:b", "two")]

    def test_empty_header(self):
        assert parse_client_claims(None) == []

    def test_malformed_header(self):
        with pytest.raises(ValueError):
            parse_client_claims("not base64!")


class TestTokenUseCase:
    """Tests for TokenUseCase dispatch and token issuance."""

    @pytest.mark.asyncio
    async def test_empty_form(self, unit_env):
        """Test an empty form is an invalid request."""
        use_case = await unit_env.get(TokenUseCase)

        result = await use_case.execute(TokenRequest.from_form({}))

        assert isinstance(result, OAuthError)
        assert result.error == OAuthErrorType.INVALID_REQUEST

    @pytest.mark.asyncio
    async def test_unsupported_grant_never_authenticates(self, unit_env):
        """Test an unknown grant type is refused before any authentication."""
        # Arrange
        users = CountingUserIdentityProvider()
        seed_users(users)
        handler = PasswordGrantHandler(
            identity_provider=users,
            application_provider=await unit_env.get(ApplicationIdentityProvider),
            policy_enforcement=await unit_env.get(PolicyEnforcementService),
            policy_settings=await unit_env.get(PolicySettings),
        )
        use_case = TokenUseCase(
            grant_registry=GrantHandlerRegistry([handler]),
            application_provider=await unit_env.get(ApplicationIdentityProvider),
            session_service=await unit_env.get(SessionService),
            token_service=await unit_env.get(TokenService),
        )

        # Act
        refused = await use_case.execute(
            TokenRequest.from_form(password_form(grant_type="implicit"))
        )
        issued = await use_case.execute(TokenRequest.from_form(password_form()))

        # Assert
        assert refused.error == OAuthErrorType.UNSUPPORTED_GRANT_TYPE
        assert refused.error_description == "implicit is not supported"
        assert isinstance(issued, OAuthTokenResponse)
        assert users.calls == 1

    @pytest.mark.asyncio
    async def test_grant_type_is_case_insensitive(self, unit_env):
        use_case = await unit_env.get(TokenUseCase)

        result = await use_case.execute(
            TokenRequest.from_form(password_form(grant_type=" PASSWORD "))
        )

        assert isinstance(result, OAuthTokenResponse)

    @pytest.mark.asyncio
    async def test_password_grant_issues_tokens(self, unit_env):
        """Test the password grant for a confidential client."""
        # Arrange
        use_case = await unit_env.get(TokenUseCase)
        audit = await unit_env.get(InMemoryAuditService)

        # Act
        result = await use_case.execute(
            TokenRequest.from_form(password_form(nonce="abc"), remote_ip="10.0.0.7")
        )

        # Assert
        assert isinstance(result, OAuthTokenResponse)
        assert result.token_type == "bearer"
        assert 0 < result.expires_in <= 3600
        assert result.refresh_token
        assert result.nonce == "abc"

        claims = read_claims(result.id_token)
        assert claims["name"] == ALICE
        assert claims["sub"] == ALICE_SID
        assert claims["aud"] == CONFIDENTIAL_APP
        assert claims["email"] == ALICE_EMAIL
        assert claims["role"] == ["clinician", "reviewer"]
        assert claims["usrid"] == ALICE_SID
        assert claims["appid"] == CONFIDENTIAL_APP_SID
        assert claims["nonce"] == "abc"
        assert claims["sid"]
        assert claims["at_hash"]
        assert claims["jti"]

        assert [e.action for e in audit.events] == [AuditAction.SESSION_START]
        assert audit.events[0].outcome == AuditOutcome.SUCCESS
        assert audit.events[0].remote_ip == "10.0.0.7"

    @pytest.mark.asyncio
    async def test_confidential_tokens_are_signed_with_client_secret(self, unit_env):
        """Test the symmetric fallback keys the id token to the client secret."""
        use_case = await unit_env.get(TokenUseCase)

        result = await use_case.execute(TokenRequest.from_form(password_form()))

        header = jwt.get_unverified_header(result.id_token)
        assert header["alg"] == "HS256"
        assert header["kid"] == CONFIDENTIAL_APP

    @pytest.mark.asyncio
    async def test_public_client_password_grant(self, unit_env):
        """Test a public client authenticates on behalf of the user."""
        use_case = await unit_env.get(TokenUseCase)
        form = password_form(client_id=PUBLIC_APP)
        del form["client_secret"]

        result = await use_case.execute(TokenRequest.from_form(form))

        assert isinstance(result, OAuthTokenResponse)
        assert read_claims(result.id_token)["aud"] == PUBLIC_APP

    @pytest.mark.asyncio
    async def test_wrong_password(self, unit_env):
        use_case = await unit_env.get(TokenUseCase)

        result = await use_case.execute(TokenRequest.from_form(password_form(password="no")))

        assert result.error == OAuthErrorType.INVALID_GRANT

    @pytest.mark.asyncio
    async def test_wrong_client_secret(self, unit_env):
        """Test a bad client secret fails without falling back to public auth."""
        use_case = await unit_env.get(TokenUseCase)

        result = await use_case.execute(
            TokenRequest.from_form(password_form(client_secret="nope"))
        )

        assert result.error == OAuthErrorType.INVALID_CLIENT

    @pytest.mark.asyncio
    async def test_second_factor_required(self, unit_env):
        """Test a user with MFA needs the code, then succeeds with it."""
        use_case = await unit_env.get(TokenUseCase)

        missing = await use_case.execute(
            TokenRequest.from_form(password_form(username=CAROL, password=CAROL_PASSWORD))
        )
        supplied = await use_case.execute(
            TokenRequest.from_form(
                password_form(
                    username=CAROL, password=CAROL_PASSWORD, mfa_code=CAROL_MFA_CODE
                )
            )
        )

        assert missing.error == OAuthErrorType.MFA_REQUIRED
        assert isinstance(supplied, OAuthTokenResponse)

    @pytest.mark.asyncio
    async def test_password_expired(self, unit_env):
        use_case = await unit_env.get(TokenUseCase)

        result = await use_case.execute(
            TokenRequest.from_form(password_form(username=DAVE, password=DAVE_PASSWORD))
        )

        assert result.error == OAuthErrorType.PASSWORD_EXPIRED

    @pytest.mark.asyncio
    async def test_user_without_policy(self, unit_env):
        use_case = await unit_env.get(TokenUseCase)

        result = await use_case.execute(
            TokenRequest.from_form(
                password_form(username=MALLORY, password=MALLORY_PASSWORD)
            )
        )

        assert result.error == OAuthErrorType.UNAUTHORIZED_CLIENT

    @pytest.mark.asyncio
    async def test_client_without_policy(self, unit_env):
        use_case = await unit_env.get(TokenUseCase)

        result = await use_case.execute(
            TokenRequest.from_form(
                password_form(client_id=RESTRICTED_APP, client_secret=RESTRICTED_APP_SECRET)
            )
        )

        assert result.error == OAuthErrorType.UNAUTHORIZED_CLIENT

    @pytest.mark.asyncio
    async def test_client_claims_reach_the_token(self, unit_env):
        """Test client supplied claims and ui_locales end up in the id token."""
        # Arrange
        use_case = await unit_env.get(TokenUseCase)
        header = b64encode(f"{ClaimTypes.PURPOSE_OF_USE}=TREATMENT".encode()).decode()

        # Act
        result = await use_case.execute(
            TokenRequest.from_form(
                password_form(ui_locales="fr"), client_claim_header=header
            )
        )

        # Assert
        extensions = read_claims(result.id_token)["extensions"]
        assert extensions["ihe_iua"]["purpose_of_use"] == {"code": "TREATMENT"}
        assert extensions["tollgate"]["lang"] == "fr"

    @pytest.mark.asyncio
    async def test_malformed_client_claim_header(self, unit_env):
        use_case = await unit_env.get(TokenUseCase)

        result = await use_case.execute(
            TokenRequest.from_form(password_form(), client_claim_header="%%%")
        )

        assert result.error == OAuthErrorType.INVALID_REQUEST


class TestClientCredentialsGrant:
    """Tests for the client_credentials grant through the token use case."""

    @pytest.mark.asyncio
    async def test_requires_device_by_default(self, unit_env):
        """Test client-only grants are refused unless enabled."""
        use_case = await unit_env.get(TokenUseCase)

        result = await use_case.execute(
            TokenRequest.from_form(
                {
                    "grant_type": "client_credentials",
                    "client_id": CONFIDENTIAL_APP,
                    "client_secret": CONFIDENTIAL_APP_SECRET,
                }
            )
        )

        assert result.error == OAuthErrorType.UNAUTHORIZED_CLIENT

    @pytest.mark.asyncio
    async def test_with_authenticated_device(self, unit_env):
        """Test an application on an authenticated device gets a client session."""
        # Arrange
        use_case = await unit_env.get(TokenUseCase)
        devices = await unit_env.get(DeviceIdentityProvider)
        device = await devices.authenticate(DEVICE, DEVICE_SECRET)

        # Act
        result = await use_case.execute(
            TokenRequest.from_form(
                {
                    "grant_type": "client_credentials",
                    "client_id": CONFIDENTIAL_APP,
                    "client_secret": CONFIDENTIAL_APP_SECRET,
                },
                authenticated_principal=device,
            )
        )

        # Assert
        assert isinstance(result, OAuthTokenResponse)
        claims = read_claims(result.id_token)
        assert claims["name"] == CONFIDENTIAL_APP
        assert claims["devid"] == DEVICE_SID
        assert "usrid" not in claims

    @pytest.mark.asyncio
    async def test_missing_client_secret(self, unit_env):
        use_case = await unit_env.get(TokenUseCase)

        result = await use_case.execute(
            TokenRequest.from_form(
                {"grant_type": "client_credentials", "client_id": PUBLIC_APP}
            )
        )

        assert result.error == OAuthErrorType.INVALID_CLIENT


class TestRequiredSessionClaims:
    """Tests for sessions that demand claims the request does not carry."""

    async def build_use_case(self, container, store: InMemorySessionStore) -> TokenUseCase:
        oauth_settings = await container.get(OAuthSettings)
        policy_settings = await container.get(PolicySettings)
        return TokenUseCase(
            grant_registry=await container.get(GrantHandlerRegistry),
            application_provider=await container.get(ApplicationIdentityProvider),
            session_service=SessionService(
                session_provider=store,
                audit_service=await container.get(AuditService),
                policy_settings=policy_settings,
            ),
            token_service=TokenService(
                session_identity_provider=store,
                session_token_resolver=store,
                claim_mapper_registry=await container.get(ClaimMapperRegistry),
                role_provider=await container.get(RoleProvider),
                signing_service=await container.get(SigningCredentialService),
                oauth_settings=oauth_settings,
                policy_settings=policy_settings,
            ),
        )

    @pytest.mark.asyncio
    async def test_missing_claim_is_reported(self, unit_env):
        """Test a missing required claim maps to missing_claim with the claim name."""
        # Arrange
        store = InMemorySessionStore(
            SessionSettings(required_claims=[ClaimTypes.PURPOSE_OF_USE])
        )
        use_case = await self.build_use_case(unit_env, store)

        # Act
        result = await use_case.execute(TokenRequest.from_form(password_form()))

        # Assert
        assert isinstance(result, OAuthError)
        assert result.error == OAuthErrorType.MISSING_CLAIM
        assert result.data == {"claim": ClaimTypes.PURPOSE_OF_USE}

    @pytest.mark.asyncio
    async def test_claim_supplied_by_client(self, unit_env):
        store = InMemorySessionStore(
            SessionSettings(required_claims=[ClaimTypes.PURPOSE_OF_USE])
        )
        use_case = await self.build_use_case(unit_env, store)
        header = b64encode(f"{ClaimTypes.PURPOSE_OF_USE}=TREATMENT".encode()).decode()

        result = await use_case.execute(
            TokenRequest.from_form(password_form(), client_claim_header=header)
        )

        assert isinstance(result, OAuthTokenResponse)
