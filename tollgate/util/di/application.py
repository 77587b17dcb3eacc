"""Application layer DI providers."""

from dishka import Scope, provide
from jinja2 import Environment

from tollgate.application.grant import (
    AuthorizationCodeGrantHandler,
    ClientCredentialsGrantHandler,
    GrantHandlerRegistry,
    PasswordGrantHandler,
    PasswordResetGrantHandler,
    RefreshTokenGrantHandler,
)
from tollgate.application.usecase.oauth import (
    AuthorizeUseCase,
    FormPostResponseRenderer,
    FragmentResponseRenderer,
    GetDiscoveryDocumentUseCase,
    GetKeySetUseCase,
    GetLoginContentUseCase,
    GetSessionUseCase,
    GetUserInfoUseCase,
    QueryResponseRenderer,
    ResponseModeRegistry,
    SignoutUseCase,
    TokenUseCase,
)
from tollgate.config import (
    OAuthSettings,
    PolicySettings,
    SecuritySettings,
    Settings,
)
from tollgate.domain.provider import (
    ApplicationIdentityProvider,
    IdentityProvider,
    LoginAssetProvider,
    PolicyEnforcementService,
    SecurityChallengeIdentityService,
    SessionIdentityProvider,
    SessionProvider,
    SessionTokenResolver,
)
from tollgate.domain.service import (
    AuthorizationCodeService,
    AuthorizationCookieService,
    ClaimMapperRegistry,
    SessionService,
    SigningCredentialService,
    TokenService,
)
from tollgate.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production grant handlers and use cases - concrete, no mocks needed.

    The grant and response mode registries are built once per container.
    """

    scope = Scope.APP

    # Registries
    @provide
    def get_grant_registry(
        self,
        identity_provider: IdentityProvider,
        application_provider: ApplicationIdentityProvider,
        challenge_service: SecurityChallengeIdentityService,
        policy_enforcement: PolicyEnforcementService,
        code_service: AuthorizationCodeService,
        session_token_resolver: SessionTokenResolver,
        session_identity_provider: SessionIdentityProvider,
        session_service: SessionService,
        oauth_settings: OAuthSettings,
        policy_settings: PolicySettings,
    ) -> GrantHandlerRegistry:
        """Provide the grant type to handler map."""
        return GrantHandlerRegistry(
            [
                PasswordGrantHandler(
                    identity_provider=identity_provider,
                    application_provider=application_provider,
                    policy_enforcement=policy_enforcement,
                    policy_settings=policy_settings,
                ),
                ClientCredentialsGrantHandler(
                    policy_enforcement=policy_enforcement,
                    oauth_settings=oauth_settings,
                    policy_settings=policy_settings,
                ),
                AuthorizationCodeGrantHandler(
                    code_service=code_service,
                    identity_provider=identity_provider,
                    policy_enforcement=policy_enforcement,
                    policy_settings=policy_settings,
                ),
                RefreshTokenGrantHandler(
                    session_token_resolver=session_token_resolver,
                    session_identity_provider=session_identity_provider,
                    session_service=session_service,
                ),
                PasswordResetGrantHandler(
                    challenge_service=challenge_service,
                    application_provider=application_provider,
                    policy_enforcement=policy_enforcement,
                    policy_settings=policy_settings,
                ),
            ]
        )

    @provide
    def get_response_mode_registry(
        self, environment: Environment
    ) -> ResponseModeRegistry:
        """Provide the response mode to renderer map."""
        return ResponseModeRegistry(
            [
                QueryResponseRenderer(),
                FragmentResponseRenderer(),
                FormPostResponseRenderer(environment),
            ]
        )

    # OAuth use cases
    @provide
    def get_token_use_case(
        self,
        grant_registry: GrantHandlerRegistry,
        application_provider: ApplicationIdentityProvider,
        session_service: SessionService,
        token_service: TokenService,
    ) -> TokenUseCase:
        """Provide token endpoint use case."""
        return TokenUseCase(
            grant_registry=grant_registry,
            application_provider=application_provider,
            session_service=session_service,
            token_service=token_service,
        )

    @provide
    def get_authorize_use_case(
        self,
        application_provider: ApplicationIdentityProvider,
        identity_provider: IdentityProvider,
        policy_enforcement: PolicyEnforcementService,
        code_service: AuthorizationCodeService,
        cookie_service: AuthorizationCookieService,
        login_asset_provider: LoginAssetProvider,
        renderers: ResponseModeRegistry,
        policy_settings: PolicySettings,
        security_settings: SecuritySettings,
    ) -> AuthorizeUseCase:
        """Provide authorize endpoint use case."""
        return AuthorizeUseCase(
            application_provider=application_provider,
            identity_provider=identity_provider,
            policy_enforcement=policy_enforcement,
            code_service=code_service,
            cookie_service=cookie_service,
            login_asset_provider=login_asset_provider,
            renderers=renderers,
            policy_settings=policy_settings,
            security_settings=security_settings,
        )

    @provide
    def get_session_use_case(self, token_service: TokenService) -> GetSessionUseCase:
        """Provide session endpoint use case."""
        return GetSessionUseCase(token_service=token_service)

    @provide
    def get_userinfo_use_case(
        self,
        session_identity_provider: SessionIdentityProvider,
        claim_mapper_registry: ClaimMapperRegistry,
    ) -> GetUserInfoUseCase:
        """Provide userinfo endpoint use case."""
        return GetUserInfoUseCase(
            session_identity_provider=session_identity_provider,
            claim_mapper_registry=claim_mapper_registry,
        )

    @provide
    def get_signout_use_case(
        self,
        session_provider: SessionProvider,
        session_identity_provider: SessionIdentityProvider,
        session_service: SessionService,
        identity_provider: IdentityProvider,
        application_provider: ApplicationIdentityProvider,
        cookie_service: AuthorizationCookieService,
        signing_service: SigningCredentialService,
        oauth_settings: OAuthSettings,
    ) -> SignoutUseCase:
        """Provide signout endpoint use case."""
        return SignoutUseCase(
            session_provider=session_provider,
            session_identity_provider=session_identity_provider,
            session_service=session_service,
            identity_provider=identity_provider,
            application_provider=application_provider,
            cookie_service=cookie_service,
            signing_service=signing_service,
            oauth_settings=oauth_settings,
        )

    @provide
    def get_discovery_use_case(
        self,
        grant_registry: GrantHandlerRegistry,
        renderers: ResponseModeRegistry,
        signing_service: SigningCredentialService,
        settings: Settings,
    ) -> GetDiscoveryDocumentUseCase:
        """Provide discovery document use case."""
        return GetDiscoveryDocumentUseCase(
            grant_registry=grant_registry,
            renderers=renderers,
            signing_service=signing_service,
            settings=settings,
        )

    @provide
    def get_key_set_use_case(
        self, signing_service: SigningCredentialService
    ) -> GetKeySetUseCase:
        """Provide JWKS use case."""
        return GetKeySetUseCase(signing_service=signing_service)

    @provide
    def get_login_content_use_case(
        self, login_asset_provider: LoginAssetProvider
    ) -> GetLoginContentUseCase:
        """Provide login content use case."""
        return GetLoginContentUseCase(login_asset_provider=login_asset_provider)
