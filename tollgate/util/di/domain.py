"""Domain layer DI providers."""

from dishka import Scope, provide

from tollgate.config import OAuthSettings, PolicySettings, SecuritySettings
from tollgate.domain.provider import (
    AuditService,
    RoleProvider,
    SessionIdentityProvider,
    SessionProvider,
    SessionTokenResolver,
    SigningCertificateManager,
    SymmetricCryptoProvider,
)
from tollgate.domain.service import (
    AuthorizationCodeService,
    AuthorizationCookieService,
    ClaimMapperRegistry,
    ExtendedClaimMapper,
    IheIuaClaimMapper,
    JwtClaimMapper,
    SessionService,
    SigningCredentialService,
    TokenService,
)
from tollgate.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are APP-scoped: they hold no per-request state, which
    lives only in request contexts.
    """

    scope = Scope.APP

    @provide
    def get_claim_mapper_registry(self) -> ClaimMapperRegistry:
        """Provide the external claim mappers, keyed by token format."""
        return ClaimMapperRegistry(
            [JwtClaimMapper(), ExtendedClaimMapper(), IheIuaClaimMapper()]
        )

    @provide
    def get_signing_service(
        self,
        security_settings: SecuritySettings,
        certificate_manager: SigningCertificateManager,
    ) -> SigningCredentialService:
        """Provide signing credential selection."""
        return SigningCredentialService(
            security_settings=security_settings,
            certificate_manager=certificate_manager,
        )

    @provide
    def get_authorization_code_service(
        self, crypto_provider: SymmetricCryptoProvider, oauth_settings: OAuthSettings
    ) -> AuthorizationCodeService:
        """Provide authorization code codec."""
        return AuthorizationCodeService(
            crypto_provider=crypto_provider, oauth_settings=oauth_settings
        )

    @provide
    def get_cookie_service(
        self,
        crypto_provider: SymmetricCryptoProvider,
        oauth_settings: OAuthSettings,
        security_settings: SecuritySettings,
    ) -> AuthorizationCookieService:
        """Provide SSO cookie codec."""
        return AuthorizationCookieService(
            crypto_provider=crypto_provider,
            oauth_settings=oauth_settings,
            security_settings=security_settings,
        )

    @provide
    def get_session_service(
        self,
        session_provider: SessionProvider,
        audit_service: AuditService,
        policy_settings: PolicySettings,
    ) -> SessionService:
        """Provide session lifecycle service."""
        return SessionService(
            session_provider=session_provider,
            audit_service=audit_service,
            policy_settings=policy_settings,
        )

    @provide
    def get_token_service(
        self,
        session_identity_provider: SessionIdentityProvider,
        session_token_resolver: SessionTokenResolver,
        claim_mapper_registry: ClaimMapperRegistry,
        role_provider: RoleProvider,
        signing_service: SigningCredentialService,
        oauth_settings: OAuthSettings,
        policy_settings: PolicySettings,
    ) -> TokenService:
        """Provide token assembly service."""
        return TokenService(
            session_identity_provider=session_identity_provider,
            session_token_resolver=session_token_resolver,
            claim_mapper_registry=claim_mapper_registry,
            role_provider=role_provider,
            signing_service=signing_service,
            oauth_settings=oauth_settings,
            policy_settings=policy_settings,
        )
