"""Interface layer DI providers."""

from dishka import Scope, provide

from tollgate.config import OAuthSettings
from tollgate.domain.provider import (
    ApplicationIdentityProvider,
    DeviceIdentityProvider,
    SessionIdentityProvider,
    SessionProvider,
    SessionTokenResolver,
)
from tollgate.domain.service import SigningCredentialService
from tollgate.interface.api.authentication import RequestAuthenticator
from tollgate.util.di.base import ProviderBase


class ProdInterfaceProvider(ProviderBase):
    """HTTP request authentication - concrete, no mocks needed."""

    scope = Scope.APP

    @provide
    def get_request_authenticator(
        self,
        application_provider: ApplicationIdentityProvider,
        device_provider: DeviceIdentityProvider,
        session_provider: SessionProvider,
        session_token_resolver: SessionTokenResolver,
        session_identity_provider: SessionIdentityProvider,
        signing_service: SigningCredentialService,
        oauth_settings: OAuthSettings,
    ) -> RequestAuthenticator:
        """Provide request authenticator."""
        return RequestAuthenticator(
            application_provider=application_provider,
            device_provider=device_provider,
            session_provider=session_provider,
            session_token_resolver=session_token_resolver,
            session_identity_provider=session_identity_provider,
            signing_service=signing_service,
            oauth_settings=oauth_settings,
        )
