"""Identity and session store providers."""

from dishka import Scope, provide

from tollgate.config import SessionSettings
from tollgate.domain.provider import (
    ApplicationIdentityProvider,
    DeviceIdentityProvider,
    IdentityProvider,
    RoleProvider,
    SecurityChallengeIdentityService,
    SessionIdentityProvider,
    SessionProvider,
    SessionTokenResolver,
)
from tollgate.persistence.inmemory import (
    InMemoryApplicationIdentityProvider,
    InMemoryDeviceIdentityProvider,
    InMemorySecurityChallengeService,
    InMemorySessionStore,
    InMemoryUserIdentityProvider,
)
from tollgate.util.di.base import ProviderBase


class StoreProvider(ProviderBase):
    """Store component base."""

    __mock_component__ = "store"


class ProdStoreProvider(StoreProvider):
    """Production stores, empty at startup.

    Deployments with persistent identity or session stores replace this
    provider.
    """

    __is_mock__ = False

    scope = Scope.APP

    @provide
    def get_users(self) -> InMemoryUserIdentityProvider:
        """Provide user identity store."""
        return InMemoryUserIdentityProvider()

    @provide
    def get_applications(self) -> InMemoryApplicationIdentityProvider:
        """Provide application identity store."""
        return InMemoryApplicationIdentityProvider()

    @provide
    def get_devices(self) -> InMemoryDeviceIdentityProvider:
        """Provide device identity store."""
        return InMemoryDeviceIdentityProvider()

    @provide
    def get_session_store(self, settings: SessionSettings) -> InMemorySessionStore:
        """Provide session store."""
        return InMemorySessionStore(settings)


class StoreInterfaceProvider(ProviderBase):
    """Binds the stores to the collaborator interfaces the core consumes."""

    scope = Scope.APP

    @provide
    def get_identity_provider(self, users: InMemoryUserIdentityProvider) -> IdentityProvider:
        return users

    @provide
    def get_role_provider(self, users: InMemoryUserIdentityProvider) -> RoleProvider:
        return users

    @provide
    def get_challenge_service(
        self, users: InMemoryUserIdentityProvider
    ) -> SecurityChallengeIdentityService:
        return InMemorySecurityChallengeService(users)

    @provide
    def get_application_provider(
        self, applications: InMemoryApplicationIdentityProvider
    ) -> ApplicationIdentityProvider:
        return applications

    @provide
    def get_device_provider(
        self, devices: InMemoryDeviceIdentityProvider
    ) -> DeviceIdentityProvider:
        return devices

    @provide
    def get_session_provider(self, store: InMemorySessionStore) -> SessionProvider:
        return store

    @provide
    def get_session_token_resolver(self, store: InMemorySessionStore) -> SessionTokenResolver:
        return store

    @provide
    def get_session_identity_provider(
        self, store: InMemorySessionStore
    ) -> SessionIdentityProvider:
        return store
