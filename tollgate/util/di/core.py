"""Core DI providers (non-mockable)."""

from dishka import Scope, provide

from tollgate.config import (
    OAuthSettings,
    PolicySettings,
    SecuritySettings,
    SessionSettings,
    Settings,
)
from tollgate.util.di.base import ProviderBase


class ProdConfigProvider(ProviderBase):
    """Production config provider - concrete, no mocks needed.

    Settings are loaded from environment variables and .env file automatically.
    """

    scope = Scope.APP

    @provide
    def provide_settings(self) -> Settings:
        """Provide application settings from environment."""
        return Settings()

    @provide
    def provide_oauth_settings(self, settings: Settings) -> OAuthSettings:
        return settings.oauth

    @provide
    def provide_security_settings(self, settings: Settings) -> SecuritySettings:
        return settings.security

    @provide
    def provide_policy_settings(self, settings: Settings) -> PolicySettings:
        return settings.policies

    @provide
    def provide_session_settings(self, settings: Settings) -> SessionSettings:
        return settings.session
