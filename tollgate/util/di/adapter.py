"""Adapter DI providers."""

from dishka import Scope, provide
from jinja2 import Environment

from tollgate.adapter.assets import TemplateLoginAssetProvider
from tollgate.adapter.policy import ClaimPolicyEnforcementService
from tollgate.adapter.templating import create_template_environment
from tollgate.config import OAuthSettings
from tollgate.domain.provider import LoginAssetProvider, PolicyEnforcementService
from tollgate.util.di.base import ProviderBase


class ProdAdapterProvider(ProviderBase):
    """Policy decisions and the login surface - concrete, no mocks needed."""

    scope = Scope.APP

    @provide
    def get_policy_enforcement(self) -> PolicyEnforcementService:
        """Provide claim based policy decision point."""
        return ClaimPolicyEnforcementService()

    @provide
    def get_template_environment(self, oauth_settings: OAuthSettings) -> Environment:
        """Provide page templates, deployment folder first."""
        return create_template_environment(oauth_settings.login_asset_path)

    @provide
    def get_login_asset_provider(
        self, environment: Environment, oauth_settings: OAuthSettings
    ) -> LoginAssetProvider:
        """Provide login page renderer."""
        return TemplateLoginAssetProvider(environment, oauth_settings.login_asset_path)
