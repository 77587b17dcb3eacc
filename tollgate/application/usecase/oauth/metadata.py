"""Discovery, key set and login content use cases."""

from tollgate.application.grant import GrantHandlerRegistry
from tollgate.application.usecase.base import BaseUseCase
from tollgate.config import OAuthSettings, Settings
from tollgate.domain.error import NotFoundError
from tollgate.domain.model.response import DiscoveryDocument, JsonWebKeySet
from tollgate.domain.provider import LoginAssetProvider, RenderedAsset
from tollgate.domain.service import SigningCredentialService

from .renderer import ResponseModeRegistry

TOKEN_ENDPOINT_AUTH_METHODS = ["client_secret_post", "client_secret_basic", "none"]


class GetDiscoveryDocumentUseCase(BaseUseCase):
    """OpenID Connect discovery metadata."""

    def __init__(
        self,
        grant_registry: GrantHandlerRegistry,
        renderers: ResponseModeRegistry,
        signing_service: SigningCredentialService,
        settings: Settings,
    ) -> None:
        self.grant_registry = grant_registry
        self.renderers = renderers
        self.signing_service = signing_service
        self.settings = settings

    async def execute(self, request: None = None) -> DiscoveryDocument:
        oauth: OAuthSettings = self.settings.oauth
        base = self.settings.endpoint_base_url
        return DiscoveryDocument(
            issuer=oauth.issuer_name,
            authorization_endpoint=f"{base}/authorize",
            token_endpoint=f"{base}/oauth2_token",
            userinfo_endpoint=f"{base}/userinfo",
            end_session_endpoint=f"{base}/signout",
            jwks_uri=f"{base}/jwks",
            grant_types_supported=self.grant_registry.grant_types,
            response_types_supported=["code"],
            response_modes_supported=self.renderers.response_modes,
            id_token_signing_alg_values_supported=self.signing_service.algorithms,
            scopes_supported=oauth.scopes_supported,
            subject_types_supported=["public"],
            token_endpoint_auth_methods_supported=TOKEN_ENDPOINT_AUTH_METHODS,
        )


class GetKeySetUseCase(BaseUseCase):
    """Published verification keys."""

    def __init__(self, signing_service: SigningCredentialService) -> None:
        self.signing_service = signing_service

    async def execute(self, request: None = None) -> JsonWebKeySet:
        return self.signing_service.get_publishable_key_set()


class GetLoginContentUseCase(BaseUseCase):
    """Static assets referenced by the login page."""

    def __init__(self, login_asset_provider: LoginAssetProvider) -> None:
        self.login_asset_provider = login_asset_provider

    async def execute(self, request: str) -> RenderedAsset:
        """Render one asset.

        Raises:
            NotFoundError: If the asset does not exist
        """
        asset = self.login_asset_provider.render(request, None, {})
        if asset is None:
            raise NotFoundError("content", request)
        return asset
