"""Client credentials grant."""

import logfire

from tollgate.config import OAuthSettings, PolicySettings
from tollgate.domain.model.context import TokenRequest
from tollgate.domain.provider import PolicyEnforcementService
from tollgate.domain.value import GrantType, OAuthErrorType

from .base import GrantHandler, demand_policy


class ClientCredentialsGrantHandler(GrantHandler):
    """Issues a client-only session to an authenticated application.

    Without an authenticated device the grant is refused unless client-only
    grants are enabled in configuration.
    """

    grant_types = (GrantType.CLIENT_CREDENTIALS.value,)

    def __init__(
        self,
        policy_enforcement: PolicyEnforcementService,
        oauth_settings: OAuthSettings,
        policy_settings: PolicySettings,
    ) -> None:
        self.policy_enforcement = policy_enforcement
        self.oauth_settings = oauth_settings
        self.policy_settings = policy_settings

    async def handle(self, context: TokenRequest) -> bool:
        if not context.client_id:
            return context.fail(OAuthErrorType.INVALID_GRANT, "missing client_id")
        if context.application_principal is None:
            return context.fail(OAuthErrorType.INVALID_CLIENT, "invalid client_secret")

        with logfire.span("grant.client_credentials", client_id=context.client_id):
            if context.device_principal is not None:
                policy = self.policy_settings.client_credentials_flow
                if not await demand_policy(
                    self.policy_enforcement, context, policy, context.device_principal
                ):
                    return False
            else:
                if not self.oauth_settings.allow_client_only_grant:
                    return context.fail(
                        OAuthErrorType.UNAUTHORIZED_CLIENT,
                        "client_credentials grant requires device authentication",
                    )
                policy = self.policy_settings.client_credentials_flow_without_device

            return await demand_policy(
                self.policy_enforcement, context, policy, context.application_principal
            )
