"""Resource owner password credentials grant."""

import logfire

from tollgate.config import PolicySettings
from tollgate.domain.error import AuthenticationError, MfaRequiredError, PasswordExpiredError
from tollgate.domain.model.context import TokenRequest
from tollgate.domain.provider import (
    ApplicationIdentityProvider,
    IdentityProvider,
    PolicyEnforcementService,
)
from tollgate.domain.value import GrantType, OAuthErrorType

from .base import GrantHandler, demand_policy


class PasswordGrantHandler(GrantHandler):
    """Authenticates a user by username and password (and optional MFA code)."""

    grant_types = (GrantType.PASSWORD.value,)

    def __init__(
        self,
        identity_provider: IdentityProvider,
        application_provider: ApplicationIdentityProvider,
        policy_enforcement: PolicyEnforcementService,
        policy_settings: PolicySettings,
    ) -> None:
        self.identity_provider = identity_provider
        self.application_provider = application_provider
        self.policy_enforcement = policy_enforcement
        self.policy_settings = policy_settings

    async def handle(self, context: TokenRequest) -> bool:
        if not context.username:
            return context.fail(OAuthErrorType.INVALID_REQUEST, "missing username")

        with logfire.span("grant.password", username=context.username):
            try:
                principal = await self.identity_provider.authenticate(
                    context.username, context.password or "", context.mfa_code
                )
            except MfaRequiredError as e:
                return context.fail(OAuthErrorType.MFA_REQUIRED, str(e))
            except PasswordExpiredError as e:
                return context.fail(OAuthErrorType.PASSWORD_EXPIRED, str(e))
            except AuthenticationError as e:
                logfire.info("Password authentication failed", error=str(e))
                return context.fail(OAuthErrorType.INVALID_GRANT, str(e))

            if principal is None:
                return context.fail(OAuthErrorType.INVALID_GRANT, "invalid password")
            context.user_principal = principal

            if context.application_principal is None and context.client_id:
                context.application_principal = (
                    await self.application_provider.authenticate_on_behalf_of(
                        context.client_id, principal
                    )
                )
            if context.application_principal is None:
                return context.fail(
                    OAuthErrorType.INVALID_CLIENT, "unable to authenticate client"
                )

            policies = self.policy_settings
            if context.device_principal is not None:
                policy = policies.password_flow
            else:
                policy = policies.password_flow_without_device

            for subject in (
                principal,
                context.application_principal,
                context.device_principal,
            ):
                if not await demand_policy(
                    self.policy_enforcement, context, policy, subject
                ):
                    return False

            return True
