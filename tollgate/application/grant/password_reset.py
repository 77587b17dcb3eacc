"""Password reset (security challenge) grant."""

from uuid import UUID

import logfire

from tollgate.config import PolicySettings
from tollgate.domain.error import AuthenticationError, MfaRequiredError
from tollgate.domain.model.context import TokenRequest
from tollgate.domain.provider import (
    ApplicationIdentityProvider,
    PolicyEnforcementService,
    SecurityChallengeIdentityService,
)
from tollgate.domain.value import GrantType, OAuthErrorType

from .base import GrantHandler, demand_policy


class PasswordResetGrantHandler(GrantHandler):
    """Authenticates a user by a security challenge response.

    The resulting session is restricted to the password-only login scope
    so it can be used for nothing but changing the password.
    """

    grant_types = (GrantType.PASSWORD_RESET.value,)

    def __init__(
        self,
        challenge_service: SecurityChallengeIdentityService,
        application_provider: ApplicationIdentityProvider,
        policy_enforcement: PolicyEnforcementService,
        policy_settings: PolicySettings,
    ) -> None:
        self.challenge_service = challenge_service
        self.application_provider = application_provider
        self.policy_enforcement = policy_enforcement
        self.policy_settings = policy_settings

    async def handle(self, context: TokenRequest) -> bool:
        if not context.username:
            return context.fail(OAuthErrorType.INVALID_REQUEST, "missing username")
        if not context.challenge:
            return context.fail(OAuthErrorType.INVALID_REQUEST, "missing challenge")
        if not context.challenge_response:
            return context.fail(OAuthErrorType.INVALID_REQUEST, "missing challenge response")
        try:
            challenge_id = UUID(context.challenge)
        except ValueError:
            return context.fail(OAuthErrorType.INVALID_REQUEST, "invalid challenge")

        context.scopes = [self.policy_settings.login_password_only]

        with logfire.span("grant.password_reset", username=context.username):
            try:
                principal = await self.challenge_service.authenticate(
                    context.username,
                    challenge_id,
                    context.challenge_response,
                    context.mfa_code,
                )
            except MfaRequiredError as e:
                return context.fail(OAuthErrorType.MFA_REQUIRED, str(e))
            except AuthenticationError as e:
                logfire.info("Challenge response rejected", error=str(e))
                return context.fail(OAuthErrorType.INVALID_GRANT, str(e))

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

            if context.device_principal is not None:
                policy = self.policy_settings.reset_flow
            else:
                policy = self.policy_settings.reset_flow_without_device

            for subject in (context.application_principal, context.device_principal):
                if not await demand_policy(
                    self.policy_enforcement, context, policy, subject
                ):
                    return False
            return True
