"""Authorization code grant."""

from datetime import datetime, timezone

import logfire

from tollgate.adapter.crypto.pkce import verify_pkce
from tollgate.config import PolicySettings
from tollgate.domain.model.context import TokenRequest
from tollgate.domain.model.principal import ClaimsPrincipal
from tollgate.domain.provider import IdentityProvider, PolicyEnforcementService
from tollgate.domain.service import AuthorizationCodeService
from tollgate.domain.value import CodeValidation, GrantType, OAuthErrorType

from .base import GrantHandler, demand_policy

# Users redeemed from a code were authenticated by the authorize endpoint
LOCAL_AUTHENTICATION = "LOCAL"

_VALIDATION_ERRORS = {
    CodeValidation.EXPIRED: "expired authorization code",
    CodeValidation.MISMATCHED_DEVICE: "authorization code was issued to another device",
    CodeValidation.MISMATCHED_APPLICATION: "authorization code was issued to another client",
}


class AuthorizationCodeGrantHandler(GrantHandler):
    """Redeems a stateless authorization code for a user session."""

    grant_types = (GrantType.AUTHORIZATION_CODE.value,)

    def __init__(
        self,
        code_service: AuthorizationCodeService,
        identity_provider: IdentityProvider,
        policy_enforcement: PolicyEnforcementService,
        policy_settings: PolicySettings,
    ) -> None:
        self.code_service = code_service
        self.identity_provider = identity_provider
        self.policy_enforcement = policy_enforcement
        self.policy_settings = policy_settings

    async def handle(self, context: TokenRequest) -> bool:
        if not context.code:
            return context.fail(OAuthErrorType.INVALID_REQUEST, "missing code")

        code = self.code_service.decode(context.code)
        if code is None:
            return context.fail(OAuthErrorType.INVALID_GRANT, "invalid authorization code")

        with logfire.span("grant.authorization_code", client_id=context.client_id):
            result = self.code_service.validate(
                code,
                datetime.now(timezone.utc),
                context.get_device_identity(),
                context.get_application_identity(),
            )
            if result != CodeValidation.OK:
                logfire.info("Authorization code refused", reason=result.value)
                return context.fail(OAuthErrorType.INVALID_GRANT, _VALIDATION_ERRORS[result])

            if code.code_challenge:
                if not verify_pkce(
                    context.code_verifier, code.code_challenge, code.code_challenge_method
                ):
                    return context.fail(OAuthErrorType.INVALID_GRANT, "invalid code_verifier")
            elif context.application_principal is None:
                return context.fail(
                    OAuthErrorType.INVALID_CLIENT,
                    "client authentication or PKCE is required",
                )

            if context.device_principal is not None:
                if not await demand_policy(
                    self.policy_enforcement,
                    context,
                    self.policy_settings.code_flow,
                    context.device_principal,
                ):
                    return False
            else:
                application = context.application_principal
                if application is None and context.get_application_identity() is not None:
                    application = ClaimsPrincipal.of(context.get_application_identity())
                if not await demand_policy(
                    self.policy_enforcement,
                    context,
                    self.policy_settings.code_flow_without_device,
                    application,
                ):
                    return False

            user = await self.identity_provider.get_identity_by_sid(code.user_sid)
            if user is None:
                return context.fail(OAuthErrorType.INVALID_GRANT, "unknown user")

            context.user_principal = ClaimsPrincipal.of(
                user.as_authenticated(LOCAL_AUTHENTICATION)
            )
            context.nonce = code.nonce
            if code.scopes:
                context.scopes = code.scopes
            context.session = None
            return True
