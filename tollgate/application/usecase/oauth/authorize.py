"""Authorize endpoint use case."""

from datetime import datetime, timezone

import logfire

from tollgate.adapter.crypto.pkce import SUPPORTED_METHODS
from tollgate.application.usecase.base import BaseUseCase, context_error
from tollgate.config import PolicySettings, SecuritySettings
from tollgate.domain.error import AuthenticationError, NotFoundError
from tollgate.domain.model.authorization import AuthorizationCode
from tollgate.domain.model.context import AuthorizeRequest
from tollgate.domain.model.principal import ClaimsPrincipal
from tollgate.domain.provider import (
    ApplicationIdentityProvider,
    IdentityProvider,
    LoginAssetProvider,
    PolicyEnforcementService,
)
from tollgate.domain.service import AuthorizationCodeService, AuthorizationCookieService
from tollgate.domain.value import (
    FormFields,
    IdentityKind,
    OAuthErrorType,
    PolicyDecision,
    ResponseMode,
)

from .renderer import AuthorizeResponse, ResponseModeRegistry

CODE_RESPONSE_TYPE = "code"
TOKEN_RESPONSE_TYPE = "token"

LOGIN_FAILED_MESSAGE = "invalid username or password"

DEFAULT_RESPONSE_MODES = {
    CODE_RESPONSE_TYPE: ResponseMode.QUERY.value,
    TOKEN_RESPONSE_TYPE: ResponseMode.FRAGMENT.value,
}


class AuthorizeUseCase(BaseUseCase):
    """Interactive authorization: login, code issuance and SSO cookie tracking."""

    def __init__(
        self,
        application_provider: ApplicationIdentityProvider,
        identity_provider: IdentityProvider,
        policy_enforcement: PolicyEnforcementService,
        code_service: AuthorizationCodeService,
        cookie_service: AuthorizationCookieService,
        login_asset_provider: LoginAssetProvider,
        renderers: ResponseModeRegistry,
        policy_settings: PolicySettings,
        security_settings: SecuritySettings,
    ) -> None:
        self.application_provider = application_provider
        self.identity_provider = identity_provider
        self.policy_enforcement = policy_enforcement
        self.code_service = code_service
        self.cookie_service = cookie_service
        self.login_asset_provider = login_asset_provider
        self.renderers = renderers
        self.policy_settings = policy_settings
        self.security_settings = security_settings

    async def execute(self, request: AuthorizeRequest) -> AuthorizeResponse:
        """Validate the request, attempt a login and render the result.

        Validation failures are returned as errors, never redirected.
        Without a username, or after a failed login, the login page is
        rendered.

        Args:
            request: Authorize request context

        Returns:
            The response to render
        """
        context = request

        with logfire.span(
            "authorize_endpoint", client_id=context.client_id, trace_id=context.trace_id
        ):
            if not await self._validate(context) or not await self._resolve_application(
                context
            ):
                logfire.info(
                    "Authorize request rejected",
                    error=context.error_type.value if context.error_type else None,
                    description=context.error_message,
                )
                return AuthorizeResponse(
                    status_code=400, error=context_error(context, state=context.state)
                )

            if context.username:
                response = await self._login(context)
                if response is not None:
                    return response

            return self._render_login(context)

    async def _validate(self, context: AuthorizeRequest) -> bool:
        if not context.client_id:
            return context.fail(OAuthErrorType.INVALID_REQUEST, "missing client_id")

        if context.response_type_supplied and not context.response_type:
            return context.fail(OAuthErrorType.INVALID_REQUEST, "missing response_type")
        context.response_type = (context.response_type or CODE_RESPONSE_TYPE).lower()
        if context.response_type != CODE_RESPONSE_TYPE:
            return context.fail(
                OAuthErrorType.UNSUPPORTED_RESPONSE_TYPE,
                f"{context.response_type} is not supported",
            )

        context.response_mode = (
            context.response_mode or DEFAULT_RESPONSE_MODES[context.response_type]
        ).lower()
        if self.renderers.get(context.response_mode) is None:
            return context.fail(
                OAuthErrorType.UNSUPPORTED_RESPONSE_MODE,
                f"{context.response_mode} is not supported",
            )

        if not context.redirect_uri:
            return context.fail(OAuthErrorType.INVALID_REQUEST, "missing redirect_uri")

        if context.code_challenge:
            method = context.code_challenge_method or "plain"
            if method not in SUPPORTED_METHODS:
                return context.fail(
                    OAuthErrorType.INVALID_REQUEST,
                    f"code_challenge_method {method} is not supported",
                )
            context.code_challenge_method = method

        device = context.find_authenticated_identity(IdentityKind.DEVICE)
        if device is not None:
            context.device_principal = ClaimsPrincipal.of(device)
            decision = await self.policy_enforcement.demand(
                self.policy_settings.code_flow, context.device_principal
            )
            if decision == PolicyDecision.DENY:
                return context.fail(
                    OAuthErrorType.UNAUTHORIZED_CLIENT,
                    f"{device.name} lacks policy {self.policy_settings.code_flow}",
                )
        return True

    async def _resolve_application(self, context: AuthorizeRequest) -> bool:
        application = await self.application_provider.get_identity(context.client_id)
        system_sid = self.security_settings.system_application_sid.lower()
        if application is None or (application.security_id or "").lower() == system_sid:
            return context.fail(OAuthErrorType.INVALID_CLIENT, "unknown client")
        context.application_identity = application
        return True

    async def _login(self, context: AuthorizeRequest) -> AuthorizeResponse | None:
        try:
            principal = await self.identity_provider.authenticate(
                context.username, context.password or ""
            )
        except AuthenticationError as e:
            logfire.info("Interactive login failed", error=str(e))
            context.login_error_message = LOGIN_FAILED_MESSAGE
            return None

        context.user_principal = principal
        now = datetime.now(timezone.utc)
        user = principal.identity
        device = context.get_device_identity()
        application = context.get_application_identity()

        user_sid = user.security_id or await self.identity_provider.get_sid(user.name)
        if user_sid is None:
            raise NotFoundError("user", user.name)

        code = AuthorizationCode(
            issued_at=now,
            device_sid=device.security_id if device else None,
            application_sid=application.security_id if application else None,
            user_sid=user_sid,
            nonce=context.nonce,
            scope=context.scope,
            code_challenge=context.code_challenge,
            code_challenge_method=context.code_challenge_method
            if context.code_challenge
            else None,
        )
        context.authorization_code = self.code_service.encode(code)

        cookie_value, cookie_expires = self.cookie_service.record_login(
            context.cookie_value, user.name, now
        )
        logfire.info("Authorization code issued", user=user.name, client_id=context.client_id)

        renderer = self.renderers.get(context.response_mode)
        response = renderer.render(
            context.redirect_uri,
            {FormFields.CODE: context.authorization_code, FormFields.STATE: context.state},
        )
        response.cookie_value = cookie_value
        response.cookie_expires = cookie_expires
        return response

    def _render_login(self, context: AuthorizeRequest) -> AuthorizeResponse:
        bindings = {
            FormFields.CLIENT_ID: context.client_id,
            FormFields.REDIRECT_URI: context.redirect_uri,
            FormFields.RESPONSE_TYPE: context.response_type,
            FormFields.RESPONSE_MODE: context.response_mode,
            FormFields.STATE: context.state,
            FormFields.SCOPE: context.scope,
            FormFields.NONCE: context.nonce,
            FormFields.LOGIN_HINT: context.login_hint,
            FormFields.USERNAME: context.username or context.login_hint,
            FormFields.CODE_CHALLENGE: context.code_challenge,
            FormFields.CODE_CHALLENGE_METHOD: context.code_challenge_method,
            "activity_id": context.trace_id,
            "error_message": context.login_error_message,
        }
        asset = self.login_asset_provider.render(None, context.ui_locales, bindings)
        if asset is None:
            raise NotFoundError("login page", "login.html")
        return AuthorizeResponse(
            content=asset.content,
            media_type=asset.media_type,
            headers={"X-Frame-Options": "SAMEORIGIN", "Cache-Control": "no-store"},
        )
