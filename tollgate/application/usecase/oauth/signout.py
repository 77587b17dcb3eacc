"""Signout endpoint use case."""

from collections.abc import Awaitable, Callable, Sequence
from typing import Any

import logfire

from tollgate.application.usecase.base import BaseUseCase, context_error
from tollgate.config import OAuthSettings
from tollgate.domain.model.context import SignoutRequest
from tollgate.domain.model.response import OAuthError
from tollgate.domain.model.session import Session
from tollgate.domain.provider import (
    ApplicationIdentityProvider,
    IdentityProvider,
    SessionIdentityProvider,
    SessionProvider,
)
from tollgate.domain.service import (
    AuthorizationCookieService,
    SessionService,
    SigningCredentialService,
)
from tollgate.domain.value import JwtClaims, OAuthErrorType, SignatureAlgorithm
from tollgate.util.jwt import JWTError, verify_token
from tollgate.util.session import format_session_id, parse_session_id

SignoutHook = Callable[[SignoutRequest], Awaitable[None]]


class SignoutUseCase(BaseUseCase):
    """Terminates sessions named by an id token hint or by the SSO cookie.

    Hooks run before and after a successful signout, e.g. to notify
    relying parties.
    """

    def __init__(
        self,
        session_provider: SessionProvider,
        session_identity_provider: SessionIdentityProvider,
        session_service: SessionService,
        identity_provider: IdentityProvider,
        application_provider: ApplicationIdentityProvider,
        cookie_service: AuthorizationCookieService,
        signing_service: SigningCredentialService,
        oauth_settings: OAuthSettings,
        before_signout: Sequence[SignoutHook] = (),
        after_signout: Sequence[SignoutHook] = (),
    ) -> None:
        self.session_provider = session_provider
        self.session_identity_provider = session_identity_provider
        self.session_service = session_service
        self.identity_provider = identity_provider
        self.application_provider = application_provider
        self.cookie_service = cookie_service
        self.signing_service = signing_service
        self.oauth_settings = oauth_settings
        self.before_signout = list(before_signout)
        self.after_signout = list(after_signout)

    async def execute(self, request: SignoutRequest) -> OAuthError | None:
        """Run the signout.

        An empty form is a successful no-op. An undecodable cookie is
        treated as absent.

        Args:
            request: Signout request context

        Returns:
            None on success, otherwise the OAuth error
        """
        context = request
        if not context.form:
            return None

        for hook in self.before_signout:
            await hook(context)

        with logfire.span("signout_endpoint", trace_id=context.trace_id):
            if context.id_token_hint:
                await self._signout_by_token(context)
            else:
                await self._signout_by_cookie(context)

            if context.has_error:
                logfire.info("Signout rejected", description=context.error_message)
                return context_error(context)

            logfire.info("Signed out", sessions=len(context.abandoned_sessions))

        for hook in self.after_signout:
            await hook(context)
        return None

    async def _verification_keys(self, context: SignoutRequest) -> list[dict[str, Any]] | None:
        """Published keys, plus the client's own key when it presents its secret.

        The secret must authenticate the client before its key is trusted.
        """
        keys = list(self.signing_service.get_publishable_key_set().keys)
        secret = context.client_secret or context.symmetric_secret
        if not secret:
            return keys

        application = (
            await self.application_provider.authenticate(context.client_id, secret)
            if context.client_id
            else None
        )
        if application is None:
            context.fail(OAuthErrorType.INVALID_CLIENT, "invalid client credentials")
            return None
        keys.append(
            self.signing_service.create_symmetric_verification_key(
                secret, application.identity.name
            )
        )
        return keys

    async def _signout_by_token(self, context: SignoutRequest) -> bool:
        keys = await self._verification_keys(context)
        if keys is None:
            return False
        try:
            claims = verify_token(
                context.id_token_hint,
                keys,
                issuer=self.oauth_settings.issuer_name,
                algorithms=[a.value for a in SignatureAlgorithm],
                audience=context.client_id,
                leeway=self.oauth_settings.token_clock_skew_seconds,
            )
        except JWTError as e:
            return context.fail(OAuthErrorType.INVALID_REQUEST, f"invalid id_token_hint: {e}")

        session_claim = claims.get(JwtClaims.SESSION_ID)
        session_id = parse_session_id(session_claim) if isinstance(session_claim, str) else None
        if session_id is None:
            return context.fail(OAuthErrorType.INVALID_REQUEST, "id_token_hint names no session")

        session = await self.session_provider.get(session_id)
        if session is None:
            return context.fail(OAuthErrorType.INVALID_REQUEST, "session not found")

        await self._abandon(context, session)
        context.session = session
        return True

    async def _signout_by_cookie(self, context: SignoutRequest) -> None:
        cookie = self.cookie_service.read(context.cookie_value)
        if cookie is None:
            return

        for user_name in cookie.users:
            identity = await self.identity_provider.get_identity(user_name)
            if identity is None or identity.security_id is None:
                logfire.warn("Skipping unknown user tracked by cookie", user=user_name)
                continue
            for session in await self.session_provider.get_user_sessions(
                identity.security_id
            ):
                await self._abandon(context, session)

    async def _abandon(self, context: SignoutRequest, session: Session) -> None:
        principal = await self.session_identity_provider.authenticate(session)
        await self.session_service.abandon_session(session, principal, context.remote_ip)
        context.abandoned_sessions.append(session)
        logfire.debug("Session abandoned", session_id=format_session_id(session.id))
