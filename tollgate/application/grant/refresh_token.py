"""Refresh token grant."""

import logfire

from tollgate.domain.error import SecuritySessionError
from tollgate.domain.model.context import TokenRequest
from tollgate.domain.provider import SessionIdentityProvider, SessionTokenResolver
from tollgate.domain.service import SessionService
from tollgate.domain.value import GrantType, IdentityKind, OAuthErrorType

from .base import GrantHandler


class RefreshTokenGrantHandler(GrantHandler):
    """Extends an existing session with its refresh token.

    A refresh token presented by a client other than the one the session
    was issued to abandons the session.
    """

    grant_types = (GrantType.REFRESH_TOKEN.value,)

    def __init__(
        self,
        session_token_resolver: SessionTokenResolver,
        session_identity_provider: SessionIdentityProvider,
        session_service: SessionService,
    ) -> None:
        self.session_token_resolver = session_token_resolver
        self.session_identity_provider = session_identity_provider
        self.session_service = session_service

    async def handle(self, context: TokenRequest) -> bool:
        if not context.refresh_token_value:
            return context.fail(OAuthErrorType.INVALID_REQUEST, "missing refresh_token")

        client = context.get_application_identity()
        if client is None:
            return context.fail(OAuthErrorType.INVALID_CLIENT, "missing client_id")

        with logfire.span("grant.refresh_token", client_id=client.name):
            try:
                session = await self.session_token_resolver.extend_session_with_refresh_token(
                    context.refresh_token_value
                )
            except SecuritySessionError as e:
                logfire.info("Refresh token rejected", error=str(e))
                return context.fail(OAuthErrorType.INVALID_GRANT, str(e))

            principal = await self.session_identity_provider.authenticate(session)
            if principal is None:
                return context.fail(OAuthErrorType.INVALID_GRANT, "session has no principal")

            session_client = principal.find_identity(IdentityKind.APPLICATION)
            if session_client is None or session_client.name.lower() != client.name.lower():
                logfire.warn(
                    "Refresh token presented by a different client, abandoning session",
                    client_id=client.name,
                    session_client=session_client.name if session_client else None,
                )
                await self.session_service.abandon_session(
                    session, principal, context.remote_ip
                )
                context.session = None
                return context.fail(OAuthErrorType.INVALID_CLIENT, "invalid refresh token")

            await self.session_service.audit_session_start(
                session, principal, context.remote_ip
            )
            if principal.find_identity(IdentityKind.USER) is not None:
                context.user_principal = principal
            elif context.application_principal is None:
                context.application_principal = principal
            context.session = session
            return True
