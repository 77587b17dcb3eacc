"""Token endpoint use case."""

import binascii
from base64 import b64decode

import logfire

from tollgate.application.grant import GrantHandlerRegistry
from tollgate.application.usecase.base import BaseUseCase, context_error
from tollgate.domain.error import SecuritySessionError, SessionErrorKind
from tollgate.domain.model.context import TokenRequest
from tollgate.domain.model.principal import Claim, ClaimsPrincipal
from tollgate.domain.model.response import OAuthError, OAuthTokenResponse
from tollgate.domain.provider import ApplicationIdentityProvider
from tollgate.domain.service import SessionService, TokenService
from tollgate.domain.value import ClaimTypes, IdentityKind, OAuthErrorType


def parse_client_claims(header: str | None) -> list[Claim]:
    """Decode the client claim header.

    The header is base64 of ``type=value`` pairs separated by ``;``.

    Raises:
        ValueError: If the header is not valid base64 text
    """
    if not header:
        return []
    try:
        decoded = b64decode(header, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValueError(f"Malformed client claim header: {e}") from e

    claims = []
    for pair in decoded.split(";"):
        claim_type, sep, value = pair.partition("=")
        if sep and claim_type.strip():
            claims.append(Claim(type=claim_type.strip(), value=value.strip()))
    return claims


class TokenUseCase(BaseUseCase):
    """Issues tokens for every registered grant type."""

    def __init__(
        self,
        grant_registry: GrantHandlerRegistry,
        application_provider: ApplicationIdentityProvider,
        session_service: SessionService,
        token_service: TokenService,
    ) -> None:
        """Initialize token use case.

        Args:
            grant_registry: Grant type to handler map
            application_provider: Application identity provider
            session_service: Session establishment
            token_service: Descriptor assembly and token minting
        """
        self.grant_registry = grant_registry
        self.application_provider = application_provider
        self.session_service = session_service
        self.token_service = token_service

    async def execute(self, request: TokenRequest) -> OAuthTokenResponse | OAuthError:
        """Run the token endpoint pipeline.

        Steps:
        1. Reject an empty form
        2. Capture the client secret for the symmetric signing fallback
        3. Look up the grant handler
        4. Resolve device and application identities
        5. Collect client supplied claims
        6. Dispatch to the grant handler
        7. Establish a session if the handler left that to the endpoint
        8. Build the descriptor and mint tokens

        Args:
            request: Token request context

        Returns:
            Token response, or the OAuth error to return to the client
        """
        context = request

        if not context.form:
            context.fail(OAuthErrorType.INVALID_REQUEST, "empty request")
            return context_error(context)

        if context.client_secret:
            context.symmetric_secret = context.client_secret

        handler = self.grant_registry.get(context.grant_type)
        if handler is None:
            logfire.info("Unsupported grant type", grant_type=context.grant_type)
            context.fail(
                OAuthErrorType.UNSUPPORTED_GRANT_TYPE,
                f"{context.grant_type or ''} is not supported",
            )
            return context_error(context)

        with logfire.span(
            "token_endpoint",
            grant_type=context.grant_type,
            client_id=context.client_id,
            trace_id=context.trace_id,
        ):
            if not await self._resolve_client(context):
                return context_error(context)

            try:
                context.additional_claims = parse_client_claims(context.client_claim_header)
            except ValueError as e:
                context.fail(OAuthErrorType.INVALID_REQUEST, str(e))
                return context_error(context)
            if context.ui_locales and not any(
                c.type == ClaimTypes.LANGUAGE for c in context.additional_claims
            ):
                context.additional_claims.append(
                    Claim(type=ClaimTypes.LANGUAGE, value=context.ui_locales)
                )

            try:
                if not await handler.handle(context):
                    logfire.info(
                        "Grant refused",
                        error=context.error_type.value if context.error_type else None,
                        description=context.error_message,
                    )
                    return context_error(context)

                if context.session is None and not await self._establish_session(context):
                    return context_error(context)

                await self.token_service.build_descriptor(context)
                self.token_service.mint_tokens(context)
            except SecuritySessionError as e:
                if e.kind != SessionErrorKind.MISSING_REQUIRED_CLAIM:
                    raise
                logfire.warn("Session requires a missing claim", claim=e.data.get("claim"))
                return OAuthError(
                    error=OAuthErrorType.MISSING_CLAIM,
                    error_description=str(e),
                    data=e.data,
                )

            return self.token_service.create_token_response(context)

    async def _resolve_client(self, context: TokenRequest) -> bool:
        if context.device_principal is None:
            device = context.find_authenticated_identity(IdentityKind.DEVICE)
            if device is not None:
                context.device_principal = ClaimsPrincipal.of(device)

        if context.application_principal is not None:
            return True

        application = context.find_authenticated_identity(IdentityKind.APPLICATION)
        if application is not None:
            context.application_principal = ClaimsPrincipal.of(application)
        elif context.client_id and context.client_secret:
            context.application_principal = await self.application_provider.authenticate(
                context.client_id, context.client_secret
            )
            if context.application_principal is None:
                return context.fail(OAuthErrorType.INVALID_CLIENT, "invalid client credentials")
        elif context.client_id:
            # Public client: identified but not authenticated
            context.application_identity = await self.application_provider.get_identity(
                context.client_id
            )

        if context.client_id is None and context.get_application_identity() is not None:
            context.client_id = context.get_application_identity().name
        return True

    async def _establish_session(self, context: TokenRequest) -> bool:
        if context.user_principal is not None:
            session = await self.session_service.establish_user_session(
                context.user_principal,
                context.get_application_identity(),
                context.get_device_identity(),
                context.scopes,
                context.additional_claims,
                context.remote_ip,
            )
        elif context.application_principal is not None:
            session = await self.session_service.establish_client_session(
                context.application_principal,
                context.device_principal,
                context.scopes,
                context.additional_claims,
                context.remote_ip,
            )
        else:
            return context.fail(OAuthErrorType.UNSPECIFIED_ERROR, "no principal to establish")

        if session is None:
            return context.fail(OAuthErrorType.UNSPECIFIED_ERROR, "could not establish session")
        context.session = session
        return True
