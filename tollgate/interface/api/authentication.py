"""HTTP request authentication for the OAuth endpoints.

Resolves the principal behind a request from its headers:

- ``Authorization: Basic`` carries client credentials
- ``X-Device-Authorization: Basic`` carries device credentials
- ``Authorization: Bearer`` names a session, either by its opaque
  reference token or by a token signed by this server
"""

import binascii
import logging
from base64 import b64decode
from dataclasses import dataclass
from urllib.parse import unquote_plus

from fastapi import Request

from tollgate.config import OAuthSettings
from tollgate.domain.error import AuthenticationError
from tollgate.domain.model.principal import ClaimsIdentity, ClaimsPrincipal
from tollgate.domain.model.session import Session
from tollgate.domain.provider import (
    ApplicationIdentityProvider,
    DeviceIdentityProvider,
    SessionIdentityProvider,
    SessionProvider,
    SessionTokenResolver,
)
from tollgate.domain.service import SigningCredentialService
from tollgate.domain.value import Headers, JwtClaims, SignatureAlgorithm
from tollgate.util.jwt import JWTError, verify_token
from tollgate.util.session import parse_session_id

logger = logging.getLogger(__name__)


@dataclass
class RequestAuthentication:
    """Outcome of authenticating a request's headers."""

    principal: ClaimsPrincipal | None = None
    session: Session | None = None
    client_id: str | None = None
    client_secret: str | None = None


def parse_basic_credentials(value: str) -> tuple[str, str]:
    """Split a Basic credential into its id and secret.

    Both parts are form-url-decoded (RFC 6749 section 2.3.1).

    Raises:
        AuthenticationError: If the credential is malformed
    """
    try:
        decoded = b64decode(value.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        raise AuthenticationError("Malformed basic credentials")
    identifier, sep, secret = decoded.partition(":")
    if not sep or not identifier:
        raise AuthenticationError("Malformed basic credentials")
    return unquote_plus(identifier), unquote_plus(secret)


def remote_address(request: Request) -> str | None:
    forwarded = request.headers.get(Headers.FORWARDED_FOR)
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


class RequestAuthenticator:
    """Authenticates clients, devices and bearer sessions from headers."""

    def __init__(
        self,
        application_provider: ApplicationIdentityProvider,
        device_provider: DeviceIdentityProvider,
        session_provider: SessionProvider,
        session_token_resolver: SessionTokenResolver,
        session_identity_provider: SessionIdentityProvider,
        signing_service: SigningCredentialService,
        oauth_settings: OAuthSettings,
    ) -> None:
        self.application_provider = application_provider
        self.device_provider = device_provider
        self.session_provider = session_provider
        self.session_token_resolver = session_token_resolver
        self.session_identity_provider = session_identity_provider
        self.signing_service = signing_service
        self.oauth_settings = oauth_settings

    async def authenticate(self, request: Request) -> RequestAuthentication:
        """Authenticate every credential presented in the request headers.

        Raises:
            AuthenticationError: If a presented credential is rejected
        """
        result = RequestAuthentication()
        identities: list[ClaimsIdentity] = []

        scheme, _, credentials = request.headers.get(Headers.AUTHORIZATION, "").partition(" ")
        scheme = scheme.lower()
        if scheme == "basic":
            client_id, client_secret = parse_basic_credentials(credentials)
            application = await self.application_provider.authenticate(
                client_id, client_secret
            )
            if application is None:
                logger.info(f"Client authentication failed for {client_id}")
                raise AuthenticationError("Invalid client credentials")
            identities.extend(application.identities)
            result.client_id = client_id
            result.client_secret = client_secret
        elif scheme == "bearer":
            result.session = await self._resolve_bearer(credentials.strip())
            if result.session is None:
                raise AuthenticationError("Invalid or expired bearer token")
            principal = await self.session_identity_provider.authenticate(result.session)
            if principal is not None:
                identities.extend(principal.identities)

        scheme, _, credentials = request.headers.get(
            Headers.DEVICE_AUTHORIZATION, ""
        ).partition(" ")
        if scheme.lower() == "basic":
            device_id, device_secret = parse_basic_credentials(credentials)
            device = await self.device_provider.authenticate(device_id, device_secret)
            if device is None:
                logger.info(f"Device authentication failed for {device_id}")
                raise AuthenticationError("Invalid device credentials")
            identities.extend(device.identities)

        if identities:
            result.principal = ClaimsPrincipal(identities=tuple(identities))
        return result

    async def _resolve_bearer(self, token: str) -> Session | None:
        if not token:
            return None
        if token.count(".") != 2:
            return await self.session_token_resolver.resolve_session(token)

        try:
            claims = verify_token(
                token,
                self.signing_service.get_publishable_key_set().keys,
                issuer=self.oauth_settings.issuer_name,
                algorithms=[a.value for a in SignatureAlgorithm],
                leeway=self.oauth_settings.token_clock_skew_seconds,
            )
        except JWTError as e:
            logger.info(f"Bearer token rejected: {e}")
            return None

        session_claim = claims.get(JwtClaims.SESSION_ID)
        if not isinstance(session_claim, str):
            return None
        session_id = parse_session_id(session_claim)
        return await self.session_provider.get(session_id) if session_id else None
