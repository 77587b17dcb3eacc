"""Token descriptor assembly and token minting."""

from base64 import urlsafe_b64encode
from datetime import datetime, timezone
from hashlib import sha256
from typing import Any

import logfire

from tollgate.config import OAuthSettings, PolicySettings
from tollgate.domain.error import SecuritySessionError
from tollgate.domain.model.context import RequestContext
from tollgate.domain.model.principal import ClaimsIdentity
from tollgate.domain.model.response import OAuthTokenResponse
from tollgate.domain.model.token import ClaimBag, SecurityTokenDescriptor, SigningCredential
from tollgate.domain.provider import (
    RoleProvider,
    SessionIdentityProvider,
    SessionTokenResolver,
)
from tollgate.domain.value import (
    ClaimTypes,
    IdentityKind,
    JwtClaims,
    SignatureAlgorithm,
    TokenType,
)
from tollgate.domain.value.policies import UNRESTRICTED_ALL_ABBREVIATION
from tollgate.util.error import ConfigurationError
from tollgate.util.jwt import sign_token
from tollgate.util.session import format_session_id

from .base import Service
from .claim_mapper import JWT_FORMAT, ClaimMapperRegistry
from .signing_service import SigningCredentialService

DEFAULT_SIGNING_KEY = "default"

# at_hash keeps the left-most 128 bits of the digest
ACCESS_TOKEN_HASH_BYTES = 16


def _b64url(data: bytes) -> str:
    return urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def access_token_hash(encoded_token: str) -> str:
    digest = sha256(encoded_token.encode("utf-8")).digest()
    return _b64url(digest[:ACCESS_TOKEN_HASH_BYTES])


class TokenService(Service):
    """Builds signable token descriptors from sessions and mints tokens."""

    def __init__(
        self,
        session_identity_provider: SessionIdentityProvider,
        session_token_resolver: SessionTokenResolver,
        claim_mapper_registry: ClaimMapperRegistry,
        role_provider: RoleProvider,
        signing_service: SigningCredentialService,
        oauth_settings: OAuthSettings,
        policy_settings: PolicySettings,
    ) -> None:
        self.session_identity_provider = session_identity_provider
        self.session_token_resolver = session_token_resolver
        self.claim_mapper_registry = claim_mapper_registry
        self.role_provider = role_provider
        self.signing_service = signing_service
        self.oauth_settings = oauth_settings
        self.policy_settings = policy_settings

    async def build_descriptor(
        self, context: RequestContext, now: datetime | None = None
    ) -> SecurityTokenDescriptor:
        """Assemble the token descriptor for the context's session.

        Fills any unresolved identity slots of the context from the
        session principal.

        Args:
            context: Request context with an established session
            now: Current time (defaults to UTC now)

        Returns:
            Descriptor ready for signing, also stored on the context

        Raises:
            SecuritySessionError: If the session has no principal
            ConfigurationError: If no signing key is available
        """
        now = now or datetime.now(timezone.utc)
        session = context.session
        if session is None:
            raise SecuritySessionError("No session to describe")

        with logfire.span("token_service.build_descriptor", trace_id=context.trace_id):
            principal = await self.session_identity_provider.authenticate(session)
            if principal is None:
                raise SecuritySessionError("Session principal could not be authenticated")

            if context.get_device_identity() is None:
                context.device_identity = principal.find_identity(IdentityKind.DEVICE)
            if context.get_application_identity() is None:
                context.application_identity = principal.find_identity(
                    IdentityKind.APPLICATION
                )
            if context.get_user_identity() is None:
                context.user_identity = principal.find_identity(IdentityKind.USER)

            user = context.get_user_identity()
            application = context.get_application_identity()
            device = context.get_device_identity()
            primary = context.get_primary_identity() or principal.identity

            claims = self.claim_mapper_registry.map_to_external(JWT_FORMAT, principal.claims)

            claims.pop(JwtClaims.NAME, None)
            claims.pop(JwtClaims.ACTOR, None)
            claims[JwtClaims.NAME] = primary.name
            actor = primary.find_first(ClaimTypes.ACTOR)
            if actor is not None:
                claims[JwtClaims.ACTOR] = actor.value
            claims[JwtClaims.SUBJECT] = primary.security_id or primary.name

            for identity, claim_name in (
                (user, JwtClaims.USER_IDENTIFIER),
                (application, JwtClaims.APPLICATION_IDENTIFIER),
                (device, JwtClaims.DEVICE_IDENTIFIER),
            ):
                if identity is not None and identity.name_identifier:
                    claims[claim_name] = identity.name_identifier

            session_id = format_session_id(session.id)
            claims[JwtClaims.SESSION_ID] = session_id
            if context.nonce:
                claims[JwtClaims.NONCE] = context.nonce

            encoded_session = self.session_token_resolver.get_encoded_id_token(session)
            claims[JwtClaims.ACCESS_TOKEN_HASH] = access_token_hash(encoded_session)
            claims[JwtClaims.TOKEN_ID] = self._token_id(
                primary, user, application, device, session_id, context, now
            )

            if self.oauth_settings.encode_scopes and JwtClaims.SCOPE in claims:
                claims[JwtClaims.SCOPE] = self._encode_scopes(claims[JwtClaims.SCOPE])

            if user is not None and JwtClaims.ROLE not in claims:
                for role in await self.role_provider.get_roles(user.name):
                    claims.add(JwtClaims.ROLE, role)

            descriptor = SecurityTokenDescriptor(
                claims=claims,
                not_before=session.not_before,
                expires=session.not_after,
                issued_at=session.not_before,
                audience=application.name if application else context.client_id,
                issuer=self.oauth_settings.issuer_name,
                signing_credential=self._signing_credentials(context, application),
            )
            context.descriptor = descriptor
            return descriptor

    def mint_tokens(self, context: RequestContext, now: datetime | None = None) -> None:
        """Sign the descriptor and populate the context's token fields."""
        now = now or datetime.now(timezone.utc)
        descriptor = context.descriptor
        session = context.session
        if descriptor is None or session is None:
            raise SecuritySessionError("No token descriptor to sign")

        context.id_token = sign_token(
            self.serialize_claims(descriptor), descriptor.signing_credential
        )
        context.expires_in = session.not_after - now
        context.token_type = self.oauth_settings.token_type.value
        if self.oauth_settings.token_type == TokenType.BEARER:
            context.access_token = self.session_token_resolver.get_encoded_id_token(session)
        else:
            context.access_token = context.id_token
        context.refresh_token = self.session_token_resolver.get_encoded_refresh_token(
            session
        )
        logfire.info(
            "Tokens issued",
            audience=descriptor.audience,
            key_id=descriptor.signing_credential.key_id,
            token_type=context.token_type,
        )

    @staticmethod
    def serialize_claims(descriptor: SecurityTokenDescriptor) -> dict[str, Any]:
        """Registered claims plus the descriptor's claim bag."""
        payload: dict[str, Any] = dict(descriptor.claims)
        payload["iss"] = descriptor.issuer
        if descriptor.audience:
            payload["aud"] = descriptor.audience
        payload["nbf"] = int(descriptor.not_before.timestamp())
        payload["iat"] = int(descriptor.issued_at.timestamp())
        payload["exp"] = int(descriptor.expires.timestamp())
        return payload

    @staticmethod
    def create_token_response(context: RequestContext) -> OAuthTokenResponse:
        expires_in = context.expires_in.total_seconds() if context.expires_in else 0
        return OAuthTokenResponse(
            access_token=context.access_token,
            id_token=context.id_token,
            token_type=context.token_type,
            expires_in=int(expires_in),
            refresh_token=context.refresh_token,
            nonce=context.nonce,
        )

    def _signing_credentials(
        self, context: RequestContext, application: ClaimsIdentity | None
    ) -> SigningCredential:
        application_id = application.name if application else context.client_id
        credential = self.signing_service.create_signing_credentials(
            f"SA.{application_id}" if application_id else None,
            self.oauth_settings.jwt_signing_key,
            DEFAULT_SIGNING_KEY,
        )

        # Symmetric tokens are signed with the client's own secret
        if (
            credential is None or credential.algorithm == SignatureAlgorithm.HS256
        ) and context.symmetric_secret:
            credential = self.signing_service.create_symmetric_credentials(
                context.symmetric_secret, key_id=application_id or "0"
            )

        if credential is None:
            raise ConfigurationError("No signing key found")
        return credential

    def _encode_scopes(self, scopes: str | list[str]) -> str | list[str]:
        prefix = self.policy_settings.unrestricted_all
        values = [scopes] if isinstance(scopes, str) else scopes
        encoded = [
            f"{UNRESTRICTED_ALL_ABBREVIATION}{s[len(prefix):]}" if s.startswith(prefix) else s
            for s in values
        ]
        return encoded[0] if isinstance(scopes, str) else encoded

    @staticmethod
    def _token_id(
        primary: ClaimsIdentity,
        user: ClaimsIdentity | None,
        application: ClaimsIdentity | None,
        device: ClaimsIdentity | None,
        session_id: str,
        context: RequestContext,
        now: datetime,
    ) -> str:
        raw = "".join(
            [
                primary.name,
                user.name if user else "",
                application.name if application else "",
                device.name if device else "",
                session_id,
                context.nonce or "",
                now.isoformat(),
                context.trace_id,
            ]
        )
        return _b64url(sha256(raw.encode("utf-8")).digest())
