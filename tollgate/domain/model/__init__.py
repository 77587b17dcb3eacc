"""Domain models for the authorization server."""

from tollgate.domain.model.audit import AuditEvent
from tollgate.domain.model.authorization import AuthorizationCode, AuthorizationCookie
from tollgate.domain.model.context import (
    AuthorizeRequest,
    RequestContext,
    SessionRequest,
    SignoutRequest,
    TokenRequest,
)
from tollgate.domain.model.principal import Claim, ClaimsIdentity, ClaimsPrincipal
from tollgate.domain.model.response import (
    DiscoveryDocument,
    JsonWebKeySet,
    OAuthError,
    OAuthTokenResponse,
)
from tollgate.domain.model.session import Session
from tollgate.domain.model.token import (
    ClaimBag,
    SecurityTokenDescriptor,
    SigningCredential,
)

__all__ = [
    "AuditEvent",
    "AuthorizationCode",
    "AuthorizationCookie",
    "AuthorizeRequest",
    "Claim",
    "ClaimBag",
    "ClaimsIdentity",
    "ClaimsPrincipal",
    "DiscoveryDocument",
    "JsonWebKeySet",
    "OAuthError",
    "OAuthTokenResponse",
    "RequestContext",
    "SecurityTokenDescriptor",
    "Session",
    "SessionRequest",
    "SignoutRequest",
    "SigningCredential",
    "TokenRequest",
]
