"""Domain services."""

from .authorization_code_service import AuthorizationCodeService
from .base import Service
from .claim_mapper import (
    ClaimMapper,
    ClaimMapperRegistry,
    ExtendedClaimMapper,
    IheIuaClaimMapper,
    JwtClaimMapper,
)
from .cookie_service import AuthorizationCookieService
from .session_service import SessionService
from .signing_service import SigningCredentialService
from .token_service import TokenService

__all__ = [
    "AuthorizationCodeService",
    "AuthorizationCookieService",
    "ClaimMapper",
    "ClaimMapperRegistry",
    "ExtendedClaimMapper",
    "IheIuaClaimMapper",
    "JwtClaimMapper",
    "Service",
    "SessionService",
    "SigningCredentialService",
    "TokenService",
]
