"""Domain value objects and enumerations."""

from .claims import ClaimTypes, FormFields, Headers, JwtClaims
from .common import RootValueObject, ValueObject
from .types import (
    AuditAction,
    AuditOutcome,
    CodeValidation,
    GrantType,
    IdentityKind,
    OAuthErrorType,
    PolicyDecision,
    ResponseMode,
    SignatureAlgorithm,
    TokenType,
)

__all__ = [
    "AuditAction",
    "AuditOutcome",
    "ClaimTypes",
    "CodeValidation",
    "FormFields",
    "GrantType",
    "Headers",
    "IdentityKind",
    "JwtClaims",
    "OAuthErrorType",
    "PolicyDecision",
    "ResponseMode",
    "RootValueObject",
    "SignatureAlgorithm",
    "TokenType",
    "ValueObject",
]
