"""Enumerated value types."""

from enum import Enum


class OAuthErrorType(str, Enum):
    """OAuth error codes surfaced to clients."""

    INVALID_REQUEST = "invalid_request"
    INVALID_CLIENT = "invalid_client"
    INVALID_GRANT = "invalid_grant"
    UNAUTHORIZED_CLIENT = "unauthorized_client"
    UNSUPPORTED_GRANT_TYPE = "unsupported_grant_type"
    UNSUPPORTED_RESPONSE_TYPE = "unsupported_response_type"
    UNSUPPORTED_RESPONSE_MODE = "unsupported_response_mode"
    INVALID_SCOPE = "invalid_scope"
    MISSING_CLAIM = "missing_claim"
    MFA_REQUIRED = "mfa_required"
    PASSWORD_EXPIRED = "password_expired"
    UNSPECIFIED_ERROR = "unspecified_error"


class GrantType(str, Enum):
    """Grant types handled by the token endpoint."""

    PASSWORD = "password"
    CLIENT_CREDENTIALS = "client_credentials"
    AUTHORIZATION_CODE = "authorization_code"
    REFRESH_TOKEN = "refresh_token"
    PASSWORD_RESET = "x_challenge"


class TokenType(str, Enum):
    """Access token types the server can issue."""

    BEARER = "bearer"
    JWT = "urn:ietf:params:oauth:token-type:jwt"


class ResponseMode(str, Enum):
    """How the authorize endpoint hands the code back to the client."""

    QUERY = "query"
    FRAGMENT = "fragment"
    FORM_POST = "form_post"


class SignatureAlgorithm(str, Enum):
    """Supported token signature algorithms."""

    HS256 = "HS256"
    RS256 = "RS256"
    RS512 = "RS512"


class IdentityKind(str, Enum):
    """The kind of party an identity represents."""

    USER = "user"
    APPLICATION = "application"
    DEVICE = "device"


class PolicyDecision(str, Enum):
    """Outcome of a policy demand."""

    GRANT = "grant"
    DENY = "deny"


class CodeValidation(str, Enum):
    """Outcome of authorization code validation."""

    OK = "ok"
    EXPIRED = "expired"
    MISMATCHED_DEVICE = "mismatched_device"
    MISMATCHED_APPLICATION = "mismatched_application"


class AuditOutcome(str, Enum):
    """Audit event outcome."""

    SUCCESS = "success"
    MINOR_FAIL = "minor_fail"


class AuditAction(str, Enum):
    """Session lifecycle audit actions."""

    SESSION_START = "session_start"
    SESSION_STOP = "session_stop"
