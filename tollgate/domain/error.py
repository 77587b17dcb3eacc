"""Domain layer errors."""

from enum import Enum
from typing import Any


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Domain validation error."""

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class AuthenticationError(DomainError):
    """Raised by identity providers when credentials are rejected."""

    pass


class MfaRequiredError(AuthenticationError):
    """Raised when a second authentication factor must be supplied."""

    pass


class PasswordExpiredError(AuthenticationError):
    """Raised when the credential is valid but must be changed."""

    pass


class PolicyViolationError(DomainError):
    """Raised when a principal is denied a policy outside a grant flow."""

    def __init__(self, policy: str, principal_name: str | None):
        self.policy = policy
        self.principal_name = principal_name
        super().__init__(f"Policy {policy} denied for {principal_name or 'anonymous'}")


class SessionErrorKind(str, Enum):
    """Classification of session provider failures."""

    NOT_ESTABLISHED = "not_established"
    MISSING_REQUIRED_CLAIM = "missing_required_claim"
    REFRESH_INVALID = "refresh_invalid"


class SecuritySessionError(DomainError):
    """Raised by session providers.

    Attributes:
        kind: Failure classification
        data: Structured detail, e.g. ``{"claim": "..."}`` for a missing claim
    """

    def __init__(
        self,
        message: str,
        kind: SessionErrorKind = SessionErrorKind.NOT_ESTABLISHED,
        data: dict[str, Any] | None = None,
    ):
        self.kind = kind
        self.data = data or {}
        super().__init__(message)


class DecryptionError(DomainError):
    """Raised when an encrypted artifact cannot be decrypted."""

    pass
