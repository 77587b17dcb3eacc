"""Identity provider interfaces.

Credential verification and identity storage are owned by these
collaborators; the OAuth core only consumes them.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from tollgate.domain.model.principal import ClaimsIdentity, ClaimsPrincipal


class IdentityProvider(ABC):
    """User identity provider."""

    @abstractmethod
    async def authenticate(
        self, username: str, password: str, mfa_code: str | None = None
    ) -> ClaimsPrincipal:
        """Authenticate a user with a password and optional second factor.

        Args:
            username: User name
            password: Password
            mfa_code: Second factor code, if supplied

        Returns:
            The authenticated user principal

        Raises:
            AuthenticationError: If the credentials are rejected
            MfaRequiredError: If a second factor is required but missing
            PasswordExpiredError: If the password must be changed
        """
        pass

    @abstractmethod
    async def get_identity(self, name: str) -> ClaimsIdentity | None:
        """Find a user identity by name (unauthenticated)."""
        pass

    @abstractmethod
    async def get_identity_by_sid(self, sid: str) -> ClaimsIdentity | None:
        """Find a user identity by security id (unauthenticated)."""
        pass

    @abstractmethod
    async def get_sid(self, name: str) -> str | None:
        """Resolve a user name to its security id."""
        pass


class ApplicationIdentityProvider(ABC):
    """Client application identity provider."""

    @abstractmethod
    async def authenticate(
        self, client_id: str, client_secret: str
    ) -> ClaimsPrincipal | None:
        """Authenticate an application by its secret.

        Returns:
            The application principal, or None if the secret is rejected
        """
        pass

    @abstractmethod
    async def authenticate_on_behalf_of(
        self, client_id: str, principal: ClaimsPrincipal
    ) -> ClaimsPrincipal | None:
        """Authenticate an application acting for an already authenticated principal.

        Used by public clients that present no secret of their own.

        Returns:
            The application principal, or None if not permitted
        """
        pass

    @abstractmethod
    async def get_identity(self, client_id: str) -> ClaimsIdentity | None:
        """Find an application identity by client id."""
        pass


class DeviceIdentityProvider(ABC):
    """Device identity provider."""

    @abstractmethod
    async def authenticate(
        self, device_id: str, device_secret: str
    ) -> ClaimsPrincipal | None:
        """Authenticate a device by its secret.

        Returns:
            The device principal, or None if the secret is rejected
        """
        pass

    @abstractmethod
    async def get_identity(self, device_id: str) -> ClaimsIdentity | None:
        """Find a device identity by name."""
        pass


class SecurityChallengeIdentityService(ABC):
    """Authenticates users by answering a security challenge."""

    @abstractmethod
    async def authenticate(
        self,
        username: str,
        challenge_id: UUID,
        response: str,
        mfa_code: str | None = None,
    ) -> ClaimsPrincipal:
        """Authenticate a user by a challenge response.

        Raises:
            AuthenticationError: If the response is rejected
        """
        pass


class RoleProvider(ABC):
    """Role lookup for users."""

    @abstractmethod
    async def get_roles(self, username: str) -> list[str]:
        """Return every role the user belongs to."""
        pass
