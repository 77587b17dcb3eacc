"""Session provider interfaces."""

from abc import ABC, abstractmethod

from tollgate.domain.model.principal import ClaimsPrincipal
from tollgate.domain.model.session import Session


class SessionProvider(ABC):
    """Creates, looks up and terminates sessions."""

    @abstractmethod
    async def establish(
        self,
        principal: ClaimsPrincipal,
        remote_ip: str | None,
        is_override: bool,
        purpose_of_use: str | None,
        scopes: list[str],
        language: str | None,
    ) -> Session | None:
        """Establish a session for an authenticated principal.

        Args:
            principal: Composite principal (user/application/device)
            remote_ip: Caller address
            is_override: Whether the session is a policy override session
            purpose_of_use: Purpose of use code, if asserted
            scopes: Requested scopes
            language: Preferred language, if asserted

        Returns:
            The new session, or None if the provider declined

        Raises:
            SecuritySessionError: If establishment failed, e.g. a required
                claim is missing
        """
        pass

    @abstractmethod
    async def get(self, session_id: bytes, allow_expired: bool = False) -> Session | None:
        """Find a session by id."""
        pass

    @abstractmethod
    async def extend(self, refresh_token: bytes) -> Session:
        """Extend a session using its refresh token.

        Raises:
            SecuritySessionError: If the refresh token is unknown or expired
        """
        pass

    @abstractmethod
    async def abandon(self, session: Session) -> None:
        """Terminate a session."""
        pass

    @abstractmethod
    async def get_user_sessions(self, user_sid: str) -> list[Session]:
        """Return all active sessions of a user."""
        pass


class SessionTokenResolver(ABC):
    """Converts sessions to and from their opaque encoded tokens."""

    @abstractmethod
    def get_encoded_id_token(self, session: Session) -> str:
        """Opaque reference token identifying the session."""
        pass

    @abstractmethod
    def get_encoded_refresh_token(self, session: Session) -> str | None:
        """Opaque refresh token for the session, if it has one."""
        pass

    @abstractmethod
    async def extend_session_with_refresh_token(self, encoded_token: str) -> Session:
        """Extend the session named by an encoded refresh token.

        Raises:
            SecuritySessionError: If the token is malformed, unknown or expired
        """
        pass

    @abstractmethod
    async def resolve_session(self, encoded_token: str) -> Session | None:
        """Find the session named by an encoded reference token."""
        pass


class SessionIdentityProvider(ABC):
    """Authenticates the principal bound to a session."""

    @abstractmethod
    async def authenticate(self, session: Session) -> ClaimsPrincipal | None:
        """Return the principal of a session, with session claims applied."""
        pass
