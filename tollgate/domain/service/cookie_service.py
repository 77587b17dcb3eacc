"""SSO cookie encoding."""

from datetime import datetime, timedelta

import logfire
from pydantic import ValidationError as PydanticValidationError

from tollgate.config import OAuthSettings, SecuritySettings
from tollgate.domain.error import DecryptionError
from tollgate.domain.model.authorization import AuthorizationCookie
from tollgate.domain.provider import SymmetricCryptoProvider

from .base import Service


class AuthorizationCookieService(Service):
    """Reads and writes the encrypted SSO cookie."""

    def __init__(
        self,
        crypto_provider: SymmetricCryptoProvider,
        oauth_settings: OAuthSettings,
        security_settings: SecuritySettings,
    ) -> None:
        self.crypto_provider = crypto_provider
        self.cookie_name = oauth_settings.cookie_name
        self.lifetime = timedelta(
            seconds=security_settings.authentication_cookie_validity_seconds
        )

    def read(self, value: str | None) -> AuthorizationCookie | None:
        """Decrypt a presented cookie.

        Returns:
            The cookie, or None if absent, corrupt or tampered with
        """
        if not value:
            return None
        try:
            return AuthorizationCookie.model_validate_json(self.crypto_provider.decrypt(value))
        except (DecryptionError, PydanticValidationError) as e:
            logfire.warn("Discarding unreadable authorization cookie", error=str(e))
            return None

    def write(self, cookie: AuthorizationCookie) -> str:
        return self.crypto_provider.encrypt(cookie.model_dump_json(by_alias=True))

    def record_login(
        self, value: str | None, user_name: str, now: datetime
    ) -> tuple[str, datetime]:
        """Add a user to the presented cookie, starting a new one if needed.

        Returns:
            Tuple of (encrypted cookie value, cookie expiry)
        """
        cookie = self.read(value) or AuthorizationCookie(created_at=now)
        cookie = cookie.with_user(user_name, now)
        return self.write(cookie), now + self.lifetime
