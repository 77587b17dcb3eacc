"""Client-held authorization artifacts: the authorization code and SSO cookie."""

from datetime import datetime

from pydantic import ConfigDict, Field

from tollgate.domain.model.common import DomainModel


class AuthorizationCode(DomainModel):
    """Stateless authorization code payload.

    Serialized with short field names, then encrypted into the opaque
    code string handed to the client.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    issued_at: datetime = Field(alias="iat")
    device_sid: str | None = Field(default=None, alias="dev")
    application_sid: str | None = Field(default=None, alias="app")
    user_sid: str = Field(alias="usr")
    nonce: str | None = None
    scope: str | None = Field(default=None, alias="scp")
    code_challenge: str | None = Field(default=None, alias="cv")
    code_challenge_method: str | None = Field(default=None, alias="cvm")

    @property
    def scopes(self) -> list[str]:
        return self.scope.split() if self.scope else []


class AuthorizationCookie(DomainModel):
    """SSO cookie tracking users who logged in interactively in this browser."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    users: tuple[str, ...] = Field(default=(), alias="u")
    created_at: datetime = Field(alias="c")
    nonce: int = Field(default=0, alias="n")

    def with_user(self, user_name: str, now: datetime) -> "AuthorizationCookie":
        """Record a login, appending the user if not already tracked."""
        users = self.users
        if not any(u.lower() == user_name.lower() for u in users):
            users = users + (user_name,)
        return self.model_copy(
            update={"users": users, "created_at": now, "nonce": self.nonce + 1}
        )
