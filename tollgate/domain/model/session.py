"""Session model."""

from datetime import datetime

from tollgate.domain.model.common import DomainModel


class Session(DomainModel):
    """A session established by the session provider.

    The session provider owns persistence; this is the read model the
    OAuth core works with.
    """

    id: bytes
    not_before: datetime
    not_after: datetime
    refresh_token: bytes | None = None
    refresh_not_after: datetime | None = None
    application_name: str | None = None
    user_name: str | None = None
    scopes: tuple[str, ...] = ()

    def is_expired(self, now: datetime) -> bool:
        return now > self.not_after
