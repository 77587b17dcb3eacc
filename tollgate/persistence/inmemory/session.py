"""In-memory session store."""

import binascii
import logging
import secrets
from base64 import urlsafe_b64decode, urlsafe_b64encode
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import uuid4

from tollgate.config import SessionSettings
from tollgate.domain.error import SecuritySessionError, SessionErrorKind
from tollgate.domain.model.principal import Claim, ClaimsPrincipal
from tollgate.domain.model.session import Session
from tollgate.domain.provider import (
    SessionIdentityProvider,
    SessionProvider,
    SessionTokenResolver,
)
from tollgate.domain.value import ClaimTypes, IdentityKind

logger = logging.getLogger(__name__)


def encode_bytes(value: bytes) -> str:
    return urlsafe_b64encode(value).rstrip(b"=").decode("ascii")


def decode_bytes(value: str) -> bytes:
    """Decode unpadded base64url.

    Raises:
        ValueError: If the value is not base64url
    """
    try:
        return urlsafe_b64decode(value + "=" * (-len(value) % 4))
    except (binascii.Error, UnicodeEncodeError) as e:
        raise ValueError("Malformed token") from e


@dataclass
class _Entry:
    session: Session
    principal: ClaimsPrincipal


class InMemorySessionStore(SessionProvider, SessionTokenResolver, SessionIdentityProvider):
    """Sessions held in process memory.

    Encoded id tokens are the base64url session id; refresh tokens are
    random and rotate on every extension.
    """

    def __init__(self, settings: SessionSettings) -> None:
        self._settings = settings
        self._entries: dict[bytes, _Entry] = {}

    async def establish(
        self,
        principal: ClaimsPrincipal,
        remote_ip: str | None,
        is_override: bool,
        purpose_of_use: str | None,
        scopes: list[str],
        language: str | None,
    ) -> Session | None:
        for claim_type in self._settings.required_claims:
            if principal.find_first(claim_type) is None:
                raise SecuritySessionError(
                    f"Session requires claim {claim_type}",
                    kind=SessionErrorKind.MISSING_REQUIRED_CLAIM,
                    data={"claim": claim_type},
                )

        now = datetime.now(timezone.utc)
        session_id = uuid4().bytes
        user = principal.find_identity(IdentityKind.USER)
        application = principal.find_identity(IdentityKind.APPLICATION)
        session = Session(
            id=session_id,
            not_before=now,
            not_after=now + timedelta(seconds=self._settings.lifetime_seconds),
            refresh_token=secrets.token_bytes(32),
            refresh_not_after=now
            + timedelta(seconds=self._settings.refresh_lifetime_seconds),
            application_name=application.name if application else None,
            user_name=user.name if user else None,
            scopes=tuple(scopes),
        )

        session_claims = [
            Claim(type=ClaimTypes.SESSION_ID, value=encode_bytes(session_id)),
            *(Claim(type=ClaimTypes.SCOPE, value=s) for s in scopes),
        ]
        if language and principal.find_first(ClaimTypes.LANGUAGE) is None:
            session_claims.append(Claim(type=ClaimTypes.LANGUAGE, value=language))
        if purpose_of_use and principal.find_first(ClaimTypes.PURPOSE_OF_USE) is None:
            session_claims.append(
                Claim(type=ClaimTypes.PURPOSE_OF_USE, value=purpose_of_use)
            )
        if is_override:
            session_claims.append(Claim(type=ClaimTypes.OVERRIDE, value="true"))

        self._entries[session_id] = _Entry(
            session=session, principal=principal.with_claims(session_claims)
        )
        logger.info(f"Established session for {principal.identity.name} from {remote_ip}")
        return session

    async def get(self, session_id: bytes, allow_expired: bool = False) -> Session | None:
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        if not allow_expired and entry.session.is_expired(datetime.now(timezone.utc)):
            return None
        return entry.session

    async def extend(self, refresh_token: bytes) -> Session:
        now = datetime.now(timezone.utc)
        entry = next(
            (
                e
                for e in self._entries.values()
                if e.session.refresh_token is not None
                and secrets.compare_digest(e.session.refresh_token, refresh_token)
            ),
            None,
        )
        if entry is None:
            raise SecuritySessionError(
                "Refresh token not found", kind=SessionErrorKind.REFRESH_INVALID
            )
        if entry.session.refresh_not_after and now > entry.session.refresh_not_after:
            raise SecuritySessionError(
                "Refresh token expired", kind=SessionErrorKind.REFRESH_INVALID
            )

        entry.session = entry.session.model_copy(
            update={
                "not_before": now,
                "not_after": now + timedelta(seconds=self._settings.lifetime_seconds),
                "refresh_token": secrets.token_bytes(32),
                "refresh_not_after": now
                + timedelta(seconds=self._settings.refresh_lifetime_seconds),
            }
        )
        return entry.session

    async def abandon(self, session: Session) -> None:
        if self._entries.pop(session.id, None) is not None:
            logger.info(f"Abandoned session {encode_bytes(session.id)}")

    async def get_user_sessions(self, user_sid: str) -> list[Session]:
        now = datetime.now(timezone.utc)
        sessions = []
        for entry in self._entries.values():
            user = entry.principal.find_identity(IdentityKind.USER)
            if (
                user is not None
                and user.security_id is not None
                and user.security_id.lower() == user_sid.lower()
                and not entry.session.is_expired(now)
            ):
                sessions.append(entry.session)
        return sessions

    def get_encoded_id_token(self, session: Session) -> str:
        return encode_bytes(session.id)

    def get_encoded_refresh_token(self, session: Session) -> str | None:
        return encode_bytes(session.refresh_token) if session.refresh_token else None

    async def extend_session_with_refresh_token(self, encoded_token: str) -> Session:
        try:
            refresh_token = decode_bytes(encoded_token)
        except ValueError as e:
            raise SecuritySessionError(
                "Malformed refresh token", kind=SessionErrorKind.REFRESH_INVALID
            ) from e
        return await self.extend(refresh_token)

    async def resolve_session(self, encoded_token: str) -> Session | None:
        try:
            session_id = decode_bytes(encoded_token)
        except ValueError:
            return None
        return await self.get(session_id)

    async def authenticate(self, session: Session) -> ClaimsPrincipal | None:
        entry = self._entries.get(session.id)
        return entry.principal if entry else None
