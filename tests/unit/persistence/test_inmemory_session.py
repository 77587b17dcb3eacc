"""Tests for the in-memory session store."""

from datetime import datetime, timedelta, timezone

import pytest

from tollgate.config import SessionSettings
from tollgate.domain.error import SecuritySessionError, SessionErrorKind
from tollgate.domain.model.principal import Claim, ClaimsIdentity, ClaimsPrincipal
from tollgate.domain.value import ClaimTypes, IdentityKind
from tollgate.persistence.inmemory import InMemorySessionStore


def _principal(*claims: Claim) -> ClaimsPrincipal:
    user = ClaimsIdentity(
        name="alice",
        kind=IdentityKind.USER,
        is_authenticated=True,
        claims=(Claim(type=ClaimTypes.SECURITY_ID, value="alice-sid"), *claims),
    )
    app = ClaimsIdentity(name="fiddler", kind=IdentityKind.APPLICATION)
    return ClaimsPrincipal.of(user, app)


async def _establish(store: InMemorySessionStore, principal: ClaimsPrincipal, **kwargs):
    arguments = {
        "remote_ip": "10.0.0.1",
        "is_override": False,
        "purpose_of_use": None,
        "scopes": ["openid"],
        "language": None,
    }
    arguments.update(kwargs)
    return await store.establish(principal, **arguments)


class TestInMemorySessionStore:
    """Tests for InMemorySessionStore."""

    @pytest.mark.asyncio
    async def test_establish_records_session(self):
        """Test establishment records the session and its principal."""
        # Arrange
        store = InMemorySessionStore(SessionSettings(lifetime_seconds=600))

        # Act
        session = await _establish(store, _principal(), language="de", is_override=True)

        # Assert
        assert session.user_name == "alice"
        assert session.application_name == "fiddler"
        assert session.scopes == ("openid",)
        assert session.not_after - session.not_before == timedelta(seconds=600)

        principal = await store.authenticate(session)
        assert principal.find_first(ClaimTypes.LANGUAGE).value == "de"
        assert principal.find_first(ClaimTypes.OVERRIDE).value == "true"
        assert principal.find_first(ClaimTypes.SCOPE).value == "openid"

    @pytest.mark.asyncio
    async def test_missing_required_claim(self):
        store = InMemorySessionStore(
            SessionSettings(required_claims=[ClaimTypes.PURPOSE_OF_USE])
        )

        with pytest.raises(SecuritySessionError) as exc_info:
            await _establish(store, _principal())

        assert exc_info.value.kind == SessionErrorKind.MISSING_REQUIRED_CLAIM
        assert exc_info.value.data == {"claim": ClaimTypes.PURPOSE_OF_USE}

    @pytest.mark.asyncio
    async def test_encoded_tokens_resolve(self):
        store = InMemorySessionStore(SessionSettings())
        session = await _establish(store, _principal())

        resolved = await store.resolve_session(store.get_encoded_id_token(session))

        assert resolved == session
        assert await store.resolve_session("@@not-base64@@") is None

    @pytest.mark.asyncio
    async def test_refresh_rotates_token(self):
        """Test a refresh issues a new refresh token and spends the old one."""
        store = InMemorySessionStore(SessionSettings())
        session = await _establish(store, _principal())
        old_token = store.get_encoded_refresh_token(session)

        extended = await store.extend_session_with_refresh_token(old_token)

        assert extended.id == session.id
        assert store.get_encoded_refresh_token(extended) != old_token
        with pytest.raises(SecuritySessionError):
            await store.extend_session_with_refresh_token(old_token)

    @pytest.mark.asyncio
    async def test_expired_session_is_hidden(self):
        store = InMemorySessionStore(SessionSettings(lifetime_seconds=-1))
        session = await _establish(store, _principal())

        assert await store.get(session.id) is None
        assert await store.get(session.id, allow_expired=True) == session
        assert session.is_expired(datetime.now(timezone.utc))

    @pytest.mark.asyncio
    async def test_user_sessions_and_abandon(self):
        store = InMemorySessionStore(SessionSettings())
        first = await _establish(store, _principal())
        second = await _establish(store, _principal())

        sessions = await store.get_user_sessions("ALICE-SID")
        await store.abandon(first)

        assert {s.id for s in sessions} == {first.id, second.id}
        assert [s.id for s in await store.get_user_sessions("alice-sid")] == [second.id]
