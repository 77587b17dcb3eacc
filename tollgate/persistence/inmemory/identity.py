"""In-memory identity stores."""

import hmac
import logging
from dataclasses import dataclass, field
from uuid import UUID, uuid4

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError

from tollgate.domain.error import (
    AuthenticationError,
    MfaRequiredError,
    PasswordExpiredError,
)
from tollgate.domain.model.principal import Claim, ClaimsIdentity, ClaimsPrincipal
from tollgate.domain.provider import (
    ApplicationIdentityProvider,
    DeviceIdentityProvider,
    IdentityProvider,
    RoleProvider,
    SecurityChallengeIdentityService,
)
from tollgate.domain.value import ClaimTypes, IdentityKind

logger = logging.getLogger(__name__)


@dataclass
class _Account:
    identity: ClaimsIdentity
    secret_hash: str | None
    roles: list[str] = field(default_factory=list)
    mfa_code: str | None = None
    password_expired: bool = False
    challenges: dict[UUID, str] = field(default_factory=dict)


def _build_identity(
    name: str,
    kind: IdentityKind,
    sid: str | None,
    policies: tuple[str, ...] | list[str],
    claims: tuple[Claim, ...] | list[Claim],
) -> ClaimsIdentity:
    sid = sid or str(uuid4())
    return ClaimsIdentity(
        name=name,
        kind=kind,
        claims=(
            Claim(type=ClaimTypes.NAME, value=name),
            Claim(type=ClaimTypes.SECURITY_ID, value=sid),
            Claim(type=ClaimTypes.NAME_IDENTIFIER, value=sid),
            *(Claim(type=ClaimTypes.GRANTED_POLICY, value=p) for p in policies),
            *claims,
        ),
    )


class _AccountStore:
    def __init__(self, hasher: PasswordHasher | None = None) -> None:
        self._accounts: dict[str, _Account] = {}
        self.hasher = hasher or PasswordHasher()

    def hash(self, secret: str) -> str:
        return self.hasher.hash(secret)

    def verify(self, secret_hash: str | None, secret: str | None) -> bool:
        if secret_hash is None:
            return False
        try:
            return self.hasher.verify(secret_hash, secret or "")
        except (VerificationError, InvalidHash):
            return False

    def add(self, account: _Account) -> ClaimsIdentity:
        self._accounts[account.identity.name.lower()] = account
        return account.identity

    def find(self, name: str) -> _Account | None:
        return self._accounts.get(name.lower())

    def find_by_sid(self, sid: str) -> _Account | None:
        return next(
            (
                a
                for a in self._accounts.values()
                if a.identity.security_id and a.identity.security_id.lower() == sid.lower()
            ),
            None,
        )


class InMemoryUserIdentityProvider(IdentityProvider, RoleProvider):
    """User accounts, passwords, roles and security challenges."""

    def __init__(self, hasher: PasswordHasher | None = None) -> None:
        self._store = _AccountStore(hasher)

    def add_user(
        self,
        name: str,
        password: str,
        *,
        sid: str | None = None,
        policies: tuple[str, ...] | list[str] = (),
        roles: tuple[str, ...] | list[str] = (),
        claims: tuple[Claim, ...] | list[Claim] = (),
        mfa_code: str | None = None,
        password_expired: bool = False,
    ) -> ClaimsIdentity:
        """Register a user account."""
        identity = _build_identity(name, IdentityKind.USER, sid, policies, claims)
        return self._store.add(
            _Account(
                identity=identity,
                secret_hash=self._store.hash(password),
                roles=list(roles),
                mfa_code=mfa_code,
                password_expired=password_expired,
            )
        )

    def add_challenge(self, name: str, challenge_id: UUID, answer: str) -> None:
        """Register a security challenge answer for a user."""
        account = self._store.find(name)
        if account is None:
            raise KeyError(name)
        account.challenges[challenge_id] = self._store.hash(answer)

    async def authenticate(
        self, username: str, password: str, mfa_code: str | None = None
    ) -> ClaimsPrincipal:
        account = self._store.find(username)
        if account is None or not self._store.verify(account.secret_hash, password):
            raise AuthenticationError("Invalid username or password")
        self._check_second_factor(account, mfa_code)
        if account.password_expired:
            raise PasswordExpiredError("Password has expired")
        return ClaimsPrincipal.of(account.identity.as_authenticated("PASSWORD"))

    async def authenticate_challenge(
        self, username: str, challenge_id: UUID, response: str, mfa_code: str | None
    ) -> ClaimsPrincipal:
        account = self._store.find(username)
        answer = account.challenges.get(challenge_id) if account else None
        if account is None or not self._store.verify(answer, response):
            raise AuthenticationError("Invalid challenge response")
        self._check_second_factor(account, mfa_code)
        identity = account.identity.as_authenticated("CHALLENGE").with_claims(
            [Claim(type=ClaimTypes.PASSWORD_RESET, value="true")]
        )
        return ClaimsPrincipal.of(identity)

    @staticmethod
    def _check_second_factor(account: _Account, mfa_code: str | None) -> None:
        if account.mfa_code is None:
            return
        if not mfa_code:
            raise MfaRequiredError("A second authentication factor is required")
        if not hmac.compare_digest(account.mfa_code, mfa_code):
            raise AuthenticationError("Invalid second factor")

    async def get_identity(self, name: str) -> ClaimsIdentity | None:
        account = self._store.find(name)
        return account.identity if account else None

    async def get_identity_by_sid(self, sid: str) -> ClaimsIdentity | None:
        account = self._store.find_by_sid(sid)
        return account.identity if account else None

    async def get_sid(self, name: str) -> str | None:
        account = self._store.find(name)
        return account.identity.security_id if account else None

    async def get_roles(self, username: str) -> list[str]:
        account = self._store.find(username)
        return list(account.roles) if account else []


class InMemorySecurityChallengeService(SecurityChallengeIdentityService):
    """Challenge authentication backed by the in-memory user store."""

    def __init__(self, users: InMemoryUserIdentityProvider) -> None:
        self._users = users

    async def authenticate(
        self,
        username: str,
        challenge_id: UUID,
        response: str,
        mfa_code: str | None = None,
    ) -> ClaimsPrincipal:
        return await self._users.authenticate_challenge(
            username, challenge_id, response, mfa_code
        )


class InMemoryApplicationIdentityProvider(ApplicationIdentityProvider):
    """Client applications.

    Applications registered without a secret are public clients and may
    only authenticate on behalf of an already authenticated principal.
    """

    def __init__(self, hasher: PasswordHasher | None = None) -> None:
        self._store = _AccountStore(hasher)

    def add_application(
        self,
        client_id: str,
        secret: str | None = None,
        *,
        sid: str | None = None,
        policies: tuple[str, ...] | list[str] = (),
        claims: tuple[Claim, ...] | list[Claim] = (),
    ) -> ClaimsIdentity:
        """Register a client application."""
        identity = _build_identity(
            client_id, IdentityKind.APPLICATION, sid, policies, claims
        )
        return self._store.add(
            _Account(
                identity=identity,
                secret_hash=self._store.hash(secret) if secret is not None else None,
            )
        )

    async def authenticate(
        self, client_id: str, client_secret: str
    ) -> ClaimsPrincipal | None:
        account = self._store.find(client_id)
        if account is None or account.secret_hash is None:
            return None
        if not self._store.verify(account.secret_hash, client_secret):
            logger.info(f"Rejected secret for application {client_id}")
            return None
        return ClaimsPrincipal.of(account.identity.as_authenticated("SECRET"))

    async def authenticate_on_behalf_of(
        self, client_id: str, principal: ClaimsPrincipal
    ) -> ClaimsPrincipal | None:
        account = self._store.find(client_id)
        if account is None or account.secret_hash is not None:
            return None
        if not principal.identity.is_authenticated:
            return None
        return ClaimsPrincipal.of(account.identity.as_authenticated("PUBLIC"))

    async def get_identity(self, client_id: str) -> ClaimsIdentity | None:
        account = self._store.find(client_id)
        return account.identity if account else None


class InMemoryDeviceIdentityProvider(DeviceIdentityProvider):
    """Devices with shared secrets."""

    def __init__(self, hasher: PasswordHasher | None = None) -> None:
        self._store = _AccountStore(hasher)

    def add_device(
        self,
        device_id: str,
        secret: str,
        *,
        sid: str | None = None,
        policies: tuple[str, ...] | list[str] = (),
        claims: tuple[Claim, ...] | list[Claim] = (),
    ) -> ClaimsIdentity:
        """Register a device."""
        identity = _build_identity(device_id, IdentityKind.DEVICE, sid, policies, claims)
        return self._store.add(
            _Account(identity=identity, secret_hash=self._store.hash(secret))
        )

    async def authenticate(
        self, device_id: str, device_secret: str
    ) -> ClaimsPrincipal | None:
        account = self._store.find(device_id)
        if account is None or account.secret_hash is None:
            return None
        if not self._store.verify(account.secret_hash, device_secret):
            logger.info(f"Rejected secret for device {device_id}")
            return None
        return ClaimsPrincipal.of(account.identity.as_authenticated("SECRET"))

    async def get_identity(self, device_id: str) -> ClaimsIdentity | None:
        account = self._store.find(device_id)
        return account.identity if account else None
