"""Tests for the in-memory identity stores."""

import pytest

from tollgate.domain.error import AuthenticationError, MfaRequiredError
from tollgate.domain.provider import (
    ApplicationIdentityProvider,
    DeviceIdentityProvider,
    IdentityProvider,
    RoleProvider,
    SecurityChallengeIdentityService,
)
from tollgate.domain.value import ClaimTypes
from tollgate.persistence.inmemory import InMemoryApplicationIdentityProvider
from tests.di.store import (
    ALICE,
    ALICE_PASSWORD,
    ALICE_ROLES,
    ALICE_SID,
    BOB,
    BOB_CHALLENGE,
    BOB_CHALLENGE_ANSWER,
    CAROL,
    CAROL_MFA_CODE,
    CAROL_PASSWORD,
    CONFIDENTIAL_APP,
    CONFIDENTIAL_APP_SECRET,
    DEVICE,
    DEVICE_SECRET,
    FAST_HASHER,
    PUBLIC_APP,
)
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


class TestUserIdentityProvider:
    """Tests for the user store."""

    @pytest.mark.asyncio
    async def test_authenticate(self, unit_env):
        users = await unit_env.get(IdentityProvider)

        principal = await users.authenticate("ALICE", ALICE_PASSWORD)

        assert principal.identity.name == ALICE
        assert principal.identity.is_authenticated
        assert principal.identity.security_id == ALICE_SID

    @pytest.mark.asyncio
    async def test_wrong_password(self, unit_env):
        users = await unit_env.get(IdentityProvider)

        with pytest.raises(AuthenticationError):
            await users.authenticate(ALICE, "wrong")

    @pytest.mark.asyncio
    async def test_wrong_second_factor(self, unit_env):
        users = await unit_env.get(IdentityProvider)

        with pytest.raises(MfaRequiredError):
            await users.authenticate(CAROL, CAROL_PASSWORD)
        with pytest.raises(AuthenticationError):
            await users.authenticate(CAROL, CAROL_PASSWORD, "000000")
        assert await users.authenticate(CAROL, CAROL_PASSWORD, CAROL_MFA_CODE)

    @pytest.mark.asyncio
    async def test_lookup_by_sid_and_roles(self, unit_env):
        users = await unit_env.get(IdentityProvider)
        roles = await unit_env.get(RoleProvider)

        identity = await users.get_identity_by_sid(ALICE_SID.upper())

        assert identity.name == ALICE
        assert await roles.get_roles(ALICE) == list(ALICE_ROLES)
        assert await roles.get_roles("nobody") == []

    @pytest.mark.asyncio
    async def test_challenge_marks_password_reset(self, unit_env):
        challenges = await unit_env.get(SecurityChallengeIdentityService)

        principal = await challenges.authenticate(BOB, BOB_CHALLENGE, BOB_CHALLENGE_ANSWER)

        assert principal.identity.name == BOB
        assert principal.find_first(ClaimTypes.PASSWORD_RESET).value == "true"


class TestApplicationIdentityProvider:
    """Tests for the application store."""

    @pytest.mark.asyncio
    async def test_confidential_client(self, unit_env):
        applications = await unit_env.get(ApplicationIdentityProvider)

        assert await applications.authenticate(CONFIDENTIAL_APP, CONFIDENTIAL_APP_SECRET)
        assert await applications.authenticate(CONFIDENTIAL_APP, "wrong") is None

    @pytest.mark.asyncio
    async def test_public_client_only_on_behalf(self, unit_env):
        """Test a public client cannot use a secret but can act for a user."""
        applications = await unit_env.get(ApplicationIdentityProvider)
        users = await unit_env.get(IdentityProvider)
        user = await users.authenticate(ALICE, ALICE_PASSWORD)

        assert await applications.authenticate(PUBLIC_APP, "") is None
        on_behalf = await applications.authenticate_on_behalf_of(PUBLIC_APP, user)
        assert on_behalf.identity.name == PUBLIC_APP
        assert on_behalf.identity.is_authenticated

    @pytest.mark.asyncio
    async def test_confidential_client_not_on_behalf(self, unit_env):
        applications = await unit_env.get(ApplicationIdentityProvider)
        users = await unit_env.get(IdentityProvider)
        user = await users.authenticate(ALICE, ALICE_PASSWORD)

        assert await applications.authenticate_on_behalf_of(CONFIDENTIAL_APP, user) is None


class TestDeviceIdentityProvider:
    """Tests for the device store."""

    @pytest.mark.asyncio
    async def test_authenticate(self, unit_env):
        devices = await unit_env.get(DeviceIdentityProvider)

        assert (await devices.authenticate(DEVICE, DEVICE_SECRET)).identity.name == DEVICE
        assert await devices.authenticate(DEVICE, "wrong") is None


class TestSecretHashing:
    """Tests for how the stores keep secrets."""

    @pytest.mark.asyncio
    async def test_secrets_are_stored_as_argon2_hashes(self):
        """Test only an argon2 hash of the secret is kept."""
        # Arrange
        applications = InMemoryApplicationIdentityProvider(FAST_HASHER)

        # Act
        applications.add_application("portal", "portal-secret")

        # Assert
        stored = applications._store.find("portal").secret_hash
        assert stored.startswith("$argon2id$")
        assert "portal-secret" not in stored
        assert (await applications.authenticate("portal", "portal-secret")) is not None

    @pytest.mark.asyncio
    async def test_corrupt_hash_does_not_authenticate(self):
        applications = InMemoryApplicationIdentityProvider(FAST_HASHER)
        applications.add_application("portal", "portal-secret")
        applications._store.find("portal").secret_hash = "not-a-hash"

        assert await applications.authenticate("portal", "portal-secret") is None
