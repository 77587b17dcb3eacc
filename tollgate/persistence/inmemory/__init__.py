"""In-memory collaborator implementations."""

from tollgate.persistence.inmemory.audit import InMemoryAuditService
from tollgate.persistence.inmemory.identity import (
    InMemoryApplicationIdentityProvider,
    InMemoryDeviceIdentityProvider,
    InMemorySecurityChallengeService,
    InMemoryUserIdentityProvider,
)
from tollgate.persistence.inmemory.session import InMemorySessionStore

__all__ = [
    "InMemoryApplicationIdentityProvider",
    "InMemoryAuditService",
    "InMemoryDeviceIdentityProvider",
    "InMemorySecurityChallengeService",
    "InMemorySessionStore",
    "InMemoryUserIdentityProvider",
]
