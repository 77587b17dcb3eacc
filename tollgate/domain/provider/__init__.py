"""Interfaces of the collaborators the authorization server relies on."""

from .identity import (
    ApplicationIdentityProvider,
    DeviceIdentityProvider,
    IdentityProvider,
    RoleProvider,
    SecurityChallengeIdentityService,
)
from .security import (
    AuditService,
    LoginAssetProvider,
    PolicyEnforcementService,
    RenderedAsset,
    SigningCertificateManager,
    SymmetricCryptoProvider,
)
from .session import SessionIdentityProvider, SessionProvider, SessionTokenResolver

__all__ = [
    "ApplicationIdentityProvider",
    "AuditService",
    "DeviceIdentityProvider",
    "IdentityProvider",
    "LoginAssetProvider",
    "PolicyEnforcementService",
    "RenderedAsset",
    "RoleProvider",
    "SecurityChallengeIdentityService",
    "SessionIdentityProvider",
    "SessionProvider",
    "SessionTokenResolver",
    "SigningCertificateManager",
    "SymmetricCryptoProvider",
]
