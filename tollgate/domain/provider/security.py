"""Policy, audit and key material interfaces."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from cryptography import x509

from tollgate.domain.model.audit import AuditEvent
from tollgate.domain.model.principal import ClaimsPrincipal
from tollgate.domain.value import PolicyDecision


class PolicyEnforcementService(ABC):
    """Policy decision point."""

    @abstractmethod
    async def demand(self, policy_id: str, principal: ClaimsPrincipal) -> PolicyDecision:
        """Decide whether a principal holds a policy."""
        pass


class AuditService(ABC):
    """Security audit sink."""

    @abstractmethod
    async def send(self, event: AuditEvent) -> None:
        pass


class SymmetricCryptoProvider(ABC):
    """Symmetric encryption for client-held artifacts."""

    @abstractmethod
    def encrypt(self, plaintext: str) -> str:
        """Encrypt text into a URL-safe opaque string."""
        pass

    @abstractmethod
    def decrypt(self, ciphertext: str) -> str:
        """Decrypt an opaque string.

        Raises:
            DecryptionError: If the input is malformed or was tampered with
        """
        pass


class SigningCertificateManager(ABC):
    """Certificates registered for signing on behalf of the system identity."""

    @abstractmethod
    def get_signing_certificates(self) -> list[x509.Certificate]:
        pass


@dataclass(frozen=True)
class RenderedAsset:
    """A rendered login/content asset."""

    content: bytes
    media_type: str


class LoginAssetProvider(ABC):
    """Renders the interactive login surface and its static content."""

    @abstractmethod
    def render(
        self, asset_path: str | None, locale: str | None, bindings: dict[str, str]
    ) -> RenderedAsset | None:
        """Render an asset.

        Args:
            asset_path: Asset to render, None for the login page
            locale: Preferred locale
            bindings: Values bound into the page

        Returns:
            The rendered asset, or None if it does not exist
        """
        pass
