"""Key material providers."""

from dishka import Scope, provide

from tollgate.adapter.crypto.certificates import PemSigningCertificateManager
from tollgate.adapter.crypto.symmetric import FernetCryptoProvider
from tollgate.config import OAuthSettings, SecuritySettings
from tollgate.domain.provider import SigningCertificateManager, SymmetricCryptoProvider
from tollgate.util.di.base import ProviderBase


class CryptoProvider(ProviderBase):
    """Crypto component base."""

    __mock_component__ = "crypto"


class ProdCryptoProvider(CryptoProvider):
    """Production key material read from settings."""

    __is_mock__ = False

    scope = Scope.APP

    @provide
    def get_symmetric_crypto(self, oauth_settings: OAuthSettings) -> SymmetricCryptoProvider:
        """Provide Fernet encryption for codes and cookies."""
        return FernetCryptoProvider(oauth_settings.symmetric_key)

    @provide
    def get_certificate_manager(
        self, security_settings: SecuritySettings
    ) -> SigningCertificateManager:
        """Provide system identity signing certificates."""
        return PemSigningCertificateManager(security_settings.signing_certificate_paths)
