"""Signing credential selection and key set publication."""

from base64 import b64encode, urlsafe_b64encode
from dataclasses import dataclass
from typing import Any

import logfire
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.serialization import Encoding
from jwcrypto import jwk

from tollgate.config import SecuritySettings, SignatureSettings
from tollgate.domain.model.response import JsonWebKeySet
from tollgate.domain.model.token import SigningCredential
from tollgate.domain.provider import SigningCertificateManager
from tollgate.domain.value import SignatureAlgorithm
from tollgate.util.error import ConfigurationError
from tollgate.util.keys import load_certificate, load_private_key, thumbprint

from .base import Service

# HS256 keys must be at least as long as the SHA-256 digest
MIN_SYMMETRIC_KEY_BYTES = 32


def derive_symmetric_key(secret: str) -> bytes:
    """Derive an HMAC key by doubling the secret until it is long enough.

    Raises:
        ConfigurationError: If the secret is empty
    """
    key = secret.encode("utf-8")
    if not key:
        raise ConfigurationError("Symmetric signing secret is empty")
    while len(key) < MIN_SYMMETRIC_KEY_BYTES:
        key = key + key
    return key


def _b64url(data: bytes) -> str:
    return urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def symmetric_jwk(key: bytes) -> jwk.JWK:
    return jwk.JWK(kty="oct", k=_b64url(key))


@dataclass
class _ConfiguredKey:
    settings: SignatureSettings
    key: jwk.JWK | None = None
    certificate: x509.Certificate | None = None


class SigningCredentialService(Service):
    """Selects signing credentials from configured key material."""

    def __init__(
        self,
        security_settings: SecuritySettings,
        certificate_manager: SigningCertificateManager,
    ) -> None:
        """Load every configured signature key.

        Args:
            security_settings: Configured signatures
            certificate_manager: Extra certificates of the system identity

        Raises:
            KeyMaterialError: If configured key files cannot be read
        """
        self.certificate_manager = certificate_manager
        self._keys = [self._load(s) for s in security_settings.signatures]

    @staticmethod
    def _load(settings: SignatureSettings) -> _ConfiguredKey:
        if settings.algorithm == SignatureAlgorithm.HS256:
            key = symmetric_jwk(derive_symmetric_key(settings.secret or ""))
            return _ConfiguredKey(settings=settings, key=key)

        configured = _ConfiguredKey(settings=settings)
        if settings.certificate_path:
            configured.certificate = load_certificate(settings.certificate_path)
        if settings.private_key_path:
            configured.key = jwk.JWK.from_pyca(load_private_key(settings.private_key_path))
        return configured

    @property
    def algorithms(self) -> list[str]:
        """Distinct configured signature algorithms."""
        return list(dict.fromkeys(k.settings.algorithm.value for k in self._keys))

    def _find(self, key_name: str) -> _ConfiguredKey | None:
        return next(
            (k for k in self._keys if k.settings.key_name.lower() == key_name.lower()),
            None,
        )

    def create_signing_credentials(self, *key_names: str | None) -> SigningCredential | None:
        """Return credentials for the first configured key among the candidates.

        Args:
            key_names: Candidate key names in order of preference; None entries
                are skipped

        Returns:
            The signing credential, or None if no candidate is configured

        Raises:
            ConfigurationError: If an RSA key has no bound certificate or
                private key
        """
        for key_name in key_names:
            if not key_name:
                continue
            configured = self._find(key_name)
            if configured is None:
                continue

            settings = configured.settings
            if settings.algorithm != SignatureAlgorithm.HS256 and (
                configured.certificate is None or configured.key is None
            ):
                raise ConfigurationError(
                    f"Signature key {settings.key_name} requires a certificate and private key"
                )

            logfire.debug(
                "Selected signing key",
                key_name=settings.key_name,
                algorithm=settings.algorithm.value,
            )
            return SigningCredential(
                key_id=settings.key_name,
                algorithm=settings.algorithm,
                key=configured.key,
            )
        return None

    def create_symmetric_credentials(self, secret: str, key_id: str) -> SigningCredential:
        """HMAC credentials derived from an application secret."""
        return SigningCredential(
            key_id=key_id,
            algorithm=SignatureAlgorithm.HS256,
            key=symmetric_jwk(derive_symmetric_key(secret)),
        )

    def create_symmetric_verification_key(self, secret: str, key_id: str) -> dict[str, Any]:
        """JWK verifying tokens signed with an application secret.

        Never published: only a caller holding the secret can build it.
        """
        entry = symmetric_jwk(derive_symmetric_key(secret)).export(as_dict=True)
        entry.update(kid=key_id, alg=SignatureAlgorithm.HS256.value, use="sig")
        return entry

    def get_publishable_key_set(self) -> JsonWebKeySet:
        """Build the JSON Web Key Set of every key that verifies issued tokens.

        Symmetric keys are included since the server verifies its own
        HS256 tokens (e.g. id_token_hint on signout).
        """
        with logfire.span("signing_service.get_publishable_key_set"):
            keys: dict[str, dict[str, Any]] = {}

            for configured in self._keys:
                settings = configured.settings
                kid = settings.key_name or "0"
                if kid in keys:
                    continue
                if settings.algorithm == SignatureAlgorithm.HS256:
                    entry = configured.key.export(as_dict=True)
                elif configured.certificate is not None:
                    entry = self._certificate_jwk(configured.certificate)
                else:
                    logfire.warn(
                        "Skipping signature key without certificate",
                        key_name=settings.key_name,
                    )
                    continue
                entry.update(kid=kid, alg=settings.algorithm.value, use="sig")
                keys[kid] = entry

            used = {kid.lower() for kid in keys}
            for certificate in self.certificate_manager.get_signing_certificates():
                kid = thumbprint(certificate)
                if kid.lower() in used:
                    continue
                entry = self._certificate_jwk(certificate)
                entry.update(kid=kid, alg=SignatureAlgorithm.RS256.value, use="sig")
                keys[kid] = entry
                used.add(kid.lower())

            return JsonWebKeySet(keys=list(keys.values()))

    @staticmethod
    def _certificate_jwk(certificate: x509.Certificate) -> dict[str, Any]:
        entry = jwk.JWK.from_pyca(certificate.public_key()).export_public(as_dict=True)
        entry["x5c"] = [b64encode(certificate.public_bytes(Encoding.DER)).decode("ascii")]
        entry["x5t"] = _b64url(certificate.fingerprint(hashes.SHA1()))
        return entry
