"""Tests for signing credential selection and the published key set."""

from base64 import b64decode
from datetime import datetime, timedelta, timezone

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
)
from cryptography.x509.oid import NameOID

from tollgate.adapter.crypto.certificates import PemSigningCertificateManager
from tollgate.config import SecuritySettings, SignatureSettings
from tollgate.domain.service import SigningCredentialService
from tollgate.domain.service.signing_service import (
    MIN_SYMMETRIC_KEY_BYTES,
    derive_symmetric_key,
)
from tollgate.domain.value import SignatureAlgorithm
from tollgate.util.error import ConfigurationError
from tollgate.util.jwt import JWTError, sign_token, verify_token
from tollgate.util.keys import load_certificate, thumbprint


def _service(
    *signatures: SignatureSettings, system_certificates=()
) -> SigningCredentialService:
    return SigningCredentialService(
        SecuritySettings(signatures=list(signatures)),
        PemSigningCertificateManager(system_certificates),
    )


def write_key_pair(directory, name: str):
    """Write a self-signed certificate and its RSA key as PEM files."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, name)])
    now = datetime.now(timezone.utc)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(subject)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .sign(key, hashes.SHA256())
    )
    certificate_path = directory / f"{name}.crt"
    key_path = directory / f"{name}.key"
    certificate_path.write_bytes(certificate.public_bytes(Encoding.PEM))
    key_path.write_bytes(
        key.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption())
    )
    return certificate_path, key_path


CLAIMS = {"iss": "https://issuer", "exp": 4102444800, "sub": "alice"}


DEFAULT = SignatureSettings(key_name="default", secret="a fairly long shared secret")
APP_KEY = SignatureSettings(key_name="SA.fiddler", secret="fiddler signing secret")


class TestDeriveSymmetricKey:
    """Tests for derive_symmetric_key."""

    def test_short_secret_is_doubled(self):
        """Short secrets are repeated up to the minimum length."""
        assert derive_symmetric_key("abc") == b"abc" * 16

    def test_client_secret_reaches_digest_length(self):
        """A 14 byte client secret is doubled to a full HS256 key."""
        key = derive_symmetric_key("fiddler-secret")

        assert MIN_SYMMETRIC_KEY_BYTES == 32
        assert len(key) >= MIN_SYMMETRIC_KEY_BYTES
        assert key == b"fiddler-secret" * 4

    def test_long_secret_is_unchanged(self):
        secret = "x" * 40
        assert derive_symmetric_key(secret) == secret.encode()

    def test_empty_secret_is_rejected(self):
        with pytest.raises(ConfigurationError):
            derive_symmetric_key("")


class TestCreateSigningCredentials:
    """Tests for create_signing_credentials."""

    def test_first_configured_candidate_wins(self):
        """The application key is preferred over the default key."""
        service = _service(DEFAULT, APP_KEY)

        credential = service.create_signing_credentials("SA.fiddler", "jwtsign", "default")

        assert credential.key_id == "SA.fiddler"
        assert credential.algorithm == SignatureAlgorithm.HS256

    def test_missing_candidates_are_skipped(self):
        """Unconfigured and None candidates fall through to the default."""
        service = _service(DEFAULT)

        credential = service.create_signing_credentials(None, "SA.spa", "jwtsign", "default")

        assert credential.key_id == "default"

    def test_lookup_ignores_case(self):
        service = _service(DEFAULT)

        assert service.create_signing_credentials("DEFAULT").key_id == "default"

    def test_no_candidate_configured(self):
        service = _service(DEFAULT)

        assert service.create_signing_credentials("jwtsign") is None

    def test_rsa_key_without_certificate_is_rejected(self):
        """An RSA key needs both a certificate and a private key."""
        service = _service(SignatureSettings(key_name="rsa", algorithm=SignatureAlgorithm.RS256))

        with pytest.raises(ConfigurationError):
            service.create_signing_credentials("rsa")


class TestPublishableKeySet:
    """Tests for get_publishable_key_set."""

    def test_symmetric_keys_are_published(self):
        """Every configured key is published once under its name."""
        service = _service(DEFAULT, APP_KEY)

        key_set = service.get_publishable_key_set()

        kids = [k["kid"] for k in key_set.keys]
        assert kids == ["default", "SA.fiddler"]
        assert all(k["use"] == "sig" and k["alg"] == "HS256" for k in key_set.keys)

    def test_rsa_key_without_certificate_is_skipped(self):
        service = _service(
            DEFAULT, SignatureSettings(key_name="rsa", algorithm=SignatureAlgorithm.RS256)
        )

        key_set = service.get_publishable_key_set()

        assert [k["kid"] for k in key_set.keys] == ["default"]

    def test_published_key_verifies_signed_token(self):
        """Tokens signed with a credential verify against the key set."""
        # Arrange
        service = _service(DEFAULT)
        credential = service.create_signing_credentials("default")
        token = sign_token({"iss": "https://issuer", "exp": 4102444800, "sub": "alice"}, credential)

        # Act
        claims = verify_token(
            token,
            service.get_publishable_key_set().keys,
            issuer="https://issuer",
            algorithms=service.algorithms,
        )

        # Assert
        assert claims["sub"] == "alice"


class TestSymmetricFallback:
    """Tests for credentials derived from an application secret."""

    def test_short_client_secret_signs_and_verifies(self):
        """Tokens signed with a short client secret verify with its derived key."""
        # Arrange
        service = _service(DEFAULT)
        credential = service.create_symmetric_credentials("fiddler-secret", key_id="fiddler")

        # Act
        token = sign_token(CLAIMS, credential)
        claims = verify_token(
            token,
            [service.create_symmetric_verification_key("fiddler-secret", "fiddler")],
            issuer="https://issuer",
            algorithms=["HS256"],
        )

        # Assert
        assert claims["sub"] == "alice"

    def test_client_signed_token_fails_against_published_keys(self):
        service = _service(DEFAULT)
        credential = service.create_symmetric_credentials("fiddler-secret", key_id="fiddler")
        token = sign_token(CLAIMS, credential)

        with pytest.raises(JWTError):
            verify_token(
                token,
                service.get_publishable_key_set().keys,
                issuer="https://issuer",
                algorithms=["HS256"],
            )


class TestCertificateKeys:
    """Tests for RSA keys bound to certificates."""

    @pytest.mark.parametrize(
        "algorithm", [SignatureAlgorithm.RS256, SignatureAlgorithm.RS512]
    )
    def test_rsa_token_verifies_against_key_set(self, tmp_path, algorithm):
        """Test RSA-signed tokens verify against the published public key."""
        # Arrange
        certificate_path, key_path = write_key_pair(tmp_path, "signer")
        service = _service(
            SignatureSettings(
                key_name="rsa",
                algorithm=algorithm,
                certificate_path=certificate_path,
                private_key_path=key_path,
            )
        )
        credential = service.create_signing_credentials("rsa")

        # Act
        token = sign_token(CLAIMS, credential)
        claims = verify_token(
            token,
            service.get_publishable_key_set().keys,
            issuer="https://issuer",
            algorithms=service.algorithms,
        )

        # Assert
        assert credential.algorithm == algorithm
        assert claims["sub"] == "alice"

    def test_published_rsa_key_is_public_with_certificate(self, tmp_path):
        """Test the published entry carries the certificate but no private members."""
        # Arrange
        certificate_path, key_path = write_key_pair(tmp_path, "signer")
        service = _service(
            SignatureSettings(
                key_name="rsa",
                algorithm=SignatureAlgorithm.RS256,
                certificate_path=certificate_path,
                private_key_path=key_path,
            )
        )
        certificate = load_certificate(certificate_path)

        # Act
        [entry] = service.get_publishable_key_set().keys

        # Assert
        assert entry["kty"] == "RSA"
        assert entry["kid"] == "rsa"
        assert entry["alg"] == "RS256"
        for private_member in ("d", "p", "q", "dp", "dq", "qi"):
            assert private_member not in entry
        assert b64decode(entry["x5c"][0]) == certificate.public_bytes(Encoding.DER)
        assert entry["x5t"]

    def test_system_certificates_are_published_by_thumbprint(self, tmp_path):
        """Test extra system certificates join the key set under their thumbprint."""
        # Arrange
        system_path, _ = write_key_pair(tmp_path, "system")
        service = _service(DEFAULT, system_certificates=[system_path])
        expected_kid = thumbprint(load_certificate(system_path))

        # Act
        keys = service.get_publishable_key_set().keys

        # Assert
        assert [k["kid"] for k in keys] == ["default", expected_kid]
        system_entry = keys[1]
        assert system_entry["alg"] == "RS256"
        assert "d" not in system_entry
