"""PEM key material loading."""

from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from tollgate.util.error import KeyMaterialError


def load_certificate(path: Path) -> x509.Certificate:
    """Load a PEM certificate.

    Raises:
        KeyMaterialError: If the file is missing or not a PEM certificate
    """
    try:
        return x509.load_pem_x509_certificate(path.read_bytes())
    except (OSError, ValueError) as e:
        raise KeyMaterialError(f"Unable to load certificate {path}: {e}") from e


def load_private_key(path: Path) -> rsa.RSAPrivateKey:
    """Load an unencrypted PEM RSA private key.

    Raises:
        KeyMaterialError: If the file is missing or not an RSA key
    """
    try:
        key = serialization.load_pem_private_key(path.read_bytes(), password=None)
    except (OSError, ValueError, TypeError) as e:
        raise KeyMaterialError(f"Unable to load private key {path}: {e}") from e
    if not isinstance(key, rsa.RSAPrivateKey):
        raise KeyMaterialError(f"Private key {path} is not an RSA key")
    return key


def thumbprint(certificate: x509.Certificate) -> str:
    """Upper-case hex SHA-1 thumbprint."""
    return certificate.fingerprint(hashes.SHA1()).hex().upper()
