"""Fernet symmetric encryption for authorization codes and cookies."""

import logging

from cryptography.fernet import Fernet, InvalidToken

from tollgate.domain.error import DecryptionError
from tollgate.domain.provider import SymmetricCryptoProvider

logger = logging.getLogger(__name__)


class FernetCryptoProvider(SymmetricCryptoProvider):
    """Authenticated symmetric encryption (AES-128-CBC + HMAC-SHA256).

    Ciphertexts are URL-safe base64 and tamper-evident, so a modified
    code or cookie fails to decrypt rather than decoding to garbage.
    """

    def __init__(self, key: str | bytes | None = None) -> None:
        """Initialize with a Fernet key.

        Args:
            key: URL-safe base64 32-byte key. A fresh key is generated when
                omitted, which invalidates outstanding codes and cookies on
                restart.
        """
        if key is None:
            logger.warning(
                "No symmetric key configured, generated an ephemeral key"
            )
            key = Fernet.generate_key()
        self._fernet = Fernet(key)

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decrypt(self, ciphertext: str) -> str:
        try:
            return self._fernet.decrypt(ciphertext.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError, ValueError) as e:
            raise DecryptionError("Unable to decrypt value") from e
