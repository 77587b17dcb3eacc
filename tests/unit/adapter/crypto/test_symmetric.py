"""Unit tests for Fernet symmetric encryption."""

import pytest
from cryptography.fernet import Fernet

from tollgate.adapter.crypto.symmetric import FernetCryptoProvider
from tollgate.domain.error import DecryptionError


class TestFernetCryptoProvider:
    """Tests for FernetCryptoProvider."""

    def test_decrypts_own_ciphertext(self):
        """Ciphertext should decrypt back to the plaintext."""
        provider = FernetCryptoProvider(Fernet.generate_key())

        ciphertext = provider.encrypt("hello")

        assert ciphertext != "hello"
        assert provider.decrypt(ciphertext) == "hello"

    def test_other_key_cannot_decrypt(self):
        """Ciphertext from one key should not decrypt under another."""
        ciphertext = FernetCryptoProvider(Fernet.generate_key()).encrypt("hello")

        with pytest.raises(DecryptionError):
            FernetCryptoProvider(Fernet.generate_key()).decrypt(ciphertext)

    def test_tampered_ciphertext_is_rejected(self):
        """A modified ciphertext should fail to decrypt."""
        provider = FernetCryptoProvider(Fernet.generate_key())
        ciphertext = provider.encrypt("hello")
        tampered = ciphertext[:-4] + ("AAAA" if not ciphertext.endswith("AAAA") else "BBBB")

        with pytest.raises(DecryptionError):
            provider.decrypt(tampered)

    def test_garbage_is_rejected(self):
        """Non-Fernet input should raise DecryptionError."""
        provider = FernetCryptoProvider(Fernet.generate_key())

        with pytest.raises(DecryptionError):
            provider.decrypt("not a token")

    def test_generates_ephemeral_key(self):
        """Omitting the key should still give a working provider."""
        provider = FernetCryptoProvider()

        assert provider.decrypt(provider.encrypt("x")) == "x"
