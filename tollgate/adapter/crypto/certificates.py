"""System signing certificates loaded from PEM files."""

import logging
from collections.abc import Iterable
from pathlib import Path

from cryptography import x509

from tollgate.domain.provider import SigningCertificateManager
from tollgate.util.keys import load_certificate

logger = logging.getLogger(__name__)


class PemSigningCertificateManager(SigningCertificateManager):
    """Signing certificates loaded once at startup."""

    def __init__(self, paths: Iterable[Path]) -> None:
        self._certificates = [load_certificate(path) for path in paths]
        logger.info(f"Loaded {len(self._certificates)} system signing certificates")

    def get_signing_certificates(self) -> list[x509.Certificate]:
        return list(self._certificates)
