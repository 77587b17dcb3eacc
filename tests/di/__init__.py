"""Mock providers for testing."""

from .audit import MockAuditProvider
from .crypto import MockCryptoProvider
from .store import MockStoreProvider
from .container import build_test_container

__all__ = [
    "MockAuditProvider",
    "MockCryptoProvider",
    "MockStoreProvider",
    "build_test_container",
]
