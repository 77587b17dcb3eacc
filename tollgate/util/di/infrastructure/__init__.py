"""Infrastructure providers."""

# Import bases
from .audit import AuditProvider
from .crypto import CryptoProvider
from .store import StoreInterfaceProvider, StoreProvider

# Import implementations (needed for __subclasses__())
from .audit import ProdAuditProvider  # noqa: F401
from .crypto import ProdCryptoProvider  # noqa: F401
from .store import ProdStoreProvider  # noqa: F401

__all__ = [
    "AuditProvider",
    "CryptoProvider",
    "ProdAuditProvider",
    "ProdCryptoProvider",
    "ProdStoreProvider",
    "StoreInterfaceProvider",
    "StoreProvider",
]
