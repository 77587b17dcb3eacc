"""Dependency injection module."""

from typing import Type

from tollgate.util.di.adapter import ProdAdapterProvider
from tollgate.util.di.application import ProdApplicationProvider
from tollgate.util.di.base import Component, ProviderBase
from tollgate.util.di.core import ProdConfigProvider
from tollgate.util.di.domain import ProdDomainProvider
from tollgate.util.di.infrastructure import (
    AuditProvider,
    CryptoProvider,
    ProdAuditProvider,
    ProdCryptoProvider,
    ProdStoreProvider,
    StoreInterfaceProvider,
    StoreProvider,
)
from tollgate.util.di.interface import ProdInterfaceProvider

# Single list - all providers treated uniformly
PROVIDERS: list[Type[ProviderBase]] = [
    # Core providers (not mockable)
    ProdConfigProvider,
    ProdAdapterProvider,
    ProdDomainProvider,
    ProdApplicationProvider,
    ProdInterfaceProvider,
    StoreInterfaceProvider,
    # Infrastructure components (mockable)
    StoreProvider,
    CryptoProvider,
    AuditProvider,
]


def get_provider(
    base: Type[ProviderBase], use_mock: bool = False
) -> Type[ProviderBase]:
    """Get appropriate provider class.

    Automatically determines if provider is mockable by checking for subclasses.

    - No subclasses: Concrete provider, use directly
    - Has subclasses: Mockable component, select by __is_mock__ flag

    Args:
        base: Provider base class
        use_mock: Whether to use mock implementation

    Returns:
        Provider class (not instantiated)

    Raises:
        ValueError: If requested implementation not found
    """
    subclasses = base.__subclasses__()

    if not subclasses:
        return base

    impl = next(
        (c for c in subclasses if getattr(c, "__is_mock__", False) == use_mock),
        None,
    )

    if not impl:
        kind = "mock" if use_mock else "production"
        component_name = getattr(base, "__mock_component__", base.__name__)
        raise ValueError(f"No {kind} implementation for {component_name}")

    return impl


__all__ = [
    "Component",
    "ProviderBase",
    "PROVIDERS",
    "get_provider",
    # Core providers
    "ProdConfigProvider",
    "ProdAdapterProvider",
    "ProdDomainProvider",
    "ProdApplicationProvider",
    "ProdInterfaceProvider",
    "StoreInterfaceProvider",
    # Infrastructure base classes
    "AuditProvider",
    "CryptoProvider",
    "StoreProvider",
    # Infrastructure implementations
    "ProdAuditProvider",
    "ProdCryptoProvider",
    "ProdStoreProvider",
]
