"""Dependency injection module.

Providers are listed once in ``PROVIDERS``. A provider with no subclasses
is used as-is; a provider with subclasses is a mockable component, and
``get_provider`` chooses between its in-memory and production subclass.
"""

from typing import Type

from clubhouse.util.di.application import ProdApplicationProvider
from clubhouse.util.di.base import Component, ProviderBase
from clubhouse.util.di.core import ProdConfigProvider
from clubhouse.util.di.domain import ProdDomainProvider
from clubhouse.util.di.infrastructure import (
    PersistenceProvider,
    ProdPersistenceProvider,
)
from clubhouse.util.error import DependencyInjectionError

PROVIDERS: list[Type[ProviderBase]] = [
    ProdConfigProvider,
    ProdDomainProvider,
    ProdApplicationProvider,
    PersistenceProvider,
]


def mockable_components() -> set[Component]:
    """Names of the components that have a mock implementation."""
    return {
        base.__mock_component__
        for base in PROVIDERS
        if base.__mock_component__ and base.__subclasses__()
    }


def get_provider(
    base: Type[ProviderBase], use_mock: bool = False
) -> Type[ProviderBase]:
    """Resolve a provider class from ``PROVIDERS``.

    Raises:
        DependencyInjectionError: If the component has no implementation
            of the requested kind
    """
    subclasses = base.__subclasses__()
    if not subclasses:
        return base

    for candidate in subclasses:
        if candidate.__is_mock__ == use_mock:
            return candidate

    raise DependencyInjectionError(base.__mock_component__ or base.__name__, use_mock)


def select_providers(mocked: set[Component] | None = None) -> list[ProviderBase]:
    """Instantiate every provider, mocking the named components.

    Raises:
        DependencyInjectionError: If a named component cannot be mocked
    """
    mocked = mocked or set()
    unknown = mocked - mockable_components()
    if unknown:
        raise DependencyInjectionError(", ".join(sorted(unknown)), use_mock=True)

    return [
        get_provider(base, use_mock=base.__mock_component__ in mocked)()
        for base in PROVIDERS
    ]


__all__ = [
    "Component",
    "ProviderBase",
    "PROVIDERS",
    "get_provider",
    "mockable_components",
    "select_providers",
    "ProdConfigProvider",
    "ProdDomainProvider",
    "ProdApplicationProvider",
    "PersistenceProvider",
    "ProdPersistenceProvider",
]
