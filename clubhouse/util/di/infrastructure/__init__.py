"""Infrastructure providers.

Every implementation is imported here so ``get_provider`` can find it
through ``__subclasses__()``.
"""

from .persistence import PersistenceProvider, ProdPersistenceProvider

__all__ = ["PersistenceProvider", "ProdPersistenceProvider"]
