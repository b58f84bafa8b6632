"""Provider base class and the names of swappable components."""

from typing import ClassVar, Literal

from dishka import Provider

# Components with both an in-memory and a production provider
Component = Literal["persistence"]


class ProviderBase(Provider):
    """Base for every provider in the container.

    A mockable component declares ``__mock_component__`` on its abstract
    provider; ``get_provider`` then picks the subclass whose ``__is_mock__``
    matches the requested mode. Concrete-only providers leave both unset.
    """

    __mock_component__: ClassVar[Component | None] = None
    __is_mock__: ClassVar[bool] = False
