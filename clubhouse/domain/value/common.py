"""Base classes for value objects."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, RootModel


class ValueObject(BaseModel):
    """Immutable value compared by its fields.

    Filters, sort keys, field transforms and rate limit decisions are all
    value objects, so they can be hashed and reused across subscriptions.
    """

    model_config = ConfigDict(frozen=True)


T = TypeVar("T")


class RootValueObject(RootModel[T], Generic[T]):
    """Value object wrapping one primitive, read back through ``.root``.

    Validation happens on construction, e.g. ``CommentText("  hi ")``
    strips and bounds the text or raises a pydantic ValidationError.
    """

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return str(self.root)
