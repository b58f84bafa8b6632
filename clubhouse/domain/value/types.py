"""Domain value objects for clubhouse.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules and business logic.
"""

from enum import Enum
from typing import Any

from pydantic import field_validator

from clubhouse.domain.value.common import RootValueObject, ValueObject

MAX_COMMENT_LENGTH = 500


class ActionKind(str, Enum):
    """Throttled user actions.

    Only comment creation is throttled by the comment thread; the other
    kinds share the same durable cooldown records.
    """

    POST = "post"
    COMMENT = "comment"
    MESSAGE = "message"
    SCORE = "score"


class CommentText(RootValueObject[str]):
    """Submitted comment text.

    Surrounding whitespace is stripped; the result must be 1-500 characters.
    """

    @field_validator("root")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Strip and bound the text."""
        v = v.strip()
        if not v:
            raise ValueError("Comment cannot be empty")
        if len(v) > MAX_COMMENT_LENGTH:
            raise ValueError(
                f"Comment must be at most {MAX_COMMENT_LENGTH} characters"
            )
        return v


class RateLimitDecision(ValueObject):
    """Outcome of a cooldown check."""

    allowed: bool
    remaining_seconds: int = 0


class FilterOp(str, Enum):
    """Comparison operators supported by subscription filters."""

    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    IN = "in"
    ARRAY_CONTAINS = "array-contains"


class FieldFilter(ValueObject):
    """A single ``field <op> value`` condition on document fields."""

    field: str
    op: FilterOp = FilterOp.EQ
    value: Any = None


class OrderBy(ValueObject):
    """Sort key for subscription results."""

    field: str
    descending: bool = False


class FieldTransform(ValueObject):
    """Base for server-side field transforms applied inside ``update``."""


class Increment(FieldTransform):
    """Atomically add ``delta`` to a numeric field (missing counts as 0)."""

    delta: int | float


class ArrayUnion(FieldTransform):
    """Append each value not already present in an array field."""

    values: tuple[Any, ...]


class ArrayRemove(FieldTransform):
    """Remove every occurrence of each value from an array field."""

    values: tuple[Any, ...]


class ServerTimestamp(FieldTransform):
    """Replace the field with the store's write time."""


class ArrayLength(FieldTransform):
    """Set the field to the length of array field ``source``.

    Evaluated after every other change in the same update, so a counter
    stays equal to its array even when a union or remove was a no-op.
    """

    source: str
