"""Store-independent query evaluation and field transforms.

Both document store implementations filter, order and apply transforms
through these functions so they behave identically.
"""

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from typing import Any

from clubhouse.domain.model.document import Document
from clubhouse.domain.value import (
    ArrayLength,
    ArrayRemove,
    ArrayUnion,
    FieldFilter,
    FieldTransform,
    FilterOp,
    Increment,
    OrderBy,
    ServerTimestamp,
)


def _matches(fields: Mapping[str, Any], condition: FieldFilter) -> bool:
    value = fields.get(condition.field)
    target = condition.value
    op = condition.op
    if op == FilterOp.EQ:
        return value == target
    if op == FilterOp.NE:
        return value != target
    if op == FilterOp.IN:
        return value in target
    if op == FilterOp.ARRAY_CONTAINS:
        return isinstance(value, list) and target in value
    if value is None:
        return False
    try:
        if op == FilterOp.LT:
            return value < target
        if op == FilterOp.LE:
            return value <= target
        if op == FilterOp.GT:
            return value > target
        if op == FilterOp.GE:
            return value >= target
    except TypeError:
        return False
    raise ValueError(f"Unsupported filter operator: {op}")


def evaluate(
    documents: Iterable[Document],
    filters: Sequence[FieldFilter] = (),
    order_by: Sequence[OrderBy] = (),
) -> list[Document]:
    """Filter and order documents.

    Documents missing an order field sort before those that have it.
    Ties keep creation order.
    """
    result = [
        doc for doc in documents if all(_matches(doc.fields, f) for f in filters)
    ]
    result.sort(key=lambda doc: doc.create_time)
    for key in reversed(order_by):
        result.sort(
            key=lambda doc: (
                doc.fields.get(key.field) is not None,
                doc.fields.get(key.field),
            ),
            reverse=key.descending,
        )
    return result


def apply_changes(
    fields: Mapping[str, Any], changes: Mapping[str, Any], now: datetime
) -> dict[str, Any]:
    """Return a copy of ``fields`` with plain values and transforms merged in.

    ``ArrayLength`` fields are computed last, from the merged arrays.
    """
    merged = dict(fields)
    lengths: dict[str, str] = {}
    for name, change in changes.items():
        if isinstance(change, ArrayLength):
            lengths[name] = change.source
        elif not isinstance(change, FieldTransform):
            merged[name] = change
        elif isinstance(change, Increment):
            merged[name] = (merged.get(name) or 0) + change.delta
        elif isinstance(change, ArrayUnion):
            current = list(merged.get(name) or [])
            for value in change.values:
                if value not in current:
                    current.append(value)
            merged[name] = current
        elif isinstance(change, ArrayRemove):
            current = list(merged.get(name) or [])
            merged[name] = [v for v in current if v not in change.values]
        elif isinstance(change, ServerTimestamp):
            merged[name] = now
        else:
            raise ValueError(f"Unsupported field transform: {type(change).__name__}")
    for name, source in lengths.items():
        merged[name] = len(merged.get(source) or [])
    return merged
