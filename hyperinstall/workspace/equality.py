"""Deep comparison of JSON-like values."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

__all__ = ["structurally_equal"]

_NUMBER = (int, float)


def _kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, _NUMBER):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, Sequence):
        return "array"
    return type(value).__name__


def structurally_equal(left: Any, right: Any) -> bool:
    """Return whether two decoded JSON values are the same document.

    Mappings compare without regard to key order, sequences element by element.
    Values of different JSON types never match, so ``1`` differs from ``"1"``
    and ``True`` differs from ``1``; ``1`` and ``1.0`` are the same number.
    """

    kind = _kind(left)
    if kind != _kind(right):
        return False
    if kind == "object":
        if left.keys() != right.keys():
            return False
        return all(structurally_equal(left[key], right[key]) for key in left)
    if kind == "array":
        if len(left) != len(right):
            return False
        return all(structurally_equal(a, b) for a, b in zip(left, right, strict=True))
    return bool(left == right)
