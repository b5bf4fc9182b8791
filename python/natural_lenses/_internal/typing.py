from __future__ import annotations

from typing import Any

from typing_extensions import TypeIs


class NotSetType:
    __slots__ = ()
    _instance: NotSetType | None = None

    def __new__(cls) -> NotSetType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_SET"


NOT_SET = NotSetType()


def is_not_set(obj: Any) -> TypeIs[NotSetType]:
    return obj is NOT_SET


class HoleType:
    """
    Marker for an empty position inside a sequence container.

    Removing an element that is not the last one from a sequence leaves a
    hole rather than shifting the later elements down, so positions stay
    stable across a series of edits. Reading a hole yields Nothing.
    """

    __slots__ = ()
    _instance: HoleType | None = None

    def __new__(cls) -> HoleType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "HOLE"

    def __reduce__(self) -> str:
        return "HOLE"


HOLE = HoleType()


def is_hole(obj: Any) -> TypeIs[HoleType]:
    return obj is HOLE


# Types whose values compare by value under strict equality; everything else
# compares by identity.
SCALAR_TYPES: frozenset[type] = frozenset(
    (str, bytes, int, float, complex, bool, type(None))
)


def strictly_equal(a: Any, b: Any) -> bool:
    """
    Identity, or equality of two values of the same immutable scalar type.
    """
    if a is b:
        return True
    tp = type(a)
    return tp is type(b) and tp in SCALAR_TYPES and a == b
