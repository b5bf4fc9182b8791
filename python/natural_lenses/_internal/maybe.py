"""
The Maybe convention: a two-state result telling presence-with-value apart
from absence.

A present slot is reported as ``Just(value)``, where ``value`` may be any
object including ``None``. An absent slot is reported as ``NOTHING``. Absence
is never encoded as ``None``.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, Iterator, Mapping, NamedTuple, TypeVar

from typing_extensions import TypeIs

from .typing import is_hole

T = TypeVar("T")
U = TypeVar("U")


class Just(NamedTuple, Generic[T]):
    value: T
    # Set on the aggregate produced by a multifocal, so consumers can tell it
    # apart from a single slot that happens to hold a list or dict.
    multifocal: bool = False


class NothingType:
    __slots__ = ()
    _instance: NothingType | None = None

    def __new__(cls) -> NothingType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOTHING"

    def __bool__(self) -> bool:
        return False


NOTHING = NothingType()

Maybe = Just[T] | NothingType


def is_just(maybe: Maybe[T]) -> TypeIs[Just[T]]:
    return isinstance(maybe, Just)


def is_nothing(maybe: Maybe[Any]) -> TypeIs[NothingType]:
    return maybe is NOTHING


def maybe_do(
    maybe: Maybe[T],
    then: Callable[[T], U],
    or_else: Callable[[], U] | None = None,
) -> U | None:
    """
    Call *then* with the value of a Just, or *or_else* (if given) for Nothing,
    and return whatever the called function returns.
    """
    match maybe:
        case Just(value=value):
            return then(value)
        case _:
            return or_else() if or_else is not None else None


def each_found(maybe: Maybe[Any]) -> Iterator[tuple[Any, Any]]:
    """
    Iterate the found value(s) in a Maybe as ``(value, key)`` pairs.

    For a multifocal aggregate this yields each present element with its index
    (sequence-shaped) or key (mapping-shaped). For a plain Just it yields the
    single value with a key of ``None``. Nothing yields nothing.
    """
    match maybe:
        case Just(value=value, multifocal=True):
            if isinstance(value, Mapping):
                for key, elem in value.items():
                    yield elem, key
            elif isinstance(value, (list, tuple)):
                for i, elem in enumerate(value):
                    if not is_hole(elem):
                        yield elem, i
            else:
                yield value, None
        case Just(value=value):
            yield value, None
        case _:
            return
