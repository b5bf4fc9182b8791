"""
Multifocal optics: many keyed child optics viewed as one aggregate slot.

An `ArrayNFocal` aggregates a sequence of optics into a list-shaped value and
an `ObjectNFocal` aggregates a mapping of optics into a dict-shaped value.
"""

from __future__ import annotations

import abc
import copy
from typing import Any, Callable, Iterable, Iterator, Mapping, Sequence, TypeVar

import numpy as np

from .containers import CloneOp, clone_container, index_maybe, register_container_type
from .errors import StereoscopyError
from .maybe import NOTHING, Just, Maybe, NothingType, is_just
from .optic import MaybeXform, Optic
from .typing import HOLE, NOT_SET, is_hole, is_not_set

S = TypeVar("S")

XformPairs = Iterable[tuple[Any, Callable[[Any], Any]]]
XformOpts = Mapping[str, Any] | Callable[[Any], Mapping[str, Any]]


class _LensCap(Optic):
    """
    An optic that never finds anything and never changes anything.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return "LENS_CAP"

    def get_maybe(self, subject: Any, *tail: Any) -> Maybe[Any]:
        return NOTHING

    def xform_in_clone_maybe(self, subject: S, fn: MaybeXform) -> S:
        return subject


LENS_CAP = _LensCap()


def _remove_slot(_value_maybe: Maybe[Any]) -> Maybe[Any]:
    return NOTHING


def _deep_equal(a: Any, b: Any) -> bool:
    if a is b:
        return True
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        return (
            isinstance(a, np.ndarray)
            and isinstance(b, np.ndarray)
            and np.array_equal(a, b)
        )
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        return a.keys() == b.keys() and all(_deep_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return (
            type(a) is type(b)
            and len(a) == len(b)
            and all(_deep_equal(x, y) for x, y in zip(a, b))
        )
    return bool(a == b)


class AbstractNFocal(Optic):
    """
    Base class for multifocal optics.

    The child optics are copied at construction. Pass ``live=True`` to keep a
    reference to the given collection instead, so that later changes to it
    are seen by this multifocal; `rebind` makes a multifocal of the same shape
    over another collection.
    """

    __slots__ = ("lenses",)

    lenses: Any

    def __init__(self, lenses: Any, *, live: bool = False):
        self.lenses = lenses if live else self._snapshot(lenses)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.lenses!r})"

    @staticmethod
    @abc.abstractmethod
    def _snapshot(lenses: Any) -> Any: ...

    @abc.abstractmethod
    def _items(self) -> Iterator[tuple[Any, Optic]]:
        """
        The (key, child optic) pairs of this multifocal.
        """

    @abc.abstractmethod
    def _provided(self, new_vals: Any) -> dict[Any, Any]:
        """
        The child keys given values by the aggregate *new_vals*, with those
        values.
        """

    @abc.abstractmethod
    def _empty_aggregate(self) -> Any: ...

    def rebind(self, lenses: Any, *, live: bool = False) -> AbstractNFocal:
        """
        A multifocal of the same shape over *lenses*.
        """
        return type(self)(lenses, live=live)

    def _child(self, key: Any) -> Optic | None:
        match index_maybe(self.lenses, key):
            case Just(value=optic) if isinstance(optic, Optic):
                return optic
            case _:
                return None

    def present(self, subject: Any) -> list[Any]:
        """
        The keys of the child optics whose slots are present in *subject*.
        """
        return [key for key, optic in self._items() if optic.present(subject)]

    def xform_in_clone(  # type: ignore[override]
        self,
        subject: S,
        xforms: XformPairs | Callable[[Any], Any],
        opts: XformOpts | None = None,
    ) -> S:
        """
        Clone *subject*, applying transforms to selected child slots.

        *xforms* is an iterable of ``(key, fn)`` pairs, applied in order, each
        through the child optic at *key* (a key with no child optic is a
        no-op). *opts* gives the keyword arguments for the child's
        ``xform_in_clone``, either as a mapping or as a function from the key
        to a mapping.

        If *xforms* is itself callable, it transforms the whole aggregate.
        """
        if callable(xforms):
            aggregate_opts = opts if isinstance(opts, Mapping) else {}
            return super().xform_in_clone(subject, xforms, **aggregate_opts)

        def _opts_for(key: Any) -> Mapping[str, Any]:
            if opts is None:
                return {}
            if isinstance(opts, Mapping):
                return opts
            return opts(key)

        cur = subject
        for key, xform in xforms:
            optic = self._child(key)
            if optic is not None:
                cur = optic.xform_in_clone(cur, xform, **_opts_for(key))
        return cur

    def xform_in_clone_maybe(  # type: ignore[override]
        self,
        subject: S,
        xforms: Iterable[tuple[Any, MaybeXform]] | MaybeXform,
    ) -> S:
        """
        Clone *subject*, applying Maybe transforms to selected child slots.

        *xforms* is an iterable of ``(key, fn)`` pairs applied in order; each
        *fn* receives the child slot as a Maybe and returns a Maybe, where
        ``NOTHING`` removes the slot. A key with no child optic is a no-op.

        If *xforms* is itself callable, it receives the aggregate as a Maybe
        and its result is written back with `set_in_clone`.
        """
        if callable(xforms):
            return self._xform_aggregate(subject, xforms)
        cur = subject
        for key, xform in xforms:
            optic = self._child(key)
            if optic is not None:
                cur = optic.xform_in_clone_maybe(cur, xform)
        return cur

    def set_in_clone(self, subject: S, new_vals: Any) -> S:
        """
        Clone *subject* so that this multifocal reads back as *new_vals*.

        Every child with a value in *new_vals* gets that value and every other
        child's slot is removed. Raises `StereoscopyError` if the clone does
        not read back as requested, e.g. because two children address the
        same storage.
        """
        provided = self._provided(new_vals)
        fan_out: list[tuple[Any, MaybeXform]] = []
        for key, _optic in self._items():
            if key in provided:
                fan_out.append((key, lambda _m, v=provided[key]: Just(v)))
            else:
                fan_out.append((key, _remove_slot))
        result = self.xform_in_clone_maybe(subject, fan_out)
        self._verify(result, provided)
        return result

    def _verify(self, clone: Any, provided: dict[Any, Any]) -> None:
        for key, optic in self._items():
            actual = optic.get_maybe(clone)
            if key in provided:
                expected = provided[key]
                if not (is_just(actual) and _deep_equal(actual.value, expected)):
                    raise StereoscopyError(key, Just(expected), actual)
            elif is_just(actual):
                raise StereoscopyError(key, NOTHING, actual)

    def _xform_aggregate(self, subject: S, fn: MaybeXform) -> S:
        current = self.get_maybe(subject)
        # fn may edit the aggregate in place, so compare against a copy.
        before = copy.copy(current.value) if is_just(current) else NOT_SET
        result = fn(current)
        match result:
            case Just(value=value):
                if not is_not_set(before) and _deep_equal(value, before):
                    return subject
                return self.set_in_clone(subject, value)
            case NothingType():
                return self.set_in_clone(subject, self._empty_aggregate())
            case _:
                raise TypeError(
                    f"transform must return a Maybe, not {type(result).__qualname__}"
                )


class ArrayNFocal(AbstractNFocal):
    """
    Multifocal building a list: element *i* of the aggregate is the value of
    child optic *i*, or `HOLE` where that slot is missing.
    """

    lenses: Sequence[Optic]

    @staticmethod
    def _snapshot(lenses: Any) -> list[Optic]:
        return list(lenses)

    def _child(self, key: Any) -> Optic | None:
        # Keys are positions as reported by `present`; no negative indexing.
        if not isinstance(key, int) or isinstance(key, bool):
            return None
        if not 0 <= key < len(self.lenses):
            return None
        optic = self.lenses[key]
        return optic if isinstance(optic, Optic) else None

    def _items(self) -> Iterator[tuple[int, Optic]]:
        for i, optic in enumerate(self.lenses):
            if not is_hole(optic):
                yield i, optic

    def _provided(self, new_vals: Any) -> dict[Any, Any]:
        count = len(self.lenses)
        return {
            i: value
            for i, value in enumerate(new_vals)
            if i < count and not is_hole(value)
        }

    def _empty_aggregate(self) -> list[Any]:
        return []

    def get_maybe(self, subject: Any, *tail: Any) -> Maybe[Any]:
        result: list[Any] = [HOLE] * len(self.lenses)
        for i, optic in self._items():
            match optic.get_maybe(subject):
                case Just(value=value):
                    result[i] = value
                case _:
                    pass
        if tail:
            return ArrayNFocal(
                [value if isinstance(value, Optic) else LENS_CAP for value in result]
            ).get_maybe(*tail)
        return Just(result, multifocal=True)


class ObjectNFocal(AbstractNFocal):
    """
    Multifocal building a dict: each key of the aggregate maps to the value of
    the child optic under that key; keys whose slots are missing are omitted.
    """

    lenses: Mapping[Any, Optic]

    @staticmethod
    def _snapshot(lenses: Any) -> dict[Any, Optic]:
        return dict(lenses)

    def _items(self) -> Iterator[tuple[Any, Optic]]:
        return iter(self.lenses.items())

    def _provided(self, new_vals: Any) -> dict[Any, Any]:
        return {key: value for key, value in new_vals.items() if key in self.lenses}

    def _empty_aggregate(self) -> dict[Any, Any]:
        return {}

    def get_maybe(self, subject: Any, *tail: Any) -> Maybe[Any]:
        result: dict[Any, Any] = {}
        for key, optic in self._items():
            match optic.get_maybe(subject):
                case Just(value=value):
                    result[key] = value
                case _:
                    pass
        if tail:
            return ObjectNFocal(
                {
                    key: value if isinstance(value, Optic) else LENS_CAP
                    for key, value in result.items()
                }
            ).get_maybe(*tail)
        return Just(result, multifocal=True)


def make_nfocal(lenses: Any, *, live: bool = False) -> AbstractNFocal:
    """
    Build an `ObjectNFocal` from a mapping of optics, or an `ArrayNFocal`
    from any other iterable of optics.
    """
    if isinstance(lenses, Mapping):
        return ObjectNFocal(lenses, live=live)
    return ArrayNFocal(lenses, live=live)


# A multifocal is itself a container of its child optics, so lenses can read
# or replace a constituent optic.


def _nfocal_at_maybe(nfocal: AbstractNFocal, key: Any) -> Maybe[Any]:
    return index_maybe(nfocal.lenses, key)


def _nfocal_clone_impl(nfocal: AbstractNFocal, op: CloneOp) -> AbstractNFocal:
    return nfocal.rebind(clone_container(nfocal.lenses, op))


register_container_type(AbstractNFocal, _nfocal_at_maybe, _nfocal_clone_impl)
