"""
Container adapters: how a container type reads the value at a key and how it
produces a clone with one key set or removed.

Every container type that optics can traverse has a `ContainerAdapter` in the
registry. Built-in adapters cover mappings, sequences, fixed-schema records
(dataclasses, NamedTuples, Pydantic models) and plain attribute objects.
Other types join by calling `register_container_type()`; the first
registration for a type wins, so built-ins cannot be replaced.
"""

from __future__ import annotations

import abc
import collections.abc
import copy
import logging
import threading
from typing import Any, Callable, NamedTuple

from . import datatype
from .errors import UnconstructableContainerError
from .maybe import NOTHING, Just, Maybe
from .typing import HOLE, is_hole

_logger = logging.getLogger(__name__)


class SetOp(NamedTuple):
    key: Any
    value: Any


class RemoveOp(NamedTuple):
    key: Any


class PlainCloneOp(NamedTuple):
    """
    Clone the container without any change.
    """


PLAIN_CLONE = PlainCloneOp()

CloneOp = SetOp | RemoveOp | PlainCloneOp

AtMaybeFn = Callable[[Any, Any], Maybe[Any]]
CloneImplFn = Callable[[Any, CloneOp], Any]


class ContainerAdapter(NamedTuple):
    at_maybe: AtMaybeFn
    clone_impl: CloneImplFn


# Values of these types are never traversed into.
_NON_CONTAINER_TYPES: tuple[type, ...] = (
    str,
    bytes,
    bytearray,
    int,
    float,
    complex,
    type(None),
    set,
    frozenset,
    range,
)

_registry_lock = threading.Lock()
_registry: dict[type, ContainerAdapter] = {}
_abc_registry: list[tuple[type, ContainerAdapter]] = []
_resolved: dict[type, ContainerAdapter | None] = {}


def register_container_type(
    container_type: type, at_maybe: AtMaybeFn, clone_impl: CloneImplFn
) -> bool:
    """
    Make *container_type* traversable by optics.

    *at_maybe(container, key)* must return ``Just(value)`` or ``NOTHING``.
    *clone_impl(container, op)* must return a container equivalent to
    *container* with *op* (a `SetOp`, `RemoveOp` or `PLAIN_CLONE`) applied,
    without modifying *container*.

    Returns False, changing nothing, if the type already has an adapter.
    Abstract base classes may be registered; they match virtual subclasses.
    """
    with _registry_lock:
        if container_type in _registry:
            _logger.debug(
                "Container adapter for %s already registered; keeping the first",
                container_type.__qualname__,
            )
            return False
        adapter = ContainerAdapter(at_maybe=at_maybe, clone_impl=clone_impl)
        _registry[container_type] = adapter
        if isinstance(container_type, abc.ABCMeta):
            _abc_registry.append((container_type, adapter))
        _resolved.clear()
    return True


def _resolve(tp: type) -> ContainerAdapter | None:
    adapter = _registry.get(tp)
    if adapter is not None:
        return adapter
    if datatype.is_record_type(tp):
        return _RECORD_ADAPTER
    if issubclass(tp, _NON_CONTAINER_TYPES):
        return None
    for cls in tp.__mro__[1:]:
        if cls is object:
            break
        adapter = _registry.get(cls)
        if adapter is not None:
            return adapter
    for abc_type, adapter in _abc_registry:
        if issubclass(tp, abc_type):
            return adapter
    return _registry.get(object)


def adapter_for(container: Any) -> ContainerAdapter | None:
    """
    The adapter used for *container*, or None for values that are not
    containers (strings, numbers, None, ...).
    """
    tp = type(container)
    try:
        return _resolved[tp]
    except KeyError:
        pass
    adapter = _resolve(tp)
    _resolved[tp] = adapter
    return adapter


def index_maybe(container: Any, key: Any) -> Maybe[Any]:
    adapter = adapter_for(container)
    if adapter is None:
        return NOTHING
    return adapter.at_maybe(container, key)


def clone_container(container: Any, op: CloneOp = PLAIN_CLONE) -> Any:
    adapter = adapter_for(container)
    if adapter is None:
        raise TypeError(f"no container adapter for {type(container).__qualname__}")
    return adapter.clone_impl(container, op)


# =============================================================================
# Sequences
# =============================================================================


def _sequence_index(seq: Any, key: Any) -> int | None:
    if not isinstance(key, int) or isinstance(key, bool):
        return None
    length = len(seq)
    if key < -length or key >= length:
        return None
    return key + length if key < 0 else key


def _sequence_at_maybe(seq: Any, key: Any) -> Maybe[Any]:
    index = _sequence_index(seq, key)
    if index is None:
        return NOTHING
    elem = seq[index]
    if is_hole(elem):
        return NOTHING
    return Just(elem)


def _rebuild_sequence(seq: Any, items: list[Any]) -> Any:
    if type(seq) is list:
        return items
    if isinstance(seq, list):
        result = copy.copy(seq)
        result[:] = items
        return result
    return type(seq)(items)


def _sequence_clone_impl(seq: Any, op: CloneOp) -> Any:
    items = list(seq)
    match op:
        case SetOp(key=key, value=value):
            if not isinstance(key, int) or isinstance(key, bool):
                raise TypeError(
                    f"{type(seq).__qualname__} indices must be integers, not {type(key).__qualname__}"
                )
            index = key + len(items) if key < 0 else key
            if index < 0:
                raise IndexError(f"index {key} out of range for length {len(items)}")
            if index >= len(items):
                items.extend([HOLE] * (index + 1 - len(items)))
            items[index] = value
        case RemoveOp(key=key):
            index = _sequence_index(seq, key)
            if index is None or is_hole(items[index]):
                return seq
            if index == len(items) - 1:
                del items[index]
            else:
                items[index] = HOLE
        case _:
            pass
    return _rebuild_sequence(seq, items)


# =============================================================================
# Mappings
# =============================================================================


def _mapping_at_maybe(mapping: Any, key: Any) -> Maybe[Any]:
    try:
        present = key in mapping
    except TypeError:
        # Unhashable key.
        return NOTHING
    return Just(mapping[key]) if present else NOTHING


def _mapping_clone_impl(mapping: Any, op: CloneOp) -> Any:
    if isinstance(op, RemoveOp) and _mapping_at_maybe(mapping, op.key) is NOTHING:
        return mapping
    mutable = isinstance(mapping, collections.abc.MutableMapping)
    result = copy.copy(mapping) if mutable else dict(mapping)
    match op:
        case SetOp(key=key, value=value):
            result[key] = value
        case RemoveOp(key=key):
            del result[key]
        case _:
            pass
    return result if mutable else type(mapping)(result)


# =============================================================================
# Fixed-schema records
# =============================================================================


def _record_at_maybe(record: Any, key: Any) -> Maybe[Any]:
    if isinstance(key, str) and key in datatype.record_field_names(type(record)):
        return Just(getattr(record, key))
    return NOTHING


def _record_clone_impl(record: Any, op: CloneOp) -> Any:
    record_type = type(record)
    fields = datatype.record_field_names(record_type)
    match op:
        case SetOp(key=key, value=value):
            if key not in fields:
                raise UnconstructableContainerError(
                    record_type,
                    f"'{record_type.__qualname__}' has no field {key!r}",
                )
            return datatype.replace_record_field(record, key, value)
        case RemoveOp(key=key):
            if key not in fields:
                return record
            raise UnconstructableContainerError(
                record_type,
                f"'{record_type.__qualname__}' cannot be constructed without field {key!r}",
            )
        case _:
            return copy.copy(record)


_RECORD_ADAPTER = ContainerAdapter(
    at_maybe=_record_at_maybe, clone_impl=_record_clone_impl
)


# =============================================================================
# Plain attribute objects
# =============================================================================


def _object_at_maybe(obj: Any, key: Any) -> Maybe[Any]:
    if not isinstance(key, str):
        return NOTHING
    try:
        return Just(getattr(obj, key))
    except AttributeError:
        return NOTHING


def _object_clone_impl(obj: Any, op: CloneOp) -> Any:
    state = getattr(obj, "__dict__", None)
    obj_type = type(obj)
    if isinstance(op, RemoveOp) and (state is None or op.key not in state):
        return obj
    if state is None:
        raise UnconstructableContainerError(
            obj_type,
            f"'{obj_type.__qualname__}' has no instance attributes to copy; "
            "register a container adapter for it",
        )
    try:
        result = obj_type()
    except TypeError as e:
        raise UnconstructableContainerError(
            obj_type,
            f"'{obj_type.__qualname__}' requires arguments for instantiation; "
            "register a container adapter for it",
        ) from e
    result.__dict__.update(state)
    match op:
        case SetOp(key=key, value=value):
            setattr(result, key, value)
        case RemoveOp(key=key):
            delattr(result, key)
        case _:
            pass
    return result


register_container_type(list, _sequence_at_maybe, _sequence_clone_impl)
register_container_type(tuple, _sequence_at_maybe, _sequence_clone_impl)
register_container_type(dict, _mapping_at_maybe, _mapping_clone_impl)
register_container_type(
    collections.abc.Mapping, _mapping_at_maybe, _mapping_clone_impl
)
register_container_type(
    collections.abc.Sequence, _sequence_at_maybe, _sequence_clone_impl
)
register_container_type(object, _object_at_maybe, _object_clone_impl)
