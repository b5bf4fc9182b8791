from __future__ import annotations

import itertools
import logging
from typing import Any, Callable, TypeVar

from .containers import (
    ContainerAdapter,
    RemoveOp,
    SetOp,
    adapter_for,
    index_maybe,
)
from .custom_step import Step
from .maybe import NOTHING, Just, Maybe, NothingType
from .optic import MaybeXform, Optic
from .typing import NOT_SET, NotSetType, strictly_equal

_logger = logging.getLogger(__name__)

S = TypeVar("S")


class Slot:
    """
    A (container, key) pair visited while cloning through a `Lens`.
    """

    __slots__ = ("container", "key", "_adapter")

    container: Any
    key: Any
    _adapter: ContainerAdapter

    def __init__(self, container: Any, key: Any, adapter: ContainerAdapter):
        self.container = container
        self.key = key
        self._adapter = adapter

    def get_maybe(self) -> Maybe[Any]:
        return self._adapter.at_maybe(self.container, self.key)

    def clone_and_set(self, value: Any) -> Any:
        return self._adapter.clone_impl(self.container, SetOp(self.key, value))

    def clone_omitting(self) -> Any:
        return self._adapter.clone_impl(self.container, RemoveOp(self.key))


class StepSlot:
    """
    A (container, `Step`) pair visited while cloning through a `Lens`.
    """

    __slots__ = ("container", "step")

    container: Any
    step: Step

    def __init__(self, container: Any, step: Step):
        self.container = container
        self.step = step

    def get_maybe(self) -> Maybe[Any]:
        if not self.step.can_read:
            return NOTHING
        return self.step.get_maybe(self.container)  # type: ignore[misc]

    def clone_and_set(self, value: Any) -> Any:
        assert self.step.updated_clone is not None
        return self.step.updated_clone(self.container, Just(value))

    def clone_omitting(self) -> Any:
        assert self.step.updated_clone is not None
        return self.step.updated_clone(self.container, NOTHING)


class Lens(Optic):
    """
    An optic for one fixed path of keys into nested data.

    Each key indexes the container at its depth through that container's
    registered adapter: string keys for mappings and attribute objects,
    integer keys (negative ones counting from the end) for sequences, any
    hashable value for mappings. A `Step` may stand in for a key where the
    default navigation is not adequate.

    Lenses compare by identity: two lenses with the same keys are distinct.
    """

    __slots__ = ("keys",)

    keys: tuple[Any, ...]

    def __init__(self, *keys: Any):
        self.keys = keys

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(repr(k) for k in self.keys)})"

    def __truediv__(self, other: Any) -> Optic:
        if isinstance(other, Optic):
            from .fusion import fuse

            return fuse(self, other)
        return self._with_keys((*self.keys, other))

    def _with_keys(self, keys: tuple[Any, ...]) -> Lens:
        return Lens(*keys)

    def get_maybe(self, subject: Any, *tail: Any) -> Maybe[Any]:
        cur = subject
        for key in self.keys:
            if isinstance(key, Step):
                next_maybe = key.get_maybe(cur) if key.can_read else NOTHING  # type: ignore[misc]
            else:
                next_maybe = index_maybe(cur, key)
            match next_maybe:
                case Just(value=value):
                    cur = value
                case _:
                    return NOTHING
        if tail:
            return cur.get_maybe(*tail) if isinstance(cur, Optic) else NOTHING
        return Just(cur)

    def xform_in_clone_maybe(self, subject: S, fn: MaybeXform) -> S:
        if not self.keys:
            return self._xform_subject(subject, fn)

        slots: list[Slot | StepSlot] = []
        cur: Any = subject
        present = True
        for depth in range(len(self.keys)):
            slot = self._make_slot(cur, depth)
            if slot is None:
                return subject
            slots.append(slot)
            match slot.get_maybe():
                case Just(value=value):
                    cur = value
                    continue
                case _:
                    present = False
            if depth + 1 < len(self.keys):
                cur = self._construct_for(depth + 1)
                if cur is NOT_SET:
                    return subject

        last_slot = slots[-1]
        result = fn(Just(cur) if present else NOTHING)
        match result:
            case Just(value=value):
                if present and strictly_equal(value, cur):
                    return subject
                new_child = last_slot.clone_and_set(value)
            case NothingType():
                if not present:
                    return subject
                new_child = last_slot.clone_omitting()
                if new_child is last_slot.container:
                    return subject
            case _:
                raise TypeError(
                    f"transform must return a Maybe, not {type(result).__qualname__}"
                )

        for slot in reversed(slots[:-1]):
            new_child = slot.clone_and_set(new_child)
        return new_child

    def bound(
        self,
        subject: Any,
        *,
        or_throw: BaseException | None = None,
        or_else: Callable[..., Any] | NotSetType = NOT_SET,
    ) -> Callable[..., Any]:
        """
        Get the method named by the last key, bound to the object the other
        keys lead to within *subject*.

        When there is no such method, *or_throw* is raised if given, else
        *or_else* is returned if given, else a function doing nothing.
        """
        *path, method_name = self.keys or (None,)
        target = Lens(*path).get(subject)
        fn = getattr(target, method_name, None) if isinstance(method_name, str) else None
        if callable(fn):
            return fn
        if or_throw is not None:
            raise or_throw
        if not isinstance(or_else, NotSetType):
            return or_else
        return lambda *_args, **_kwargs: None

    @staticmethod
    def fuse(*lenses: Lens) -> Lens:
        """
        Combine lenses into one whose keys are the concatenation of theirs.
        All arguments must be exactly `Lens`, not a subclass or other optic;
        use the module-level `fuse` for arbitrary optics.
        """
        if not all(type(lens) is Lens for lens in lenses):
            raise TypeError("Expected all arguments to be exactly Lens (no derived classes)")
        return Lens(*itertools.chain.from_iterable(lens.keys for lens in lenses))

    def _xform_subject(self, subject: S, fn: MaybeXform) -> S:
        match fn(Just(subject)):
            case Just(value=value):
                return subject if strictly_equal(value, subject) else value
            case NothingType():
                return subject
            case result:
                raise TypeError(
                    f"transform must return a Maybe, not {type(result).__qualname__}"
                )

    def _make_slot(self, container: Any, depth: int) -> Slot | StepSlot | None:
        key = self.keys[depth]
        if isinstance(key, Step):
            return StepSlot(container, key) if key.can_update else None
        adapter = adapter_for(container)
        if adapter is None:
            if container is not None:
                _logger.warning(
                    "Replacing non-container value %r at depth %d of %r with a new container",
                    container,
                    depth,
                    self,
                )
            container = self._construct_for(depth)
            adapter = adapter_for(container)
            if adapter is None:
                raise TypeError(
                    f"constructed container for {self!r} at depth {depth} has no adapter"
                )
        return Slot(container, key, adapter)

    def _construct_for(self, depth: int) -> Any:
        """
        Construct an empty container to be indexed by the key at *depth*.
        """
        key = self.keys[depth]
        if isinstance(key, Step):
            if not key.can_construct:
                return NOT_SET
            return key.construct()  # type: ignore[misc]
        if isinstance(key, int) and not isinstance(key, bool):
            return []
        return {}


def lens(*keys: Any) -> Lens:
    """
    Construct a `Lens` over *keys*.
    """
    return Lens(*keys)
