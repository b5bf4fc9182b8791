from __future__ import annotations

import collections.abc
from typing import Any, Iterable, TypeVar

from .maybe import NOTHING, Just, Maybe, is_just
from .optic import MaybeXform, Optic
from .setting import get_settings

S = TypeVar("S")


def _is_empty_container(value: Any) -> bool:
    if isinstance(value, (str, bytes, bytearray)):
        return False
    if not isinstance(value, collections.abc.Collection):
        return False
    try:
        return len(value) == 0
    except TypeError:
        return False


class OpticArray(Optic):
    """
    Optics applied in series, each to the result of the previous one.

    Construct this with `fuse`, which merges adjacent plain lenses so that an
    `OpticArray` only holds stages that cannot be merged.
    """

    __slots__ = ("optics",)

    optics: tuple[Optic, ...]

    def __init__(self, optics: Iterable[Optic]):
        self.optics = tuple(optics)

    def __repr__(self) -> str:
        return f"OpticArray({list(self.optics)!r})"

    def present(self, subject: Any) -> Any:
        if not self.optics:
            return True
        *leading, final = self.optics
        cur = subject
        for optic in leading:
            cur = optic.get(cur)
        return final.present(cur)

    def get_maybe(self, subject: Any, *tail: Any) -> Maybe[Any]:
        # Unless strict presence is configured, an empty container coming out
        # of an intermediate stage counts as a missing slot.
        empty_is_missing = not get_settings().strict_presence
        last_index = len(self.optics) - 1
        result: Maybe[Any] = Just(subject)
        cur = subject
        for i, optic in enumerate(self.optics):
            result = optic.get_maybe(cur)
            match result:
                case Just(value=value):
                    cur = value
                case _:
                    return NOTHING
            if i < last_index and empty_is_missing and _is_empty_container(cur):
                return NOTHING
        if tail:
            return cur.get_maybe(*tail) if isinstance(cur, Optic) else NOTHING
        return result

    def xform_in_clone_maybe(self, subject: S, fn: MaybeXform) -> S:
        if not self.optics:
            match fn(Just(subject)):
                case Just(value=value):
                    return value
                case _:
                    return subject

        stage_inputs: list[Maybe[Any]] = [Just(subject)]
        for optic in self.optics[:-1]:
            next_input = optic.get_maybe(stage_inputs[-1].value)  # type: ignore[union-attr]
            stage_inputs.append(next_input)
            if not is_just(next_input):
                break

        def _stage_subject(i: int) -> Any:
            stage_input = stage_inputs[i] if i < len(stage_inputs) else NOTHING
            return stage_input.value if is_just(stage_input) else None

        last_subject = _stage_subject(len(self.optics) - 1)
        new_value = self.optics[-1].xform_in_clone_maybe(last_subject, fn)
        if new_value is last_subject:
            return subject

        # Stages whose input was missing start from None, from which their
        # lenses build fresh containers.
        for i in range(len(self.optics) - 2, -1, -1):
            new_value = self.optics[i].set_in_clone(_stage_subject(i), new_value)
        return new_value
