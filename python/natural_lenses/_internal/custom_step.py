from __future__ import annotations

from typing import Any, Callable

from .maybe import Maybe

GetMaybeFn = Callable[[Any], Maybe[Any]]
UpdatedCloneFn = Callable[[Any, Maybe[Any]], Any]
ConstructFn = Callable[[], Any]


class Step:
    """
    A step within a `Lens` with fully customizable behavior.

    Use an instance in place of a plain key when the container at that depth
    needs navigation or cloning that its registered adapter does not provide.

    Args:
        get_maybe: Returns ``Just(value)`` for the slot within the container it
            is passed, or ``NOTHING`` if the slot does not exist.
        updated_clone: Takes the container and a Maybe of the new slot value
            and returns a minimally modified clone of the container, such that
            *get_maybe* on the clone returns that Maybe. ``NOTHING`` means
            remove the slot.
        construct: Returns an empty container of the type this step navigates.

    Any of these may be omitted, limiting what the owning lens can do:
    without *construct* or *updated_clone* the lens cannot create a missing
    container at this depth, without *updated_clone* it also cannot modify an
    existing one, and without *get_maybe* it cannot read or transform through
    this depth at all.
    """

    __slots__ = ("get_maybe", "updated_clone", "construct")

    get_maybe: GetMaybeFn | None
    updated_clone: UpdatedCloneFn | None
    construct: ConstructFn | None

    def __init__(
        self,
        get_maybe: GetMaybeFn | None = None,
        updated_clone: UpdatedCloneFn | None = None,
        construct: ConstructFn | None = None,
    ):
        self.get_maybe = get_maybe
        self.updated_clone = updated_clone
        self.construct = construct

    @property
    def can_read(self) -> bool:
        return self.get_maybe is not None

    @property
    def can_update(self) -> bool:
        return self.get_maybe is not None and self.updated_clone is not None

    @property
    def can_construct(self) -> bool:
        return self.construct is not None and self.updated_clone is not None

    def __repr__(self) -> str:
        ops = [
            name
            for name in self.__slots__
            if getattr(self, name) is not None
        ]
        return f"Step({', '.join(ops)})"
