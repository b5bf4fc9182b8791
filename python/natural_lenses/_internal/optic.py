"""
The abstract optic contract.

Concrete optics implement two primitives, `Optic.get_maybe` and
`Optic.xform_in_clone_maybe`; every other operation here is derived from them.
"""

from __future__ import annotations

import abc
import collections.abc
import logging
from typing import Any, Callable, Iterable, Iterator, TypeVar

from .maybe import NOTHING, Just, Maybe, is_just
from .setting import get_settings
from .typing import NOT_SET, NotSetType

_logger = logging.getLogger(__name__)

S = TypeVar("S")
R = TypeVar("R")

MaybeXform = Callable[[Maybe[Any]], Maybe[Any]]


def is_iterable_value(value: Any) -> bool:
    """
    Whether *value* counts as iterable for optics. Strings and bytes are
    treated as scalars.
    """
    if isinstance(value, (str, bytes, bytearray)):
        return False
    return isinstance(value, collections.abc.Iterable)


class NoniterableInput(list[Any]):
    """
    The empty list given to the transform of
    `Optic.xform_iterable_in_clone` in place of a non-iterable slot value,
    which is kept in ``noniterable_value``.
    """

    noniterable_value: Any


def _raise_for_noniterable(or_throw: BaseException | None, value: Any) -> None:
    if or_throw is None:
        return
    try:
        setattr(or_throw, "noniterable_value", value)
    except AttributeError:
        pass
    raise or_throw


def _noop(*_args: Any, **_kwargs: Any) -> None:
    return None


class Optic(abc.ABC):
    """
    A navigable, settable path into nested data.

    Every write operation returns a minimally changed clone of its subject:
    containers off the modified path are shared by reference, the subject is
    never mutated, and a write that leaves the slot strictly equal to its
    current value returns the subject itself.
    """

    __slots__ = ()

    @abc.abstractmethod
    def get_maybe(self, subject: Any, *tail: Any) -> Maybe[Any]:
        """
        Get the presence and value of this slot as ``Just(value)`` or
        ``NOTHING``.

        If *tail* is given and the slot value is itself an optic, that optic
        is applied to *tail*; if the slot value is not an optic the result is
        ``NOTHING``.
        """
        raise NotImplementedError("Abstract method not implemented by concrete class")

    @abc.abstractmethod
    def xform_in_clone_maybe(self, subject: S, fn: MaybeXform) -> S:
        """
        Clone *subject*, transforming or removing the slot according to *fn*.

        *fn* receives the slot as a Maybe and returns a Maybe: ``Just(value)``
        sets the slot in the clone and ``NOTHING`` removes it.
        """
        raise NotImplementedError("Abstract method not implemented by concrete class")

    def get(self, subject: Any, *tail: Any) -> Any:
        """
        Get the value of this slot, or None if it is missing.

        With *tail*, the slot value must be an optic, which is applied in turn
        to *tail*.
        """
        match self.get_maybe(subject, *tail):
            case Just(value=value):
                return value
            case _:
                return None

    def present(self, subject: Any) -> Any:
        """
        Test for the presence of this slot in *subject*.
        """
        return is_just(self.get_maybe(subject))

    def get_iterable(
        self, subject: Any, *, or_throw: BaseException | None = None
    ) -> Iterable[Any]:
        """
        Get the value of this slot, always as an iterable.

        A missing slot gives an empty list. A slot holding a non-iterable
        value (strings count as non-iterable) gives an empty list too, unless
        *or_throw* is given: then *or_throw* is raised with the slot value
        attached as its ``noniterable_value`` attribute.
        """
        match self.get_maybe(subject):
            case Just(value=value) if is_iterable_value(value):
                return value
            case Just(value=value):
                _raise_for_noniterable(or_throw, value)
        return []

    def getting(
        self,
        subject: Any,
        *,
        then: Callable[[Any], R] | None = None,
        else_: Callable[[], R] | None = None,
    ) -> R | None:
        """
        Call *then* with the slot value if the slot is present, otherwise call
        *else_*. Returns the result of the function called, or None when the
        relevant function is not given.
        """
        match self.get_maybe(subject):
            case Just(value=value):
                return then(value) if then is not None else None
            case _:
                return else_() if else_ is not None else None

    def if_found(self, subject: Any) -> Iterator[Any]:
        """
        Iterate over the slot value: once if present, never if missing.
        """
        match self.get_maybe(subject):
            case Just(value=value):
                yield value
            case _:
                return

    def set_in_clone(self, subject: S, new_val: Any) -> S:
        """
        Clone *subject* with this slot holding *new_val*.
        """
        return self.xform_in_clone_maybe(subject, lambda _: Just(new_val))

    def xform_in_clone(
        self, subject: S, fn: Callable[[Any], Any], *, add_missing: bool = False
    ) -> S:
        """
        Clone *subject* with *fn* applied to the value in this slot.

        If the slot is missing, *fn* is not called and *subject* is returned,
        unless *add_missing* is True, in which case *fn* is called with None
        and its result is added.
        """

        def _xform(value_maybe: Maybe[Any]) -> Maybe[Any]:
            match value_maybe:
                case Just(value=value):
                    return Just(fn(value))
                case _ if add_missing:
                    return Just(fn(None))
                case _:
                    return NOTHING

        return self.xform_in_clone_maybe(subject, _xform)

    def xform_iterable_in_clone(
        self,
        subject: S,
        fn: Callable[[Iterable[Any]], Iterable[Any]],
        *,
        or_throw: BaseException | None = None,
    ) -> S:
        """
        Clone *subject* with *fn* applied to the iterable value in this slot.

        Unlike `xform_in_clone`, *fn* is always called and always receives an
        iterable: an empty list stands in for a missing slot or a non-iterable
        value (strings count as non-iterable). If the slot holds a
        non-iterable value and *or_throw* is given, *or_throw* is raised with
        the value attached as its ``noniterable_value`` attribute. A
        non-iterable result from *fn* is logged and replaced by an empty list.
        """

        def _xform(value_maybe: Maybe[Any]) -> Maybe[Any]:
            fn_input: Iterable[Any]
            match value_maybe:
                case Just(value=value) if is_iterable_value(value):
                    fn_input = value
                case Just(value=value):
                    _raise_for_noniterable(or_throw, value)
                    fn_input = NoniterableInput()
                    fn_input.noniterable_value = value
                case _:
                    fn_input = NoniterableInput()
            result = fn(fn_input)
            if not is_iterable_value(result):
                _logger.warning(
                    "Noniterable result from fn of xform_iterable_in_clone; "
                    "substituting empty list (optic=%r, input=%r, fn=%r, result=%r)",
                    self,
                    fn_input,
                    fn,
                    result,
                    stack_info=get_settings().log_stack_info,
                )
                return Just([])
            return Just(result)

        return self.xform_in_clone_maybe(subject, _xform)

    def binding(
        self,
        method_name: str,
        *,
        on: Any,
        bind_now: bool = False,
        or_throw: BaseException | None = None,
        or_else: Callable[..., Any] | NotSetType = NOT_SET,
    ) -> Callable[..., Any]:
        """
        Get a function calling method *method_name* of the target of this
        optic within *on*.

        By default the target is looked up in *on* each time the returned
        function is called, so later changes to *on* are seen. With
        *bind_now* the method is looked up once, during this call.

        When the target has no such callable, *or_throw* is raised if given,
        else *or_else* is used if given, else nothing happens.
        """

        def _look_up() -> Any:
            target = self.get(on)
            fn = getattr(target, method_name, None)
            return fn if callable(fn) else None

        if bind_now:
            fn = _look_up()
            if fn is not None:
                return fn
            if or_throw is not None:
                raise or_throw
            if not isinstance(or_else, NotSetType):
                return or_else
            return _noop

        def _bound(*args: Any, **kwargs: Any) -> Any:
            fn = _look_up()
            if fn is not None:
                return fn(*args, **kwargs)
            if or_throw is not None:
                raise or_throw
            if not isinstance(or_else, NotSetType):
                return or_else(*args, **kwargs)
            return None

        return _bound
