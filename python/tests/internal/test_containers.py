import collections
import dataclasses
from typing import Any, NamedTuple

import numpy as np
import pydantic
import pytest

from natural_lenses import (
    HOLE,
    NOTHING,
    PLAIN_CLONE,
    Just,
    RemoveOp,
    SetOp,
    UnconstructableContainerError,
    clone_container,
    index_maybe,
    register_container_type,
)
from natural_lenses._internal import containers


@dataclasses.dataclass(frozen=True)
class Point:
    x: int
    y: int


class PointTuple(NamedTuple):
    x: int
    y: int


class PointModel(pydantic.BaseModel):
    x: int
    y: int


class Bag:
    pass


class NeedsArgs:
    def __init__(self, a: int) -> None:
        self.a = a


class TestSequences:
    def test_index_with_negative_key(self) -> None:
        assert index_maybe([1, 2, 3], -1) == Just(3)
        assert index_maybe([1, 2, 3], -3) == Just(1)
        assert index_maybe([1, 2, 3], -4) is NOTHING
        assert index_maybe([1, 2, 3], 3) is NOTHING

    def test_non_int_key_is_missing(self) -> None:
        assert index_maybe([1, 2], "0") is NOTHING
        assert index_maybe([1, 2], True) is NOTHING

    def test_hole_reads_as_missing(self) -> None:
        assert index_maybe([1, HOLE, 3], 1) is NOTHING

    def test_set_past_end_fills_holes(self) -> None:
        src = [1]
        result = clone_container(src, SetOp(3, 4))
        assert result == [1, HOLE, HOLE, 4]
        assert src == [1]

    def test_set_negative_key(self) -> None:
        assert clone_container([1, 2, 3], SetOp(-1, 9)) == [1, 2, 9]

    def test_set_negative_key_out_of_range(self) -> None:
        with pytest.raises(IndexError):
            clone_container([1, 2], SetOp(-3, 0))

    def test_set_non_int_key(self) -> None:
        with pytest.raises(TypeError, match="indices must be integers"):
            clone_container([1, 2], SetOp("a", 0))

    def test_remove_last_shrinks(self) -> None:
        assert clone_container([1, 2, 3], RemoveOp(-1)) == [1, 2]

    def test_remove_middle_leaves_hole(self) -> None:
        assert clone_container([1, 2, 3], RemoveOp(1)) == [1, HOLE, 3]

    def test_remove_missing_returns_same(self) -> None:
        src = [1, 2]
        assert clone_container(src, RemoveOp(5)) is src

    def test_tuple_stays_tuple(self) -> None:
        result = clone_container((1, 2), SetOp(0, 5))
        assert result == (5, 2)
        assert type(result) is tuple

    def test_plain_clone_is_a_copy(self) -> None:
        src = [1, 2]
        result = clone_container(src, PLAIN_CLONE)
        assert result == src
        assert result is not src


class TestMappings:
    def test_missing_and_unhashable_keys(self) -> None:
        assert index_maybe({"a": None}, "a") == Just(None)
        assert index_maybe({"a": 1}, "b") is NOTHING
        assert index_maybe({"a": 1}, ["a"]) is NOTHING

    def test_set_and_remove(self) -> None:
        src = {"a": 1, "b": 2}
        assert clone_container(src, SetOp("c", 3)) == {"a": 1, "b": 2, "c": 3}
        assert clone_container(src, RemoveOp("a")) == {"b": 2}
        assert src == {"a": 1, "b": 2}

    def test_subclass_is_preserved(self) -> None:
        src = collections.OrderedDict(a=1)
        result = clone_container(src, SetOp("b", 2))
        assert type(result) is collections.OrderedDict
        assert list(result) == ["a", "b"]

    def test_defaultdict_read_does_not_insert(self) -> None:
        src: collections.defaultdict[str, list[Any]] = collections.defaultdict(list)
        assert index_maybe(src, "a") is NOTHING
        assert "a" not in src


class TestRecords:
    @pytest.mark.parametrize(
        "record", [Point(1, 2), PointTuple(1, 2), PointModel(x=1, y=2)]
    )
    def test_read_and_replace_field(self, record: Any) -> None:
        assert index_maybe(record, "x") == Just(1)
        assert index_maybe(record, "z") is NOTHING
        result = clone_container(record, SetOp("x", 5))
        assert type(result) is type(record)
        assert result.x == 5
        assert result.y == 2
        assert record.x == 1

    @pytest.mark.parametrize(
        "record", [Point(1, 2), PointTuple(1, 2), PointModel(x=1, y=2)]
    )
    def test_remove_declared_field_raises(self, record: Any) -> None:
        with pytest.raises(UnconstructableContainerError, match="without field 'x'"):
            clone_container(record, RemoveOp("x"))

    def test_set_undeclared_field_raises(self) -> None:
        with pytest.raises(UnconstructableContainerError) as exc_info:
            clone_container(Point(1, 2), SetOp("z", 3))
        assert exc_info.value.container_type is Point


class TestObjects:
    def test_attributes(self) -> None:
        obj = Bag()
        obj.a = 1  # type: ignore[attr-defined]
        assert index_maybe(obj, "a") == Just(1)
        assert index_maybe(obj, "b") is NOTHING

        result = clone_container(obj, SetOp("b", 2))
        assert type(result) is Bag
        assert result.a == 1 and result.b == 2
        assert not hasattr(obj, "b")

        removed = clone_container(obj, RemoveOp("a"))
        assert not hasattr(removed, "a")
        assert obj.a == 1  # type: ignore[attr-defined]

    def test_type_needing_arguments_raises(self) -> None:
        with pytest.raises(UnconstructableContainerError, match="requires arguments"):
            clone_container(NeedsArgs(1), SetOp("a", 2))


class TestNonContainers:
    @pytest.mark.parametrize("value", ["abc", b"abc", 5, 1.5, None, {1, 2}])
    def test_scalars_have_no_slots(self, value: Any) -> None:
        assert index_maybe(value, 0) is NOTHING
        assert containers.adapter_for(value) is None

    def test_clone_of_scalar_raises(self) -> None:
        with pytest.raises(TypeError, match="no container adapter"):
            clone_container("abc", SetOp(0, "x"))


class TestNdarray:
    def test_read(self) -> None:
        arr = np.array([1, 2, 3])
        assert index_maybe(arr, -1).value == 3  # type: ignore[union-attr]
        assert index_maybe(arr, 3) is NOTHING

    def test_set_copies(self) -> None:
        arr = np.array([1, 2, 3])
        result = clone_container(arr, SetOp(1, 9))
        assert result.tolist() == [1, 9, 3]
        assert arr.tolist() == [1, 2, 3]

    def test_append_at_end(self) -> None:
        result = clone_container(np.array([1, 2]), SetOp(2, 3))
        assert result.tolist() == [1, 2, 3]

    def test_set_beyond_end_raises(self) -> None:
        with pytest.raises(IndexError):
            clone_container(np.array([1, 2]), SetOp(5, 3))

    def test_remove_only_last(self) -> None:
        arr = np.array([1, 2, 3])
        assert clone_container(arr, RemoveOp(2)).tolist() == [1, 2]
        with pytest.raises(IndexError, match="only the last element"):
            clone_container(arr, RemoveOp(0))


class TestRegistration:
    def test_first_registration_wins(self) -> None:
        class Box:
            def __init__(self, content: Any = None) -> None:
                self.content = content

        def at_maybe(box: Box, key: Any) -> Any:
            return Just(box.content) if key == "content" else NOTHING

        def clone_impl(box: Box, op: Any) -> Box:
            match op:
                case SetOp(value=value):
                    return Box(value)
                case _:
                    return Box()

        assert register_container_type(Box, at_maybe, clone_impl) is True
        assert register_container_type(Box, lambda c, k: NOTHING, clone_impl) is False
        assert index_maybe(Box(3), "content") == Just(3)
        assert clone_container(Box(3), SetOp("content", 4)).content == 4

    def test_builtin_adapter_cannot_be_replaced(self) -> None:
        assert register_container_type(list, lambda c, k: NOTHING, lambda c, op: c) is False
        assert index_maybe([1], 0) == Just(1)
