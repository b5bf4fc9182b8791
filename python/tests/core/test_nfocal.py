from typing import Any

import numpy as np
import pytest

from natural_lenses import (
    HOLE,
    LENS_CAP,
    NOTHING,
    ArrayNFocal,
    Just,
    Lens,
    ObjectNFocal,
    StereoscopyError,
    each_found,
    make_nfocal,
)


def _subject() -> dict[str, Any]:
    return {"a": 1, "b": {"c": 2}, "untouched": [1, 2]}


class TestConstruction:
    def test_shape_follows_collection(self) -> None:
        assert isinstance(make_nfocal([Lens("a")]), ArrayNFocal)
        assert isinstance(make_nfocal((Lens("a"),)), ArrayNFocal)
        assert isinstance(make_nfocal({"x": Lens("a")}), ObjectNFocal)

    def test_snapshot_by_default(self) -> None:
        lenses = [Lens("a")]
        nfocal = make_nfocal(lenses)
        lenses.append(Lens("b", "c"))
        assert nfocal.get(_subject()) == [1]

    def test_live_sees_later_changes(self) -> None:
        lenses = {"x": Lens("a")}
        nfocal = make_nfocal(lenses, live=True)
        lenses["y"] = Lens("b", "c")
        assert nfocal.get(_subject()) == {"x": 1, "y": 2}

    def test_rebind(self) -> None:
        nfocal = make_nfocal([Lens("a")])
        rebound = nfocal.rebind([Lens("b", "c"), Lens("a")])
        assert type(rebound) is ArrayNFocal
        assert rebound.get(_subject()) == [2, 1]
        assert nfocal.get(_subject()) == [1]


class TestGet:
    def test_array_aggregate(self) -> None:
        nfocal = make_nfocal([Lens("a"), Lens("b", "c"), Lens("missing")])
        result = nfocal.get_maybe(_subject())
        assert result == Just([1, 2, HOLE], multifocal=True)
        assert list(each_found(result)) == [(1, 0), (2, 1)]

    def test_object_aggregate_omits_missing(self) -> None:
        nfocal = make_nfocal({"x": Lens("a"), "y": Lens("missing")})
        assert nfocal.get_maybe(_subject()) == Just({"x": 1}, multifocal=True)

    def test_present_lists_keys(self) -> None:
        assert make_nfocal([Lens("missing"), Lens("a")]).present(_subject()) == [1]
        assert make_nfocal({"x": Lens("a"), "y": Lens("z")}).present(_subject()) == ["x"]

    def test_get_with_tail(self) -> None:
        optics = {"f": Lens("x"), "g": 5}
        nfocal = make_nfocal([Lens("f"), Lens("g"), Lens("h")])
        assert nfocal.get(optics, {"x": "found"}) == ["found", HOLE, HOLE]

    def test_lens_cap_finds_nothing(self) -> None:
        subject = {"a": 1}
        assert LENS_CAP.get_maybe(subject) is NOTHING
        assert LENS_CAP.set_in_clone(subject, 2) is subject


class TestSetInClone:
    def test_array_set_and_remove(self) -> None:
        nfocal = make_nfocal([Lens("a"), Lens("b", "c")])
        subject = _subject()
        result = nfocal.set_in_clone(subject, [10, HOLE])
        assert result == {"a": 10, "b": {}, "untouched": [1, 2]}
        assert result["untouched"] is subject["untouched"]
        assert subject == _subject()

    def test_object_set_and_remove(self) -> None:
        nfocal = make_nfocal({"x": Lens("a"), "y": Lens("b", "c")})
        result = nfocal.set_in_clone(_subject(), {"y": 20})
        assert result == {"b": {"c": 20}, "untouched": [1, 2]}

    def test_extra_values_are_ignored(self) -> None:
        nfocal = make_nfocal([Lens("a")])
        assert nfocal.set_in_clone({}, [1, 2, 3]) == {"a": 1}

    def test_conflicting_slots_raise(self) -> None:
        nfocal = make_nfocal([Lens("a"), Lens("a")])
        with pytest.raises(StereoscopyError) as exc_info:
            nfocal.set_in_clone({}, [1, 2])
        assert exc_info.value.key == 0
        assert exc_info.value.expected == Just(1)
        assert exc_info.value.actual == Just(2)

    def test_agreeing_slots_do_not_raise(self) -> None:
        nfocal = make_nfocal([Lens("a"), Lens("a")])
        assert nfocal.set_in_clone({}, [1, 1]) == {"a": 1}

    def test_removal_overridden_by_sibling_raises(self) -> None:
        nfocal = make_nfocal({"whole": Lens("a"), "part": Lens("a", "b")})
        with pytest.raises(StereoscopyError) as exc_info:
            nfocal.set_in_clone({}, {"part": 1})
        assert exc_info.value.key == "whole"
        assert exc_info.value.expected is NOTHING

    def test_array_values_compare_by_content(self) -> None:
        nfocal = make_nfocal([Lens("m", 0)])
        subject = {"m": np.array([[1, 2], [3, 4]])}
        result = nfocal.set_in_clone(subject, [np.array([9, 9])])
        assert result["m"].tolist() == [[9, 9], [3, 4]]
        assert subject["m"].tolist() == [[1, 2], [3, 4]]


class TestXformInClone:
    def test_pairs(self) -> None:
        nfocal = make_nfocal([Lens("a"), Lens("b", "c")])
        result = nfocal.xform_in_clone(
            _subject(), [(0, lambda v: v + 1), (1, lambda v: v * 10), (5, str)]
        )
        assert result == {"a": 2, "b": {"c": 20}, "untouched": [1, 2]}

    def test_missing_child_is_skipped(self) -> None:
        nfocal = make_nfocal({"x": Lens("missing")})
        subject = _subject()
        assert nfocal.xform_in_clone(subject, [("x", lambda v: v + 1)]) is subject

    def test_opts_mapping(self) -> None:
        nfocal = make_nfocal({"x": Lens("missing")})
        result = nfocal.xform_in_clone({}, [("x", lambda v: "new")], {"add_missing": True})
        assert result == {"missing": "new"}

    def test_opts_per_key(self) -> None:
        nfocal = make_nfocal({"x": Lens("p"), "y": Lens("q")})
        result = nfocal.xform_in_clone(
            {},
            [("x", lambda v: 1), ("y", lambda v: 2)],
            lambda key: {"add_missing": key == "y"},
        )
        assert result == {"q": 2}

    def test_whole_aggregate(self) -> None:
        nfocal = make_nfocal([Lens("a"), Lens("b", "c")])
        result = nfocal.xform_in_clone(_subject(), lambda agg: [agg[1], agg[0]])
        assert result == {"a": 2, "b": {"c": 1}, "untouched": [1, 2]}

    def test_whole_aggregate_unchanged_returns_subject(self) -> None:
        nfocal = make_nfocal([Lens("a")])
        subject = _subject()
        assert nfocal.xform_in_clone_maybe(subject, lambda m: m) is subject

    def test_whole_aggregate_edited_in_place(self) -> None:
        nfocal = make_nfocal([Lens("a"), Lens("b")])
        subject = {"a": 1, "b": 2}

        def _bump_first(agg: list[Any]) -> list[Any]:
            agg[0] += 10
            return agg

        result = nfocal.xform_in_clone(subject, _bump_first)
        assert result == {"a": 11, "b": 2}
        assert subject == {"a": 1, "b": 2}

    def test_whole_aggregate_equal_copy_returns_subject(self) -> None:
        nfocal = make_nfocal({"x": Lens("a")})
        subject = _subject()
        assert nfocal.xform_in_clone(subject, lambda agg: dict(agg)) is subject

    def test_negative_key_is_not_a_position(self) -> None:
        nfocal = make_nfocal([Lens("a"), Lens("b")])
        subject = {"a": 1, "b": 2}
        assert nfocal.xform_in_clone(subject, [(-1, lambda v: v + 100)]) is subject
        assert (
            nfocal.xform_in_clone_maybe(subject, [(-1, lambda _: NOTHING)]) is subject
        )

    def test_whole_aggregate_nothing_removes_all(self) -> None:
        nfocal = make_nfocal({"x": Lens("a"), "y": Lens("b", "c")})
        result = nfocal.xform_in_clone_maybe(_subject(), lambda _: NOTHING)
        assert result == {"b": {}, "untouched": [1, 2]}

    def test_maybe_pairs(self) -> None:
        nfocal = make_nfocal([Lens("a"), Lens("b", "c")])
        result = nfocal.xform_in_clone_maybe(
            _subject(), [(0, lambda _: NOTHING), (1, lambda _: Just("two"))]
        )
        assert result == {"b": {"c": "two"}, "untouched": [1, 2]}


class TestAsContainer:
    def test_lens_reads_constituent_optic(self) -> None:
        inner = Lens("b", "c")
        nfocal = make_nfocal([Lens("a"), inner])
        assert Lens(1).get(nfocal) is inner
        assert Lens(-1).get(nfocal) is inner

    def test_lens_replaces_constituent_optic(self) -> None:
        nfocal = make_nfocal({"x": Lens("a"), "y": Lens("b")})
        updated = Lens("y").set_in_clone(nfocal, Lens("b", "c"))
        assert type(updated) is ObjectNFocal
        assert updated.get(_subject()) == {"x": 1, "y": 2}
        assert nfocal.get(_subject()) == {"x": 1, "y": {"c": 2}}
