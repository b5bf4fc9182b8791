"""
Container adapter for NumPy arrays, indexed along the first axis.

Arrays cannot hold holes, so only edits that keep the array dense are
supported: replacing an element, appending right after the end, and removing
the last element.
"""

from typing import Any

import numpy as np

from .containers import CloneOp, RemoveOp, SetOp, register_container_type
from .maybe import NOTHING, Just, Maybe


def _ndarray_index(arr: np.ndarray, key: Any) -> int | None:
    if not isinstance(key, (int, np.integer)) or isinstance(key, bool):
        return None
    if arr.ndim == 0:
        return None
    length = arr.shape[0]
    key = int(key)
    if key < -length or key >= length:
        return None
    return key + length if key < 0 else key


def _ndarray_at_maybe(arr: np.ndarray, key: Any) -> Maybe[Any]:
    index = _ndarray_index(arr, key)
    if index is None:
        return NOTHING
    return Just(arr[index])


def _ndarray_clone_impl(arr: np.ndarray, op: CloneOp) -> np.ndarray:
    match op:
        case SetOp(key=key, value=value):
            index = _ndarray_index(arr, key)
            if index is not None:
                result = arr.copy()
                result[index] = value
                return result
            if isinstance(key, (int, np.integer)) and arr.ndim > 0 and key == arr.shape[0]:
                return np.concatenate([arr, np.asarray([value], dtype=arr.dtype)])
            raise IndexError(
                f"index {key!r} cannot be set in an array of shape {arr.shape}"
            )
        case RemoveOp(key=key):
            index = _ndarray_index(arr, key)
            if index is None:
                return arr
            if index != arr.shape[0] - 1:
                raise IndexError(
                    f"only the last element can be removed from an array, not index {key!r}"
                )
            return arr[:index].copy()
        case _:
            return arr.copy()


register_container_type(np.ndarray, _ndarray_at_maybe, _ndarray_clone_impl)
