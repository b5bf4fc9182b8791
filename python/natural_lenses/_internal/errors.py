from __future__ import annotations

from typing import Any


class StereoscopyError(Exception):
    """
    Raised when a multifocal write cannot be reconciled into one clone, i.e.
    some slot in the clone would need to hold more than one value at once.
    This typically means two constituent optics address the same storage.
    """

    key: Any
    expected: Any
    actual: Any

    def __init__(self, key: Any, expected: Any, actual: Any):
        self.key = key
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"multifocal slot {key!r} reads back as {actual!r} after writing {expected!r}"
        )


class UnconstructableContainerError(TypeError):
    """
    Raised when a record-like container cannot be cloned because its type
    cannot be instantiated the way the cloning logic needs.
    """

    container_type: type

    def __init__(self, container_type: type, message: str):
        self.container_type = container_type
        super().__init__(message)
