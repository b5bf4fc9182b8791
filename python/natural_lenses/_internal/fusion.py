from __future__ import annotations

from typing import Any

from .lens import Lens
from .nfocal import ArrayNFocal, ObjectNFocal
from .optic import Optic
from .optic_array import OpticArray

AnyOptic = Lens | OpticArray | ArrayNFocal | ObjectNFocal


def fuse(*optics: Optic) -> Any:
    """
    Combine optics into one applying them in series.

    Runs of adjacent plain `Lens` instances are merged into a single lens and
    nested `OpticArray` stages are flattened. One remaining stage is returned
    as is; otherwise the stages are wrapped in an `OpticArray`. With no
    arguments, returns a `Lens` with no keys, which addresses the subject
    itself.
    """
    stages: list[Optic] = []
    for optic in optics:
        parts: tuple[Optic, ...]
        match optic:
            case OpticArray():
                parts = optic.optics
            case Optic():
                parts = (optic,)
            case _:
                raise TypeError(f"Cannot fuse non-optic {optic!r}")
        for part in parts:
            if stages and type(part) is Lens and type(stages[-1]) is Lens:
                stages[-1] = Lens.fuse(stages[-1], part)  # type: ignore[arg-type]
            else:
                stages.append(part)

    match stages:
        case []:
            return Lens()
        case [single]:
            return single
        case _:
            return OpticArray(stages)
