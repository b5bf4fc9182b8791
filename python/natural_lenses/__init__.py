"""
Natural lenses: immutable optics over nested, JSON-shaped data.
"""

from ._version import __version__

from ._internal.maybe import (
    NOTHING,
    Just,
    Maybe,
    NothingType,
    each_found,
    is_just,
    is_nothing,
    maybe_do,
)

from ._internal.typing import HOLE, HoleType, NOT_SET, NotSetType, is_hole

from ._internal.errors import StereoscopyError, UnconstructableContainerError

from ._internal.containers import (
    PLAIN_CLONE,
    CloneOp,
    ContainerAdapter,
    PlainCloneOp,
    RemoveOp,
    SetOp,
    clone_container,
    index_maybe,
    register_container_type,
)

from ._internal.custom_step import Step

from ._internal.optic import NoniterableInput, Optic

from ._internal.lens import Lens, lens

from ._internal.optic_array import OpticArray

from ._internal.nfocal import (
    LENS_CAP,
    AbstractNFocal,
    ArrayNFocal,
    ObjectNFocal,
    make_nfocal,
)

from ._internal.fusion import AnyOptic, fuse

from ._internal.factory import (
    DEFAULT_CONTAINER_FACTORY,
    ContainerFactory,
    DefaultContainerFactory,
    FactoryLens,
    LensFactory,
)

from ._internal.setting import Settings, get_settings, set_settings, settings_override

__all__ = [
    "__version__",
    # .maybe
    "NOTHING",
    "Just",
    "Maybe",
    "NothingType",
    "each_found",
    "is_just",
    "is_nothing",
    "maybe_do",
    # .typing
    "HOLE",
    "HoleType",
    "NOT_SET",
    "NotSetType",
    "is_hole",
    # .errors
    "StereoscopyError",
    "UnconstructableContainerError",
    # .containers
    "PLAIN_CLONE",
    "CloneOp",
    "ContainerAdapter",
    "PlainCloneOp",
    "RemoveOp",
    "SetOp",
    "clone_container",
    "index_maybe",
    "register_container_type",
    # .custom_step
    "Step",
    # .optic
    "NoniterableInput",
    "Optic",
    # .lens
    "Lens",
    "lens",
    # .optic_array
    "OpticArray",
    # .nfocal
    "LENS_CAP",
    "AbstractNFocal",
    "ArrayNFocal",
    "ObjectNFocal",
    "make_nfocal",
    # .fusion
    "AnyOptic",
    "fuse",
    # .factory
    "DEFAULT_CONTAINER_FACTORY",
    "ContainerFactory",
    "DefaultContainerFactory",
    "FactoryLens",
    "LensFactory",
    # .setting
    "Settings",
    "get_settings",
    "set_settings",
    "settings_override",
]
