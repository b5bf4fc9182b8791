"""
Lenses that build missing containers through a pluggable factory.

A plain `Lens` fills in missing intermediate containers with a `list` (for an
integer key) or a `dict` (for any other key). When other container types are
wanted in clones, e.g. immutable ones, make lenses through a `LensFactory`.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from .custom_step import Step
from .lens import Lens


class ContainerFactory(Protocol):
    def construct(self, keys: Sequence[Any]) -> Any:
        """
        Construct an empty container for a missing slot. *keys* are the lens
        keys up to and including the one that will index the new container.
        """
        ...


class DefaultContainerFactory:
    """
    Choose the container type from the key that will index it: an integer key
    gets a *sequence_type* and any other key a *mapping_type*.
    """

    __slots__ = ("sequence_type", "mapping_type")

    sequence_type: type
    mapping_type: type

    def __init__(self, sequence_type: type = list, mapping_type: type = dict):
        self.sequence_type = sequence_type
        self.mapping_type = mapping_type

    def __repr__(self) -> str:
        return (
            f"DefaultContainerFactory(sequence_type={self.sequence_type.__qualname__}, "
            f"mapping_type={self.mapping_type.__qualname__})"
        )

    def construct(self, keys: Sequence[Any]) -> Any:
        key = keys[-1]
        if isinstance(key, int) and not isinstance(key, bool):
            return self.sequence_type()
        return self.mapping_type()


DEFAULT_CONTAINER_FACTORY = DefaultContainerFactory()


class FactoryLens(Lens):
    """
    A `Lens` constructing missing containers through a `ContainerFactory`.
    A `Step` key still constructs its own container.
    """

    __slots__ = ("_container_factory",)

    _container_factory: ContainerFactory

    def __init__(self, *keys: Any, container_factory: ContainerFactory):
        super().__init__(*keys)
        self._container_factory = container_factory

    def _with_keys(self, keys: tuple[Any, ...]) -> Lens:
        return FactoryLens(*keys, container_factory=self._container_factory)

    def _construct_for(self, depth: int) -> Any:
        if isinstance(self.keys[depth], Step):
            return super()._construct_for(depth)
        return self._container_factory.construct(self.keys[: depth + 1])


class LensFactory:
    """
    Makes lenses sharing one `ContainerFactory`.
    """

    __slots__ = ("container_factory",)

    container_factory: ContainerFactory

    def __init__(self, container_factory: ContainerFactory = DEFAULT_CONTAINER_FACTORY):
        self.container_factory = container_factory

    def lens(self, *keys: Any) -> FactoryLens:
        return FactoryLens(*keys, container_factory=self.container_factory)
