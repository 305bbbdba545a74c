"""
Coordinate systems and points.

A coordinate system is a plug-in: a subclass of CoordinateSystem that
declares its dimension and, optionally, how small a finite-difference step
should be around a given point. The class itself is the system's identity;
it is never instantiated.

    class Polar(CoordinateSystem):
        dimension = 2

        @classmethod
        def small(cls, point):
            return 1e-3 * max(1.0, abs(point[0]))

A Point is a tuple of coordinates tagged with its system. Every tensor owns
one, and two tensors can only be combined when their points are equal.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar, Iterator, Sequence, Tuple, Type

import numpy as np

from .config import DEFAULT_NUMERICS
from .core.errors import ShapeMismatch


class CoordinateSystem:
    """
    Base class marking a class as a coordinate system.

    Subclasses must set ``dimension`` to a positive int.
    """
    dimension: ClassVar[int]

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        dim = getattr(cls, "dimension", None)
        if not isinstance(dim, int) or isinstance(dim, bool) or dim < 1:
            raise TypeError(
                f"{cls.__name__} must declare a positive integer 'dimension', got {dim!r}"
            )

    def __new__(cls, *args, **kwargs):
        raise TypeError(f"{cls.__name__} is a coordinate system tag and is not instantiated")

    @classmethod
    def small(cls, point: 'Point') -> float:
        """
        Finite-difference step to use around ``point``.

        What counts as small may depend on the point; the default ignores it.
        """
        return DEFAULT_NUMERICS.default_step

    @classmethod
    def point(cls, *coords: float) -> 'Point':
        """Shorthand for Point(cls, coords)."""
        return Point(cls, coords)


@dataclass(frozen=True)
class Point:
    """
    A location on the manifold, expressed in a specific coordinate system.

    Attributes:
        system: The CoordinateSystem subclass the coordinates belong to
        coords: The coordinates (len == system.dimension)
    """
    system: Type[CoordinateSystem]
    coords: Tuple[float, ...]

    def __post_init__(self):
        if not (isinstance(self.system, type) and issubclass(self.system, CoordinateSystem)):
            raise TypeError(f"Point system must be a CoordinateSystem subclass, got {self.system!r}")
        coords = tuple(float(c) for c in np.asarray(self.coords, dtype=float).reshape(-1))
        if len(coords) != self.system.dimension:
            raise ShapeMismatch(
                f"{self.system.__name__} points have {self.system.dimension} coordinates, "
                f"got {len(coords)}"
            )
        object.__setattr__(self, "coords", coords)

    @classmethod
    def from_array(cls, system: Type[CoordinateSystem], coords: Sequence[float]) -> 'Point':
        """Point from an array of coordinates, e.g. a conversion result."""
        return cls(system, tuple(coords))

    @property
    def dimension(self) -> int:
        return self.system.dimension

    def __getitem__(self, axis: int) -> float:
        return self.coords[axis]

    def __len__(self) -> int:
        return len(self.coords)

    def __iter__(self) -> Iterator[float]:
        return iter(self.coords)

    def as_array(self) -> np.ndarray:
        """Coordinates as a fresh float64 array."""
        return np.array(self.coords, dtype=np.float64)

    def perturbed(self, axis: int, delta: float) -> 'Point':
        """A new point with ``coords[axis]`` shifted by ``delta``."""
        coords = list(self.coords)
        coords[axis] += delta
        return Point(self.system, tuple(coords))

    def is_finite(self) -> bool:
        return all(math.isfinite(c) for c in self.coords)

    def __repr__(self) -> str:
        coords = ", ".join(f"{c:g}" for c in self.coords)
        return f"Point[{self.system.__name__}]({coords})"


__all__ = [
    'CoordinateSystem',
    'Point',
]
