"""
Coordinate conversion: Jacobians and tensor re-expression.

A Conversion is a plug-in describing how points of a ``source`` coordinate
system map to a ``target`` system. Given that map y(x), this module computes

    J[i, j]    = ∂y^i/∂x^j          central finite differences, O(h²)
    J⁻¹        = LU inverse of J    None at a coordinate singularity

and uses them to transform a tensor slot by slot:

    contravariant slot:  T'^i = J[i, j] T^j
    covariant slot:      T'_i = J⁻¹[j, i] T_j

Subclasses register themselves on definition, so ``tensor.convert(Polar)``
finds the right map:

    class CartesianToPolar(Conversion):
        source = Cartesian
        target = Polar

        def convert_coords(self, x):
            return jnp.array([jnp.hypot(x[0], x[1]), jnp.arctan2(x[1], x[0])])

``convert_coords`` receives a float64 array. Writing it against jax.numpy
also makes autodiff_jacobian() available. Importing this module turns on
``jax_enable_x64`` so jax.numpy plug-ins evaluate in float64; a plug-in that
still returns lower precision (x64 switched off again, or an explicit
float32 dtype) is logged at WARNING, since the O(h²) finite differences do
not survive it.
"""
from __future__ import annotations

import types
from functools import reduce
from typing import Callable, ClassVar, Dict, Optional, Tuple, Type

import jax
import jax.numpy as jnp
import numpy as np

from .coordinates import CoordinateSystem, Point
from .core import (
    IndexType,
    MATRIX,
    ShapeMismatch,
    IncompatiblePoints,
    ConversionNotFound,
)
from .tensor import Tensor
from .utils.logging import get_logger

# jax.numpy plug-ins must run in double precision
jax.config.update("jax_enable_x64", True)

logger = get_logger(__name__)

_REGISTRY: Dict[Tuple[type, type], Type['Conversion']] = {}


class Conversion:
    """
    Map between two coordinate systems of equal dimension.

    Subclasses set ``source`` and ``target`` and implement convert_coords().
    Pass ``register=False`` in the class statement to keep a subclass out of
    the registry used by find_conversion().
    """
    source: ClassVar[Type[CoordinateSystem]]
    target: ClassVar[Type[CoordinateSystem]]

    def __init_subclass__(cls, register: bool = True, **kwargs):
        super().__init_subclass__(**kwargs)
        source = getattr(cls, "source", None)
        target = getattr(cls, "target", None)
        if source is None or target is None:
            return
        for system in (source, target):
            if not (isinstance(system, type) and issubclass(system, CoordinateSystem)):
                raise TypeError(f"{cls.__name__}: {system!r} is not a CoordinateSystem")
        if source.dimension != target.dimension:
            raise ShapeMismatch(
                f"{cls.__name__}: cannot convert {source.__name__} "
                f"({source.dimension}D) to {target.__name__} ({target.dimension}D)"
            )
        if register:
            _REGISTRY[(source, target)] = cls

    @classmethod
    def from_function(
        cls,
        source: Type[CoordinateSystem],
        target: Type[CoordinateSystem],
        fn: Callable[[np.ndarray], np.ndarray],
        register: bool = True,
    ) -> 'Conversion':
        """Build (and optionally register) a conversion from a plain function."""
        name = getattr(fn, "__name__", f"{source.__name__}To{target.__name__}")
        namespace = {
            "source": source,
            "target": target,
            "convert_coords": lambda self, x: fn(x),
        }
        subclass = types.new_class(
            name, (cls,), {"register": register}, lambda ns: ns.update(namespace)
        )
        return subclass()

    @property
    def dimension(self) -> int:
        return self.source.dimension

    # -------------------------------------------------------------------------
    # Points
    # -------------------------------------------------------------------------

    def convert_coords(self, x: np.ndarray) -> np.ndarray:
        """Target coordinates of the source coordinates ``x``."""
        raise NotImplementedError

    def _as_float64(self, values, what: str) -> np.ndarray:
        arr = np.asarray(values)
        if np.issubdtype(arr.dtype, np.floating) and arr.dtype != np.float64:
            logger.warning(
                "%s: %s evaluated in %s, expected float64; is jax_enable_x64 off?",
                type(self).__name__, what, arr.dtype,
            )
        return arr.astype(np.float64)

    def _target_coords(self, point: Point) -> np.ndarray:
        y = self._as_float64(self.convert_coords(point.as_array()), "convert_coords").reshape(-1)
        if y.size != self.target.dimension:
            raise ShapeMismatch(
                f"{type(self).__name__}.convert_coords returned {y.size} coordinates, "
                f"expected {self.target.dimension}"
            )
        return y

    def _check_source(self, point: Point) -> None:
        if point.system is not self.source:
            raise IncompatiblePoints(
                f"{type(self).__name__} converts from {self.source.__name__}, "
                f"got a point in {point.system.__name__}"
            )

    def convert_point(self, point: Point) -> Point:
        self._check_source(point)
        return Point.from_array(self.target, self._target_coords(point))

    # -------------------------------------------------------------------------
    # Jacobians
    # -------------------------------------------------------------------------

    def jacobian(self, point: Point) -> Tensor:
        """
        Central-difference Jacobian ∂y^i/∂x^j at ``point``.

        The step is ``source.small(point)``. The result is a MATRIX anchored
        at the converted point. Truncation error is O(h²) and assumes the map
        is smooth around ``point``.
        """
        self._check_source(point)
        d = self.dimension
        h = self.source.small(point)
        logger.debug("jacobian %s at %r with h=%g", type(self).__name__, point, h)

        J = np.zeros((d, d), dtype=np.float64)
        for j in range(d):
            y_minus = self._target_coords(point.perturbed(j, -h))
            y_plus = self._target_coords(point.perturbed(j, h))
            J[:, j] = (y_plus - y_minus) / (2.0 * h)

        return Tensor(self.convert_point(point), MATRIX, J)

    def inv_jacobian(self, point: Point, pivot_floor: Optional[float] = None) -> Optional[Tensor]:
        """Inverse of jacobian(point); None where the Jacobian is singular."""
        return self.jacobian(point).inverse(pivot_floor)

    def autodiff_jacobian(self, point: Point) -> Tensor:
        """
        Exact first-order Jacobian via forward-mode autodiff (jax.jacfwd).

        Requires convert_coords to be written with jax.numpy.
        """
        self._check_source(point)
        fn = lambda x: jnp.asarray(self.convert_coords(x))
        J = jax.jacfwd(fn)(jnp.asarray(point.as_array()))
        return Tensor(self.convert_point(point), MATRIX, self._as_float64(J, "autodiff_jacobian"))

    # -------------------------------------------------------------------------
    # Tensors
    # -------------------------------------------------------------------------

    def convert(self, tensor: Tensor) -> Optional[Tensor]:
        """
        Re-express ``tensor`` in the target system at the converted point.

        For result index i and source index j every term is

            tensor[j] · Π_k F_k,   F_k = J[i_k, j_k]    (contravariant slot k)
                                   F_k = J⁻¹[j_k, i_k]  (covariant slot k)

        The variance is unchanged. Returns None if the Jacobian is singular
        at the tensor's point, for every variance.
        """
        point = tensor.point
        self._check_source(point)
        variance = tensor.variance

        J = self.jacobian(point)
        J_inv = J.inverse()
        if J_inv is None:
            logger.warning(
                "%s: Jacobian is singular at %r, cannot convert",
                type(self).__name__, point,
            )
            return None
        factors_by_kind = {
            IndexType.CONTRAVARIANT: J.to_array(),
            IndexType.COVARIANT: J_inv.to_array().T,
        }

        factors = [factors_by_kind[kind] for kind in variance]
        source = tensor.components
        result = Tensor.zero(J.point, variance)
        for index in result.iter_coords():
            rows = (factors[k][i] for k, i in enumerate(index))
            weights = reduce(np.multiply.outer, rows, np.ones(()))
            result[index] = weights.reshape(-1) @ source
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.source.__name__} -> {self.target.__name__})"


def find_conversion(
    source: Type[CoordinateSystem],
    target: Type[CoordinateSystem],
) -> Conversion:
    """
    Registered conversion from ``source`` to ``target``.

    Raises:
        ConversionNotFound: if none was registered
    """
    try:
        cls = _REGISTRY[(source, target)]
    except KeyError:
        raise ConversionNotFound(
            f"No conversion registered from {source.__name__} to {target.__name__}"
        ) from None
    return cls()


def registered_conversions() -> Dict[Tuple[type, type], Type[Conversion]]:
    return dict(_REGISTRY)


__all__ = [
    'Conversion',
    'find_conversion',
    'registered_conversions',
]
