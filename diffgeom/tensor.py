"""
The Tensor type and its algebra.

A Tensor is anchored at a Point, carries a Variance (its rank and the kind of
every index slot) and owns a dense float64 array of dimension ** rank
components. Components are stored row-major over the slots:

    flat = Σ_k index_k · d^(rank-1-k)        (last index fastest)

This flattening is the single source of truth for every operation below.
Contraction and the fused inner product work directly on flat offsets with
precomputed strides instead of rebuilding multi-indices term by term.

Operations and their variance bookkeeping:
- a + b, a - b           same point, same variance
- a * s, s * a, a / s    any variance, s a real number
- a * b (multiply)       variance a.variance.concat(b.variance)
- a.trace(lo, hi)        variance a.variance.contract(lo, hi)
- a.inner_product(b, lo, hi) == a.multiply(b).trace(lo, hi)
- m.transpose()          rank 2, slots swapped
- m.inverse()            rank 2, every slot flipped, None if singular
- a.convert(target)      same variance, new coordinate system

All checks run before any component is touched. Misuse raises a TensorError
subclass; a singular matrix or Jacobian is reported as None.
"""
from __future__ import annotations

import numbers
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from .config import DEFAULT_NUMERICS
from .coordinates import CoordinateSystem, Point
from .core import (
    Variance,
    SCALAR,
    VECTOR,
    COVECTOR,
    MATRIX,
    TWO_FORM,
    INV_TWO_FORM,
    ShapeMismatch,
    IndexOutOfBounds,
    IncompatiblePoints,
    VarianceMismatch,
    InvalidRank,
)
from .iteration import CoordIterator, flat_offset
from . import linalg
from .utils.logging import get_logger

logger = get_logger(__name__)

IndexKey = Union[int, Tuple[int, ...]]


# =============================================================================
# Stride helpers
# =============================================================================

def _trace_offsets(coords: np.ndarray, rank: int, lo: int, hi: int, dim: int):
    """
    Map flat offsets of a rank-(rank-2) tensor to offsets in a rank-``rank``
    tensor with 0 inserted at slots lo and hi, plus the step that advances
    both inserted slots by one.
    """
    modl = dim ** (rank - 2 - lo)
    modh = dim ** (rank - 1 - hi)
    head = coords // modl
    rest = coords % modl
    middle = rest // modh
    tail = rest % modh
    offsets = head * modl * dim * dim + middle * modh * dim + tail
    return offsets, modl * dim + modh


def _slot_offsets(coords: np.ndarray, rank: int, slot: int, dim: int):
    """Same as _trace_offsets for a single inserted slot."""
    stride = dim ** (rank - 1 - slot)
    offsets = (coords // stride) * stride * dim + coords % stride
    return offsets, stride


def _is_scalar(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


# =============================================================================
# Tensor
# =============================================================================

class Tensor:
    """
    Dense tensor anchored at a point.

    Build one with Tensor.zero / Tensor.from_components or the named
    constructors (vector, covector, matrix, two_form, ...). Components are
    read and written with a multi-index tuple, ``t[i, j]``, or a raw flat
    offset, ``t[k]``.

    Tensors are mutable values: in-place operators and item assignment
    change the receiver only. They are therefore unhashable.
    """

    __slots__ = ("_point", "_variance", "_x")
    __hash__ = None  # type: ignore[assignment]

    def __init__(
        self,
        point: Point,
        variance: Variance,
        components: Optional[Union[Sequence[float], np.ndarray]] = None,
    ):
        if not isinstance(point, Point):
            raise TypeError(f"Tensor point must be a Point, got {type(point).__name__}")
        if not isinstance(variance, Variance):
            raise TypeError(f"Tensor variance must be a Variance, got {type(variance).__name__}")
        self._point = point
        self._variance = variance

        size = point.dimension ** variance.rank
        if components is None:
            self._x = np.zeros(size, dtype=np.float64)
        else:
            x = np.array(components, dtype=np.float64, order="C", copy=True).reshape(-1)
            if x.size != size:
                raise ShapeMismatch(
                    f"A rank-{variance.rank} tensor in {point.dimension} dimensions has "
                    f"{size} components, got {x.size}"
                )
            self._x = x

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def zero(cls, point: Point, variance: Variance = SCALAR) -> 'Tensor':
        """All components 0."""
        return cls(point, variance)

    @classmethod
    def from_components(
        cls,
        point: Point,
        variance: Variance,
        flat: Union[Sequence[float], np.ndarray],
    ) -> 'Tensor':
        """
        Tensor with the given components in canonical order:
        (0,...,0,0), (0,...,0,1), ..., (0,...,1,0), ...

        Raises:
            ShapeMismatch: if len(flat) != dimension ** rank
        """
        return cls(point, variance, flat)

    @classmethod
    def scalar(cls, point: Point, value: float = 0.0) -> 'Tensor':
        return cls(point, SCALAR, [value])

    @classmethod
    def vector(cls, point: Point, components=None) -> 'Tensor':
        return cls(point, VECTOR, components)

    @classmethod
    def covector(cls, point: Point, components=None) -> 'Tensor':
        return cls(point, COVECTOR, components)

    @classmethod
    def matrix(cls, point: Point, components=None) -> 'Tensor':
        """Rank-2 mixed tensor (contravariant, covariant): a linear map."""
        return cls(point, MATRIX, components)

    @classmethod
    def two_form(cls, point: Point, components=None) -> 'Tensor':
        """Rank-2 doubly covariant tensor, e.g. a metric g_ij."""
        return cls(point, TWO_FORM, components)

    @classmethod
    def inv_two_form(cls, point: Point, components=None) -> 'Tensor':
        """Rank-2 doubly contravariant tensor, e.g. an inverse metric g^ij."""
        return cls(point, INV_TWO_FORM, components)

    @classmethod
    def unit(cls, point: Point, variance: Variance = MATRIX) -> 'Tensor':
        """Kronecker delta: 1 on the diagonal, 0 elsewhere."""
        if variance.rank != 2:
            raise InvalidRank(f"unit() needs a rank-2 variance, got rank {variance.rank}")
        return cls(point, variance, np.eye(point.dimension))

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def point(self) -> Point:
        return self._point

    def set_point(self, point: Point) -> None:
        """Re-anchor the tensor at another point of the same system."""
        if not isinstance(point, Point) or point.system is not self._point.system:
            raise IncompatiblePoints(
                f"Cannot move a {self.system.__name__} tensor to {point!r}"
            )
        self._point = point

    @property
    def system(self) -> type:
        return self._point.system

    @property
    def variance(self) -> Variance:
        return self._variance

    @property
    def rank(self) -> int:
        return self._variance.rank

    @property
    def dimension(self) -> int:
        return self._point.dimension

    @property
    def num_coords(self) -> int:
        return self._x.size

    @property
    def components(self) -> np.ndarray:
        """Read-only flat view of the components in canonical order."""
        view = self._x.view()
        view.flags.writeable = False
        return view

    def to_array(self) -> np.ndarray:
        """Copy of the components shaped (dimension,) * rank."""
        return self._x.reshape((self.dimension,) * self.rank).copy()

    def copy(self) -> 'Tensor':
        return Tensor(self._point, self._variance, self._x)

    def iter_coords(self) -> CoordIterator:
        """All multi-indices of this tensor, in storage order."""
        return CoordIterator(self.rank, self.dimension)

    @property
    def value(self) -> float:
        """The single component of a rank-0 tensor."""
        if self.rank != 0:
            raise InvalidRank(f"Only rank-0 tensors have a scalar value, this one has rank {self.rank}")
        return float(self._x[0])

    def __float__(self) -> float:
        return self.value

    # -------------------------------------------------------------------------
    # Indexing
    # -------------------------------------------------------------------------

    @staticmethod
    def _check_integer(idx) -> int:
        if isinstance(idx, bool) or not isinstance(idx, numbers.Integral):
            raise TypeError(f"Tensor indices must be integers, got {idx!r}")
        return int(idx)

    def _offset(self, key: IndexKey) -> int:
        dim = self.dimension
        if isinstance(key, (tuple, list)):
            if len(key) != self.rank:
                raise IndexOutOfBounds(
                    f"Rank-{self.rank} tensor indexed with {len(key)} indices: {tuple(key)}"
                )
            index = tuple(self._check_integer(idx) for idx in key)
            if not all(0 <= idx < dim for idx in index):
                raise IndexOutOfBounds(
                    f"Index {tuple(key)} out of range for dimension {dim}"
                )
            return flat_offset(index, dim)
        if isinstance(key, numbers.Integral):
            offset = self._check_integer(key)
            if not 0 <= offset < self._x.size:
                raise IndexOutOfBounds(
                    f"Flat offset {key} out of range for {self._x.size} components"
                )
            return offset
        raise TypeError(f"Tensor indices must be int or tuple of int, got {type(key).__name__}")

    def __getitem__(self, key: IndexKey) -> float:
        return float(self._x[self._offset(key)])

    def __setitem__(self, key: IndexKey, value: float) -> None:
        self._x[self._offset(key)] = value

    # -------------------------------------------------------------------------
    # Componentwise arithmetic
    # -------------------------------------------------------------------------

    def _check_same_point(self, other: 'Tensor') -> None:
        if not isinstance(other, Tensor):
            raise TypeError(f"Expected a Tensor, got {type(other).__name__}")
        if self._point != other._point:
            raise IncompatiblePoints(
                f"Tensors anchored at different points: {self._point!r} vs {other._point!r}"
            )

    def _check_compatible(self, other: 'Tensor') -> None:
        self._check_same_point(other)
        if self._variance != other._variance:
            raise VarianceMismatch(
                f"Tensors have different variance: {self._variance!r} vs {other._variance!r}"
            )

    def add(self, other: 'Tensor') -> 'Tensor':
        result = self.copy()
        result += other
        return result

    def subtract(self, other: 'Tensor') -> 'Tensor':
        result = self.copy()
        result -= other
        return result

    def scale(self, factor: float) -> 'Tensor':
        result = self.copy()
        result *= factor
        return result

    def divide(self, divisor: float) -> 'Tensor':
        """
        Componentwise division. Dividing by exactly 0 yields ±inf/NaN
        components under IEEE semantics; it is the caller's responsibility.
        """
        result = self.copy()
        result /= divisor
        return result

    def equals(self, other: 'Tensor') -> bool:
        """Exact equality of point, variance and every component."""
        return (
            isinstance(other, Tensor)
            and self._point == other._point
            and self._variance == other._variance
            and bool(np.array_equal(self._x, other._x))
        )

    def __iadd__(self, other: 'Tensor') -> 'Tensor':
        self._check_compatible(other)
        self._x += other._x
        return self

    def __isub__(self, other: 'Tensor') -> 'Tensor':
        self._check_compatible(other)
        self._x -= other._x
        return self

    def __imul__(self, factor: float) -> 'Tensor':
        if not _is_scalar(factor):
            return NotImplemented
        self._x *= factor
        return self

    def __itruediv__(self, divisor: float) -> 'Tensor':
        if not _is_scalar(divisor):
            return NotImplemented
        with np.errstate(divide="ignore", invalid="ignore"):
            self._x /= divisor
        return self

    def __add__(self, other: 'Tensor') -> 'Tensor':
        if not isinstance(other, Tensor):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: 'Tensor') -> 'Tensor':
        if not isinstance(other, Tensor):
            return NotImplemented
        return self.subtract(other)

    def __mul__(self, other: Union[float, 'Tensor']) -> 'Tensor':
        if isinstance(other, Tensor):
            return self.multiply(other)
        if _is_scalar(other):
            return self.scale(other)
        return NotImplemented

    def __rmul__(self, other: float) -> 'Tensor':
        if _is_scalar(other):
            return self.scale(other)
        return NotImplemented

    def __truediv__(self, other: float) -> 'Tensor':
        if _is_scalar(other):
            return self.divide(other)
        return NotImplemented

    def __neg__(self) -> 'Tensor':
        return self.scale(-1.0)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tensor):
            return NotImplemented
        return self.equals(other)

    # -------------------------------------------------------------------------
    # Index algebra
    # -------------------------------------------------------------------------

    def multiply(self, other: 'Tensor') -> 'Tensor':
        """
        Tensor product: result[a + b] = self[a] * other[b].

        The result's slots are this tensor's slots followed by other's.
        """
        self._check_same_point(other)
        variance = self._variance.concat(other._variance)
        return Tensor(self._point, variance, np.outer(self._x, other._x))

    def trace(self, lo: int, hi: int) -> 'Tensor':
        """
        Contract slots lo < hi, which must be of opposite kinds.

        Each result component is Σ_i self[..., i (at lo), ..., i (at hi), ...].

        Raises:
            InvalidContraction: for same-kind or out-of-range slots
        """
        variance = self._variance.contract(lo, hi)
        dim = self.dimension
        coords = np.arange(dim ** variance.rank)
        offsets, step = _trace_offsets(coords, self.rank, lo, hi, dim)
        idx = offsets[:, None] + step * np.arange(dim)[None, :]
        return Tensor(self._point, variance, self._x[idx].sum(axis=1))

    def inner_product(self, other: 'Tensor', lo: int, hi: int) -> 'Tensor':
        """
        Product followed by contraction, in a single pass.

        Equal to ``self.multiply(other).trace(lo, hi)``; lo and hi are slot
        positions in the concatenated variance (self's slots first). Both may
        fall in self, both in other, or one in each.
        """
        self._check_same_point(other)
        variance = self._variance.concat(other._variance).contract(lo, hi)
        m, n = self.rank, other.rank
        dim = self.dimension
        coords = np.arange(dim ** variance.rank)

        if hi < m:
            split = dim ** n
            left, right = coords // split, coords % split
            off1, step1 = _trace_offsets(left, m, lo, hi, dim)
            off2, step2 = right, 0
        elif lo >= m:
            split = dim ** (n - 2)
            left, right = coords // split, coords % split
            off1, step1 = left, 0
            off2, step2 = _trace_offsets(right, n, lo - m, hi - m, dim)
        else:
            split = dim ** (n - 1)
            left, right = coords // split, coords % split
            off1, step1 = _slot_offsets(left, m, lo, dim)
            off2, step2 = _slot_offsets(right, n, hi - m, dim)

        i = np.arange(dim)[None, :]
        terms = self._x[off1[:, None] + step1 * i] * other._x[off2[:, None] + step2 * i]
        return Tensor(self._point, variance, terms.sum(axis=1))

    def transpose(self) -> 'Tensor':
        """result[i, j] = self[j, i]; the two slot kinds are swapped."""
        if self.rank != 2:
            raise InvalidRank(f"transpose() needs a rank-2 tensor, got rank {self.rank}")
        dim = self.dimension
        x = self._x.reshape(dim, dim).T
        return Tensor(self._point, self._variance.swap(0, 1), x)

    def inverse(self, pivot_floor: Optional[float] = None) -> Optional['Tensor']:
        """
        Matrix inverse by LU decomposition, or None if singular.

        The result's components are the ordinary inverse of the component
        matrix and every slot kind is flipped (a metric g_ij inverts to g^ij).
        """
        if self.rank != 2:
            raise InvalidRank(f"inverse() needs a rank-2 tensor, got rank {self.rank}")
        if pivot_floor is None:
            pivot_floor = DEFAULT_NUMERICS.pivot_floor
        inv = linalg.invert(self._x, self.dimension, pivot_floor)
        if inv is None:
            logger.debug("inverse(): singular matrix at %r", self._point)
            return None
        return Tensor(self._point, self._variance.flipped(), inv)

    def convert(self, target) -> Optional['Tensor']:
        """
        Re-express the tensor in another coordinate system.

        ``target`` is either a CoordinateSystem subclass (the registered
        conversion from this tensor's system is used) or a Conversion.
        Returns None when the conversion needs an inverse Jacobian and the
        Jacobian is singular at this point.
        """
        from .conversion import Conversion, find_conversion

        if isinstance(target, Conversion):
            conversion = target
        elif isinstance(target, type) and issubclass(target, CoordinateSystem):
            conversion = find_conversion(self.system, target)
        else:
            raise TypeError(
                f"convert() expects a CoordinateSystem subclass or a Conversion, got {target!r}"
            )
        return conversion.convert(self)

    # -------------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------------

    def __repr__(self) -> str:
        comps = np.array2string(self.to_array(), precision=6, separator=", ")
        return f"Tensor({self._point!r}, {self._variance!r}, {comps})"


__all__ = [
    'Tensor',
]
