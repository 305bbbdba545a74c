"""
Index variance descriptors for tensors.

This module defines the type taxonomy every tensor carries:

- IndexType: Whether a single index slot is covariant or contravariant
- Variance: The ordered sequence of index slots (its length is the rank)
- Common descriptors: SCALAR, VECTOR, COVECTOR, MATRIX, TWO_FORM, INV_TWO_FORM

A Variance is fixed once a tensor is built. The algebraic operations never
touch it directly; they derive the variance of their result from the
operands' descriptors (concat for a product, contract for a trace, swap for
a transpose), and those derivations are where illegal index combinations are
rejected, before any component is computed.
"""
from __future__ import annotations

from enum import Enum
from typing import Iterator, Tuple

from .errors import IndexOutOfBounds, InvalidContraction


class IndexType(Enum):
    """
    Transformation behaviour of a single index slot.

    Under a change of coordinates x -> y:
    - CONTRAVARIANT (upper index): picks up a factor ∂y^i/∂x^j
    - COVARIANT (lower index): picks up a factor ∂x^j/∂y^i

    A contravariant slot and a covariant slot can be summed over together
    (contraction); two slots of the same kind cannot.
    """
    CONTRAVARIANT = "contra"
    COVARIANT = "co"

    @property
    def other(self) -> 'IndexType':
        """The opposite kind of index."""
        if self is IndexType.CONTRAVARIANT:
            return IndexType.COVARIANT
        return IndexType.CONTRAVARIANT

    @property
    def symbol(self) -> str:
        return "^" if self is IndexType.CONTRAVARIANT else "_"


class Variance:
    """
    Ordered list of index kinds describing a tensor's slots.

    Instances are immutable and compare by value, so two tensors are
    combinable exactly when their Variance objects are equal.

    Example:
        >>> MATRIX = Variance(IndexType.CONTRAVARIANT, IndexType.COVARIANT)
        >>> MATRIX.rank
        2
        >>> MATRIX.concat(VECTOR)
        Variance(^, _, ^)
        >>> MATRIX.concat(VECTOR).contract(1, 2)
        Variance(^)
    """

    __slots__ = ("_kinds",)

    def __init__(self, *kinds: IndexType):
        for kind in kinds:
            if not isinstance(kind, IndexType):
                raise TypeError(f"Variance slots must be IndexType, got {kind!r}")
        self._kinds: Tuple[IndexType, ...] = tuple(kinds)

    @classmethod
    def of(cls, *kinds: IndexType) -> 'Variance':
        return cls(*kinds)

    @property
    def kinds(self) -> Tuple[IndexType, ...]:
        return self._kinds

    @property
    def rank(self) -> int:
        return len(self._kinds)

    def __len__(self) -> int:
        return len(self._kinds)

    def __iter__(self) -> Iterator[IndexType]:
        return iter(self._kinds)

    def __getitem__(self, slot: int) -> IndexType:
        return self._kinds[slot]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Variance):
            return NotImplemented
        return self._kinds == other._kinds

    def __hash__(self) -> int:
        return hash(self._kinds)

    def __repr__(self) -> str:
        return "Variance(" + ", ".join(k.symbol for k in self._kinds) + ")"

    # -------------------------------------------------------------------------
    # Index manipulation
    # -------------------------------------------------------------------------

    def concat(self, other: 'Variance') -> 'Variance':
        """Variance of a tensor product: this tensor's slots, then other's."""
        return Variance(*(self._kinds + other._kinds))

    def check_contractible(self, lo: int, hi: int) -> None:
        """
        Validate a contraction over slots lo and hi.

        Raises:
            InvalidContraction: if the slots are out of order, out of range
                or of the same kind.
        """
        if not (0 <= lo < hi < self.rank):
            raise InvalidContraction(
                f"Cannot contract slots ({lo}, {hi}) of a rank-{self.rank} tensor: "
                f"need 0 <= lo < hi < rank"
            )
        if self._kinds[lo] == self._kinds[hi]:
            raise InvalidContraction(
                f"Cannot contract slots {lo} and {hi}: both are "
                f"{self._kinds[lo].name.lower()}"
            )

    def contract(self, lo: int, hi: int) -> 'Variance':
        """Variance after summing over slots lo and hi (both removed)."""
        self.check_contractible(lo, hi)
        kinds = self._kinds
        return Variance(*(kinds[:lo] + kinds[lo + 1:hi] + kinds[hi + 1:]))

    def swap(self, i: int, j: int) -> 'Variance':
        """Variance with slots i and j exchanged."""
        if not (0 <= i < self.rank and 0 <= j < self.rank):
            raise IndexOutOfBounds(
                f"Cannot swap slots ({i}, {j}) of a rank-{self.rank} variance"
            )
        kinds = list(self._kinds)
        kinds[i], kinds[j] = kinds[j], kinds[i]
        return Variance(*kinds)

    def flipped(self) -> 'Variance':
        """Every slot replaced by the opposite kind."""
        return Variance(*(k.other for k in self._kinds))


# =============================================================================
# Common Variances
# =============================================================================

CONTRA = IndexType.CONTRAVARIANT
CO = IndexType.COVARIANT

SCALAR = Variance()
VECTOR = Variance(CONTRA)
COVECTOR = Variance(CO)
MATRIX = Variance(CONTRA, CO)
TWO_FORM = Variance(CO, CO)
INV_TWO_FORM = Variance(CONTRA, CONTRA)


__all__ = [
    'IndexType',
    'Variance',
    'CONTRA',
    'CO',
    'SCALAR',
    'VECTOR',
    'COVECTOR',
    'MATRIX',
    'TWO_FORM',
    'INV_TWO_FORM',
]
