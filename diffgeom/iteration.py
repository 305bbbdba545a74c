"""
Multi-index iteration in canonical (row-major) order.

For rank r and dimension d the sequence is

    (0, ..., 0, 0), (0, ..., 0, 1), ..., (0, ..., 0, d-1), (0, ..., 1, 0), ...

i.e. the last slot varies fastest, matching the flat storage order of
Tensor components. The n-th multi-index produced is the multi-index of
flat offset n.
"""
from __future__ import annotations

from typing import Iterator, Tuple

MultiIndex = Tuple[int, ...]


class CoordIterator:
    """
    Restartable iterable over all multi-indices of a given rank and dimension.

    Every call to iter() starts an independent cursor at the all-zero index.
    Rank 0 yields the empty index exactly once (the single scalar component).
    """

    __slots__ = ("rank", "dimension")

    def __init__(self, rank: int, dimension: int):
        if rank < 0:
            raise ValueError(f"rank must be non-negative, got {rank}")
        if dimension < 1:
            raise ValueError(f"dimension must be positive, got {dimension}")
        self.rank = rank
        self.dimension = dimension

    def __len__(self) -> int:
        return self.dimension ** self.rank

    def __iter__(self) -> Iterator[MultiIndex]:
        dim = self.dimension
        coord = [0] * self.rank
        yield tuple(coord)
        if not coord:
            return
        while True:
            i = len(coord) - 1
            # odometer increment, carrying into slower slots
            while True:
                coord[i] += 1
                if coord[i] < dim:
                    break
                coord[i] = 0
                if i == 0:
                    return
                i -= 1
            yield tuple(coord)

    def __repr__(self) -> str:
        return f"CoordIterator(rank={self.rank}, dimension={self.dimension})"


def flat_offset(index: MultiIndex, dimension: int) -> int:
    """Flat storage offset of a multi-index: Σ index_k · d^(rank-1-k)."""
    offset = 0
    for idx in index:
        offset = offset * dimension + idx
    return offset


def multi_index(offset: int, rank: int, dimension: int) -> MultiIndex:
    """Inverse of flat_offset."""
    digits = [0] * rank
    for k in range(rank - 1, -1, -1):
        offset, digits[k] = divmod(offset, dimension)
    return tuple(digits)


__all__ = [
    'MultiIndex',
    'CoordIterator',
    'flat_offset',
    'multi_index',
]
