"""
Dense LU engine.

Gaussian elimination with scaled partial pivoting (Crout ordering) on a flat,
row-major n×n buffer. This is the solver behind Tensor.inverse() and, through
it, behind the inverse Jacobian used by coordinate conversion.

Contract:
- lu_decompose() takes a buffer the caller owns exclusively and overwrites
  it with the packed L (unit diagonal, below) and U (on and above the
  diagonal) factors of the row-permuted matrix.
- A row whose largest absolute entry is exactly 0 makes the matrix singular;
  this is reported by returning None, never by raising.
- A pivot that comes out exactly 0 after elimination is replaced by
  ``pivot_floor`` (see diffgeom.config). The factorisation then succeeds but
  the inverse is dominated by rounding; this is a known precision boundary.

Pivot selection scales each candidate by the reciprocal of its row's largest
entry, so that a row multiplied through by a large constant does not win the
pivot on magnitude alone.
"""
from __future__ import annotations

from typing import Optional

import numpy as np

from .config import DEFAULT_NUMERICS
from .utils.logging import get_logger

logger = get_logger(__name__)


def _square_view(buf: np.ndarray, n: int) -> np.ndarray:
    if not isinstance(buf, np.ndarray) or buf.dtype != np.float64:
        raise TypeError("LU buffer must be a float64 numpy array")
    if buf.size != n * n:
        raise ValueError(f"LU buffer has {buf.size} entries, expected {n * n}")
    view = buf.reshape(n, n)
    if not np.shares_memory(view, buf):
        raise ValueError("LU buffer must be contiguous so it can be updated in place")
    return view


def lu_decompose(
    buf: np.ndarray,
    n: int,
    pivot_floor: float = DEFAULT_NUMERICS.pivot_floor,
) -> Optional[np.ndarray]:
    """
    Decompose a row-major n×n matrix in place.

    Args:
        buf: Flat (n*n,) or (n, n) float64 buffer, overwritten with the factors
        n: Matrix order
        pivot_floor: Replacement for an exactly-zero pivot

    Returns:
        Permutation vector ``perm`` (row j was exchanged with row perm[j] at
        step j), or None if the matrix is singular.
    """
    a = _square_view(buf, n)
    perm = np.zeros(n, dtype=np.intp)

    row_max = np.max(np.abs(a), axis=1) if n else np.zeros(0)
    for i in range(n):
        if row_max[i] == 0.0:
            logger.debug("LU: row %d is identically zero, matrix is singular", i)
            return None
    row_scale = 1.0 / row_max

    for j in range(n):
        # U entries above the diagonal in column j
        for i in range(j):
            a[i, j] -= a[i, :i] @ a[:i, j]

        # L entries (not yet divided by the pivot) on and below the diagonal
        best = 0.0
        pivot_row = j
        for i in range(j, n):
            a[i, j] -= a[i, :j] @ a[:j, j]
            score = abs(a[i, j]) * row_scale[i]
            if score > best:
                best = score
                pivot_row = i

        if pivot_row != j:
            a[[j, pivot_row], :] = a[[pivot_row, j], :]
            row_scale[pivot_row] = row_scale[j]
        perm[j] = pivot_row

        if a[j, j] == 0.0:
            logger.debug("LU: zero pivot in column %d replaced by %g", j, pivot_floor)
            a[j, j] = pivot_floor

        if j != n - 1:
            a[j + 1:, j] /= a[j, j]

    return perm


def lu_substitute(
    lu: np.ndarray,
    perm: np.ndarray,
    b: np.ndarray,
    n: int,
) -> np.ndarray:
    """
    Solve A x = b given the packed factors from lu_decompose().

    Returns a new array; ``b`` is not modified.
    """
    a = np.asarray(lu, dtype=float).reshape(n, n)
    x = np.array(b, dtype=float, copy=True).reshape(n)

    # forward substitution with L, applying the row exchanges as we go
    for i in range(n):
        p = perm[i]
        tmp = x[p]
        x[p] = x[i]
        x[i] = tmp - a[i, :i] @ x[:i]

    # back substitution with U
    for i in range(n - 1, -1, -1):
        x[i] = (x[i] - a[i, i + 1:] @ x[i + 1:]) / a[i, i]

    return x


def solve(
    matrix: np.ndarray,
    b: np.ndarray,
    n: int,
    pivot_floor: float = DEFAULT_NUMERICS.pivot_floor,
) -> Optional[np.ndarray]:
    """Solve A x = b on a private copy of A. None if A is singular."""
    lu = np.array(matrix, dtype=np.float64, copy=True).reshape(n * n)
    perm = lu_decompose(lu, n, pivot_floor)
    if perm is None:
        return None
    return lu_substitute(lu, perm, b, n)


def invert(
    matrix: np.ndarray,
    n: int,
    pivot_floor: float = DEFAULT_NUMERICS.pivot_floor,
) -> Optional[np.ndarray]:
    """
    Inverse of a row-major n×n matrix, as a flat (n*n,) row-major array.

    The decomposition runs on a private copy; column k of the inverse is the
    solution of A x = e_k. Returns None if A is singular.
    """
    lu = np.array(matrix, dtype=np.float64, copy=True).reshape(n * n)
    perm = lu_decompose(lu, n, pivot_floor)
    if perm is None:
        return None

    result = np.zeros((n, n), dtype=np.float64)
    for k in range(n):
        e_k = np.zeros(n, dtype=np.float64)
        e_k[k] = 1.0
        result[:, k] = lu_substitute(lu, perm, e_k, n)
    return result.reshape(n * n)


__all__ = [
    'lu_decompose',
    'lu_substitute',
    'solve',
    'invert',
]
