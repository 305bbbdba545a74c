"""
Numerical tunables.

The engine has two knobs that affect results rather than correctness of
index bookkeeping:

- pivot_floor: value substituted for an exactly-zero pivot during LU
  decomposition. This keeps back substitution finite for matrices that are
  singular only through floating-point cancellation; the resulting inverse
  is then dominated by rounding and should not be trusted. It is a
  precision boundary, not a guarantee.
- default_step: finite-difference step h returned by
  CoordinateSystem.small() unless a coordinate system overrides it. The
  central-difference Jacobian has O(h²) truncation error, and rounding
  error grows like eps/h, so h should be scaled to the coordinates.
"""
from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class NumericsConfig:
    """
    Numerical parameters for the LU engine and numerical differentiation.

    Attributes:
        pivot_floor: Replacement for an exactly-zero pivot (default 1e-30)
        default_step: Default finite-difference step (default 0.01)
    """
    pivot_floor: float = 1.0e-30
    default_step: float = 0.01

    def __post_init__(self):
        if not self.pivot_floor > 0.0:
            raise ValueError(f"pivot_floor must be positive, got {self.pivot_floor}")
        if not self.default_step > 0.0:
            raise ValueError(f"default_step must be positive, got {self.default_step}")

    def with_overrides(self, **changes) -> 'NumericsConfig':
        return replace(self, **changes)


DEFAULT_NUMERICS = NumericsConfig()


__all__ = [
    'NumericsConfig',
    'DEFAULT_NUMERICS',
]
