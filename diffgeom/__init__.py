"""
diffgeom: dense tensor algebra on manifolds

This package represents tensors anchored at points of a manifold, with a
known rank and a known kind (covariant/contravariant) for every index slot,
and refuses to combine tensors whose points or index structures disagree.

Core Types (diffgeom.core):
    - IndexType: Contravariant/covariant slot classification
    - Variance: Slot descriptor with concat/contract/swap
    - TensorError and subclasses: API misuse

Coordinates (diffgeom.coordinates, diffgeom.conversion):
    - CoordinateSystem: Plug-in base class declaring a dimension
    - Point: Coordinates tagged with their system
    - Conversion: Plug-in map between systems, with central-difference
      and autodiff Jacobians

Tensors (diffgeom.tensor):
    - Tensor: Dense components with add/scale/multiply/trace/
      inner_product/transpose/inverse/convert
    - CoordIterator: Multi-indices in storage order

Linear Algebra (diffgeom.linalg):
    - lu_decompose, lu_substitute, solve, invert

Usage:
    from diffgeom import CoordinateSystem, Tensor, MATRIX

    class Plane(CoordinateSystem):
        dimension = 2

    m = Tensor.matrix(Plane.point(0.0, 0.0), [2.0, 1.0, 1.0, 1.0])
    m_inv = m.inverse()
"""

__version__ = "0.3.0"

# =============================================================================
# Core Types (diffgeom.core)
# =============================================================================
from .core import (
    IndexType,
    Variance,
    CONTRA,
    CO,
    SCALAR,
    VECTOR,
    COVECTOR,
    MATRIX,
    TWO_FORM,
    INV_TWO_FORM,
    TensorError,
    ShapeMismatch,
    IndexOutOfBounds,
    IncompatiblePoints,
    VarianceMismatch,
    InvalidContraction,
    InvalidRank,
    ConversionNotFound,
)

# =============================================================================
# Configuration
# =============================================================================
from .config import NumericsConfig, DEFAULT_NUMERICS

# =============================================================================
# Coordinates and Tensors
# =============================================================================
from .coordinates import CoordinateSystem, Point
from .iteration import CoordIterator, flat_offset, multi_index
from .tensor import Tensor
from .conversion import Conversion, find_conversion, registered_conversions

# =============================================================================
# Linear Algebra
# =============================================================================
from .linalg import lu_decompose, lu_substitute, solve, invert


__all__ = [
    "__version__",
    # Core
    "IndexType",
    "Variance",
    "CONTRA",
    "CO",
    "SCALAR",
    "VECTOR",
    "COVECTOR",
    "MATRIX",
    "TWO_FORM",
    "INV_TWO_FORM",
    # Errors
    "TensorError",
    "ShapeMismatch",
    "IndexOutOfBounds",
    "IncompatiblePoints",
    "VarianceMismatch",
    "InvalidContraction",
    "InvalidRank",
    "ConversionNotFound",
    # Configuration
    "NumericsConfig",
    "DEFAULT_NUMERICS",
    # Coordinates
    "CoordinateSystem",
    "Point",
    "Conversion",
    "find_conversion",
    "registered_conversions",
    # Tensors
    "Tensor",
    "CoordIterator",
    "flat_offset",
    "multi_index",
    # Linear algebra
    "lu_decompose",
    "lu_substitute",
    "solve",
    "invert",
]
