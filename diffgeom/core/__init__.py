"""
Core type system for tensors.

This module provides:
- IndexType: Contravariant/covariant slot classification
- Variance: Ordered slot descriptor with concat/contract/swap
- Common variances: SCALAR, VECTOR, COVECTOR, MATRIX, TWO_FORM, INV_TWO_FORM
- The TensorError exception hierarchy
"""
from .types import (
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
)
from .errors import (
    TensorError,
    ShapeMismatch,
    IndexOutOfBounds,
    IncompatiblePoints,
    VarianceMismatch,
    InvalidContraction,
    InvalidRank,
    ConversionNotFound,
)

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
    'TensorError',
    'ShapeMismatch',
    'IndexOutOfBounds',
    'IncompatiblePoints',
    'VarianceMismatch',
    'InvalidContraction',
    'InvalidRank',
    'ConversionNotFound',
]
