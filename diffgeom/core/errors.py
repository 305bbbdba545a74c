"""
Exceptions for misuse of the tensor API.

Every error here signals a programming mistake (wrong shape, wrong point,
wrong index kinds) and is raised before any arithmetic runs. Each class
also derives from the closest builtin so callers can catch either.

Numerical outcomes such as a singular matrix are not errors: they are
reported as ``None`` by the operations that can produce them.
"""
from __future__ import annotations


class TensorError(Exception):
    """Base class for all tensor API misuse."""
    pass


class ShapeMismatch(TensorError, ValueError):
    """Component or coordinate count does not match dimension ** rank."""
    pass


class IndexOutOfBounds(TensorError, IndexError):
    """Multi-index or flat offset outside the tensor."""
    pass


class IncompatiblePoints(TensorError, ValueError):
    """Operands are anchored at different points or coordinate systems."""
    pass


class VarianceMismatch(TensorError, TypeError):
    """Operands have different index structures."""
    pass


class InvalidContraction(TensorError, TypeError):
    """Contraction over slots that are not a covariant/contravariant pair."""
    pass


class InvalidRank(TensorError, TypeError):
    """Operation defined only for another rank (e.g. transpose on rank != 2)."""
    pass


class ConversionNotFound(TensorError, LookupError):
    """No conversion is registered between two coordinate systems."""
    pass


__all__ = [
    'TensorError',
    'ShapeMismatch',
    'IndexOutOfBounds',
    'IncompatiblePoints',
    'VarianceMismatch',
    'InvalidContraction',
    'InvalidRank',
    'ConversionNotFound',
]
