"""
Pytest configuration and shared fixtures for tensor algebra tests.

Provides JAX-aware fixtures (seeded PRNG keys, float64 mode) and
parametrised coordinate spaces of several dimensions.
"""
import pytest
import jax

from diffgeom import CoordinateSystem

# Ensure reproducible, double-precision tests across runs
jax.config.update("jax_enable_x64", True)


@pytest.fixture(scope="session")
def base_key():
    """Root PRNG key for all tests."""
    return jax.random.PRNGKey(42)


@pytest.fixture
def key(base_key, request):
    """Per-test PRNG key derived from test name for reproducibility."""
    test_id = hash(request.node.nodeid) % (2**31)
    return jax.random.fold_in(base_key, test_id)


@pytest.fixture(params=[1, 2, 3, 4])
def dim(request):
    """Parametrized dimension for testing across scales."""
    return request.param


@pytest.fixture
def space(dim):
    """A coordinate system of dimension ``dim``."""
    return type(f"Space{dim}D", (CoordinateSystem,), {"dimension": dim})


@pytest.fixture
def point(space):
    """A generic point of ``space``."""
    return space.point(*[0.5 + i for i in range(space.dimension)])


@pytest.fixture
def tolerance():
    """Tolerance for results that went through an LU solve."""
    return 1e-9


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "invariant: mathematical invariant verification")
    config.addinivalue_line("markers", "conversion: coordinate conversion tests")
