"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def collinear_design(rng):
    """Design with perfect collinearity (should fail validation)."""
    n = 40
    x1 = rng.standard_normal(n)
    X = np.column_stack([np.ones(n), x1, 2.0 * x1])
    y = rng.standard_normal(n)
    return X, y
