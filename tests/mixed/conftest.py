"""
Shared fixtures for mixed model tests.

Provides the sleepstudy data and synthetic random intercept datasets
with known structure.
"""

import numpy as np
import pytest

from pymixgam.datasets import sleepstudy_source
from pymixgam.mixed import indicator_matrix


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(2024)


@pytest.fixture(scope='module')
def sleepstudy():
    """Reaction ~ Days with one-hot Subject indicators.

    18 subjects, 10 days each = 180 observations.
    """
    ds = sleepstudy_source()
    y = ds['Reaction']
    X = np.column_stack([np.ones(len(y)), ds['Days']])
    Z, levels = indicator_matrix(ds['Subject'])
    return {'y': y, 'X': X, 'Z': Z, 'levels': levels}


@pytest.fixture
def balanced_intercept(rng):
    """Balanced random intercept data: y ~ x + (1 | group).

    12 groups × 8 observations. Every group sees the same covariate
    values, so least squares before and after decorrelation coincide.
    """
    n_groups = 12
    n_per = 8
    n = n_groups * n_per

    beta = np.array([5.0, 2.0])
    tau = 3.0
    sigma = 1.0

    x_pattern = np.linspace(-1.0, 1.0, n_per)
    x = np.tile(x_pattern, n_groups)
    group = np.repeat(np.arange(n_groups), n_per)
    g = rng.normal(0, tau, n_groups)

    X = np.column_stack([np.ones(n), x])
    y = X @ beta + g[group] + rng.normal(0, sigma, n)
    Z, _ = indicator_matrix(group)

    return {
        'y': y, 'X': X, 'Z': Z, 'group': group, 'g': g,
        'beta': beta, 'tau': tau, 'sigma': sigma,
        'n_groups': n_groups, 'n_per': n_per,
    }


@pytest.fixture
def unbalanced_intercept(rng):
    """Random intercept data with unequal group sizes and a free covariate."""
    sizes = np.array([3, 5, 9, 4, 12, 6, 7, 2])
    group = np.repeat(np.arange(len(sizes)), sizes)
    n = group.shape[0]
    x = rng.normal(0, 1, n)
    g = rng.normal(0, 2.0, len(sizes))
    X = np.column_stack([np.ones(n), x])
    y = 1.0 + 0.5 * x + g[group] + rng.normal(0, 1.0, n)
    Z, _ = indicator_matrix(group)
    return {'y': y, 'X': X, 'Z': Z, 'group': group}
