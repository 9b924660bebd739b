"""
Shared fixtures for spline tests.
"""

import numpy as np
import pytest

from pymixgam.datasets import engine_source, ENGINE_KNOTS
from pymixgam.spline import scale_unit_interval


@pytest.fixture(scope='module')
def engine():
    """Engine wear data with size scaled to [0, 1] and 7 interior knots."""
    ds = engine_source()
    return {
        'x': scale_unit_interval(ds['size']),
        'y': np.asarray(ds['wear']),
        'knots': ENGINE_KNOTS,
    }


@pytest.fixture
def smooth_curve():
    """Noisy sine on [0, 1], 60 points."""
    rng = np.random.default_rng(7)
    x = np.sort(rng.uniform(0, 1, 60))
    y = np.sin(2 * np.pi * x) + rng.normal(0, 0.2, 60)
    return {'x': x, 'y': y, 'knots': np.linspace(0.1, 0.9, 9)}
