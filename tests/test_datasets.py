"""Tests for the bundled reference datasets."""

import numpy as np

from pymixgam.datasets import (
    sleepstudy, engine, sleepstudy_source, engine_source,
    SLEEPSTUDY_SUBJECTS, ENGINE_KNOTS,
)


class TestSleepstudy:

    def test_shape(self):
        assert sleepstudy.shape == (180, 3)

    def test_design(self):
        days = sleepstudy[:, 1]
        np.testing.assert_array_equal(np.unique(days), np.arange(10))
        assert len(np.unique(sleepstudy[:, 2])) == 18
        np.testing.assert_array_equal(sleepstudy[:10, 2], SLEEPSTUDY_SUBJECTS[0])

    def test_first_subject(self):
        np.testing.assert_allclose(sleepstudy[0, 0], 249.5600)
        np.testing.assert_allclose(sleepstudy[9, 0], 466.3535)

    def test_source(self):
        ds = sleepstudy_source()
        assert set(ds.keys()) == {'Reaction', 'Days', 'Subject'}
        assert ds.n_observations == 180


class TestEngine:

    def test_shape(self):
        assert engine.shape == (19, 2)

    def test_source(self):
        ds = engine_source()
        assert ds.n_observations == 19
        assert np.min(ds['size']) == 1.42
        assert np.max(ds['size']) == 2.98

    def test_knots(self):
        np.testing.assert_allclose(ENGINE_KNOTS, [1 / 8, 2 / 8, 3 / 8, 4 / 8, 5 / 8, 6 / 8, 7 / 8])
