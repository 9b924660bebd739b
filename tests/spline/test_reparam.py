"""Tests for the fixed/random eigen-reparameterization of the spline basis."""

import numpy as np
import pytest

from pymixgam.core.exceptions import ConfigurationError, DimensionError
from pymixgam.spline import build_spline_design, build_penalty, split_fixed_random


@pytest.mark.parametrize("knots", [
    np.arange(1, 8) / 8.0,
    np.linspace(0.1, 0.9, 4),
    np.array([0.3]),
    np.linspace(0.05, 0.95, 15),
])
def test_null_space_has_dimension_two(knots):
    x = np.linspace(0, 1, 30)
    basis = split_fixed_random(build_penalty(knots), build_spline_design(x, knots))
    assert basis.X_F.shape == (30, 2)
    assert basis.Z.shape == (30, len(knots))
    assert np.all(basis.D_pos > 0)
    assert np.all(np.diff(basis.D_pos) >= 0)


class TestReparameterization:

    @pytest.fixture
    def setup(self):
        knots = np.arange(1, 8) / 8.0
        x = np.linspace(0, 1, 25)
        X = build_spline_design(x, knots)
        S = build_penalty(knots)
        return X, S, split_fixed_random(S, X)

    def test_null_space_spans_lines(self, setup):
        X, S, basis = setup
        np.testing.assert_allclose(S @ basis.U_F, 0.0, atol=1e-14)
        # U_F lies in span(e_1, e_2): intercept and slope coefficients
        np.testing.assert_allclose(basis.U_F[2:, :], 0.0, atol=1e-12)

    def test_random_design_scaling(self, setup):
        X, S, basis = setup
        np.testing.assert_allclose(basis.X_R, X @ basis.U_R)
        np.testing.assert_allclose(basis.Z * np.sqrt(basis.D_pos), basis.X_R)

    def test_linear_predictor_preserved(self, setup, rng):
        X, S, basis = setup
        beta_F = rng.normal(size=2)
        g = rng.normal(size=basis.Z.shape[1])
        beta = basis.to_basis_coefficients(beta_F, g)
        np.testing.assert_allclose(
            X @ beta, basis.X_F @ beta_F + basis.Z @ g, rtol=1e-10, atol=1e-12
        )

    def test_penalty_becomes_ridge(self, setup, rng):
        X, S, basis = setup
        g = rng.normal(size=basis.Z.shape[1])
        beta = basis.to_basis_coefficients(rng.normal(size=2), g)
        assert beta @ S @ beta == pytest.approx(g @ g, rel=1e-8)


class TestErrors:

    def test_wrong_null_dimension(self):
        knots = np.arange(1, 8) / 8.0
        X = build_spline_design(np.linspace(0, 1, 10), knots)
        with pytest.raises(ConfigurationError) as exc:
            split_fixed_random(build_penalty(knots), X, null_dim=3)
        assert exc.value.expected == 3
        assert exc.value.actual == 2

    def test_knots_at_both_endpoints(self):
        """rk(0, .) and rk(1, .) coincide, so the null space gains a dimension."""
        knots = np.linspace(0.0, 1.0, 6)
        X = build_spline_design(np.linspace(0, 1, 20), knots)
        with pytest.raises(ConfigurationError) as exc:
            split_fixed_random(build_penalty(knots), X)
        assert exc.value.actual == 3

    def test_indefinite_penalty(self):
        S = np.diag([0.0, 0.0, -1.0, 1.0])
        with pytest.raises(ConfigurationError, match="positive semi-definite"):
            split_fixed_random(S, np.ones((5, 4)))

    def test_non_conforming_design(self):
        S = build_penalty(np.array([0.25, 0.75]))
        with pytest.raises(DimensionError):
            split_fixed_random(S, np.ones((5, 3)))
