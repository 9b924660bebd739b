"""Tests for maximum-likelihood fitting with fit_ml()."""

import numpy as np
import pytest

from pymixgam.core.compute.tolerances import REFERENCE
from pymixgam.core.exceptions import (
    ConfigurationError, ConvergenceError, DimensionError, NotPositiveDefiniteError,
)
from pymixgam.mixed import fit_ml, neg_log_lik
from pymixgam.mixed import solvers


class TestSleepstudy:
    """Reaction ~ Days + (1 | Subject), ML.

    Reference values from lme4::lmer(..., REML = FALSE).
    """

    @pytest.fixture(scope='class')
    def fit(self, sleepstudy):
        d = sleepstudy
        return fit_ml(
            d['y'], d['X'], d['Z'],
            coefficient_names=['(Intercept)', 'Days'],
            group_names=list(d['levels']),
        )

    def test_converged(self, fit):
        assert fit.converged
        assert fit.result.warnings == ()

    def test_fixed_effects(self, fit):
        np.testing.assert_allclose(fit.fixef['(Intercept)'], 251.4, rtol=REFERENCE.rtol)
        np.testing.assert_allclose(fit.fixef['Days'], 10.47, rtol=REFERENCE.rtol)

    def test_fixed_effects_equal_ols(self, fit, sleepstudy):
        """Balanced design: GLS and OLS estimates coincide."""
        d = sleepstudy
        b_ols, *_ = np.linalg.lstsq(d['X'], d['y'], rcond=None)
        np.testing.assert_allclose(fit.coefficients, b_ols, rtol=1e-8)

    def test_variance_components(self, fit):
        np.testing.assert_allclose(fit.tau, 36.01, rtol=REFERENCE.rtol)
        np.testing.assert_allclose(fit.sigma, 30.90, rtol=REFERENCE.rtol)

    def test_log_likelihood(self, fit, sleepstudy):
        d = sleepstudy
        assert fit.log_likelihood == pytest.approx(-897.04, abs=1.0)
        assert fit.log_likelihood == pytest.approx(
            -neg_log_lik(d['y'], d['X'], d['Z'], fit.theta)
        )

    def test_is_a_minimum(self, fit, sleepstudy):
        d = sleepstudy
        f0 = neg_log_lik(d['y'], d['X'], d['Z'], fit.theta)
        for step in ([1e-3, 0], [-1e-3, 0], [0, 1e-3], [0, -1e-3]):
            assert neg_log_lik(d['y'], d['X'], d['Z'], fit.theta + step) >= f0

    def test_ranef_keyed_by_subject(self, fit):
        assert set(fit.ranef) >= {'308', '309', '372'}
        assert len(fit.random_effects) == 18
        # random effects of a one-hot model sum to zero when X has an intercept
        assert abs(np.sum(fit.random_effects)) < 1e-6

    def test_fitted_plus_residuals(self, fit, sleepstudy):
        np.testing.assert_allclose(
            fit.fitted_values + fit.residuals, sleepstudy['y'], atol=1e-9
        )

    def test_timing_and_info(self, fit):
        assert fit.timing['total_seconds'] >= fit.timing['optimization']
        assert fit.result.info['optimizer'] == 'Nelder-Mead'
        assert fit.result.info['likelihood_form'] == 'cholesky'

    def test_summary(self, fit):
        s = fit.summary()
        assert 'Residual' in s
        assert 'Days' in s
        assert 'ML' in s
        assert 'MixedMLSolution' in repr(fit)

    def test_ranef_table_with_reference(self, fit):
        table = fit.ranef_table(fit.random_effects)
        assert 'Reference' in table
        assert len(table.splitlines()) == 19
        with pytest.raises(ValueError):
            fit.ranef_table(np.zeros(3))


class TestLikelihoodForms:

    def test_both_forms_reach_same_estimates(self, sleepstudy):
        d = sleepstudy
        chol = fit_ml(d['y'], d['X'], d['Z'], method='cholesky')
        mvn = fit_ml(d['y'], d['X'], d['Z'], method='mvn')
        np.testing.assert_allclose(mvn.tau, chol.tau, rtol=1e-5)
        np.testing.assert_allclose(mvn.sigma, chol.sigma, rtol=1e-5)
        np.testing.assert_allclose(mvn.log_likelihood, chol.log_likelihood, rtol=1e-8)
        np.testing.assert_allclose(mvn.coefficients, chol.coefficients, rtol=1e-8)

    def test_unknown_form(self, sleepstudy):
        d = sleepstudy
        with pytest.raises(ValueError, match="Unknown likelihood form"):
            fit_ml(d['y'], d['X'], d['Z'], method='reml')


class TestSynthetic:

    def test_recovers_truth(self, balanced_intercept):
        d = balanced_intercept
        fit = fit_ml(d['y'], d['X'], d['Z'])
        assert fit.converged
        np.testing.assert_allclose(fit.coefficients[1], d['beta'][1], atol=0.3)
        np.testing.assert_allclose(fit.sigma, d['sigma'], rtol=0.25)
        assert 1.0 < fit.tau < 6.0

    def test_unbalanced_converges(self, unbalanced_intercept):
        d = unbalanced_intercept
        fit = fit_ml(d['y'], d['X'], d['Z'], theta0=(0.5, 0.0))
        assert fit.tau > 0 and fit.sigma > 0

    def test_smoothing_parameter(self, balanced_intercept):
        d = balanced_intercept
        fit = fit_ml(d['y'], d['X'], d['Z'])
        assert fit.smoothing_parameter == pytest.approx(fit.sigma**2 / fit.tau**2)


class TestInvalidObjective:

    def test_numerical_error_becomes_unfavorable_value(self, monkeypatch, sleepstudy):
        """A failed factorization moves the simplex on instead of aborting."""
        calls = {'n': 0}
        real = solvers.LIKELIHOOD_FORMS['cholesky']

        def flaky(y, X, Z, theta):
            calls['n'] += 1
            if calls['n'] == 1:
                raise NotPositiveDefiniteError("synthetic", matrix_name='Sigma')
            return real(y, X, Z, theta)

        monkeypatch.setitem(solvers.LIKELIHOOD_FORMS, 'cholesky', flaky)
        d = sleepstudy
        fit = fit_ml(d['y'], d['X'], d['Z'])
        assert fit.result.info['n_invalid'] == 1
        assert fit.result.has_warning('not positive definite')
        np.testing.assert_allclose(fit.tau, 36.01, rtol=REFERENCE.rtol)


class TestConvergenceReporting:

    def test_non_convergence_warns(self, sleepstudy):
        d = sleepstudy
        with pytest.warns(RuntimeWarning, match="did not converge"):
            fit = fit_ml(d['y'], d['X'], d['Z'], max_iter=3)
        assert not fit.converged
        assert fit.result.has_warning('did not converge')
        assert 'WARNING' in fit.summary()

    def test_strict_raises(self, sleepstudy):
        d = sleepstudy
        with pytest.raises(ConvergenceError) as exc:
            fit_ml(d['y'], d['X'], d['Z'], max_iter=3, strict=True)
        assert exc.value.iterations <= 3


class TestSetupErrors:

    def test_rank_deficient_x(self, sleepstudy):
        d = sleepstudy
        X = np.column_stack([d['X'], 2.0 * d['X'][:, 1]])
        with pytest.raises(ConfigurationError, match="rank-deficient"):
            fit_ml(d['y'], X, d['Z'])

    def test_length_mismatch(self, sleepstudy):
        d = sleepstudy
        with pytest.raises(DimensionError):
            fit_ml(d['y'][:-1], d['X'], d['Z'])

    def test_bad_theta0(self, sleepstudy):
        d = sleepstudy
        with pytest.raises(ValueError, match="theta0"):
            fit_ml(d['y'], d['X'], d['Z'], theta0=(0.0,))

    def test_wrong_number_of_names(self, sleepstudy):
        d = sleepstudy
        with pytest.raises(ValueError, match="Expected 18 names"):
            fit_ml(d['y'], d['X'], d['Z'], group_names=['a', 'b'])
