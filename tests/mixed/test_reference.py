"""Cross-check against statsmodels MixedLM (ML, random intercept)."""

import numpy as np
import pytest

pytest.importorskip("statsmodels")

from pymixgam.datasets import sleepstudy_source
from pymixgam.mixed import fit_ml
from pymixgam.walkthrough import build_mixed_inputs, reference_fit


@pytest.fixture(scope='module')
def fits():
    ds = sleepstudy_source()
    y, X, Z, levels = build_mixed_inputs(ds, 'Reaction', 'Days', 'Subject')
    ours = fit_ml(y, X, Z, group_names=list(levels))
    ref = reference_fit(ds, 'Reaction', 'Days', 'Subject')
    return ours, ref


def test_variance_components(fits):
    ours, (tau, sigma, _, _, _) = fits
    np.testing.assert_allclose(ours.tau, tau, rtol=1e-3)
    np.testing.assert_allclose(ours.sigma, sigma, rtol=1e-3)


def test_log_likelihood(fits):
    ours, (_, _, llf, _, _) = fits
    np.testing.assert_allclose(ours.log_likelihood, llf, atol=1e-3)


def test_fixed_effects(fits):
    ours, (_, _, _, fe, _) = fits
    np.testing.assert_allclose(ours.coefficients, fe, rtol=1e-5)


def test_random_effects(fits):
    ours, (_, _, _, _, ranef) = fits
    np.testing.assert_allclose(ours.random_effects, ranef, atol=0.05)


def test_reference_values_are_floats():
    tau, sigma, llf, fe, ranef = reference_fit(
        sleepstudy_source(), 'Reaction', 'Days', 'Subject'
    )
    assert isinstance(tau, float) and tau > 0
    assert isinstance(sigma, float) and sigma > 0
    assert fe.shape == (2,)
    assert ranef.shape == (18,)


def test_walkthrough_prints_reference_column(capsys):
    from pymixgam.walkthrough import run_sleepstudy

    run_sleepstudy()
    out = capsys.readouterr().out
    assert 'reference' in out
    assert 'Reference' in out
    assert 'install statsmodels' not in out
