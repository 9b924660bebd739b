"""Smoke tests for the walkthrough driver."""

import numpy as np

from pymixgam.datasets import sleepstudy_source
from pymixgam.walkthrough import (
    build_mixed_inputs, comparison_table, main, run_engine, run_sleepstudy,
)


def test_build_mixed_inputs():
    y, X, Z, levels = build_mixed_inputs(
        sleepstudy_source(), 'Reaction', 'Days', 'Subject'
    )
    assert X.shape == (180, 2)
    assert Z.shape == (180, 18)
    assert levels[0] == '308'
    np.testing.assert_array_equal(Z.sum(axis=0), 10.0)


def test_run_sleepstudy(capsys):
    fits = run_sleepstudy()
    out = capsys.readouterr().out
    assert set(fits) == {'cholesky', 'mvn'}
    assert 'Predicted random effects' in out
    assert '308' in out
    table = comparison_table(fits)
    assert len(table.splitlines()) == 3


def test_run_engine(capsys):
    res = run_engine()
    out = capsys.readouterr().out
    assert res['max_diff'] < 1e-6
    assert 'mixed model' in out
    assert res['gcv'].lam > 0


def test_main(capsys):
    main()
    out = capsys.readouterr().out
    assert 'Reaction ~ Days' in out
    assert 'Total time' in out
