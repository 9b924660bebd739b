"""
Penalized cubic regression spline fitting.

Public API:
    fit_penalized_spline() — fit at a given λ by augmented least squares
    gcv_search()           — choose λ on a grid by generalized
                             cross-validation
    fit_spline_mixed()     — estimate λ by fitting the equivalent mixed
                             model with mixed.fit_ml
"""

from __future__ import annotations

import warnings
import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.linalg import solve_triangular

from pymixgam.core.result import Result
from pymixgam.core.compute.timing import Timer
from pymixgam.core.compute.linalg import qr_decompose
from pymixgam.core.compute.tolerances import (
    OPTIMIZER_TOL, OPTIMIZER_MAX_ITER, GCV_EDF_RTOL,
)
from pymixgam.core.exceptions import (
    NumericalError, SingularMatrixError, ValidationError,
)
from pymixgam.core.validation import (
    check_array, check_1d, check_finite, check_consistent_length,
)
from pymixgam.mixed._likelihood import neg_log_lik
from pymixgam.mixed.solvers import fit_ml
from pymixgam.spline._common import PenalizedSplineParams, SplineMixedParams
from pymixgam.spline.basis import (
    build_spline_design, build_penalty, augmented_system,
)
from pymixgam.spline.reparam import split_fixed_random
from pymixgam.spline.solution import PenalizedSplineSolution, SplineMixedSolution


def _check_xy(x: ArrayLike, y: ArrayLike) -> tuple[NDArray, NDArray]:
    x = check_array(x, 'x')
    y = check_array(y, 'y')
    check_1d(x, 'x')
    check_1d(y, 'y')
    check_consistent_length(x, y, names=('x', 'y'))
    check_finite(y, 'y')
    return x, y


def _penalized_fit(X: NDArray, y: NDArray, S: NDArray, lam: float):
    """Coefficients and influence-matrix trace from the augmented QR."""
    n, q = X.shape
    X_aug, y_aug = augmented_system(X, y, S, lam)
    qr = qr_decompose(X_aug, mode='reduced')
    if qr.rank < q:
        raise SingularMatrixError(
            f"Augmented spline system is rank-deficient at lambda={lam}: "
            f"rank={qr.rank}, expected={q}",
            matrix_name='X_aug',
            rank=qr.rank,
            expected_rank=q,
        )
    beta = solve_triangular(qr.R, qr.Q.T @ y_aug, lower=False)
    # A = X (X'X + λS)⁻¹ X' = Q₁Q₁' with Q₁ the first n rows of Q
    edf = float(np.sum(qr.Q[:n, :] ** 2))
    return beta, edf


def _default_lambda_grid() -> NDArray:
    return 1e-8 * 1.5 ** np.arange(60)


def _gcv_score(n: int, rss: float, edf: float) -> float:
    """n RSS / (n - edf)², infinite once the fit interpolates."""
    denom = n - edf
    if denom <= GCV_EDF_RTOL * n:
        return float(np.inf)
    return n * rss / denom ** 2


def fit_penalized_spline(
    x: ArrayLike,
    y: ArrayLike,
    knots: ArrayLike,
    lam: float,
) -> PenalizedSplineSolution:
    """Fit a penalized cubic regression spline at a given λ.

    Minimizes ‖y - Xβ‖² + λβ'Sβ by ordinary least squares on the
    augmented system (see spline.basis).

    Args:
        x: Covariate in [0, 1] (n,). Use scale_unit_interval() first.
        y: Response (n,).
        knots: Knots in [0, 1] (k,).
        lam: Smoothing parameter λ >= 0.

    Returns:
        PenalizedSplineSolution with coefficients, fitted values, edf,
        RSS and GCV score.
    """
    timer = Timer()
    timer.start()

    with timer.section('setup'):
        x, y = _check_xy(x, y)
        knots = check_array(knots, 'knots')
        X = build_spline_design(x, knots)
        S = build_penalty(knots)

    with timer.section('fit'):
        beta, edf = _penalized_fit(X, y, S, float(lam))

    params = _spline_params(X, y, knots, float(lam), beta, edf)
    timer.stop()

    result = Result(
        params=params,
        info={'method': 'augmented_qr', 'lambda': float(lam)},
        timing=timer.result(),
        backend_name='cpu_penalized_spline',
    )
    return PenalizedSplineSolution(_result=result)


def gcv_search(
    x: ArrayLike,
    y: ArrayLike,
    knots: ArrayLike,
    lambdas: ArrayLike | None = None,
) -> PenalizedSplineSolution:
    """Choose λ by minimizing the GCV score over a grid.

        V(λ) = n ‖y - A_λ y‖² / (n - tr A_λ)²

    Args:
        x, y, knots: As for fit_penalized_spline().
        lambdas: Candidate λ values. Default 1e-8 × 1.5^i, i = 0..59.

    Returns:
        PenalizedSplineSolution at the best λ; gcv_path holds the grid
        and scores.
    """
    timer = Timer()
    timer.start()

    with timer.section('setup'):
        x, y = _check_xy(x, y)
        knots = check_array(knots, 'knots')
        X = build_spline_design(x, knots)
        S = build_penalty(knots)
        if lambdas is None:
            grid = _default_lambda_grid()
        else:
            grid = check_array(lambdas, 'lambdas').ravel()
        if grid.size == 0 or np.any(grid < 0):
            raise ValidationError("lambdas: need at least one non-negative value")

    n = y.shape[0]
    scores = np.empty(grid.shape[0], dtype=np.float64)
    with timer.section('search'):
        best = None
        for i, lam in enumerate(grid):
            beta, edf = _penalized_fit(X, y, S, float(lam))
            resid = y - X @ beta
            scores[i] = _gcv_score(n, float(resid @ resid), edf)
            if best is None or scores[i] < scores[best[0]]:
                best = (i, beta, edf)

    i_best, beta, edf = best
    lam_best = float(grid[i_best])
    at_boundary = i_best in (0, grid.shape[0] - 1) and grid.shape[0] > 1
    if at_boundary:
        warnings.warn(
            f"GCV minimum at the edge of the lambda grid (lambda={lam_best:.6g}). "
            f"Consider widening the grid.",
            RuntimeWarning,
            stacklevel=2,
        )
    params = _spline_params(X, y, knots, lam_best, beta, edf)
    timer.stop()

    result = Result(
        params=params,
        info={
            'method': 'gcv_grid',
            'lambda': lam_best,
            'lambda_grid': grid,
            'gcv_scores': scores,
            'at_grid_boundary': at_boundary,
        },
        timing=timer.result(),
        backend_name='cpu_penalized_spline_gcv',
        warnings=(
            ("GCV minimum at the edge of the lambda grid",) if at_boundary else ()
        ),
    )
    return PenalizedSplineSolution(_result=result)


def fit_spline_mixed(
    x: ArrayLike,
    y: ArrayLike,
    knots: ArrayLike,
    theta0: ArrayLike | None = None,
    *,
    method: str = 'cholesky',
    tol: float = OPTIMIZER_TOL,
    max_iter: int = OPTIMIZER_MAX_ITER,
) -> SplineMixedSolution:
    """Fit a penalized cubic regression spline as a mixed model.

    The basis is split by split_fixed_random() and (X_F, Z) are handed
    to mixed.fit_ml unchanged. The smoothing parameter follows from the
    variance components as λ̂ = σ̂² / τ̂².

    Args:
        x: Covariate in [0, 1] (n,).
        y: Response (n,).
        knots: Knots in [0, 1] (k,).
        theta0: Starting (log τ, log σ). If None, the start is the best
            point of the profile over the default λ grid (see
            _profile_start); Z has very large entries when the penalty
            has small eigenvalues, so a fixed start such as (0, 0) can
            leave the simplex on the τ → 0 edge.
        method, tol, max_iter: Passed to fit_ml().

    Returns:
        SplineMixedSolution; its fitted values equal those of
        fit_penalized_spline(x, y, knots, solution.lam).
    """
    timer = Timer()
    timer.start()

    with timer.section('setup'):
        x, y = _check_xy(x, y)
        knots = check_array(knots, 'knots')
        X = build_spline_design(x, knots)
        S = build_penalty(knots)

    with timer.section('reparameterization'):
        basis = split_fixed_random(S, X)
        if theta0 is None:
            theta0 = _profile_start(X, y, S, basis)

    with timer.section('mixed_fit'):
        mixed = fit_ml(
            y, basis.X_F, basis.Z, theta0,
            method=method, tol=tol, max_iter=max_iter,
            coefficient_names=[f'F{j + 1}' for j in range(basis.X_F.shape[1])],
            group_names=[f'r{j + 1}' for j in range(basis.Z.shape[1])],
        )

    beta_F = mixed.coefficients
    g = mixed.random_effects
    beta = basis.to_basis_coefficients(beta_F, g)
    fitted = basis.X_F @ beta_F + basis.Z @ g

    timer.stop()

    params = SplineMixedParams(
        coefficients=beta,
        fixed_coefficients=beta_F,
        random_effects=g,
        knots=knots,
        lam=mixed.smoothing_parameter,
        tau=mixed.tau,
        sigma=mixed.sigma,
        log_likelihood=mixed.log_likelihood,
        converged=mixed.converged,
        fitted_values=fitted,
        residuals=y - fitted,
        n_obs=y.shape[0],
    )

    result = Result(
        params=params,
        info={
            'method': 'mixed_ml',
            'likelihood_form': method,
            'theta0': tuple(float(t) for t in np.asarray(theta0, dtype=np.float64)),
            'converged': mixed.converged,
            'null_dim': basis.X_F.shape[1],
            'n_random': basis.Z.shape[1],
        },
        timing=timer.result(),
        backend_name='cpu_spline_mixed',
        warnings=mixed.warnings,
    )
    return SplineMixedSolution(_result=result, mixed=mixed, basis=basis)


def _profile_start(X, y, S, basis) -> NDArray:
    """Starting θ for the mixed fit from the penalized fits on the λ grid.

    At fixed λ the ML residual variance is the penalized residual sum of
    squares over n, σ² = (‖y - Xβ‖² + λβ'Sβ) / n, and τ² = σ² / λ. Each
    grid point is scored with the decorrelation-form likelihood and the
    best one returned.
    """
    n = y.shape[0]
    best_theta, best_value = np.zeros(2), np.inf
    for lam in _default_lambda_grid():
        try:
            beta, _ = _penalized_fit(X, y, S, float(lam))
            resid = y - X @ beta
            sigma2 = (float(resid @ resid) + lam * float(beta @ S @ beta)) / n
            if not sigma2 > 0:
                continue
            theta = np.array([0.5 * np.log(sigma2 / lam), 0.5 * np.log(sigma2)])
            value = neg_log_lik(y, basis.X_F, basis.Z, theta)
        except NumericalError:
            continue
        if value < best_value:
            best_theta, best_value = theta, value
    return best_theta


def _spline_params(X, y, knots, lam, beta, edf) -> PenalizedSplineParams:
    n = y.shape[0]
    fitted = X @ beta
    resid = y - fitted
    rss = float(resid @ resid)
    return PenalizedSplineParams(
        coefficients=beta,
        knots=knots,
        lam=lam,
        fitted_values=fitted,
        residuals=resid,
        rss=rss,
        edf=edf,
        gcv=_gcv_score(n, rss, edf),
        n_obs=n,
    )
