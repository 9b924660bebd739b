"""
Maximum-likelihood fitting of the two-variance-component mixed model.

Public API:
    fit_ml() — minimize the negative marginal log-likelihood over
               θ = (log τ, log σ) with a derivative-free simplex search,
               then recover fixed effects and BLUPs at θ̂.
"""

from __future__ import annotations

import warnings
import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.optimize import minimize

from pymixgam.core.result import Result
from pymixgam.core.compute.timing import Timer
from pymixgam.core.compute.tolerances import (
    OPTIMIZER_TOL, OPTIMIZER_MAX_ITER, INVALID_OBJECTIVE,
)
from pymixgam.core.exceptions import NumericalError, ConvergenceError

from pymixgam.mixed._common import MixedMLParams
from pymixgam.mixed._likelihood import (
    LIKELIHOOD_FORMS, gls_coefficients, variance_parameters,
)
from pymixgam.mixed._blup import predict_random_effects
from pymixgam.mixed.design import MixedDesign
from pymixgam.mixed.solution import MixedMLSolution


def fit_ml(
    y: ArrayLike,
    X: ArrayLike,
    Z: ArrayLike,
    theta0: ArrayLike = (0.0, 0.0),
    *,
    method: str = 'cholesky',
    tol: float = OPTIMIZER_TOL,
    max_iter: int = OPTIMIZER_MAX_ITER,
    coefficient_names: list[str] | None = None,
    group_names: list[str] | None = None,
    strict: bool = False,
) -> MixedMLSolution:
    """Fit y = Xβ + Zg + ε by maximum likelihood.

    g ~ N(0, τ² I) and ε ~ N(0, σ² I). The variance parameters are
    optimized on the log scale so the search is unconstrained while
    τ², σ² stay positive.

    Args:
        y: Response vector (n,).
        X: Fixed effects design matrix (n, p), including an intercept
            column if desired.
        Z: Random effects design matrix (n, m), e.g. from
            indicator_matrix(groups).
        theta0: Starting (log τ, log σ). Default (0, 0), i.e. τ = σ = 1.
        method: Likelihood form to optimize: 'cholesky' (decorrelation)
            or 'mvn' (direct multivariate normal density).
        tol: Nelder-Mead xatol and fatol. Default 1e-10.
        max_iter: Maximum simplex iterations.
        coefficient_names: Names for the columns of X.
        group_names: Names for the columns of Z.
        strict: If True, raise ConvergenceError instead of warning when
            the optimizer reports failure.

    Returns:
        MixedMLSolution with τ̂, σ̂, fixed effects, BLUPs and fit statistics.

    Raises:
        ValidationError / DimensionError: On malformed inputs.
        ConfigurationError: If X is rank-deficient.
        ConvergenceError: If strict=True and the optimizer did not converge.

    Examples:
        >>> Z, levels = indicator_matrix(subject)
        >>> X = np.column_stack([np.ones(len(days)), days])
        >>> sol = fit_ml(reaction, X, Z, group_names=list(levels))
        >>> sol.tau, sol.sigma
    """
    if method not in LIKELIHOOD_FORMS:
        raise ValueError(
            f"Unknown likelihood form '{method}'. "
            f"Choose from {sorted(LIKELIHOOD_FORMS)}"
        )
    objective = LIKELIHOOD_FORMS[method]

    timer = Timer()
    timer.start()

    with timer.section('setup'):
        design = MixedDesign.validate(y, X, Z)
        theta_start = np.asarray(theta0, dtype=np.float64)
        if theta_start.shape != (2,):
            raise ValueError(
                f"theta0 must have shape (2,), got {theta_start.shape}"
            )
        coef_names = _names(coefficient_names, design.p, _default_coef_names)
        grp_names = _names(group_names, design.m, _default_group_names)

    n_invalid = 0

    def _objective(theta: NDArray) -> float:
        nonlocal n_invalid
        try:
            return objective(design.y, design.X, design.Z, theta)
        except NumericalError:
            n_invalid += 1
            return INVALID_OBJECTIVE

    with timer.section('optimization'):
        opt_result = minimize(
            _objective,
            theta_start,
            method='Nelder-Mead',
            options={
                'xatol': tol,
                'fatol': tol,
                'maxiter': max_iter,
                'maxfev': 2 * max_iter,
            },
        )

    converged = bool(opt_result.success)
    theta_hat = np.asarray(opt_result.x, dtype=np.float64)
    n_iter = int(opt_result.nit)

    if not converged:
        if strict:
            raise ConvergenceError(
                f"Nelder-Mead did not converge after {n_iter} iterations: "
                f"{opt_result.message}",
                iterations=n_iter,
                reason='max_iterations' if n_iter >= max_iter else str(opt_result.message),
                threshold=tol,
            )
        warnings.warn(
            f"Mixed model optimizer did not converge after {n_iter} iterations. "
            f"Message: {opt_result.message}",
            RuntimeWarning,
            stacklevel=2,
        )

    tau_hat, sigma_hat = variance_parameters(theta_hat)

    with timer.section('fixed_effects'):
        beta = gls_coefficients(design.y, design.X, design.Z, theta_hat)

    with timer.section('blups'):
        g = predict_random_effects(
            design.y, design.X, design.Z, tau_hat, sigma_hat, beta=beta
        )

    with timer.section('model_fit'):
        ll = -float(opt_result.fun)
        n_params = design.p + 2
        aic = -2.0 * ll + 2.0 * n_params
        bic = -2.0 * ll + np.log(design.n) * n_params
        fitted = design.X @ beta + design.Z @ g

    timer.stop()

    params = MixedMLParams(
        theta=theta_hat,
        tau=tau_hat,
        sigma=sigma_hat,
        coefficients=beta,
        coefficient_names=coef_names,
        random_effects=g,
        group_names=grp_names,
        log_likelihood=ll,
        aic=float(aic),
        bic=float(bic),
        n_obs=design.n,
        n_random=design.m,
        likelihood_form=method,
        converged=converged,
        n_iter=n_iter,
        n_fev=int(opt_result.nfev),
        fitted_values=fitted,
        residuals=design.y - fitted,
    )

    warn_list = []
    if not converged:
        warn_list.append(f"Optimizer did not converge: {opt_result.message}")
    if n_invalid:
        warn_list.append(
            f"Covariance was not positive definite at {n_invalid} trial points"
        )

    result = Result(
        params=params,
        info={
            'method': 'ML',
            'likelihood_form': method,
            'optimizer': 'Nelder-Mead',
            'converged': converged,
            'n_iter': n_iter,
            'n_fev': int(opt_result.nfev),
            'n_invalid': n_invalid,
            'objective': float(opt_result.fun),
            'message': str(opt_result.message),
        },
        timing=timer.result(),
        backend_name=f'cpu_mixed_ml_{method}',
        warnings=tuple(warn_list),
    )

    return MixedMLSolution(_result=result)


# =====================================================================
# Helpers
# =====================================================================

def _names(given, k: int, default) -> tuple[str, ...]:
    if given is None:
        return tuple(default(k))
    names = tuple(str(s) for s in given)
    if len(names) != k:
        raise ValueError(f"Expected {k} names, got {len(names)}")
    return names


def _default_coef_names(p: int) -> list[str]:
    """Generate default coefficient names."""
    names = ['(Intercept)']
    for i in range(1, p):
        names.append(f'X{i}')
    return names


def _default_group_names(m: int) -> list[str]:
    return [f'g{j + 1}' for j in range(m)]
