"""
Marginal Gaussian likelihood for the two-variance-component mixed model.

Integrating out the random effects g gives y ~ N(Xβ, Σ) with

    Σ = τ² ZZ' + σ² I_n,   θ = (log τ, log σ).

Two independent evaluations of the negative log-likelihood are provided:

neg_log_lik (decorrelation form):
    Factor Σ = U'U, map y and X through U'⁻¹ so the errors become
    independent, fit ordinary least squares, and read off

        ℓ = -(n/2) log 2π - Σᵢ log Uᵢᵢ - r'r/2.

neg_log_lik_mvn (direct form):
    Fit ordinary least squares of y on X without decorrelating and
    evaluate the multivariate normal density N(y; Xb, Σ) directly.

The two coincide whenever the least squares estimates before and after
decorrelation agree (e.g. balanced one-hot groupings with a covariate
pattern shared across groups); their agreement is used as a check, so
neither is written in terms of the other.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy import stats

from pymixgam.core.compute.linalg import (
    cholesky_upper, decorrelate, log_det_from_upper, qr_solve,
)
from pymixgam.core.exceptions import NotPositiveDefiniteError
from pymixgam.core.validation import (
    check_array, check_1d, check_2d, check_consistent_length,
)


def variance_parameters(theta: NDArray) -> tuple[float, float]:
    """(τ, σ) = exp(θ). Both are positive for every finite θ."""
    theta = np.asarray(theta, dtype=np.float64)
    if theta.shape != (2,):
        raise ValueError(f"theta must have shape (2,), got {theta.shape}")
    tau, sigma = np.exp(theta)
    return float(tau), float(sigma)


def marginal_covariance(Z: NDArray, tau: float, sigma: float) -> NDArray:
    """Σ = τ² ZZ' + σ² I_n."""
    n = Z.shape[0]
    return tau**2 * (Z @ Z.T) + sigma**2 * np.eye(n)


def as_model_arrays(y, X, Z) -> tuple[NDArray, NDArray, NDArray]:
    """Float arrays y (n,), X (n, p), Z (n, m) with matching row counts.

    1-D X or Z are treated as a single column.
    """
    y = check_array(y, 'y')
    if y.ndim == 2 and y.shape[1] == 1:
        y = y.ravel()
    check_1d(y, 'y')
    X = check_array(X, 'X')
    if X.ndim == 1:
        X = X.reshape(-1, 1)
    check_2d(X, 'X')
    Z = check_array(Z, 'Z')
    if Z.ndim == 1:
        Z = Z.reshape(-1, 1)
    check_2d(Z, 'Z')
    check_consistent_length(y, X, Z, names=('y', 'X', 'Z'))
    return y, X, Z


def _factor_sigma(Z: NDArray, theta: NDArray) -> NDArray:
    """Upper Cholesky factor of Σ(θ), tagging failures with θ."""
    tau, sigma = variance_parameters(theta)
    Sigma = marginal_covariance(Z, tau, sigma)
    try:
        return cholesky_upper(Sigma, name='Sigma')
    except NotPositiveDefiniteError as e:
        raise NotPositiveDefiniteError(
            f"covariance not positive definite at theta={tuple(np.round(theta, 6))} "
            f"(tau={tau:.3e}, sigma={sigma:.3e}): {e}",
            matrix_name='Sigma',
            min_eigenvalue=e.min_eigenvalue,
            theta=tuple(float(t) for t in theta),
        ) from e


def neg_log_lik(
    y: NDArray,
    X: NDArray,
    Z: NDArray,
    theta: NDArray,
) -> float:
    """Negative marginal log-likelihood, decorrelation form.

    Args:
        y: Response vector (n,).
        X: Fixed effects design matrix (n, p), full column rank.
        Z: Random effects design matrix (n, m).
        theta: (log τ, log σ).

    Returns:
        -ℓ(θ), with β profiled out by least squares on the decorrelated data.

    Raises:
        NotPositiveDefiniteError: If Σ(θ) cannot be Cholesky-factored.
    """
    y, X, Z = as_model_arrays(y, X, Z)
    n = y.shape[0]
    U = _factor_sigma(Z, theta)

    y_dec = decorrelate(U, y)
    X_dec = decorrelate(U, X)

    b = qr_solve(X_dec, y_dec)
    resid = y_dec - X_dec @ b

    ll = (-0.5 * n * np.log(2.0 * np.pi)
          - 0.5 * log_det_from_upper(U)
          - 0.5 * float(resid @ resid))
    return float(-ll)


def neg_log_lik_mvn(
    y: NDArray,
    X: NDArray,
    Z: NDArray,
    theta: NDArray,
) -> float:
    """Negative marginal log-likelihood, direct multivariate normal form.

    -log N(y; μ, Σ) = (n/2) log 2π + ½ log|Σ| + ½ (y-μ)'Σ⁻¹(y-μ),
    with μ = Xb and b the ordinary least squares fit of y on X.

    Raises:
        NotPositiveDefiniteError: If Σ(θ) is not positive definite.
    """
    y, X, Z = as_model_arrays(y, X, Z)
    tau, sigma = variance_parameters(theta)
    Sigma = marginal_covariance(Z, tau, sigma)

    b = qr_solve(X, y)
    mu = X @ b

    if not np.all(np.isfinite(Sigma)):
        raise NotPositiveDefiniteError(
            f"covariance not positive definite at theta={tuple(np.round(theta, 6))}: "
            f"contains non-finite entries",
            matrix_name='Sigma',
            theta=tuple(float(t) for t in theta),
        )
    try:
        logpdf = stats.multivariate_normal.logpdf(y, mean=mu, cov=Sigma)
    except (np.linalg.LinAlgError, ValueError) as e:
        raise NotPositiveDefiniteError(
            f"covariance not positive definite at theta={tuple(np.round(theta, 6))}: {e}",
            matrix_name='Sigma',
            theta=tuple(float(t) for t in theta),
        ) from e
    return float(-logpdf)


def gls_coefficients(
    y: NDArray,
    X: NDArray,
    Z: NDArray,
    theta: NDArray,
) -> NDArray:
    """Fixed effects at θ: least squares on the decorrelated data.

    Equals the generalized least squares estimate (X'Σ⁻¹X)⁻¹X'Σ⁻¹y.
    """
    y, X, Z = as_model_arrays(y, X, Z)
    U = _factor_sigma(Z, theta)
    return qr_solve(decorrelate(U, X), decorrelate(U, y))


LIKELIHOOD_FORMS = {
    'cholesky': neg_log_lik,
    'mvn': neg_log_lik_mvn,
}
