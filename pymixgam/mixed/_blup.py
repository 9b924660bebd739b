"""
Best linear unbiased prediction of the random effects.

Given variance components τ̂, σ̂ and fixed effects b, the BLUP is

    ĝ = τ̂² Z' Σ_s⁻¹ (y - Xb) / σ̂²,   Σ_s = τ̂² ZZ'/σ̂² + I_n.

For a one-hot grouping this reduces to shrinking each group's mean
residual toward zero by the factor τ̂² / (τ̂² + σ̂²/n_j), but it is
computed here in closed matrix form so Z may be any real matrix.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from pymixgam.core.compute.linalg import cholesky_upper, cho_solve_upper, qr_solve
from pymixgam.mixed._likelihood import as_model_arrays


def predict_random_effects(
    y: NDArray,
    X: NDArray,
    Z: NDArray,
    tau: float,
    sigma: float,
    beta: NDArray | None = None,
) -> NDArray:
    """Predict the random effects g.

    Args:
        y: Response vector (n,).
        X: Fixed effects design matrix (n, p).
        Z: Random effects design matrix (n, m).
        tau: Random effect standard deviation τ̂ (> 0).
        sigma: Residual standard deviation σ̂ (> 0).
        beta: Fixed effects to form the residual with. If None, the
            ordinary least squares fit of y on X is used.

    Returns:
        ĝ (m,), one prediction per column of Z.
    """
    if not (tau > 0 and sigma > 0):
        raise ValueError(
            f"tau and sigma must be positive, got tau={tau}, sigma={sigma}"
        )
    y, X, Z = as_model_arrays(y, X, Z)
    n = y.shape[0]
    ratio = tau**2 / sigma**2

    Sigma_scaled = ratio * (Z @ Z.T) + np.eye(n)
    U = cholesky_upper(Sigma_scaled, name='Sigma_scaled')

    if beta is None:
        beta = qr_solve(X, y)
    resid = y - X @ beta

    return ratio * (Z.T @ cho_solve_upper(U, resid))


def group_mean_residuals(
    y: NDArray,
    X: NDArray,
    Z: NDArray,
    beta: NDArray | None = None,
) -> NDArray:
    """Unshrunk per-column mean residual Z'r / colSums(Z).

    For an indicator Z this is each group's raw mean residual, the
    quantity a BLUP shrinks toward zero.
    """
    y, X, Z = as_model_arrays(y, X, Z)
    if beta is None:
        beta = qr_solve(X, y)
    resid = y - X @ beta
    return (Z.T @ resid) / Z.sum(axis=0)
