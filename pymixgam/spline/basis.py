"""
Cubic regression spline basis and roughness penalty.

For knots x*_1..x*_k in [0, 1] the basis has k + 2 columns:

    [1, x, R(x, x*_1), ..., R(x, x*_k)]

and the penalty matrix S is zero on the intercept and linear rows and
columns (straight lines cost nothing) with the kernel Gram matrix
R(x*_i, x*_j) in the remaining k x k block.

The penalized least squares problem

    minimize ‖y - Xβ‖² + λ β'Sβ

is solved as ordinary least squares on the augmented system

    [ X        ] β ≈ [ y ]
    [ √λ S^½   ]     [ 0 ]

since the extra rows contribute exactly λβ'Sβ to the residual sum
of squares.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pymixgam.core.compute.linalg import sym_sqrt
from pymixgam.core.exceptions import ValidationError
from pymixgam.core.validation import (
    check_array, check_1d, check_finite, check_unit_interval,
)
from pymixgam.spline._kernel import rk


def scale_unit_interval(
    x: ArrayLike,
    lower: float | None = None,
    upper: float | None = None,
) -> NDArray:
    """Min-max scale x to [0, 1].

    The basis builders never scale internally; call this first.

    Args:
        x: Covariate values.
        lower: Value mapped to 0. Defaults to min(x).
        upper: Value mapped to 1. Defaults to max(x). Pass the training
            bounds when scaling new data for prediction.
    """
    x = check_array(x, 'x')
    lo = float(np.min(x)) if lower is None else float(lower)
    hi = float(np.max(x)) if upper is None else float(upper)
    if not hi > lo:
        raise ValidationError(
            f"x: cannot scale to [0, 1], range is degenerate (lower={lo}, upper={hi})"
        )
    return (x - lo) / (hi - lo)


def _check_knots(knots: ArrayLike) -> NDArray:
    knots = check_array(knots, 'knots')
    check_1d(knots, 'knots')
    check_finite(knots, 'knots')
    check_unit_interval(knots, 'knots')
    if knots.shape[0] < 1:
        raise ValidationError("knots: need at least one knot")
    return knots


def build_spline_design(x: ArrayLike, knots: ArrayLike) -> NDArray:
    """Spline design matrix (n, k + 2): [1, x, R(x_i, knot_j)].

    Args:
        x: Covariate values in [0, 1] (n,).
        knots: Knot locations in [0, 1] (k,).
    """
    x = check_array(x, 'x')
    check_1d(x, 'x')
    check_finite(x, 'x')
    check_unit_interval(x, 'x')
    knots = _check_knots(knots)

    n = x.shape[0]
    X = np.empty((n, knots.shape[0] + 2), dtype=np.float64)
    X[:, 0] = 1.0
    X[:, 1] = x
    X[:, 2:] = rk(x[:, np.newaxis], knots[np.newaxis, :])
    return X


def build_penalty(knots: ArrayLike) -> NDArray:
    """Penalty matrix S (k + 2, k + 2), zero except the knot Gram block."""
    knots = _check_knots(knots)
    k = knots.shape[0]
    S = np.zeros((k + 2, k + 2), dtype=np.float64)
    S[2:, 2:] = rk(knots[:, np.newaxis], knots[np.newaxis, :])
    return S


def mat_sqrt(S: ArrayLike) -> NDArray:
    """Symmetric square root B of S, with B'B = S.

    Computed as U D^½ U' from the eigendecomposition; tiny negative
    eigenvalues from round-off are clipped at 0.
    """
    S = check_array(S, 'S')
    if S.ndim != 2 or S.shape[0] != S.shape[1]:
        raise ValidationError(f"S: expected a square matrix, got shape {S.shape}")
    return sym_sqrt(S)


def augmented_system(
    X: NDArray,
    y: NDArray,
    S: NDArray,
    lam: float,
) -> tuple[NDArray, NDArray]:
    """Stack √λ S^½ under X and zeros under y."""
    if lam < 0:
        raise ValidationError(f"lam: must be non-negative, got {lam}")
    X_aug = np.vstack([X, np.sqrt(lam) * mat_sqrt(S)])
    y_aug = np.concatenate([y, np.zeros(S.shape[0])])
    return X_aug, y_aug


def ridge_coefficients(
    X: NDArray,
    y: NDArray,
    S: NDArray,
    lam: float,
) -> NDArray:
    """Closed-form penalized least squares β = (X'X + λS)⁻¹X'y."""
    return np.linalg.solve(X.T @ X + lam * S, X.T @ y)
