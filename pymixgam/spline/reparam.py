"""
Mixed model representation of a penalized regression spline.

With the eigendecomposition S = U D U', split U into the null space of
the penalty (U_F, the intercept and linear trend) and the penalized
directions (U_R, eigenvalues D₊ > 0). Writing β = U_F β_F + U_R D₊^{-½} g,

    Xβ     = X_F β_F + Z g,       X_F = X U_F,  Z = X U_R D₊^{-½}
    λβ'Sβ  = λ ‖g‖²

so the penalized fit is the mode of a mixed model with fixed design
X_F, random design Z and g ~ N(0, (σ²/λ) I). Its two variance
components are exactly those estimated by mixed.fit_ml, with λ = σ²/τ².

References:
    Wood, S. N. (2006). Generalized Additive Models. Section 6.6.1.
"""

from __future__ import annotations

from dataclasses import dataclass
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pymixgam.core.compute.linalg import sym_eigen
from pymixgam.core.compute.tolerances import EIGEN_ZERO_RTOL
from pymixgam.core.exceptions import ConfigurationError, DimensionError
from pymixgam.core.validation import check_array, check_2d, check_finite


@dataclass(frozen=True)
class MixedSplineBasis:
    """Fixed/random split of a penalized spline basis.

    Attributes:
        X_F: Fixed effects design X U_F (n, null_dim).
        X_R: Penalized part of the design X U_R (n, r).
        Z: Random effects design X_R D₊^{-½} (n, r).
        D_pos: Positive eigenvalues of S, ascending (r,).
        U_F: Null-space eigenvectors (k + 2, null_dim).
        U_R: Eigenvectors of the positive eigenvalues (k + 2, r).
    """
    X_F: NDArray
    X_R: NDArray
    Z: NDArray
    D_pos: NDArray
    U_F: NDArray
    U_R: NDArray

    def to_basis_coefficients(self, beta_F: ArrayLike, g: ArrayLike) -> NDArray:
        """Map (β_F, g) back to coefficients of the original basis."""
        beta_F = np.asarray(beta_F, dtype=np.float64)
        g = np.asarray(g, dtype=np.float64)
        return self.U_F @ beta_F + self.U_R @ (g / np.sqrt(self.D_pos))


def split_fixed_random(
    S: ArrayLike,
    spline_design: ArrayLike,
    null_dim: int = 2,
    zero_rtol: float = EIGEN_ZERO_RTOL,
) -> MixedSplineBasis:
    """Reparameterize a penalized basis into fixed and random parts.

    Eigenpairs are sorted and partitioned by value, not by position.

    Args:
        S: Penalty matrix (q, q), symmetric positive semi-definite.
        spline_design: Basis matrix (n, q) matching S.
        null_dim: Required dimension of the penalty null space. The
            cubic spline basis leaves intercept and slope unpenalized, 2.
        zero_rtol: Relative threshold below which an eigenvalue is zero.

    Returns:
        MixedSplineBasis.

    Raises:
        DimensionError: If S and the design do not conform.
        ConfigurationError: If S has clearly negative eigenvalues or its
            null space does not have dimension null_dim.
    """
    S = check_array(S, 'S')
    check_2d(S, 'S')
    check_finite(S, 'S')
    X = check_array(spline_design, 'spline_design')
    check_2d(X, 'spline_design')

    q = S.shape[0]
    if S.shape != (q, q):
        raise DimensionError(f"S: expected a square matrix, got shape {S.shape}")
    if X.shape[1] != q:
        raise DimensionError(
            f"spline_design has {X.shape[1]} columns, S is {q} x {q}"
        )

    eig = sym_eigen(S, zero_rtol=zero_rtol)

    n_negative = int(np.sum(eig.negative_mask))
    if n_negative:
        raise ConfigurationError(
            f"S: penalty must be positive semi-definite, found {n_negative} "
            f"negative eigenvalue(s) (smallest {eig.values[0]:.3e})",
            parameter='S',
            expected='positive semi-definite',
            actual=f'{n_negative} negative eigenvalues',
        )

    n_zero = int(np.sum(eig.zero_mask))
    if n_zero != null_dim:
        raise ConfigurationError(
            f"S: penalty null space has dimension {n_zero}, expected {null_dim} "
            f"(unpenalized intercept and linear term)",
            parameter='S',
            expected=null_dim,
            actual=n_zero,
        )

    pos = eig.positive_mask
    U_F = eig.vectors[:, eig.zero_mask]
    U_R = eig.vectors[:, pos]
    D_pos = eig.values[pos]

    X_F = X @ U_F
    X_R = X @ U_R
    Z = X_R / np.sqrt(D_pos)

    return MixedSplineBasis(X_F=X_F, X_R=X_R, Z=Z, D_pos=D_pos, U_F=U_F, U_R=U_R)
