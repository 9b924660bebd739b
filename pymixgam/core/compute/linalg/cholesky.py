"""
Cholesky factorization and triangular solves.

The factor is returned in upper-triangular form U with U'U = A, the
convention used by the decorrelation form of the likelihood: solving
U'ỹ = y maps correlated errors with covariance A to independent ones.
"""

from __future__ import annotations

from typing import Any
import numpy as np
from numpy.typing import NDArray
import scipy.linalg as sla

from pymixgam.core.exceptions import NotPositiveDefiniteError


def cholesky_upper(
    A: NDArray[np.floating[Any]],
    name: str = 'A',
) -> NDArray[np.floating[Any]]:
    """Upper Cholesky factor U such that U'U = A.

    Args:
        A: Symmetric matrix (n, n).
        name: Matrix name used in the error message.

    Returns:
        Upper-triangular U (n, n).

    Raises:
        NotPositiveDefiniteError: If A is not (numerically) positive
            definite or contains non-finite entries.
    """
    if not np.all(np.isfinite(A)):
        raise NotPositiveDefiniteError(
            f"{name} is not positive definite: contains non-finite entries",
            matrix_name=name,
        )
    try:
        return sla.cholesky(A, lower=False)
    except np.linalg.LinAlgError as e:
        min_eig = float(np.linalg.eigvalsh(A)[0])
        raise NotPositiveDefiniteError(
            f"{name} is not positive definite "
            f"(smallest eigenvalue {min_eig:.3e}): {e}",
            matrix_name=name,
            min_eigenvalue=min_eig,
        ) from e


def decorrelate(
    U: NDArray[np.floating[Any]],
    B: NDArray[np.floating[Any]],
) -> NDArray[np.floating[Any]]:
    """Solve U' B̃ = B for B̃ by forward substitution.

    B may be a vector or a matrix; each column is transformed.
    """
    return sla.solve_triangular(U, B, trans='T', lower=False)


def log_det_from_upper(U: NDArray[np.floating[Any]]) -> float:
    """log|A| from the Cholesky factor of A: 2 × Σ log U_ii."""
    return 2.0 * float(np.sum(np.log(np.diag(U))))


def cho_solve_upper(
    U: NDArray[np.floating[Any]],
    b: NDArray[np.floating[Any]],
) -> NDArray[np.floating[Any]]:
    """Solve A x = b given the upper Cholesky factor of A."""
    return sla.cho_solve((U, False), b)
