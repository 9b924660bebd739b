"""
Symmetric eigendecomposition helpers.

LAPACK's symmetric solvers return eigenvalues in ascending order, but
callers here partition eigenvectors by eigenvalue, so the ordering is
enforced explicitly rather than assumed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray
import scipy.linalg as sla

from pymixgam.core.compute.tolerances import EIGEN_ZERO_RTOL


@dataclass(frozen=True)
class EigenResult:
    """Sorted eigendecomposition A = U diag(values) U'.

    Attributes:
        values: Eigenvalues in ascending order (k,).
        vectors: Orthonormal eigenvectors, column j pairs with values[j].
        zero_tol: Absolute threshold below which |value| counts as zero.
    """
    values: NDArray[np.floating[Any]]
    vectors: NDArray[np.floating[Any]]
    zero_tol: float

    @property
    def zero_mask(self) -> NDArray[np.bool_]:
        return np.abs(self.values) <= self.zero_tol

    @property
    def positive_mask(self) -> NDArray[np.bool_]:
        return self.values > self.zero_tol

    @property
    def negative_mask(self) -> NDArray[np.bool_]:
        return self.values < -self.zero_tol


def sym_eigen(
    A: NDArray[np.floating[Any]],
    zero_rtol: float = EIGEN_ZERO_RTOL,
) -> EigenResult:
    """Eigendecomposition of a symmetric matrix, sorted ascending.

    The matrix is symmetrized as (A + A')/2 first so round-off asymmetry
    from its construction does not leak into the eigenvectors.

    Args:
        A: Symmetric matrix (k, k).
        zero_rtol: Eigenvalues with |λ| <= zero_rtol × max|λ| count as zero.

    Returns:
        EigenResult with ascending eigenvalues and matching eigenvectors.
    """
    A = 0.5 * (A + A.T)
    values, vectors = sla.eigh(A)
    order = np.argsort(values, kind='stable')
    values = values[order]
    vectors = vectors[:, order]

    scale = float(np.max(np.abs(values))) if values.size else 0.0
    return EigenResult(
        values=values,
        vectors=vectors,
        zero_tol=zero_rtol * scale,
    )


def sym_sqrt(A: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
    """Symmetric square root B = U D^{1/2} U' with B'B = B B = A.

    Negative eigenvalues from round-off are clipped at zero.
    """
    eig = sym_eigen(A)
    root = np.sqrt(np.maximum(eig.values, 0.0))
    return (eig.vectors * root) @ eig.vectors.T
