"""
QR decomposition and QR-based least squares.

Every ordinary least squares step in the package (the decorrelated fit
inside the likelihood, the direct fit in the multivariate-normal form,
the BLUP residuals and the augmented penalized spline fit) goes through
qr_solve.
"""

from dataclasses import dataclass
from typing import Literal, Any
import numpy as np
from numpy.typing import NDArray
from scipy.linalg import solve_triangular

from pymixgam.core.exceptions import SingularMatrixError


@dataclass(frozen=True)
class QRResult:
    """
    Result of QR decomposition.

    Attributes:
        Q: Orthogonal matrix (n x k where k = min(n, p) for reduced mode)
        R: Upper triangular matrix (k x p)
        rank: Numerical rank determined from R diagonal
    """
    Q: NDArray[np.floating[Any]]
    R: NDArray[np.floating[Any]]
    rank: int


def qr_decompose(
    X: NDArray[np.floating[Any]],
    mode: Literal['reduced', 'complete'] = 'reduced'
) -> QRResult:
    """
    QR decomposition using LAPACK (via NumPy).

    Computes X = QR where Q is orthogonal and R is upper triangular.

    Args:
        X: Matrix to decompose (n x p)
        mode: 'reduced' for economy QR, 'complete' for full QR

    Returns:
        QRResult with Q, R, and numerical rank
    """
    Q, R = np.linalg.qr(X, mode=mode)

    diag_R = np.abs(np.diag(R))
    if len(diag_R) > 0 and np.max(diag_R) > 0:
        tol = max(X.shape) * np.finfo(X.dtype).eps * np.max(diag_R)
        rank = int(np.sum(diag_R > tol))
    else:
        rank = 0

    return QRResult(Q=Q, R=R, rank=rank)


def qr_solve(
    X: NDArray[np.floating[Any]],
    y: NDArray[np.floating[Any]],
    check_rank: bool = True,
) -> NDArray[np.floating[Any]]:
    """
    Solve least squares via QR decomposition.

    Solves min_β ||y - Xβ||² as β = R⁻¹ Q'y. No intercept column is
    added; X is used as given.

    Args:
        X: Design matrix (n x p), must have n >= p
        y: Response vector (n,)
        check_rank: If True, raise SingularMatrixError on rank-deficient X

    Returns:
        Coefficient vector β (p,)

    Raises:
        SingularMatrixError: If X is rank-deficient and check_rank=True
    """
    n, p = X.shape
    if n < p:
        raise SingularMatrixError(
            f"Least squares needs at least as many rows as columns: "
            f"got {n} rows, {p} columns",
            matrix_name='X',
            rank=n,
            expected_rank=p,
        )
    qr_result = qr_decompose(X, mode='reduced')

    if check_rank and qr_result.rank < p:
        raise SingularMatrixError(
            f"Design matrix is rank-deficient: rank={qr_result.rank}, expected={p}. "
            f"This indicates perfect multicollinearity.",
            matrix_name='X',
            rank=qr_result.rank,
            expected_rank=p
        )

    Qty = qr_result.Q.T @ y
    return solve_triangular(qr_result.R[:p, :p], Qty[:p], lower=False)
