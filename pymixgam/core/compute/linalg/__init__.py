"""
Linear algebra kernels for pymixgam.

All functions use NumPy/SciPy (LAPACK under the hood) and raise
immediately with clear messages.

Submodules:
    qr: QR decomposition and least squares
    cholesky: Upper Cholesky factor, decorrelating triangular solves
    eigen: Sorted symmetric eigendecomposition and matrix square root
"""

from pymixgam.core.compute.linalg.qr import (
    QRResult,
    qr_decompose,
    qr_solve,
)
from pymixgam.core.compute.linalg.cholesky import (
    cholesky_upper,
    decorrelate,
    log_det_from_upper,
    cho_solve_upper,
)
from pymixgam.core.compute.linalg.eigen import (
    EigenResult,
    sym_eigen,
    sym_sqrt,
)

__all__ = [
    # QR decomposition
    "QRResult",
    "qr_decompose",
    "qr_solve",
    # Cholesky
    "cholesky_upper",
    "decorrelate",
    "log_det_from_upper",
    "cho_solve_upper",
    # Eigen
    "EigenResult",
    "sym_eigen",
    "sym_sqrt",
]
