"""
Design validation for the two-variance-component mixed model.

MixedDesign validates and organizes the inputs: the response y, the
fixed effects matrix X, and the random effects matrix Z. All structural
checks (shapes, finiteness, rank of X) happen here, once, before any
likelihood is evaluated.
"""

from __future__ import annotations

from dataclasses import dataclass
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pymixgam.core.validation import (
    check_array, check_finite, check_1d, check_2d,
    check_consistent_length, check_min_samples, check_column_rank,
)
from pymixgam.core.exceptions import ValidationError


@dataclass(frozen=True)
class MixedDesign:
    """Validated design for a mixed model.

    Attributes:
        y: Response vector (n,).
        X: Fixed effects design matrix (n, p).
        Z: Random effects design matrix (n, m).
        n: Number of observations.
        p: Number of fixed effect columns.
        m: Number of random effect columns.
    """
    y: NDArray
    X: NDArray
    Z: NDArray
    n: int
    p: int
    m: int

    @staticmethod
    def validate(y: ArrayLike, X: ArrayLike, Z: ArrayLike) -> 'MixedDesign':
        """Validate inputs and create a MixedDesign.

        Args:
            y: Response vector.
            X: Fixed effects design matrix. If 1-D, treated as a single
               column. No intercept is added; include one if desired.
            Z: Random effects design matrix. If 1-D, treated as a single
               column. Any real matrix is accepted.

        Returns:
            Validated MixedDesign.

        Raises:
            ValidationError: On non-numeric or non-finite inputs, or
                fewer observations than fixed effects + 1.
            DimensionError: On inconsistent shapes.
            ConfigurationError: If X is not of full column rank.
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

        n, p = X.shape
        m = Z.shape[1]
        check_min_samples(y, p + 1, 'y')
        if m < 1:
            raise ValidationError("Z: needs at least one column")

        check_finite(y, 'y')
        check_finite(X, 'X')
        check_finite(Z, 'Z')

        check_column_rank(X, 'X')

        return MixedDesign(y=y, X=X, Z=Z, n=n, p=p, m=m)


def indicator_matrix(groups: ArrayLike) -> tuple[NDArray, tuple[str, ...]]:
    """One-hot expansion of a grouping factor.

    Args:
        groups: Group label per observation (n,). Any sortable labels.

    Returns:
        (Z, levels): Z is (n, J) with Z[i, j] = 1 when observation i is in
        level j; levels are the sorted unique labels as strings.

    Example:
        >>> Z, levels = indicator_matrix(['b', 'a', 'b'])
        >>> Z
        array([[0., 1.],
               [1., 0.],
               [0., 1.]])
        >>> levels
        ('a', 'b')
    """
    g = np.asarray(groups)
    if g.ndim != 1:
        raise ValidationError(f"groups: expected 1D array, got shape {g.shape}")
    unique_levels, ids = np.unique(g, return_inverse=True)
    Z = np.zeros((g.shape[0], len(unique_levels)), dtype=np.float64)
    Z[np.arange(g.shape[0]), ids] = 1.0
    return Z, tuple(_level_name(lv) for lv in unique_levels)


def _level_name(level) -> str:
    # 308.0 -> '308' for group codes stored as floats
    if isinstance(level, (float, np.floating)) and float(level).is_integer():
        return str(int(level))
    return str(level)
