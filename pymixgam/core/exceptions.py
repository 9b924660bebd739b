"""
Exception hierarchy for pymixgam.

All exceptions inherit from PyMixGamError so callers can catch any
library-specific error in one place. Structural problems with the model
setup are ConfigurationErrors and surface before any optimization starts;
failures inside a likelihood evaluation are NumericalErrors.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""

from __future__ import annotations

from typing import Any


class PyMixGamError(Exception):
    """Base exception for all pymixgam errors."""
    pass


class ValidationError(PyMixGamError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when array shapes don't match expected dimensions or
    when multiple arrays have inconsistent shapes.
    """
    pass


class ConfigurationError(ValidationError):
    """
    A structural precondition of the model does not hold.

    Raised at setup time, e.g. for a rank-deficient fixed effects design
    or a penalty matrix whose null space is not the expected dimension.

    Attributes:
        parameter: Name of the offending input (e.g. 'X', 'S')
        expected: What the model requires
        actual: What was found
    """

    def __init__(
        self,
        message: str,
        parameter: str | None = None,
        expected: Any = None,
        actual: Any = None,
    ):
        super().__init__(message)
        self.parameter = parameter
        self.expected = expected
        self.actual = actual


class NumericalError(PyMixGamError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during computation.
    """
    pass


class SingularMatrixError(NumericalError):
    """
    Matrix is singular or nearly singular.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        condition_number: Estimated condition number, if available
        rank: Numerical rank, if computed
        expected_rank: Expected rank (typically min(n, p))
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        condition_number: float | None = None,
        rank: int | None = None,
        expected_rank: int | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.condition_number = condition_number
        self.rank = rank
        self.expected_rank = expected_rank


class NotPositiveDefiniteError(NumericalError):
    """
    Matrix is not positive definite.

    Raised when a Cholesky factorization fails. Inside a likelihood
    evaluation this marks an invalid region of the variance parameters.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        min_eigenvalue: Minimum eigenvalue, if computed
        theta: Variance parameters (log scale) at which it failed, if any
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        min_eigenvalue: float | None = None,
        theta: tuple[float, ...] | None = None,
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.min_eigenvalue = min_eigenvalue
        self.theta = theta


class ConvergenceError(PyMixGamError):
    """
    Iterative algorithm failed to converge.

    Only raised when the caller asks for strict convergence; by default
    non-convergence is reported through the result's converged flag.

    Attributes:
        iterations: Number of iterations completed
        final_change: Final parameter or objective change
        reason: Why convergence failed (e.g., 'max_iterations')
        threshold: The convergence threshold that was not met
    """

    def __init__(
        self,
        message: str,
        iterations: int,
        final_change: float | None = None,
        reason: str | None = None,
        threshold: float | None = None
    ):
        super().__init__(message)
        self.iterations = iterations
        self.final_change = final_change
        self.reason = reason
        self.threshold = threshold
