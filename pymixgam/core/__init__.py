"""
Core infrastructure for pymixgam.

This module provides shared abstractions and utilities used by the
mixed-model and spline subpackages.

Key components:
    datasource: DataSource for tabular input
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Timing, tolerances, linear algebra primitives
"""

from pymixgam.core.datasource import DataSource
from pymixgam.core.result import Result
from pymixgam.core.exceptions import (
    PyMixGamError,
    ValidationError,
    DimensionError,
    ConfigurationError,
    NumericalError,
    SingularMatrixError,
    NotPositiveDefiniteError,
    ConvergenceError,
)

__all__ = [
    "DataSource",
    "Result",
    # Exceptions
    "PyMixGamError",
    "ValidationError",
    "DimensionError",
    "ConfigurationError",
    "NumericalError",
    "SingularMatrixError",
    "NotPositiveDefiniteError",
    "ConvergenceError",
]
