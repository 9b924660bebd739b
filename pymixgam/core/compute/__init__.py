"""
Shared compute infrastructure for pymixgam.

Numeric building blocks shared by the mixed-model and spline domains.
Domain-specific algorithms live in their own subpackages, not here.

Submodules:
    timing: Execution timing utilities
    tolerances: Tolerance tiers and numeric thresholds
    linalg: Linear algebra kernels (QR, Cholesky, eigen)
"""

from pymixgam.core.compute.timing import Timer, timed
