"""
pymixgam: linear mixed models by direct maximum likelihood, and penalized
regression splines as mixed models.

Submodules:
    mixed: Two-variance-component Gaussian LMM (likelihood, ML fit, BLUPs)
    spline: Cubic regression spline basis, penalty, and mixed model form
    datasets: sleepstudy and engine reference data
    walkthrough: Driver composing both halves
"""

__version__ = "0.1.0"

from pymixgam.core.datasource import DataSource
from pymixgam import mixed
from pymixgam import spline

__all__ = [
    "__version__",
    "DataSource",
    "mixed",
    "spline",
]
