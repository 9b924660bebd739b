"""
Penalized cubic regression splines and their mixed model form.

Public API:
    rk()                    — cubic-spline reproducing kernel on [0, 1]
    build_spline_design()   — basis matrix [1, x, R(x, knots)]
    build_penalty()         — roughness penalty S
    scale_unit_interval()   — min-max scaling of the covariate
    mat_sqrt()              — symmetric square root of S
    ridge_coefficients()    — closed-form (X'X + λS)⁻¹X'y
    split_fixed_random()    — eigen-reparameterization into (X_F, Z)
    fit_penalized_spline()  — fit at given λ by augmented least squares
    gcv_search()            — λ by generalized cross-validation
    fit_spline_mixed()      — λ by maximum likelihood as a mixed model
"""

from pymixgam.spline._kernel import rk
from pymixgam.spline.basis import (
    build_spline_design, build_penalty, scale_unit_interval, mat_sqrt,
    augmented_system, ridge_coefficients,
)
from pymixgam.spline.reparam import MixedSplineBasis, split_fixed_random
from pymixgam.spline.solvers import (
    fit_penalized_spline, gcv_search, fit_spline_mixed,
)
from pymixgam.spline.solution import PenalizedSplineSolution, SplineMixedSolution

__all__ = [
    "rk",
    "build_spline_design",
    "build_penalty",
    "scale_unit_interval",
    "mat_sqrt",
    "augmented_system",
    "ridge_coefficients",
    "MixedSplineBasis",
    "split_fixed_random",
    "fit_penalized_spline",
    "gcv_search",
    "fit_spline_mixed",
    "PenalizedSplineSolution",
    "SplineMixedSolution",
]
