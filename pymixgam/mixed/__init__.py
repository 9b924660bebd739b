"""
Mixed models: two-variance-component Gaussian linear mixed model by ML.

Public API:
    fit_ml()                  — fit by derivative-free maximum likelihood
    neg_log_lik()             — negative log-likelihood, decorrelation form
    neg_log_lik_mvn()         — negative log-likelihood, direct MVN form
    marginal_covariance()     — Σ = τ² ZZ' + σ² I
    predict_random_effects()  — BLUPs given τ̂, σ̂
    indicator_matrix()        — one-hot Z from a grouping factor
    MixedDesign               — validated (y, X, Z)
    MixedMLSolution           — result wrapper
"""

from pymixgam.mixed.solvers import fit_ml
from pymixgam.mixed.solution import MixedMLSolution
from pymixgam.mixed.design import MixedDesign, indicator_matrix
from pymixgam.mixed._likelihood import (
    neg_log_lik, neg_log_lik_mvn, marginal_covariance, gls_coefficients,
    variance_parameters,
)
from pymixgam.mixed._blup import predict_random_effects, group_mean_residuals

__all__ = [
    "fit_ml",
    "MixedMLSolution",
    "MixedDesign",
    "indicator_matrix",
    "neg_log_lik",
    "neg_log_lik_mvn",
    "marginal_covariance",
    "gls_coefficients",
    "variance_parameters",
    "predict_random_effects",
    "group_mean_residuals",
]
