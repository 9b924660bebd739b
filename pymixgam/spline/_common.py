"""
Common data types for penalized spline fits.

Frozen parameter payloads that go inside Result[P] envelopes.
"""

from dataclasses import dataclass

from numpy.typing import NDArray


@dataclass(frozen=True)
class PenalizedSplineParams:
    """
    Parameter payload for a penalized spline fit at a fixed λ.
    """
    coefficients: NDArray              # β̂ (k + 2,) in the original basis
    knots: NDArray                     # (k,)
    lam: float                         # smoothing parameter λ

    fitted_values: NDArray             # Xβ̂ (n,)
    residuals: NDArray                 # y - fitted (n,)
    rss: float                         # ‖y - Xβ̂‖²
    edf: float                         # trace of the influence matrix
    gcv: float                         # n × rss / (n - edf)²
    n_obs: int


@dataclass(frozen=True)
class SplineMixedParams:
    """
    Parameter payload for a penalized spline fitted as a mixed model.

    λ is not supplied but estimated as σ̂² / τ̂² from the variance
    components of the equivalent mixed model.
    """
    coefficients: NDArray              # β̂ (k + 2,) in the original basis
    fixed_coefficients: NDArray        # β̂_F on X_F (null_dim,)
    random_effects: NDArray            # ĝ on Z (k,)
    knots: NDArray
    lam: float                         # σ̂² / τ̂²

    tau: float
    sigma: float
    log_likelihood: float
    converged: bool

    fitted_values: NDArray             # X_F β̂_F + Z ĝ (n,)
    residuals: NDArray
    n_obs: int
