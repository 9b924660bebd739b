"""
Common data types for the two-variance-component mixed model.

Contains the frozen parameter payload that goes inside Result[P]
envelopes. The payload is a pure data container — no computation.

Model:
    y = Xβ + Zg + ε,   g ~ N(0, τ² I_m),   ε ~ N(0, σ² I_n)
    y ~ N(Xβ, Σ),      Σ = τ² ZZ' + σ² I_n

References:
    Pinheiro, J. C. & Bates, D. M. (2000). Mixed-Effects Models in S
    and S-PLUS. Springer. Chapter 2.
"""

from dataclasses import dataclass

from numpy.typing import NDArray


@dataclass(frozen=True)
class MixedMLParams:
    """
    Parameter payload for a maximum-likelihood mixed model fit.
    """
    # Variance parameters
    theta: NDArray                     # (log τ̂, log σ̂)
    tau: float                         # random effect SD τ̂
    sigma: float                       # residual SD σ̂

    # Fixed effects
    coefficients: NDArray              # β̂ (p,), decorrelated LS at θ̂
    coefficient_names: tuple[str, ...]

    # Random effects
    random_effects: NDArray            # BLUPs ĝ (m,)
    group_names: tuple[str, ...]       # label per column of Z

    # Model fit
    log_likelihood: float
    aic: float
    bic: float
    n_obs: int
    n_random: int                      # m = columns of Z
    likelihood_form: str               # 'cholesky' or 'mvn'

    # Convergence
    converged: bool
    n_iter: int
    n_fev: int

    # Predictions
    fitted_values: NDArray             # Xβ̂ + Zĝ (n,)
    residuals: NDArray                 # y - fitted (n,)
