"""
Solution wrapper for the maximum-likelihood mixed model fit.

MixedMLSolution wraps Result[MixedMLParams] and provides property
accessors, a printed summary, and a per-group table comparing the
predicted random effects against reference values.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pymixgam.core.result import Result
from pymixgam.mixed._common import MixedMLParams


class MixedMLSolution:
    """Solution wrapper for a fitted two-variance-component mixed model."""

    def __init__(self, _result: Result[MixedMLParams]):
        self._result = _result

    @property
    def params(self) -> MixedMLParams:
        return self._result.params

    @property
    def result(self) -> Result[MixedMLParams]:
        return self._result

    # --- Variance components ---

    @property
    def theta(self) -> NDArray:
        """(log τ̂, log σ̂) at the optimum."""
        return self.params.theta

    @property
    def tau(self) -> float:
        """Random effect standard deviation τ̂."""
        return self.params.tau

    @property
    def sigma(self) -> float:
        """Residual standard deviation σ̂."""
        return self.params.sigma

    @property
    def smoothing_parameter(self) -> float:
        """λ̂ = σ̂² / τ̂², the ridge penalty the fit corresponds to."""
        return self.params.sigma**2 / self.params.tau**2

    # --- Fixed effects ---

    @property
    def coefficients(self) -> NDArray:
        """Fixed effect estimates β̂."""
        return self.params.coefficients

    @property
    def fixef(self) -> dict[str, float]:
        """Fixed effects as name → value dict."""
        return dict(zip(self.params.coefficient_names,
                        (float(b) for b in self.params.coefficients)))

    # --- Random effects ---

    @property
    def random_effects(self) -> NDArray:
        """BLUPs ĝ, one per column of Z."""
        return self.params.random_effects

    @property
    def ranef(self) -> dict[str, float]:
        """BLUPs as group name → value dict."""
        return dict(zip(self.params.group_names,
                        (float(g) for g in self.params.random_effects)))

    # --- Model fit ---

    @property
    def log_likelihood(self) -> float:
        return self.params.log_likelihood

    @property
    def aic(self) -> float:
        return self.params.aic

    @property
    def bic(self) -> float:
        return self.params.bic

    @property
    def fitted_values(self) -> NDArray:
        return self.params.fitted_values

    @property
    def residuals(self) -> NDArray:
        return self.params.residuals

    @property
    def converged(self) -> bool:
        return self.params.converged

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    # --- Tables ---

    def ranef_table(self, reference: ArrayLike | None = None) -> str:
        """Per-group table of predicted random effects.

        Args:
            reference: Optional reference predictions (m,), e.g. from
                another mixed-model library, shown alongside with the
                difference.
        """
        g = self.params.random_effects
        names = self.params.group_names
        width = max(8, max(len(s) for s in names))

        if reference is None:
            lines = [f" {'Group':<{width}s} {'Predicted':>12s}"]
            for name, val in zip(names, g):
                lines.append(f" {name:<{width}s} {val:12.4f}")
            return '\n'.join(lines)

        ref = np.asarray(reference, dtype=np.float64).ravel()
        if ref.shape != g.shape:
            raise ValueError(
                f"reference has {ref.shape[0]} values, expected {g.shape[0]}"
            )
        lines = [f" {'Group':<{width}s} {'Predicted':>12s} "
                 f"{'Reference':>12s} {'Difference':>12s}"]
        for name, val, r in zip(names, g, ref):
            lines.append(
                f" {name:<{width}s} {val:12.4f} {r:12.4f} {val - r:12.3e}"
            )
        return '\n'.join(lines)

    def summary(self) -> str:
        """Printed summary of the fit."""
        params = self.params

        lines = []
        lines.append(
            f"Linear mixed model fit by ML "
            f"({params.likelihood_form} likelihood, Nelder-Mead)"
        )
        lines.append("")
        lines.append(
            f" logLik: {params.log_likelihood:.4f}  "
            f"AIC: {params.aic:.1f}  BIC: {params.bic:.1f}"
        )
        lines.append("")

        lines.append("Variance components:")
        lines.append(f" {'':<12s} {'Variance':>12s} {'Std.Dev.':>12s}")
        lines.append(
            f" {'Random':<12s} {params.tau**2:12.4f} {params.tau:12.4f}"
        )
        lines.append(
            f" {'Residual':<12s} {params.sigma**2:12.4f} {params.sigma:12.4f}"
        )
        lines.append(
            f"Number of obs: {params.n_obs}, random effects: {params.n_random}"
        )
        lines.append("")

        lines.append("Fixed effects:")
        lines.append(f" {'':>15s} {'Estimate':>12s}")
        for name, b in zip(params.coefficient_names, params.coefficients):
            lines.append(f" {name:>15s} {b:12.4f}")

        lines.append("")
        lines.append(
            f"Iterations: {params.n_iter}, function evaluations: {params.n_fev}"
        )
        if not params.converged:
            lines.append("")
            lines.append("WARNING: Model did not converge")

        return '\n'.join(lines)

    def __repr__(self) -> str:
        return (
            f"MixedMLSolution({self.params.likelihood_form}, "
            f"n={self.params.n_obs}, "
            f"tau={self.params.tau:.4g}, "
            f"sigma={self.params.sigma:.4g})"
        )
