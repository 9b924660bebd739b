"""
Solution wrappers for penalized spline fits.

Both wrappers share predict(), which evaluates the fitted spline in
its original basis at new covariate values (already scaled to [0, 1]).
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pymixgam.core.result import Result
from pymixgam.mixed.solution import MixedMLSolution
from pymixgam.spline._common import PenalizedSplineParams, SplineMixedParams
from pymixgam.spline.basis import build_spline_design
from pymixgam.spline.reparam import MixedSplineBasis


class _SplinePredictor:

    @property
    def coefficients(self) -> NDArray:
        return self.params.coefficients

    @property
    def knots(self) -> NDArray:
        return self.params.knots

    @property
    def lam(self) -> float:
        return self.params.lam

    @property
    def fitted_values(self) -> NDArray:
        return self.params.fitted_values

    @property
    def residuals(self) -> NDArray:
        return self.params.residuals

    def predict(self, x: ArrayLike) -> NDArray:
        """Fitted spline evaluated at x (scaled to [0, 1])."""
        return build_spline_design(x, self.params.knots) @ self.params.coefficients


class PenalizedSplineSolution(_SplinePredictor):
    """Solution wrapper for a penalized spline fit at fixed λ."""

    def __init__(self, _result: Result[PenalizedSplineParams]):
        self._result = _result

    @property
    def params(self) -> PenalizedSplineParams:
        return self._result.params

    @property
    def edf(self) -> float:
        """Effective degrees of freedom, tr(A)."""
        return self.params.edf

    @property
    def rss(self) -> float:
        """Residual sum of squares ‖y - Xβ‖²."""
        return self.params.rss

    @property
    def gcv(self) -> float:
        return self.params.gcv

    @property
    def gcv_path(self) -> tuple[NDArray, NDArray] | None:
        """(λ grid, GCV scores) when the fit came from gcv_search()."""
        info = self._result.info
        if 'lambda_grid' not in info:
            return None
        return info['lambda_grid'], info['gcv_scores']

    def summary(self) -> str:
        params = self.params
        lines = [
            "Penalized cubic regression spline (augmented least squares)",
            "",
            f" knots: {len(params.knots)}, n: {params.n_obs}",
            f" lambda: {params.lam:.6g}",
            f" edf: {params.edf:.3f}",
            f" RSS: {params.rss:.6g}, GCV: {params.gcv:.6g}",
        ]
        return '\n'.join(lines)

    def __repr__(self) -> str:
        return (
            f"PenalizedSplineSolution(k={len(self.params.knots)}, "
            f"lam={self.params.lam:.4g}, edf={self.params.edf:.3f})"
        )


class SplineMixedSolution(_SplinePredictor):
    """Solution wrapper for a penalized spline estimated as a mixed model."""

    def __init__(
        self,
        _result: Result[SplineMixedParams],
        mixed: MixedMLSolution,
        basis: MixedSplineBasis,
    ):
        self._result = _result
        self._mixed = mixed
        self._basis = basis

    @property
    def params(self) -> SplineMixedParams:
        return self._result.params

    @property
    def mixed(self) -> MixedMLSolution:
        """The underlying mixed model fit on (X_F, Z)."""
        return self._mixed

    @property
    def basis(self) -> MixedSplineBasis:
        return self._basis

    @property
    def tau(self) -> float:
        return self.params.tau

    @property
    def sigma(self) -> float:
        return self.params.sigma

    @property
    def log_likelihood(self) -> float:
        return self.params.log_likelihood

    @property
    def converged(self) -> bool:
        return self.params.converged

    def summary(self) -> str:
        params = self.params
        lines = [
            "Penalized cubic regression spline fitted as a mixed model (ML)",
            "",
            f" knots: {len(params.knots)}, n: {params.n_obs}",
            f" tau: {params.tau:.6g}, sigma: {params.sigma:.6g}",
            f" lambda = sigma^2 / tau^2: {params.lam:.6g}",
            f" logLik: {params.log_likelihood:.4f}",
            " fixed effects (null space): "
            + ', '.join(f'{b:.4f}' for b in np.atleast_1d(params.fixed_coefficients)),
        ]
        if not params.converged:
            lines.append("")
            lines.append("WARNING: Model did not converge")
        return '\n'.join(lines)

    def __repr__(self) -> str:
        return (
            f"SplineMixedSolution(k={len(self.params.knots)}, "
            f"lam={self.params.lam:.4g})"
        )
