"""
Generic result container for all pymixgam computations.

Every fit returns its domain-specific parameter payload wrapped in the
same envelope, so timing, convergence metadata and warnings are reported
uniformly by the mixed-model and spline solvers.

Design decisions:
    - Generic over parameter payload P
    - info dict for flexible metadata (converged, iterations, diagnostics)
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True) for reproducibility
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for a fit.

    Type Parameters:
        P: The domain-specific parameter payload type

    Attributes:
        params: Domain-specific parameters (coefficients, variances, etc.)
        info: Structured metadata (method, convergence, diagnostics)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the routine that produced this result
        warnings: Non-fatal issues encountered during computation

    Examples:
        >>> Result(
        ...     params=PenalizedSplineParams(...),
        ...     info={'method': 'augmented_qr', 'lambda': 1e-4},
        ...     timing={'total_seconds': 0.01},
        ...     backend_name='cpu_penalized_spline'
        ... )

        >>> Result(
        ...     params=MixedMLParams(...),
        ...     info={'method': 'ML', 'converged': True, 'n_iter': 87},
        ...     timing={'total_seconds': 0.5, 'optimization': 0.45},
        ...     backend_name='cpu_mixed_ml'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
