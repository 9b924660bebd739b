"""
Tolerance tiers and numeric thresholds.

Defines precision expectations for comparing results and the defaults
used by the optimizer and the eigen-reparameterization:
- EXACT: two algebraically identical computations (ridge vs augmented QR)
- LIKELIHOOD: the two likelihood formulations
- REFERENCE: estimates compared against an external mixed-model library

Used by the solvers, the walkthrough and the test suite.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ToleranceTier:
    """Tolerance specification for numerical comparison."""
    rtol: float
    atol: float
    name: str
    description: str


# Algebraically identical computations in double precision
EXACT = ToleranceTier(
    rtol=1e-8,
    atol=1e-10,
    name='exact',
    description='Same quantity computed along two exact algebraic routes',
)

# Decorrelation vs direct multivariate-normal likelihood
LIKELIHOOD = ToleranceTier(
    rtol=1e-6,
    atol=1e-8,
    name='likelihood',
    description='Cholesky and multivariate-normal negative log-likelihoods',
)

# Optimizer output compared against a reference library
REFERENCE = ToleranceTier(
    rtol=5e-2,
    atol=1e-6,
    name='reference',
    description='Variance components and fixed effects vs reference fit',
)

# Nelder-Mead xatol/fatol. Looser values give visibly different
# variance-component estimates.
OPTIMIZER_TOL = 1e-10

# Simplex iterations; the 2-parameter problem converges in a few hundred
OPTIMIZER_MAX_ITER = 5000

# Eigenvalues with |lambda| <= EIGEN_ZERO_RTOL * max|lambda| count as zero
EIGEN_ZERO_RTOL = 1e-10

# Objective value returned where the marginal covariance is not PD
INVALID_OBJECTIVE = float('inf')

# GCV is infinite once n - edf <= GCV_EDF_RTOL * n (interpolating fit)
GCV_EDF_RTOL = 1e-8
