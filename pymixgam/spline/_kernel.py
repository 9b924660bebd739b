"""
Reproducing kernel of the cubic smoothing spline on [0, 1].

    R(x, z) = [(z - ½)² - 1/12][(x - ½)² - 1/12] / 4
              - [(|x - z| - ½)⁴ - ½(|x - z| - ½)² + 7/240] / 24

References:
    Gu, C. (2002). Smoothing Spline ANOVA Models. Springer. Section 2.3.
    Wood, S. N. (2006). Generalized Additive Models: An Introduction
    with R. Chapman & Hall/CRC. Section 3.2.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray


def rk(x: ArrayLike, z: ArrayLike) -> NDArray:
    """Evaluate R(x, z) elementwise with numpy broadcasting.

    Both arguments must already be scaled to [0, 1].

    Example:
        >>> rk(x[:, None], knots[None, :])   # (n, k) kernel block
    """
    x = np.asarray(x, dtype=np.float64)
    z = np.asarray(z, dtype=np.float64)
    d = np.abs(x - z) - 0.5
    return (((z - 0.5)**2 - 1.0 / 12.0) * ((x - 0.5)**2 - 1.0 / 12.0) / 4.0
            - (d**4 - d**2 / 2.0 + 7.0 / 240.0) / 24.0)
