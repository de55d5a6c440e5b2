"""
Standard normal quantile function for stratified sampling.
"""

import numpy as np

# Acklam's rational approximation, relative error below 1.15e-9
_CENTRAL_NUM = np.array([
    -3.969683028665376e01, 2.209460984245205e02, -2.759285104469687e02,
    1.383577518672690e02, -3.066479806614716e01, 2.506628277459239e00,
])
_CENTRAL_DEN = np.array([
    -5.447609879822406e01, 1.615858368580409e02, -1.556989798598866e02,
    6.680131188771972e01, -1.328068155288572e01, 1.0,
])
_TAIL_NUM = np.array([
    -7.784894002430293e-03, -3.223964580411365e-01, -2.400758277161838e00,
    -2.549732539343734e00, 4.374664141464968e00, 2.938163982698783e00,
])
_TAIL_DEN = np.array([
    7.784695709041462e-03, 3.224671290700398e-01, 2.445134137142996e00,
    3.754408661907416e00, 1.0,
])
_TAIL_BREAK = 0.02425


def inverse_normal_cdf(u) -> np.ndarray:
    """
    Map probabilities in [0, 1] to standard normal quantiles.

    Parameters
    ----------
    u : array_like
        Probabilities; the end points are clipped to 1e-10 and 1 - 1e-10

    Returns
    -------
    np.ndarray
        ``z`` with ``P(Z <= z) = u`` for ``Z ~ N(0, 1)``
    """
    u = np.asarray(u, dtype=float)
    if np.any(u < 0) or np.any(u > 1):
        raise ValueError("probabilities must be in [0, 1]")
    u = np.clip(u, 1e-10, 1 - 1e-10)

    z = np.empty_like(u)
    lower = u < _TAIL_BREAK
    upper = u > 1 - _TAIL_BREAK
    central = ~(lower | upper)

    q = u[central] - 0.5
    r = q * q
    z[central] = q * np.polyval(_CENTRAL_NUM, r) / np.polyval(_CENTRAL_DEN, r)

    q = np.sqrt(-2.0 * np.log(u[lower]))
    z[lower] = np.polyval(_TAIL_NUM, q) / np.polyval(_TAIL_DEN, q)

    q = np.sqrt(-2.0 * np.log1p(-u[upper]))
    z[upper] = -np.polyval(_TAIL_NUM, q) / np.polyval(_TAIL_DEN, q)

    return z
