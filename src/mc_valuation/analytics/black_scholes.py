"""
Black-Scholes closed form prices used as references for simulated values.
"""

import math


def norm_cdf(x: float) -> float:
    """
    Cumulative distribution function for standard normal distribution.

    Uses math.erf for calculation without scipy dependency.
    """
    return 0.5 * (1.0 + math.erf(x / math.sqrt(2.0)))


def bs_price(
    S0: float,
    K: float,
    r: float,
    T: float,
    sigma: float,
    option_type: str,
    q: float = 0.0
) -> float:
    """
    Compute European option price using Black-Scholes formula.

    Parameters
    ----------
    S0 : float
        Initial spot price (must be > 0)
    K : float
        Strike price (must be > 0)
    r : float
        Risk-free interest rate (continuously compounded)
    T : float
        Time to maturity in years (must be >= 0)
    sigma : float
        Volatility (annualized, must be >= 0)
    option_type : str
        'call' or 'put'
    q : float, optional
        Continuous dividend yield (default: 0)

    Returns
    -------
    float
        Option price

    Notes
    -----
    T = 0 returns the intrinsic value; sigma = 0 returns the discounted
    intrinsic value of the forward.
    """
    if S0 <= 0:
        raise ValueError("Spot price S0 must be positive")
    if K <= 0:
        raise ValueError("Strike K must be positive")
    if T < 0:
        raise ValueError("Time to maturity T must be non-negative")
    if sigma < 0:
        raise ValueError("Volatility sigma must be non-negative")
    if option_type not in ["call", "put"]:
        raise ValueError("option_type must be 'call' or 'put'")

    sign = 1.0 if option_type == "call" else -1.0

    if T == 0:
        return max(sign * (S0 - K), 0.0)

    discount = math.exp(-r * T)
    forward = S0 * math.exp((r - q) * T)

    if sigma == 0:
        return max(sign * (forward - K), 0.0) * discount

    sd = sigma * math.sqrt(T)
    d1 = (math.log(forward / K) + 0.5 * sd**2) / sd
    d2 = d1 - sd

    return discount * sign * (forward * norm_cdf(sign * d1) - K * norm_cdf(sign * d2))
