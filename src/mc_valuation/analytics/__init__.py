"""
Analytical reference prices.
"""

from mc_valuation.analytics.black_scholes import bs_price, norm_cdf

__all__ = ["bs_price", "norm_cdf"]
