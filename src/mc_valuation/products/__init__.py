"""
Products package initialization.
"""

from mc_valuation.products.base import EarlyExerciseProduct, Product
from mc_valuation.products.equity_options import BermudanOption, EuropeanOption
from mc_valuation.products.float_leg import FloatLeg

__all__ = [
    "BermudanOption",
    "EarlyExerciseProduct",
    "EuropeanOption",
    "FloatLeg",
    "Product",
]
