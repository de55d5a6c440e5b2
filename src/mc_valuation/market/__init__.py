"""
Market data interfaces and simple curve implementations.
"""

from mc_valuation.market.curves import (
    FlatDiscountCurve,
    FlatForwardRateCurve,
    FlatHazardCurve,
    ForwardFXCurve,
)
from mc_valuation.market.sources import (
    DiscountingSource,
    FloatingRateSource,
    FXSource,
    SurvivalProbabilitySource,
)

__all__ = [
    "DiscountingSource",
    "FXSource",
    "FlatDiscountCurve",
    "FlatForwardRateCurve",
    "FlatHazardCurve",
    "FloatingRateSource",
    "ForwardFXCurve",
    "SurvivalProbabilitySource",
]
