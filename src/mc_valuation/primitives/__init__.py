"""
Primitives package initialization.
"""

from mc_valuation.primitives.cashflows import Cashflow
from mc_valuation.primitives.dates import (
    ACT_360,
    ACT_365_FIXED,
    Actual360,
    Actual365Fixed,
    Date,
    DayCountConvention,
    Tenor,
)
from mc_valuation.primitives.observables import (
    EUR,
    EURIBOR6M,
    GBP,
    JIBAR3M,
    LIBOR3M,
    LIBOR6M,
    USD,
    ZAR,
    Currency,
    CurrencyPair,
    DefaultRecovery,
    DefaultTime,
    FloatingIndex,
    MarketObservable,
    ReferenceEntity,
    Share,
)

__all__ = [
    "ACT_360",
    "ACT_365_FIXED",
    "Actual360",
    "Actual365Fixed",
    "Cashflow",
    "Currency",
    "CurrencyPair",
    "Date",
    "DayCountConvention",
    "DefaultRecovery",
    "DefaultTime",
    "EUR",
    "EURIBOR6M",
    "FloatingIndex",
    "GBP",
    "JIBAR3M",
    "LIBOR3M",
    "LIBOR6M",
    "MarketObservable",
    "ReferenceEntity",
    "Share",
    "Tenor",
    "USD",
    "ZAR",
]
