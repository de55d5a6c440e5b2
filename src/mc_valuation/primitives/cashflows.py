"""
Cashflows emitted by products.
"""

from dataclasses import dataclass

from mc_valuation.primitives.dates import Date
from mc_valuation.primitives.observables import Currency


@dataclass(frozen=True)
class Cashflow:
    """
    A nominal amount paid on a date in a currency.

    Attributes
    ----------
    date : Date
        Payment date
    amount : float
        Nominal amount in ``currency`` (negative for payments made)
    currency : Currency
        Currency of the amount
    """
    date: Date
    amount: float
    currency: Currency
