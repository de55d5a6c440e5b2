"""
Flat curves implementing the market data protocols.

These are deliberately simple: continuously compounded flat rates measured
with Actual/365 Fixed. They are enough to drive the simulators in tests and
demos.
"""

import math

from mc_valuation.market.sources import DiscountingSource
from mc_valuation.primitives.dates import ACT_365_FIXED, Date, DayCountConvention
from mc_valuation.primitives.observables import (
    Currency,
    CurrencyPair,
    FloatingIndex,
    ReferenceEntity,
)


class FlatDiscountCurve:
    """
    Discount curve with a single continuously compounded rate.

    Parameters
    ----------
    anchor : Date
        Date at which the discount factor is 1
    rate : float
        Continuously compounded zero rate
    currency : Currency
        Currency of the curve
    day_count : DayCountConvention, optional
        Used to measure time from the anchor (default: Actual/365 Fixed)
    """

    def __init__(
        self,
        anchor: Date,
        rate: float,
        currency: Currency,
        day_count: DayCountConvention = ACT_365_FIXED
    ):
        self._anchor = anchor
        self.rate = rate
        self._currency = currency
        self.day_count = day_count

    def discount_factor(self, date: Date) -> float:
        return math.exp(-self.rate * self.day_count.year_fraction(self._anchor, date))

    def currency(self) -> Currency:
        return self._currency

    def anchor_date(self) -> Date:
        return self._anchor

    def __repr__(self) -> str:
        return f"FlatDiscountCurve({self._currency}, rate={self.rate})"


class FlatForwardRateCurve:
    """Forecast curve that returns the same forward rate for every fixing date."""

    def __init__(self, index: FloatingIndex, rate: float):
        self._index = index
        self.rate = rate

    def forward_rate(self, date: Date) -> float:
        return self.rate

    def floating_index(self) -> FloatingIndex:
        return self._index

    def __repr__(self) -> str:
        return f"FlatForwardRateCurve({self._index}, rate={self.rate})"


class ForwardFXCurve:
    """
    FX forwards from spot and two discount curves by covered interest parity.

    ``fx_rate(date) = spot * df_base(date) / df_counter(date)`` in units of the
    counter currency per unit of the base currency.
    """

    def __init__(
        self,
        base_curve: DiscountingSource,
        counter_curve: DiscountingSource,
        spot: float
    ):
        if spot <= 0:
            raise ValueError("FX spot must be positive")
        self._pair = CurrencyPair(base_curve.currency(), counter_curve.currency())
        self.base_curve = base_curve
        self.counter_curve = counter_curve
        self.spot = spot

    def fx_rate(self, date: Date) -> float:
        return (
            self.spot
            * self.base_curve.discount_factor(date)
            / self.counter_curve.discount_factor(date)
        )

    def currency_pair(self) -> CurrencyPair:
        return self._pair

    def __repr__(self) -> str:
        return f"ForwardFXCurve({self._pair}, spot={self.spot})"


class FlatHazardCurve:
    """
    Survival curve with a constant hazard rate.

    ``survival_probability(date) = exp(-hazard * t)`` with t the Actual/365
    year fraction from the anchor. Dates before the anchor survive with
    probability 1.
    """

    def __init__(self, entity: ReferenceEntity, anchor: Date, hazard_rate: float):
        if hazard_rate <= 0:
            raise ValueError("hazard_rate must be positive")
        self._entity = entity
        self._anchor = anchor
        self.hazard_rate = hazard_rate

    def survival_probability(self, date: Date) -> float:
        t = max(ACT_365_FIXED.year_fraction(self._anchor, date), 0.0)
        return math.exp(-self.hazard_rate * t)

    def reference_entity(self) -> ReferenceEntity:
        return self._entity

    def anchor_date(self) -> Date:
        return self._anchor

    def __repr__(self) -> str:
        return f"FlatHazardCurve({self._entity}, hazard_rate={self.hazard_rate})"
