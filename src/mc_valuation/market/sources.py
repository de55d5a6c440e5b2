"""
Interfaces of the market data collaborators used by the simulators.

Curve construction is not part of this package; anything that implements
these protocols can be plugged into a simulator.
"""

from typing import Protocol

from mc_valuation.primitives.dates import Date
from mc_valuation.primitives.observables import (
    Currency,
    CurrencyPair,
    FloatingIndex,
    ReferenceEntity,
)


class DiscountingSource(Protocol):
    """Discount factors in one currency from an anchor date."""

    def discount_factor(self, date: Date) -> float:
        ...

    def currency(self) -> Currency:
        ...

    def anchor_date(self) -> Date:
        ...


class FloatingRateSource(Protocol):
    """Forward fixings of one floating rate index."""

    def forward_rate(self, date: Date) -> float:
        ...

    def floating_index(self) -> FloatingIndex:
        ...


class FXSource(Protocol):
    """Forward FX rates of one currency pair."""

    def fx_rate(self, date: Date) -> float:
        ...

    def currency_pair(self) -> CurrencyPair:
        ...


class SurvivalProbabilitySource(Protocol):
    """Survival probabilities of one reference entity."""

    def survival_probability(self, date: Date) -> float:
        ...

    def reference_entity(self) -> ReferenceEntity:
        ...

    def anchor_date(self) -> Date:
        ...
