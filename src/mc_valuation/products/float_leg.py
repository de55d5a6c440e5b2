"""
Floating rate leg.
"""

from collections.abc import Sequence

import numpy as np

from mc_valuation.primitives.cashflows import Cashflow
from mc_valuation.primitives.dates import Date
from mc_valuation.primitives.observables import Currency, MarketObservable
from mc_valuation.products.base import Product


class FloatLeg(Product):
    """
    A schedule of floating coupons.

    Coupon i pays ``notionals[i] * accrual_fractions[i] * (index_i + spreads[i])``
    on ``payment_dates[i]``, where ``index_i`` is the value of
    ``floating_indices[i]`` fixed on ``reset_dates[i]``.
    """

    def __init__(
        self,
        currency: Currency,
        payment_dates: Sequence[Date],
        notionals: Sequence[float],
        reset_dates: Sequence[Date],
        floating_indices: Sequence[MarketObservable],
        spreads: Sequence[float],
        accrual_fractions: Sequence[float]
    ):
        super().__init__()
        n = len(payment_dates)
        lengths = {
            "notionals": len(notionals),
            "reset_dates": len(reset_dates),
            "floating_indices": len(floating_indices),
            "spreads": len(spreads),
            "accrual_fractions": len(accrual_fractions),
        }
        for name, length in lengths.items():
            if length != n:
                raise ValueError(
                    f"{name} has {length} entries but there are {n} payment dates"
                )

        self.currency = currency
        self.payment_dates = list(payment_dates)
        self.notionals = np.asarray(notionals, dtype=float)
        self.reset_dates = list(reset_dates)
        self.floating_indices = list(floating_indices)
        self.spreads = np.asarray(spreads, dtype=float)
        self.accrual_fractions = np.asarray(accrual_fractions, dtype=float)
        self._index_values = np.full(n, np.nan)

    def _live_coupons(self, observable: MarketObservable | None = None) -> list[int]:
        return [
            i for i, payment_date in enumerate(self.payment_dates)
            if self.is_future(payment_date)
            and (observable is None or self.floating_indices[i] == observable)
        ]

    def reset(self) -> None:
        self._index_values = np.full(len(self.payment_dates), np.nan)

    def get_required_indices(self) -> list[MarketObservable]:
        return list(dict.fromkeys(self.floating_indices))

    def get_required_index_dates(self, observable: MarketObservable) -> list[Date]:
        return [self.reset_dates[i] for i in self._live_coupons(observable)]

    def set_index_values(self, observable: MarketObservable, values: Sequence[float]) -> None:
        coupons = self._live_coupons(observable)
        self._check_length(observable, values, len(coupons))
        self._index_values[coupons] = values

    def get_cashflows(self) -> list[Cashflow]:
        cashflows = []
        for i in self._live_coupons():
            amount = self.notionals[i] * self.accrual_fractions[i] * (
                self._index_values[i] + self.spreads[i]
            )
            cashflows.append(Cashflow(self.payment_dates[i], float(amount), self.currency))
        return cashflows

    def get_cashflow_currencies(self) -> list[Currency]:
        return [self.currency]

    def get_cashflow_dates(self, currency: Currency) -> list[Date]:
        if currency != self.currency:
            return []
        return [self.payment_dates[i] for i in self._live_coupons()]

    def __repr__(self) -> str:
        indices = ", ".join(str(obs) for obs in self.get_required_indices())
        return f"FloatLeg({self.currency}, {len(self.payment_dates)} coupons on {indices})"
