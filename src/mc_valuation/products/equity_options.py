"""
Options on a single share: European and Bermudan.
"""

from collections.abc import Sequence

import numpy as np

from mc_valuation.primitives.cashflows import Cashflow
from mc_valuation.primitives.dates import Date
from mc_valuation.primitives.observables import Currency, MarketObservable, Share
from mc_valuation.products.base import EarlyExerciseProduct, Product


def _payoff_sign(option_type: str) -> float:
    if option_type not in ["call", "put"]:
        raise ValueError("option_type must be 'call' or 'put'")
    return 1.0 if option_type == "call" else -1.0


class EuropeanOption(Product):
    """
    European option paying max(S_T - K, 0) (call) or max(K - S_T, 0) (put)
    on the exercise date.

    Parameters
    ----------
    share : Share
        Underlying share
    strike : float
        Strike price K (must be > 0)
    exercise_date : Date
        Exercise and payment date
    option_type : str, optional
        'call' or 'put' (default: 'call')
    currency : Currency, optional
        Payment currency (default: the share's currency)
    """

    def __init__(
        self,
        share: Share,
        strike: float,
        exercise_date: Date,
        option_type: str = "call",
        currency: Currency | None = None
    ):
        super().__init__()
        if strike <= 0:
            raise ValueError("Strike price must be positive")
        self._sign = _payoff_sign(option_type)
        self.share = share
        self.strike = strike
        self.exercise_date = exercise_date
        self.option_type = option_type
        self.currency = currency or share.currency
        self._spot = np.nan

    def reset(self) -> None:
        self._spot = np.nan

    def get_required_indices(self) -> list[MarketObservable]:
        return [self.share]

    def get_required_index_dates(self, observable: MarketObservable) -> list[Date]:
        if observable != self.share or not self.is_future(self.exercise_date):
            return []
        return [self.exercise_date]

    def set_index_values(self, observable: MarketObservable, values: Sequence[float]) -> None:
        self._check_length(observable, values, len(self.get_required_index_dates(observable)))
        if len(values):
            self._spot = float(values[0])

    def get_cashflows(self) -> list[Cashflow]:
        if not self.is_future(self.exercise_date):
            return []
        amount = max(self._sign * (self._spot - self.strike), 0.0)
        return [Cashflow(self.exercise_date, amount, self.currency)]

    def get_cashflow_currencies(self) -> list[Currency]:
        return [self.currency]

    def get_cashflow_dates(self, currency: Currency) -> list[Date]:
        if currency != self.currency or not self.is_future(self.exercise_date):
            return []
        return [self.exercise_date]

    def __repr__(self) -> str:
        return (
            f"EuropeanOption({self.share}, strike={self.strike}, "
            f"{self.option_type}, {self.exercise_date})"
        )


class BermudanOption(EarlyExerciseProduct):
    """
    Option on a share exercisable on any of a set of dates.

    Exercising on date t pays the intrinsic value max(±(S_t - K), 0) on t.
    Nothing is paid if the option is never exercised.

    Parameters
    ----------
    share : Share
        Underlying share
    strike : float
        Strike price K (must be > 0)
    exercise_dates : Sequence[Date]
        Dates on which the holder may exercise
    option_type : str, optional
        'call' or 'put' (default: 'put')
    currency : Currency, optional
        Payment currency (default: the share's currency)
    """

    def __init__(
        self,
        share: Share,
        strike: float,
        exercise_dates: Sequence[Date],
        option_type: str = "put",
        currency: Currency | None = None
    ):
        super().__init__()
        if strike <= 0:
            raise ValueError("Strike price must be positive")
        if not exercise_dates:
            raise ValueError("At least one exercise date is required")
        self._sign = _payoff_sign(option_type)
        self.share = share
        self.strike = strike
        self.exercise_dates = sorted(set(exercise_dates))
        self.option_type = option_type
        self.currency = currency or share.currency
        self._spots = np.array([])

    def get_exercise_dates(self) -> list[Date]:
        return [d for d in self.exercise_dates if self.is_future(d)]

    def reset(self) -> None:
        self._spots = np.full(len(self.get_exercise_dates()), np.nan)

    def get_required_indices(self) -> list[MarketObservable]:
        return [self.share]

    def get_required_index_dates(self, observable: MarketObservable) -> list[Date]:
        if observable != self.share:
            return []
        return self.get_exercise_dates()

    def set_index_values(self, observable: MarketObservable, values: Sequence[float]) -> None:
        self._check_length(observable, values, len(self.get_exercise_dates()))
        self._spots = np.asarray(values, dtype=float)

    def get_cashflows(self) -> list[Cashflow]:
        return []

    def get_exercise_cashflows(self, exercise_index: int) -> list[Cashflow]:
        date = self.get_exercise_dates()[exercise_index]
        amount = max(self._sign * (self._spots[exercise_index] - self.strike), 0.0)
        return [Cashflow(date, float(amount), self.currency)]

    def get_cashflow_currencies(self) -> list[Currency]:
        return [self.currency]

    def get_cashflow_dates(self, currency: Currency) -> list[Date]:
        if currency != self.currency:
            return []
        return self.get_exercise_dates()

    def __repr__(self) -> str:
        return (
            f"BermudanOption({self.share}, strike={self.strike}, {self.option_type}, "
            f"{len(self.exercise_dates)} exercise dates)"
        )
