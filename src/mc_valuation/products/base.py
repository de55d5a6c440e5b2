"""
Product contracts.

A product tells the coordinator which observables it needs on which dates,
receives the simulated values for the current path and returns the
resulting cashflows. Only flows strictly after the value date exist: past
flows are dropped, never reported with a zero amount.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

import numpy as np

from mc_valuation.primitives.cashflows import Cashflow
from mc_valuation.primitives.dates import Date
from mc_valuation.primitives.observables import Currency, MarketObservable


class Product(ABC):
    """
    Base class for products valued by simulation.

    Call order within a valuation: ``set_value_date``, ``reset``, then for
    each path ``set_index_values`` for every required observable followed by
    ``get_cashflows``.
    """

    def __init__(self):
        self.value_date: Date | None = None

    def set_value_date(self, value_date: Date) -> None:
        self.value_date = value_date

    def is_future(self, date: Date) -> bool:
        """Whether ``date`` is strictly after the value date."""
        if self.value_date is None:
            raise ValueError(f"{type(self).__name__}: set_value_date must be called first")
        return date > self.value_date

    @abstractmethod
    def reset(self) -> None:
        """Clear index values collected for a previous path."""

    @abstractmethod
    def get_required_indices(self) -> list[MarketObservable]:
        """Distinct observables this product needs."""

    @abstractmethod
    def get_required_index_dates(self, observable: MarketObservable) -> list[Date]:
        """Ordered dates at which ``observable`` is needed, given the value date."""

    @abstractmethod
    def set_index_values(self, observable: MarketObservable, values: Sequence[float]) -> None:
        """Values of ``observable`` in the order of ``get_required_index_dates``."""

    @abstractmethod
    def get_cashflows(self) -> list[Cashflow]:
        """Cashflows after the value date on the current path."""

    @abstractmethod
    def get_cashflow_currencies(self) -> list[Currency]:
        ...

    @abstractmethod
    def get_cashflow_dates(self, currency: Currency) -> list[Date]:
        ...

    def _check_length(self, observable: MarketObservable, values: Sequence[float],
                      expected: int) -> None:
        if len(values) != expected:
            raise ValueError(
                f"{type(self).__name__}: expected {expected} values for {observable}, "
                f"got {len(values)}"
            )


class EarlyExerciseProduct(Product):
    """
    A product the holder may exercise on a schedule of dates.

    ``get_cashflows`` returns the flows paid if the product is never
    exercised. Exercising on an exercise date cancels those flows strictly
    after that date and pays ``get_exercise_cashflows`` instead. The
    coordinator estimates continuation values by regression; the exercise
    decision itself belongs to the product (``should_exercise``).
    """

    @abstractmethod
    def get_exercise_dates(self) -> list[Date]:
        """Exercise dates after the value date, in increasing order."""

    @abstractmethod
    def get_exercise_cashflows(self, exercise_index: int) -> list[Cashflow]:
        """Flows received on the current path when exercising on date ``exercise_index``."""

    def should_exercise(
        self,
        exercise_index: int,
        exercise_value: np.ndarray,
        continuation_value: np.ndarray
    ) -> np.ndarray:
        """
        Exercise decision per path.

        Parameters
        ----------
        exercise_index : int
            Position in ``get_exercise_dates``
        exercise_value : np.ndarray
            Present value of exercising on each path
        continuation_value : np.ndarray
            Regression estimate of the present value of not exercising

        Returns
        -------
        np.ndarray
            Boolean mask of the paths that exercise
        """
        return (exercise_value > 0.0) & (exercise_value > continuation_value)
