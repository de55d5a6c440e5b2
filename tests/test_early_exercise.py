"""
Tests for early exercise products valued by regression.
"""

import math

import numpy as np
import pytest

from mc_valuation.analytics.black_scholes import bs_price
from mc_valuation.errors import RegressionDegeneracyError
from mc_valuation.market.curves import FlatDiscountCurve
from mc_valuation.primitives.cashflows import Cashflow
from mc_valuation.primitives.dates import Date
from mc_valuation.primitives.observables import ZAR, Share
from mc_valuation.products.base import EarlyExerciseProduct
from mc_valuation.products.equity_options import BermudanOption, EuropeanOption
from mc_valuation.simulators.black_equity import SimpleBlackEquity
from mc_valuation.simulators.deterministic_curves import DeterministicCurves
from mc_valuation.valuation.coordinator import Coordinator

VALUE_DATE = Date(2016, 8, 28)
SHARE = Share("ABC")
MONTHLY = [VALUE_DATE.add_months(m) for m in range(1, 13)]
QUARTERLY = [VALUE_DATE.add_months(m) for m in (3, 6, 9, 12)]


class CancellableAnnuity(EarlyExerciseProduct):
    """Fixed payments the holder may cancel for free on the exercise dates."""

    def __init__(self, payment_dates, amount, exercise_dates, cancel_at=None):
        super().__init__()
        self.payment_dates = payment_dates
        self.amount = amount
        self.exercise_dates = exercise_dates
        self.cancel_at = cancel_at

    def get_exercise_dates(self):
        return [d for d in self.exercise_dates if self.is_future(d)]

    def get_exercise_cashflows(self, exercise_index):
        return []

    def should_exercise(self, exercise_index, exercise_value, continuation_value):
        if self.cancel_at is None:
            return super().should_exercise(exercise_index, exercise_value, continuation_value)
        return np.full(len(exercise_value), exercise_index == self.cancel_at)

    def reset(self):
        pass

    def get_required_indices(self):
        return []

    def get_required_index_dates(self, observable):
        return []

    def set_index_values(self, observable, values):
        pass

    def get_cashflows(self):
        return [Cashflow(d, self.amount, ZAR) for d in self.get_cashflow_dates(ZAR)]

    def get_cashflow_currencies(self):
        return [ZAR]

    def get_cashflow_dates(self, currency):
        return [d for d in self.payment_dates if self.is_future(d)]


class ExerciseOnFirstDate(BermudanOption):
    def should_exercise(self, exercise_index, exercise_value, continuation_value):
        return np.full(len(exercise_value), exercise_index == 0)


class NeverExercise(BermudanOption):
    def should_exercise(self, exercise_index, exercise_value, continuation_value):
        return np.zeros(len(exercise_value), dtype=bool)


def make_curves(rate=0.07):
    return DeterministicCurves(FlatDiscountCurve(VALUE_DATE, rate, ZAR))


def make_equity(vol=0.22, rate=0.07, div_yield=0.02):
    return SimpleBlackEquity(VALUE_DATE, SHARE, 100.0, vol, rate, div_yield)


def discount(date, rate=0.07):
    return math.exp(-rate * (date - VALUE_DATE) / 365.0)


class TestExercisePolicy:
    """Test how exercise decisions cancel and replace cashflows."""

    @pytest.mark.parametrize("cancel_at,paid", [
        (None, QUARTERLY),
        (0, QUARTERLY[:1]),
        (1, QUARTERLY[:2]),
        (2, QUARTERLY[:3]),
    ])
    def test_cancellation(self, cancel_at, paid):
        """Test that flows on or before the exercise date are kept and later ones cancelled."""
        annuity = CancellableAnnuity(QUARTERLY, 100.0, QUARTERLY[:3], cancel_at)
        result = Coordinator(make_curves(), [], n_paths=10).value([annuity], VALUE_DATE)

        expected = sum(100.0 * discount(d) for d in paid)
        assert result.price == pytest.approx(expected)

    def test_exercise_value_replaces_continuation(self):
        """Test that exercising on the first date pays that date's intrinsic value."""
        coordinator = Coordinator(make_curves(), [make_equity()], n_paths=300)
        _, exercised = coordinator.value_with_details(
            [ExerciseOnFirstDate(SHARE, 100.0, QUARTERLY, "put")], VALUE_DATE
        )
        _, european = coordinator.value_with_details(
            [
                NeverExercise(SHARE, 100.0, QUARTERLY, "put"),
                EuropeanOption(SHARE, 100.0, QUARTERLY[0], "put"),
            ],
            VALUE_DATE,
        )
        np.testing.assert_allclose(exercised, european)

    def test_past_exercise_dates_are_ignored(self):
        """Test that only exercise dates after the value date count."""
        annuity = CancellableAnnuity(QUARTERLY, 100.0, [VALUE_DATE - 10] + QUARTERLY[:1], 0)
        result = Coordinator(make_curves(), [], n_paths=5).value([annuity], VALUE_DATE)
        assert result.price == pytest.approx(100.0 * discount(QUARTERLY[0]))


class TestBermudanOption:
    """Test Bermudan options against European references."""

    def test_put_worth_more_than_european(self):
        """Test that early exercise rights add value to a put."""
        coordinator = Coordinator(make_curves(), [make_equity()], n_paths=10000)
        bermudan = coordinator.value([BermudanOption(SHARE, 100.0, MONTHLY, "put")], VALUE_DATE)
        european = bs_price(100.0, 100.0, 0.07, 1.0, 0.22, "put", q=0.02)

        assert bermudan.price > european
        assert bermudan.price < european + 2.0

    def test_call_without_dividends_matches_european(self):
        """Test that a call on a non-dividend share is not exercised early."""
        coordinator = Coordinator(
            make_curves(0.05), [make_equity(vol=0.2, rate=0.05, div_yield=0.0)], n_paths=10000
        )
        bermudan = coordinator.value([BermudanOption(SHARE, 100.0, QUARTERLY, "call")], VALUE_DATE)
        european = bs_price(100.0, 100.0, 0.05, 1.0, 0.2, "call")

        assert abs(bermudan.price - european) < 4 * bermudan.stderr

    def test_degenerate_regression(self):
        """Test that identical regressors on every path are reported."""
        coordinator = Coordinator(make_curves(), [make_equity(vol=0.0)], n_paths=100)
        with pytest.raises(RegressionDegeneracyError) as exc_info:
            coordinator.value([BermudanOption(SHARE, 100.0, QUARTERLY, "put")], VALUE_DATE)
        assert exc_info.value.date == QUARTERLY[-1]

    def test_parallel_matches_serial(self):
        """Test that regressors merged from workers give the serial valuation."""
        option = BermudanOption(SHARE, 100.0, QUARTERLY, "put")
        serial, serial_values = Coordinator(
            make_curves(), [make_equity()], n_paths=400
        ).value_with_details([option], VALUE_DATE)
        parallel, parallel_values = Coordinator(
            make_curves(), [make_equity()], n_paths=400, n_workers=3
        ).value_with_details([option], VALUE_DATE)

        np.testing.assert_allclose(parallel_values, serial_values)
        assert parallel.price == pytest.approx(serial.price)
