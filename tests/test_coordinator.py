"""
Tests for the valuation coordinator.
"""

import math

import numpy as np
import pytest

from mc_valuation.analytics.black_scholes import bs_price
from mc_valuation.config import SimulationConfig
from mc_valuation.errors import CurrencyMismatchError, UnresolvedObservableError
from mc_valuation.market.curves import (
    FlatDiscountCurve,
    FlatForwardRateCurve,
    FlatHazardCurve,
    ForwardFXCurve,
)
from mc_valuation.primitives.dates import Date
from mc_valuation.primitives.observables import JIBAR3M, USD, ZAR, ReferenceEntity, Share
from mc_valuation.products.equity_options import EuropeanOption
from mc_valuation.products.float_leg import FloatLeg
from mc_valuation.simulators.base import SimulatorState
from mc_valuation.simulators.black_equity import SimpleBlackEquity
from mc_valuation.simulators.credit_fx import DeterministicCreditWithFXJump
from mc_valuation.simulators.deterministic_curves import DeterministicCurves
from mc_valuation.valuation.coordinator import Coordinator

VALUE_DATE = Date(2016, 8, 28)
EXPIRY = Date(2017, 8, 28)
SHARE = Share("ABC")


def make_equity(spot=100.0, vol=0.22, seed=None, **kwargs):
    return SimpleBlackEquity(VALUE_DATE, SHARE, spot, vol, 0.07, 0.02, seed=seed, **kwargs)


def make_curves(rate=0.07):
    return DeterministicCurves(FlatDiscountCurve(VALUE_DATE, rate, ZAR))


class TestConfiguration:
    """Test coordinator construction and configuration."""

    def test_config_validation(self):
        """Test that invalid settings are rejected."""
        with pytest.raises(ValueError, match="n_paths must be positive"):
            SimulationConfig(n_paths=0)
        with pytest.raises(ValueError, match="n_workers must be positive"):
            SimulationConfig(n_paths=10, n_workers=0)
        with pytest.raises(ValueError, match="regression_order must be at least 2"):
            SimulationConfig(n_paths=10, regression_order=1)

    def test_invalid_paths(self):
        """Test that the coordinator validates its settings."""
        with pytest.raises(ValueError, match="n_paths must be positive"):
            Coordinator(make_curves(), [make_equity()], n_paths=-5)

    def test_from_config(self):
        """Test building a coordinator from a config."""
        config = SimulationConfig(n_paths=123, n_workers=2, regression_order=5)
        coordinator = Coordinator.from_config(make_curves(), [make_equity()], config)
        assert coordinator.n_paths == 123
        assert coordinator.config == config

    def test_numeraire_is_appended(self):
        """Test that the numeraire joins the simulators once."""
        curves = make_curves()
        equity = make_equity()
        assert Coordinator(curves, [equity], 10).simulators == [equity, curves]
        assert Coordinator(curves, [curves, equity], 10).simulators == [curves, equity]

    def test_numeraire_capability_required(self):
        """Test that the numeraire must provide a numeraire."""
        with pytest.raises(TypeError, match="does not provide a numeraire"):
            Coordinator(make_equity(), [], 10)

    def test_empty_portfolio(self):
        """Test that there must be something to value."""
        coordinator = Coordinator(make_curves(), [make_equity()], 10)
        with pytest.raises(ValueError, match="portfolio must not be empty"):
            coordinator.value([], VALUE_DATE)


class TestResolution:
    """Test binding of observables to simulators."""

    def test_first_match_wins(self):
        """Test that the first simulator providing an observable is used."""
        first = make_equity(spot=100.0, vol=0.0)
        second = make_equity(spot=200.0, vol=0.0)
        coordinator = Coordinator(make_curves(), [first, second], n_paths=2)
        option = EuropeanOption(SHARE, 100.0, EXPIRY, "call")

        bindings = coordinator.resolve([option])
        assert bindings.provider_of(SHARE) == 0
        assert bindings.product_observables == [[bindings.handle(SHARE)]]

        result = coordinator.value([option], VALUE_DATE)
        expected = bs_price(100.0, 100.0, 0.07, 1.0, 0.0, "call", q=0.02)
        assert result.price == pytest.approx(expected)

    def test_shared_observable_has_one_handle(self):
        """Test that products requiring the same observable share its handle."""
        coordinator = Coordinator(make_curves(), [make_equity()], n_paths=2)
        options = [
            EuropeanOption(SHARE, 90.0, EXPIRY, "call"),
            EuropeanOption(SHARE, 110.0, EXPIRY, "put"),
        ]
        bindings = coordinator.resolve(options)
        assert bindings.observables == [SHARE]
        assert bindings.product_observables == [[0], [0]]
        assert bindings.handles == {SHARE: 0}
        assert bindings.handle(SHARE) == 0
        with pytest.raises(KeyError):
            bindings.handle(Share("XYZ"))

    def test_unresolved_observable_fails_before_simulation(self):
        """Test that a missing provider is reported before any path runs."""
        equity = make_equity()
        curves = make_curves()
        coordinator = Coordinator(curves, [equity], n_paths=10)
        option = EuropeanOption(Share("XYZ"), 100.0, EXPIRY)

        with pytest.raises(UnresolvedObservableError) as exc_info:
            coordinator.value([option], VALUE_DATE)
        assert exc_info.value.product is option
        assert exc_info.value.observable == Share("XYZ")
        assert equity.state == SimulatorState.CREATED
        assert curves.state == SimulatorState.CREATED


class TestValuation:
    """Test Monte Carlo valuations against known values."""

    @pytest.mark.parametrize("option_type", ["call", "put"])
    def test_reference_scenario(self, option_type):
        """Test 10,000 stratified paths against Black-Scholes to within 1%."""
        n_paths = 10000
        equity = make_equity(strata=n_paths)
        coordinator = Coordinator(make_curves(), [equity], n_paths=n_paths)
        option = EuropeanOption(SHARE, 100.0, EXPIRY, option_type)
        result = coordinator.value([option], VALUE_DATE)

        expected = bs_price(100.0, 100.0, 0.07, 1.0, 0.22, option_type, q=0.02)

        rel_error = abs(result.price - expected) / expected
        assert rel_error < 0.01, f"Relative error {rel_error:.4f} too large"
        assert result.n_paths == n_paths

    def test_reference_scenario_antithetic(self):
        """Test 10,000 antithetic paths against Black-Scholes."""
        coordinator = Coordinator(make_curves(), [make_equity(antithetic=True)], n_paths=10000)
        option = EuropeanOption(SHARE, 100.0, EXPIRY, "call")
        result = coordinator.value([option], VALUE_DATE)

        expected = bs_price(100.0, 100.0, 0.07, 1.0, 0.22, "call", q=0.02)

        # the reported stderr treats the pairs as independent paths
        assert abs(result.price - expected) < 3 * result.stderr

    @pytest.mark.parametrize("option_type", ["call", "put"])
    def test_converges_to_black_scholes(self, option_type):
        """Test the MC price of a European option against Black-Scholes."""
        coordinator = Coordinator(make_curves(), [make_equity()], n_paths=50000)
        option = EuropeanOption(SHARE, 100.0, EXPIRY, option_type)
        result = coordinator.value([option], VALUE_DATE)

        expected = bs_price(100.0, 100.0, 0.07, 1.0, 0.22, option_type, q=0.02)

        # MC price should be within 3 standard errors of BS price
        assert abs(result.price - expected) < 3 * result.stderr

        # Also check relative error is small (within 2%)
        rel_error = abs(result.price - expected) / expected
        assert rel_error < 0.02, f"Relative error {rel_error:.4f} too large"
        assert result.n_paths == 50000

    def test_reproducible(self):
        """Test that repeating a valuation gives the same result."""
        option = EuropeanOption(SHARE, 100.0, EXPIRY)
        coordinator = Coordinator(make_curves(), [make_equity()], n_paths=500)
        first = coordinator.value([option], VALUE_DATE)
        second = coordinator.value([option], VALUE_DATE)
        assert first.price == second.price
        assert first.stderr == second.stderr

    def test_portfolio_is_sum_of_products(self):
        """Test that per-path values add up across products."""
        call = EuropeanOption(SHARE, 100.0, EXPIRY, "call")
        put = EuropeanOption(SHARE, 100.0, EXPIRY, "put")
        coordinator = Coordinator(make_curves(), [make_equity()], n_paths=1000)
        result, path_values = coordinator.value_with_details([call, put], VALUE_DATE)

        _, call_values = coordinator.value_with_details([call], VALUE_DATE)
        _, put_values = coordinator.value_with_details([put], VALUE_DATE)
        np.testing.assert_allclose(path_values, call_values + put_values)
        assert result.price == pytest.approx(np.mean(path_values))

    def test_float_leg(self):
        """Test a float leg against its closed form value."""
        curves = make_curves(0.07)
        curves.add_rate_forecast(FlatForwardRateCurve(JIBAR3M, 0.08))
        payment_dates = [VALUE_DATE.add_months(m) for m in (0, 3, 6, 9, 12)]
        leg = FloatLeg(
            ZAR,
            payment_dates,
            notionals=[1e6] * 5,
            reset_dates=[d.add_months(-3) for d in payment_dates],
            floating_indices=[JIBAR3M] * 5,
            spreads=[0.005] * 5,
            accrual_fractions=[0.25] * 5,
        )
        result = Coordinator(curves, [], n_paths=20).value([leg], VALUE_DATE)

        expected = sum(
            1e6 * 0.25 * 0.085 * math.exp(-0.07 * (d - VALUE_DATE) / 365.0)
            for d in payment_dates[1:]
        )
        assert result.price == pytest.approx(expected)
        assert result.stderr == pytest.approx(0.0, abs=1e-9)

    def test_no_future_cashflows(self):
        """Test that a portfolio with only past flows is worth zero."""
        option = EuropeanOption(SHARE, 100.0, VALUE_DATE - 30)
        result = Coordinator(make_curves(), [make_equity()], n_paths=50).value(
            [option], VALUE_DATE
        )
        assert result.price == 0.0
        assert result.stderr == 0.0

    def test_single_path(self):
        """Test that one path has no standard error."""
        option = EuropeanOption(SHARE, 100.0, EXPIRY)
        result = Coordinator(make_curves(), [make_equity()], n_paths=1).value(
            [option], VALUE_DATE
        )
        assert result.n_paths == 1
        assert math.isnan(result.stderr)

    def test_currency_mismatch(self):
        """Test that flows in another currency than the numeraire are rejected."""
        option = EuropeanOption(SHARE, 100.0, EXPIRY, currency=USD)
        coordinator = Coordinator(make_curves(), [make_equity()], n_paths=10)
        with pytest.raises(CurrencyMismatchError) as exc_info:
            coordinator.value([option], VALUE_DATE)
        error = exc_info.value
        assert error.product is option
        assert error.date == EXPIRY
        assert error.cashflow_currency == USD
        assert error.numeraire_currency == ZAR

    def test_credit_simulator_as_numeraire(self):
        """Test valuing under the numeraire of the credit and FX simulator."""
        zar = FlatDiscountCurve(VALUE_DATE, 0.07, ZAR)
        usd = FlatDiscountCurve(VALUE_DATE, 0.02, USD)
        credit = DeterministicCreditWithFXJump(
            FlatHazardCurve(ReferenceEntity("Acme"), VALUE_DATE, 0.05),
            USD, ForwardFXCurve(usd, zar, 15.0), zar,
            fx_vol=0.15, rel_jump_size_in_default=0.2, expected_recovery_rate=0.4,
        )
        option = EuropeanOption(SHARE, 100.0, EXPIRY)

        _, under_credit = Coordinator(credit, [make_equity()], n_paths=200).value_with_details(
            [option], VALUE_DATE
        )
        _, under_curves = Coordinator(make_curves(), [make_equity()], n_paths=200).value_with_details(
            [option], VALUE_DATE
        )
        np.testing.assert_allclose(under_credit, under_curves)

    def test_repr(self):
        """Test the string form of the result."""
        result = Coordinator(make_curves(), [make_equity()], n_paths=100).value(
            [EuropeanOption(SHARE, 100.0, EXPIRY)], VALUE_DATE
        )
        text = repr(result)
        assert "price=" in text
        assert "n_paths=100" in text


class TestParallel:
    """Test that worker processes reproduce the serial valuation."""

    def test_parallel_matches_serial(self):
        """Test path values computed in two workers against one process."""
        option = EuropeanOption(SHARE, 100.0, EXPIRY, "put")
        serial, serial_values = Coordinator(
            make_curves(), [make_equity()], n_paths=301
        ).value_with_details([option], VALUE_DATE)
        parallel, parallel_values = Coordinator(
            make_curves(), [make_equity()], n_paths=301, n_workers=2
        ).value_with_details([option], VALUE_DATE)

        np.testing.assert_allclose(parallel_values, serial_values)
        assert parallel.price == pytest.approx(serial.price)
        assert parallel.stderr == pytest.approx(serial.stderr)

    def test_errors_from_workers(self):
        """Test that errors raised in a worker reach the caller."""
        option = EuropeanOption(SHARE, 100.0, EXPIRY, currency=USD)
        coordinator = Coordinator(make_curves(), [make_equity()], n_paths=20, n_workers=2)
        with pytest.raises(CurrencyMismatchError):
            coordinator.value([option], VALUE_DATE)
