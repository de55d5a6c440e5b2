"""
Joint simulation of a single-name default and an FX rate that jumps on default.
"""

import math
from collections.abc import Sequence

import numpy as np

from mc_valuation.errors import UnsupportedQueryError
from mc_valuation.market.sources import DiscountingSource, FXSource, SurvivalProbabilitySource
from mc_valuation.primitives.dates import Date, Tenor
from mc_valuation.primitives.observables import (
    Currency,
    CurrencyPair,
    DefaultRecovery,
    DefaultTime,
    MarketObservable,
)
from mc_valuation.simulators.base import Simulator, SimulatorState

_ONE_YEAR = Tenor.from_years(1)


class DeterministicCreditWithFXJump(Simulator):
    """
    Provides an FX process and the default event of one reference entity.

    The default time is drawn by inverse transform from a flat hazard rate
    estimated from the one year survival probability:
        h = -ln SP(anchor + 1Y),   τ = -ln(U) / h

    The FX rate (value currency per unit of ``other_currency``) follows a
    driftless lognormal process rebased onto the forward at every step, and
    from the default time onwards it is reported multiplied by
    ``1 + rel_jump_size_in_default`` to approximate wrong-way risk.

    Regression variables are the FX rate, the default indicator (0 or 1) and
    the one year forward default probability.

    Parameters
    ----------
    survival_source : SurvivalProbabilitySource
        Survival curve of the reference entity
    other_currency : Currency
        The currency quoted against the value currency
    fx_source : FXSource
        Spot and forward FX for ``other_currency``/value currency
    value_currency_discount : DiscountingSource
        Discount curve of the value currency; defines the numeraire
    fx_vol : float
        FX volatility (must be >= 0)
    rel_jump_size_in_default : float
        Relative FX move on default, e.g. 0.2 for a 20% weakening of the
        value currency
    expected_recovery_rate : float
        Recovery rate revealed on default, in [0, 1]
    seed : int, optional
        Fixed model seed (default: derived from the class name)
    """

    def __init__(
        self,
        survival_source: SurvivalProbabilitySource,
        other_currency: Currency,
        fx_source: FXSource,
        value_currency_discount: DiscountingSource,
        fx_vol: float,
        rel_jump_size_in_default: float,
        expected_recovery_rate: float,
        seed: int | None = None
    ):
        if fx_vol < 0:
            raise ValueError("fx_vol must be non-negative")
        if not 0.0 <= expected_recovery_rate <= 1.0:
            raise ValueError("expected_recovery_rate must be in [0, 1]")
        super().__init__(seed)

        self.survival_source = survival_source
        self.fx_source = fx_source
        self.value_currency_discount = value_currency_discount
        self.fx_vol = fx_vol
        self.rel_jump_size_in_default = rel_jump_size_in_default
        self.recovery_rate = expected_recovery_rate

        self.value_currency = value_currency_discount.currency()
        self.currency_pair = CurrencyPair(other_currency, self.value_currency)
        if fx_source.currency_pair() != self.currency_pair:
            raise ValueError(
                f"fx_source provides {fx_source.currency_pair()}, expected {self.currency_pair}"
            )
        entity = survival_source.reference_entity()
        self.default_time = DefaultTime(entity)
        self.default_recovery = DefaultRecovery(entity)

        self.anchor_date = value_currency_discount.anchor_date()
        self.spot = fx_source.fx_rate(self.anchor_date)

        sp_one_year = survival_source.survival_probability(
            survival_source.anchor_date().add_tenor(_ONE_YEAR)
        )
        self.hazard_rate = -math.log(sp_one_year)

        self._sim_default_time = math.inf
        self._simulation: dict[int, float] = {}

    def provides_index(self, observable: MarketObservable) -> bool:
        return observable in (self.currency_pair, self.default_time, self.default_recovery)

    def _simulate(self, path_index: int) -> None:
        rng = self._generator(path_index)

        # 1 - U lies in (0, 1], so the log is finite
        u = 1.0 - rng.random()
        if self.hazard_rate > 0:
            tau = -math.log(u) / self.hazard_rate
            self._sim_default_time = self.anchor_date.value + tau * 365.0
        else:
            self._sim_default_time = math.inf

        future_dates = [d for d in self.simulation_dates if d > self.anchor_date]
        Z = rng.standard_normal(len(future_dates))

        simulation = {d.value: self.fx_source.fx_rate(d) for d in self.simulation_dates
                      if d <= self.anchor_date}
        sim_rate = self.spot
        old_fx_fwd = self.spot
        previous = self.anchor_date
        # TODO: compensate the FX drift for the expected jump (hazard rate * jump size)
        for date, dW in zip(future_dates, Z):
            dt = (date - previous) / 365.0
            new_fx_fwd = self.fx_source.fx_rate(date)
            sim_rate = sim_rate * new_fx_fwd / old_fx_fwd * np.exp(
                -0.5 * self.fx_vol**2 * dt + self.fx_vol * np.sqrt(dt) * dW
            )
            if self._sim_default_time <= date.value:
                simulation[date.value] = float(sim_rate * (1 + self.rel_jump_size_in_default))
            else:
                simulation[date.value] = float(sim_rate)
            old_fx_fwd = new_fx_fwd
            previous = date

        self._simulation = simulation

    def _fx(self, date: Date) -> float:
        try:
            return self._simulation[date.value]
        except KeyError:
            raise self._undeclared_date(self.currency_pair, date) from None

    def _get_indices(self, observable: MarketObservable, dates: list[Date]) -> list[float]:
        if observable == self.currency_pair:
            return [self._fx(d) for d in dates]

        if len(dates) > 1:
            raise UnsupportedQueryError(
                self, observable, f"{observable} must only be queried with a single date"
            )
        if observable == self.default_time:
            return [self._sim_default_time for _ in dates]
        # Recovery is only defined once the default has happened.
        return [
            self.recovery_rate if self._sim_default_time <= d.value else math.nan
            for d in dates
        ]

    def _underlying_factors(self, date: Date) -> list[float]:
        fx_rate = self._fx(date)
        default_indicator = 0.0 if date.value < self._sim_default_time else 1.0
        sp = self.survival_source.survival_probability
        fwd_default_prob = 1.0 - sp(date.add_tenor(_ONE_YEAR)) / sp(date)
        return [fx_rate, default_indicator, fwd_default_prob]

    def numeraire(self, date: Date) -> float:
        self._require_state("numeraire", SimulatorState.SIMULATED)
        return 1.0 / self.value_currency_discount.discount_factor(date)

    def numeraire_currency(self) -> Currency:
        return self.value_currency

    def set_numeraire_dates(self, dates: Sequence[Date]) -> None:
        # Deterministic discounting: any date can be read from the curve.
        self._require_state("set_numeraire_dates", SimulatorState.RESET)

    @property
    def simulated_default_time(self) -> float:
        """Default time of the current path as a (fractional) serial day number."""
        self._require_state("simulated_default_time", SimulatorState.SIMULATED)
        return self._sim_default_time

    def __repr__(self) -> str:
        return (
            f"DeterministicCreditWithFXJump({self.currency_pair}, {self.default_time}, "
            f"fx_vol={self.fx_vol}, jump={self.rel_jump_size_in_default})"
        )
