"""
Deterministic curve stack: forward rates and FX forwards read from curves.
"""

from collections.abc import Sequence

from mc_valuation.market.sources import DiscountingSource, FloatingRateSource, FXSource
from mc_valuation.primitives.dates import Date
from mc_valuation.primitives.observables import (
    Currency,
    CurrencyPair,
    FloatingIndex,
    MarketObservable,
)
from mc_valuation.simulators.base import Simulator, SimulatorState


class DeterministicCurves(Simulator):
    """
    Numeraire simulator with no randomness.

    Floating rate fixings and FX rates are the forwards of the registered
    curves on every path, and the numeraire is the inverse discount factor of
    ``discount_curve``, so valuations under this model have zero variance.

    Parameters
    ----------
    discount_curve : DiscountingSource
        Defines the numeraire and its currency
    """

    def __init__(self, discount_curve: DiscountingSource):
        super().__init__(seed=0)
        self.discount_curve = discount_curve
        self._forecast_curves: dict[MarketObservable, FloatingRateSource] = {}
        self._fx_curves: dict[MarketObservable, FXSource] = {}

    def add_rate_forecast(
        self, forecast_curve: FloatingRateSource | Sequence[FloatingRateSource]
    ) -> None:
        """Register one or more forward rate curves."""
        if isinstance(forecast_curve, Sequence):
            for curve in forecast_curve:
                self.add_rate_forecast(curve)
            return
        self._forecast_curves[forecast_curve.floating_index()] = forecast_curve

    def add_fx_forecast(self, fx_curve: FXSource | Sequence[FXSource]) -> None:
        """Register one or more FX forward curves."""
        if isinstance(fx_curve, Sequence):
            for curve in fx_curve:
                self.add_fx_forecast(curve)
            return
        self._fx_curves[fx_curve.currency_pair()] = fx_curve

    def provides_index(self, observable: MarketObservable) -> bool:
        if isinstance(observable, FloatingIndex):
            return observable in self._forecast_curves
        if isinstance(observable, CurrencyPair):
            return observable in self._fx_curves
        return False

    def _simulate(self, path_index: int) -> None:
        # Nothing is random: every path is the forward curve.
        pass

    def _get_indices(self, observable: MarketObservable, dates: list[Date]) -> list[float]:
        if isinstance(observable, FloatingIndex):
            curve = self._forecast_curves[observable]
            return [curve.forward_rate(date) for date in dates]
        fx_curve = self._fx_curves[observable]
        return [fx_curve.fx_rate(date) for date in dates]

    def numeraire(self, date: Date) -> float:
        self._require_state("numeraire", SimulatorState.SIMULATED)
        return 1.0 / self.discount_curve.discount_factor(date)

    def numeraire_currency(self) -> Currency:
        return self.discount_curve.currency()

    def set_numeraire_dates(self, dates: Sequence[Date]) -> None:
        # The numeraire is read straight from the curve on any date.
        self._require_state("set_numeraire_dates", SimulatorState.RESET)

    def __repr__(self) -> str:
        return (
            f"DeterministicCurves(numeraire={self.numeraire_currency()}, "
            f"rates={len(self._forecast_curves)}, fx={len(self._fx_curves)})"
        )
