"""
Lognormal (Black-Scholes) share price simulator.
"""

import numpy as np

from mc_valuation.primitives.dates import ACT_365_FIXED, Date, DayCountConvention
from mc_valuation.primitives.observables import MarketObservable, Share
from mc_valuation.rng.normal import inverse_normal_cdf
from mc_valuation.simulators.base import Simulator


class SimpleBlackEquity(Simulator):
    """
    Geometric Brownian motion for a single share.

    The model follows:
        dS_t = (r - q) * S_t * dt + σ * S_t * dW_t

    and is stepped exactly between successive required dates:
        S_{k+1} = S_k * exp((r - q - 0.5σ²)Δt + σ√Δt Z),   Z ~ N(0, 1)

    Parameters
    ----------
    anchor_date : Date
        Date of the spot price
    share : Share
        The simulated observable
    spot_price : float
        Share price on ``anchor_date`` (must be > 0)
    vol : float
        Volatility (annualized, must be >= 0)
    riskfree_rate : float
        Continuously compounded risk-free rate
    div_yield : float
        Continuous dividend yield
    seed : int, optional
        Fixed model seed (default: derived from the class name)
    day_count : DayCountConvention, optional
        Measures Δt between dates (default: Actual/365 Fixed)
    antithetic : bool, optional
        Pair paths 2k and 2k+1: both take their draws from the generator of
        path k and the odd path negates them
    strata : int, optional
        Stratify the first increment into this many equiprobable strata.
        Path k (or pair k with ``antithetic``) samples stratum ``k % strata``,
        so the estimate is unbiased when the number of paths (pairs) is a
        multiple of ``strata``.

    Notes
    -----
    Both options keep every path a pure function of its index. The standard
    error reported for a valuation still treats paths as independent, which
    overstates the error of antithetic or stratified runs.
    """

    def __init__(
        self,
        anchor_date: Date,
        share: Share,
        spot_price: float,
        vol: float,
        riskfree_rate: float,
        div_yield: float = 0.0,
        seed: int | None = None,
        day_count: DayCountConvention = ACT_365_FIXED,
        antithetic: bool = False,
        strata: int | None = None
    ):
        if spot_price <= 0:
            raise ValueError("Spot price must be positive")
        if vol < 0:
            raise ValueError("Volatility must be non-negative")
        if strata is not None and strata <= 0:
            raise ValueError("strata must be positive")
        super().__init__(seed)
        self.anchor_date = anchor_date
        self.share = share
        self.spot_price = spot_price
        self.vol = vol
        self.riskfree_rate = riskfree_rate
        self.div_yield = div_yield
        self.day_count = day_count
        self.antithetic = antithetic
        self.strata = strata
        self._simulation: dict[int, float] = {}

    def provides_index(self, observable: MarketObservable) -> bool:
        return observable == self.share

    def _simulate(self, path_index: int) -> None:
        future_dates = [d for d in self.simulation_dates if d > self.anchor_date]
        simulation = {d.value: self.spot_price for d in self.simulation_dates
                      if d <= self.anchor_date}

        if future_dates:
            times = np.array(
                [self.day_count.year_fraction(self.anchor_date, d) for d in future_dates]
            )
            dt = np.diff(times, prepend=0.0)
            Z = self._normals(path_index, len(future_dates))

            drift = (self.riskfree_rate - self.div_yield - 0.5 * self.vol**2) * dt
            diffusion = self.vol * np.sqrt(dt) * Z
            prices = self.spot_price * np.exp(np.cumsum(drift + diffusion))

            for d, price in zip(future_dates, prices):
                simulation[d.value] = float(price)

        self._simulation = simulation

    def _normals(self, path_index: int, n: int) -> np.ndarray:
        draw = path_index // 2 if self.antithetic else path_index
        rng = self._generator(draw)
        Z = rng.standard_normal(n)
        if self.strata is not None:
            u = (draw % self.strata + rng.random()) / self.strata
            Z[0] = inverse_normal_cdf(np.array([u]))[0]
        if self.antithetic and path_index % 2:
            Z = -Z
        return Z

    def _price(self, date: Date) -> float:
        try:
            return self._simulation[date.value]
        except KeyError:
            raise self._undeclared_date(self.share, date) from None

    def _get_indices(self, observable: MarketObservable, dates: list[Date]) -> list[float]:
        return [self._price(d) for d in dates]

    def _underlying_factors(self, date: Date) -> list[float]:
        return [self._price(date)]

    def __repr__(self) -> str:
        return (
            f"SimpleBlackEquity({self.share}, spot={self.spot_price}, vol={self.vol}, "
            f"r={self.riskfree_rate}, q={self.div_yield}"
            + (", antithetic=True" if self.antithetic else "")
            + (f", strata={self.strata}" if self.strata is not None else "")
            + ")"
        )
