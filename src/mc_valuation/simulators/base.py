"""
Simulator and numeraire capabilities.

Every simulator follows the same life cycle::

    created -> reset -> set_required_dates* -> prepare -> run_simulation*

and the base class enforces it: calling a method out of order raises
``StateOrderError`` instead of silently returning stale or empty values.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import Enum
from typing import Protocol, runtime_checkable

import numpy as np

from mc_valuation.errors import StateOrderError, UnsupportedQueryError
from mc_valuation.primitives.dates import Date
from mc_valuation.primitives.observables import Currency, MarketObservable
from mc_valuation.rng.seeding import model_seed, path_generator


class SimulatorState(Enum):
    """Position of a simulator in its life cycle."""
    CREATED = "created"
    RESET = "reset"
    PREPARED = "prepared"
    SIMULATED = "simulated"


class Simulator(ABC):
    """
    Produces simulated values of one or more market observables.

    Subclasses implement ``provides_index``, ``_simulate`` and
    ``_get_indices``, and optionally ``_underlying_factors`` when they
    contribute regressors for continuation value estimates.

    Parameters
    ----------
    seed : int, optional
        Fixed model seed. Path ``k`` is simulated from
        ``path_generator(seed, k)``. Defaults to a stable hash of the class
        name, so that different models draw independent streams.
    """

    def __init__(self, seed: int | None = None):
        self.seed = model_seed(type(self).__name__) if seed is None else seed
        self._state = SimulatorState.CREATED
        self._required_dates: list[Date] = []
        self._simulation_dates: list[Date] = []
        self._path_index: int | None = None

    @property
    def state(self) -> SimulatorState:
        return self._state

    @property
    def simulation_dates(self) -> list[Date]:
        """Sorted distinct dates simulated on every path (set by ``prepare``)."""
        return list(self._simulation_dates)

    @property
    def current_path(self) -> int | None:
        return self._path_index

    def reset(self) -> None:
        """Clear all required dates and any simulated path."""
        self._required_dates = []
        self._simulation_dates = []
        self._path_index = None
        self._state = SimulatorState.RESET

    def set_required_dates(self, observable: MarketObservable, dates: Sequence[Date]) -> None:
        """Declare dates at which ``observable`` will be queried on every path."""
        self._require_state("set_required_dates", SimulatorState.RESET)
        if not self.provides_index(observable):
            raise UnsupportedQueryError(self, observable)
        self._required_dates.extend(dates)

    def set_regressor_dates(self, dates: Sequence[Date]) -> None:
        """Declare dates at which ``get_underlying_factors`` will be queried."""
        self._require_state("set_regressor_dates", SimulatorState.RESET)
        self._required_dates.extend(dates)

    def prepare(self) -> None:
        """Remove duplicate dates and sort them. Call once after all dates are set."""
        self._require_state("prepare", SimulatorState.RESET)
        self._simulation_dates = sorted(set(self._required_dates))
        self._state = SimulatorState.PREPARED

    def run_simulation(self, path_index: int) -> None:
        """
        Simulate path ``path_index``, replacing any previously simulated path.

        The realization depends only on the model seed and ``path_index``.
        """
        self._require_state(
            "run_simulation", SimulatorState.PREPARED, SimulatorState.SIMULATED
        )
        if path_index < 0:
            raise ValueError("path_index must be non-negative")
        self._simulate(path_index)
        self._path_index = path_index
        self._state = SimulatorState.SIMULATED

    def get_indices(self, observable: MarketObservable, dates: Sequence[Date]) -> np.ndarray:
        """Values of ``observable`` on the current path, in the order of ``dates``."""
        self._require_state("get_indices", SimulatorState.SIMULATED)
        if not self.provides_index(observable):
            raise UnsupportedQueryError(self, observable)
        return np.asarray(self._get_indices(observable, list(dates)), dtype=float)

    def get_underlying_factors(self, date: Date) -> np.ndarray:
        """Regressors this model contributes at ``date`` on the current path."""
        self._require_state("get_underlying_factors", SimulatorState.SIMULATED)
        return np.asarray(self._underlying_factors(date), dtype=float)

    @abstractmethod
    def provides_index(self, observable: MarketObservable) -> bool:
        """Whether this model simulates ``observable``."""

    @abstractmethod
    def _simulate(self, path_index: int) -> None:
        """Rebuild the transient path state for ``path_index``."""

    @abstractmethod
    def _get_indices(self, observable: MarketObservable, dates: list[Date]) -> Sequence[float]:
        ...

    def _underlying_factors(self, date: Date) -> Sequence[float]:
        return []

    def _generator(self, path_index: int) -> np.random.Generator:
        return path_generator(self.seed, path_index)

    def _require_state(self, operation: str, *allowed: SimulatorState) -> None:
        if self._state not in allowed:
            raise StateOrderError(self, operation, self._state.value)

    def _undeclared_date(self, observable, date: Date) -> UnsupportedQueryError:
        return UnsupportedQueryError(
            self, observable,
            f"{observable} was not declared for {date}; call set_required_dates before prepare",
        )


@runtime_checkable
class NumeraireProvider(Protocol):
    """
    Capability of simulators that define the numeraire.

    ``numeraire(date)`` is a strictly positive value used to convert a
    cashflow paid on ``date`` into present value by division. It is only
    valid after ``run_simulation`` for the current path.
    """

    def numeraire(self, date: Date) -> float:
        ...

    def numeraire_currency(self) -> Currency:
        ...

    def set_numeraire_dates(self, dates: Sequence[Date]) -> None:
        ...
