"""
Coordinator: values a portfolio of products against a set of simulators.
"""

import logging
from collections.abc import Sequence
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass

import numpy as np

from mc_valuation.config import SimulationConfig
from mc_valuation.errors import CurrencyMismatchError, UnresolvedObservableError
from mc_valuation.primitives.cashflows import Cashflow
from mc_valuation.primitives.dates import Date
from mc_valuation.primitives.observables import MarketObservable
from mc_valuation.products.base import EarlyExerciseProduct, Product
from mc_valuation.simulators.base import NumeraireProvider, Simulator
from mc_valuation.valuation.regressors import SimulatedRegressors
from mc_valuation.valuation.results import ValuationResult

logger = logging.getLogger(__name__)


@dataclass
class ObservableBindings:
    """
    Which simulator provides each observable of each product.

    Every distinct observable has an integer handle (its position in
    ``observables``), and so does every product (its position in the
    portfolio).

    Attributes
    ----------
    observables : list[MarketObservable]
        Distinct observables required by the portfolio, by handle
    provider : list[int]
        Position in the simulator list of the provider of each observable
    product_observables : list[list[int]]
        Observable handles required by each product
    handles : dict[MarketObservable, int]
        Handle of each observable
    """
    observables: list[MarketObservable]
    provider: list[int]
    product_observables: list[list[int]]
    handles: dict[MarketObservable, int]

    def handle(self, observable: MarketObservable) -> int:
        return self.handles[observable]

    def provider_of(self, observable: MarketObservable) -> int:
        return self.provider[self.handle(observable)]


@dataclass
class _PathBlock:
    """Everything a worker needs to simulate paths ``start`` to ``stop - 1``."""
    simulators: list[Simulator]
    numeraire_index: int
    portfolio: list[Product]
    bindings: ObservableBindings
    regression_dates: list[Date]
    n_factors: int
    start: int
    stop: int


@dataclass
class _BlockResult:
    """
    Per-path present values of one block of paths.

    ``values`` holds the products without early exercise. For each early
    exercise product (by portfolio position) ``hold`` buckets its
    unexercised flows by the exercise interval they fall in and
    ``exercise`` holds the value of exercising on each exercise date.
    """
    start: int
    values: np.ndarray
    hold: dict[int, np.ndarray]
    exercise: dict[int, np.ndarray]
    factors: np.ndarray | None


def _present_value(numeraire, product: Product, cashflow: Cashflow) -> float:
    currency = numeraire.numeraire_currency()
    if cashflow.currency != currency:
        raise CurrencyMismatchError(product, cashflow.date, cashflow.currency, currency)
    return cashflow.amount / numeraire.numeraire(cashflow.date)


def _simulate_block(block: _PathBlock) -> _BlockResult:
    """Run a contiguous range of paths and collect present values per path."""
    simulators = block.simulators
    numeraire = simulators[block.numeraire_index]
    bindings = block.bindings
    n = block.stop - block.start

    values = np.zeros(n)
    hold = {}
    exercise = {}
    exercise_serials = {}
    for p, product in enumerate(block.portfolio):
        if isinstance(product, EarlyExerciseProduct):
            serials = np.array([d.value for d in product.get_exercise_dates()])
            exercise_serials[p] = serials
            hold[p] = np.zeros((n, len(serials) + 1))
            exercise[p] = np.zeros((n, len(serials)))

    factors = None
    if block.regression_dates:
        factors = np.zeros((n, len(block.regression_dates), block.n_factors))

    for row, path in enumerate(range(block.start, block.stop)):
        for simulator in simulators:
            simulator.run_simulation(path)

        for p, product in enumerate(block.portfolio):
            for handle in bindings.product_observables[p]:
                observable = bindings.observables[handle]
                simulator = simulators[bindings.provider[handle]]
                dates = product.get_required_index_dates(observable)
                product.set_index_values(observable, simulator.get_indices(observable, dates))

            if p in hold:
                # bucket 0: on or before the first exercise date; last: after the last
                for cf in product.get_cashflows():
                    bucket = np.searchsorted(exercise_serials[p], cf.date.value, side="left")
                    hold[p][row, bucket] += _present_value(numeraire, product, cf)
                for k in range(len(exercise_serials[p])):
                    exercise[p][row, k] = sum(
                        _present_value(numeraire, product, cf)
                        for cf in product.get_exercise_cashflows(k)
                    )
            else:
                values[row] += sum(
                    _present_value(numeraire, product, cf) for cf in product.get_cashflows()
                )

        if factors is not None:
            for d, date in enumerate(block.regression_dates):
                factors[row, d, :] = np.concatenate(
                    [simulator.get_underlying_factors(date) for simulator in simulators]
                )

    return _BlockResult(
        start=block.start,
        values=values,
        hold=hold,
        exercise=exercise,
        factors=factors,
    )


class Coordinator:
    """
    Drives simulators and products through a Monte Carlo valuation.

    Parameters
    ----------
    numeraire : Simulator
        Simulator with the numeraire capability; cashflows are divided by
        its numeraire. It is appended to ``simulators`` unless already there.
    simulators : Sequence[Simulator]
        Candidate providers of observables, in priority order: each
        observable is bound to the first simulator that provides it
    n_paths : int
        Number of Monte Carlo paths
    n_workers : int, optional
        Worker processes used to run disjoint path ranges (default: 1, in
        process)
    regression_order : int, optional
        Quantile buckets per factor in continuation value regressions
    """

    def __init__(
        self,
        numeraire: Simulator,
        simulators: Sequence[Simulator],
        n_paths: int,
        *,
        n_workers: int = 1,
        regression_order: int = 10
    ):
        self.config = SimulationConfig(
            n_paths=n_paths, n_workers=n_workers, regression_order=regression_order
        )
        if not isinstance(numeraire, Simulator) or not isinstance(numeraire, NumeraireProvider):
            raise TypeError(f"{numeraire!r} does not provide a numeraire")

        self.numeraire = numeraire
        self.simulators = list(simulators)
        if not any(simulator is numeraire for simulator in self.simulators):
            self.simulators.append(numeraire)
        self._numeraire_index = next(
            i for i, simulator in enumerate(self.simulators) if simulator is numeraire
        )

    @classmethod
    def from_config(
        cls,
        numeraire: Simulator,
        simulators: Sequence[Simulator],
        config: SimulationConfig
    ) -> "Coordinator":
        return cls(
            numeraire,
            simulators,
            n_paths=config.n_paths,
            n_workers=config.n_workers,
            regression_order=config.regression_order,
        )

    @property
    def n_paths(self) -> int:
        return self.config.n_paths

    def resolve(self, portfolio: Sequence[Product]) -> ObservableBindings:
        """
        Bind every observable required by the portfolio to a simulator.

        Raises
        ------
        UnresolvedObservableError
            If no simulator provides an observable some product requires
        """
        handles: dict[MarketObservable, int] = {}
        observables: list[MarketObservable] = []
        provider: list[int] = []
        product_observables: list[list[int]] = []

        for product in portfolio:
            required = []
            for observable in dict.fromkeys(product.get_required_indices()):
                if observable not in handles:
                    position = next(
                        (i for i, simulator in enumerate(self.simulators)
                         if simulator.provides_index(observable)),
                        None,
                    )
                    if position is None:
                        raise UnresolvedObservableError(product, observable)
                    handles[observable] = len(observables)
                    observables.append(observable)
                    provider.append(position)
                required.append(handles[observable])
            product_observables.append(required)

        for observable, position in zip(observables, provider):
            logger.debug("%s is provided by %r", observable, self.simulators[position])
        return ObservableBindings(observables, provider, product_observables, handles)

    def value(self, portfolio: Sequence[Product], value_date: Date) -> ValuationResult:
        """
        Estimate the present value of ``portfolio`` as of ``value_date``.

        Returns
        -------
        ValuationResult
            Mean of the per-path present values with its standard error
        """
        result, _ = self.value_with_details(portfolio, value_date)
        return result

    def value_with_details(
        self, portfolio: Sequence[Product], value_date: Date
    ) -> tuple[ValuationResult, np.ndarray]:
        """
        Estimate the present value and return the individual path values.

        Returns
        -------
        result : ValuationResult
            Valuation results
        path_values : np.ndarray
            Present value of the whole portfolio on each path
        """
        portfolio = list(portfolio)
        if not portfolio:
            raise ValueError("portfolio must not be empty")

        # Resolve before touching any simulator so configuration errors fail fast
        bindings = self.resolve(portfolio)
        logger.info(
            "Valuing %d products with %d simulators on %s: %d paths, %d workers",
            len(portfolio), len(self.simulators), value_date,
            self.n_paths, self.config.n_workers,
        )

        regression_dates = self._setup(portfolio, bindings, value_date)
        regressors = None
        if regression_dates:
            regressors = SimulatedRegressors(regression_dates, self.n_paths, self.simulators)

        n_factors = regressors.n_factors if regressors is not None else 0
        blocks = [
            _PathBlock(
                simulators=self.simulators,
                numeraire_index=self._numeraire_index,
                portfolio=portfolio,
                bindings=bindings,
                regression_dates=regression_dates,
                n_factors=n_factors,
                start=start,
                stop=stop,
            )
            for start, stop in self._path_ranges()
        ]
        if len(blocks) == 1:
            block_results = [_simulate_block(blocks[0])]
        else:
            with ProcessPoolExecutor(max_workers=len(blocks)) as executor:
                block_results = list(executor.map(_simulate_block, blocks))

        path_values = np.zeros(self.n_paths)
        hold = {}
        exercise = {}
        for p, product in enumerate(portfolio):
            if isinstance(product, EarlyExerciseProduct):
                n_dates = len(product.get_exercise_dates())
                hold[p] = np.zeros((self.n_paths, n_dates + 1))
                exercise[p] = np.zeros((self.n_paths, n_dates))

        for block_result in block_results:
            rows = slice(block_result.start, block_result.start + len(block_result.values))
            path_values[rows] = block_result.values
            for p in hold:
                hold[p][rows] = block_result.hold[p]
                exercise[p][rows] = block_result.exercise[p]
            if regressors is not None:
                regressors.add_block(block_result.start, block_result.factors)

        for p in hold:
            path_values += self._exercise_policy_values(
                portfolio[p], hold[p], exercise[p], regressors
            )

        result = self._summarize(path_values)
        logger.info("Valuation complete: price=%.6f, stderr=%.6f", result.price, result.stderr)
        return result, path_values

    def _setup(
        self, portfolio: list[Product], bindings: ObservableBindings, value_date: Date
    ) -> list[Date]:
        """Reset everything, declare all required dates and prepare the simulators."""
        for product in portfolio:
            product.set_value_date(value_date)
            product.reset()
        for simulator in self.simulators:
            simulator.reset()

        for p, product in enumerate(portfolio):
            for handle in bindings.product_observables[p]:
                observable = bindings.observables[handle]
                simulator = self.simulators[bindings.provider[handle]]
                simulator.set_required_dates(
                    observable, product.get_required_index_dates(observable)
                )
            for currency in product.get_cashflow_currencies():
                self.numeraire.set_numeraire_dates(product.get_cashflow_dates(currency))

        regression_dates = sorted({
            date
            for product in portfolio if isinstance(product, EarlyExerciseProduct)
            for date in product.get_exercise_dates()
        })
        if regression_dates:
            for simulator in self.simulators:
                simulator.set_regressor_dates(regression_dates)

        for simulator in self.simulators:
            simulator.prepare()
        return regression_dates

    def _path_ranges(self) -> list[tuple[int, int]]:
        n_blocks = min(self.config.n_workers, self.n_paths)
        edges = np.linspace(0, self.n_paths, n_blocks + 1).astype(int)
        ranges = [(int(a), int(b)) for a, b in zip(edges[:-1], edges[1:])]
        for start, stop in ranges:
            logger.debug("Path block %d..%d", start, stop - 1)
        return ranges

    def _exercise_policy_values(
        self,
        product: EarlyExerciseProduct,
        hold: np.ndarray,
        exercise: np.ndarray,
        regressors: SimulatedRegressors | None
    ) -> np.ndarray:
        """
        Per-path value of an early exercise product under the estimated policy.

        Backward induction from the last exercise date: the continuation
        value at an exercise date is the value of the path's flows strictly
        after that date, its conditional expectation is estimated by
        regression, and the product decides where to exercise.
        """
        exercise_dates = product.get_exercise_dates()
        # flows after the last exercise date
        value_after = hold[:, len(exercise_dates)].copy()
        for k in reversed(range(len(exercise_dates))):
            estimate = regressors.fit_cfs(
                exercise_dates[k], value_after, order=self.config.regression_order
            )
            exercised = np.asarray(
                product.should_exercise(k, exercise[:, k], estimate), dtype=bool
            )
            value_after = np.where(exercised, exercise[:, k], value_after)
            # flows up to this exercise date are paid whatever happens here
            value_after = value_after + hold[:, k]
        return value_after

    def _summarize(self, path_values: np.ndarray) -> ValuationResult:
        n = len(path_values)
        price = float(np.mean(path_values))
        if n > 1:
            stderr = float(np.std(path_values, ddof=1) / np.sqrt(n))
        else:
            stderr = float("nan")

        # 95% confidence interval (use conventional 1.96 for 95% CI)
        z_critical = 1.96
        return ValuationResult(
            price=price,
            stderr=stderr,
            ci_lower=price - z_critical * stderr,
            ci_upper=price + z_critical * stderr,
            n_paths=n,
        )
