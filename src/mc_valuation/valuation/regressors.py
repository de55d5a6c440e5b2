"""
Simulated regressors and least-squares continuation value estimates.
"""

import logging
from collections.abc import Sequence

import numpy as np

from mc_valuation.errors import RegressionDegeneracyError
from mc_valuation.primitives.dates import Date
from mc_valuation.simulators.base import Simulator

logger = logging.getLogger(__name__)


class SimulatedRegressors:
    """
    Stores regressors at specified forward dates for all paths.

    The regressors live in a tensor indexed by [path, date, factor]. The
    factor axis is the concatenation of ``get_underlying_factors`` of every
    simulator, in simulator order. Each coordinate may be written only once.

    Parameters
    ----------
    dates : Sequence[Date]
        Dates at which regressors will be stored
    n_paths : int
        Number of simulated paths
    simulators : Sequence[Simulator]
        Prepared simulators. Path 0 is run on each of them to find out how
        many factors it contributes; the order of the simulators and their
        factor counts must not change afterwards.
    """

    def __init__(self, dates: Sequence[Date], n_paths: int, simulators: Sequence[Simulator]):
        if not dates:
            raise ValueError("At least one regression date is required")
        if n_paths <= 0:
            raise ValueError("n_paths must be positive")

        self.dates = list(dates)
        self.n_paths = n_paths
        self._date_positions = {d: i for i, d in enumerate(self.dates)}

        # Run one simulation to see how many factors each simulator provides
        self.factor_counts = []
        for simulator in simulators:
            simulator.run_simulation(0)
            self.factor_counts.append(len(simulator.get_underlying_factors(self.dates[0])))

        n_factors = sum(self.factor_counts)
        self._regressors = np.zeros((n_paths, len(self.dates), n_factors))
        self._written = np.zeros((n_paths, len(self.dates), n_factors), dtype=bool)

    @property
    def n_factors(self) -> int:
        return self._regressors.shape[2]

    def get_number_of_regressors(self) -> int:
        return self.n_factors

    def date_index(self, date: Date) -> int:
        try:
            return self._date_positions[date]
        except KeyError:
            raise RegressionDegeneracyError(date, "not one of the regression dates") from None

    def add(self, path: int, date_index: int, factor_index: int, value: float) -> None:
        """Store a single regressor value."""
        self._write((path, date_index, factor_index), np.asarray(value, dtype=float))

    def add_factors(self, path: int, date_index: int, values: Sequence[float]) -> None:
        """Store all factors of one path at one date."""
        values = np.asarray(values, dtype=float)
        if values.shape != (self.n_factors,):
            raise ValueError(
                f"Expected {self.n_factors} factors, got array of shape {values.shape}"
            )
        self._write((path, date_index, slice(None)), values)

    def add_block(self, first_path: int, block: np.ndarray) -> None:
        """
        Store a [paths, dates, factors] slab for consecutive paths.

        Used to merge the regressors simulated by one worker.
        """
        block = np.asarray(block, dtype=float)
        expected = (len(self.dates), self.n_factors)
        if block.ndim != 3 or block.shape[1:] != expected:
            raise ValueError(f"Expected a block of shape (n, {expected[0]}, {expected[1]})")
        stop = first_path + block.shape[0]
        if first_path < 0 or stop > self.n_paths:
            raise ValueError(f"Paths {first_path}..{stop - 1} are outside 0..{self.n_paths - 1}")
        self._write((slice(first_path, stop), slice(None), slice(None)), block)

    def _write(self, index, values: np.ndarray) -> None:
        if np.any(self._written[index]):
            raise ValueError(f"Regressors at {index} have already been written")
        self._regressors[index] = values
        self._written[index] = True

    def get_regressors(self, factor_index: int, dates: Sequence[Date]) -> np.ndarray:
        """
        Realizations of one regressor, shape (n_paths, len(dates)).

        Meant for inspecting the simulated data; fitting should go through
        ``fit_cfs``.
        """
        columns = [self.date_index(d) for d in dates]
        return self._regressors[:, columns, factor_index].copy()

    def basis_functions(self, date: Date, order: int = 10) -> np.ndarray:
        """
        Design matrix of hinge basis functions at ``date``.

        For each factor x the empirical quantiles at i/order, i = 1..order-1,
        are used as nodes k, and every node contributes max(0, k - x) and
        max(0, x - k). A leading column of ones is the intercept.

        Parameters
        ----------
        date : Date
            Regression date
        order : int, optional
            Number of quantile buckets per factor (must be >= 2)

        Returns
        -------
        np.ndarray
            Basis matrix, shape (n_paths, 1 + 2 * (order - 1) * n_factors)
        """
        if order < 2:
            raise ValueError("order must be at least 2")
        x = self._regressors[:, self.date_index(date), :]
        probabilities = np.arange(1, order) / order

        columns = [np.ones((self.n_paths, 1))]
        for factor in range(self.n_factors):
            x_j = x[:, factor, None]
            nodes = np.quantile(x[:, factor], probabilities, method="inverted_cdf")
            columns.append(np.maximum(0.0, nodes[None, :] - x_j))
            columns.append(np.maximum(0.0, x_j - nodes[None, :]))
        return np.hstack(columns)

    def fit_cfs(self, date: Date, cfs: np.ndarray, order: int = 10) -> np.ndarray:
        """
        Fitted approximation of future cashflows given the regressors at a date.

        Parameters
        ----------
        date : Date
            The date at which the regressors are observed
        cfs : np.ndarray
            Per path, the sum of the present values of all cashflows that
            take place after ``date``
        order : int, optional
            Number of quantile buckets per factor (default: 10)

        Returns
        -------
        np.ndarray
            In-sample fitted value per path: the estimated continuation value

        Raises
        ------
        RegressionDegeneracyError
            If the inputs are not finite, there are fewer distinct factor
            observations than basis functions, or the solver fails
        """
        cfs = np.asarray(cfs, dtype=float)
        if cfs.shape != (self.n_paths,):
            raise ValueError(f"Expected {self.n_paths} cashflow sums, got shape {cfs.shape}")

        X = self.basis_functions(date, order)
        x = self._regressors[:, self.date_index(date), :]
        if not (np.all(np.isfinite(x)) and np.all(np.isfinite(cfs))):
            raise RegressionDegeneracyError(date, "regressors or cashflows are not finite")

        n_distinct = len(np.unique(x, axis=0)) if self.n_factors else 1
        n_basis = X.shape[1]
        if n_distinct < n_basis:
            raise RegressionDegeneracyError(
                date,
                f"{n_distinct} distinct factor observations for {n_basis} basis functions",
            )

        # SVD based least squares copes with collinear hinge columns
        try:
            beta, _, rank, _ = np.linalg.lstsq(X, cfs, rcond=None)
        except np.linalg.LinAlgError as exc:
            raise RegressionDegeneracyError(date, str(exc)) from exc

        logger.debug(
            "Regression at %s: %d paths, %d basis functions, rank %d",
            date, self.n_paths, n_basis, rank,
        )
        return X @ beta
