"""
Monte Carlo Valuation Kernel

Values portfolios of products against a pool of stochastic simulators, with
least-squares continuation value estimates for early exercise.
"""

from mc_valuation._version import __version__

# Core components
from mc_valuation.config import SimulationConfig
from mc_valuation.errors import (
    CurrencyMismatchError,
    RegressionDegeneracyError,
    StateOrderError,
    UnresolvedObservableError,
    UnsupportedQueryError,
    ValuationError,
)
from mc_valuation.primitives import Cashflow, Currency, Date, MarketObservable, Tenor
from mc_valuation.products import BermudanOption, EarlyExerciseProduct, EuropeanOption, FloatLeg, Product
from mc_valuation.simulators import (
    DeterministicCreditWithFXJump,
    DeterministicCurves,
    NumeraireProvider,
    SimpleBlackEquity,
    Simulator,
)
from mc_valuation.valuation import Coordinator, SimulatedRegressors, ValuationResult

# Analytics
from mc_valuation.analytics.black_scholes import bs_price

__all__ = [
    # Version
    "__version__",
    # Configuration
    "SimulationConfig",
    # Errors
    "ValuationError",
    "UnresolvedObservableError",
    "UnsupportedQueryError",
    "CurrencyMismatchError",
    "StateOrderError",
    "RegressionDegeneracyError",
    # Primitives
    "Cashflow",
    "Currency",
    "Date",
    "MarketObservable",
    "Tenor",
    # Simulators
    "Simulator",
    "NumeraireProvider",
    "DeterministicCurves",
    "SimpleBlackEquity",
    "DeterministicCreditWithFXJump",
    # Products
    "Product",
    "EarlyExerciseProduct",
    "FloatLeg",
    "EuropeanOption",
    "BermudanOption",
    # Valuation
    "Coordinator",
    "SimulatedRegressors",
    "ValuationResult",
    # Analytics
    "bs_price",
]
