"""
Valuation package initialization.
"""

from mc_valuation.valuation.coordinator import Coordinator, ObservableBindings
from mc_valuation.valuation.regressors import SimulatedRegressors
from mc_valuation.valuation.results import ValuationResult

__all__ = [
    "Coordinator",
    "ObservableBindings",
    "SimulatedRegressors",
    "ValuationResult",
]
