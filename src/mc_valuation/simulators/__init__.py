"""
Simulators package initialization.
"""

from mc_valuation.simulators.base import NumeraireProvider, Simulator, SimulatorState
from mc_valuation.simulators.black_equity import SimpleBlackEquity
from mc_valuation.simulators.credit_fx import DeterministicCreditWithFXJump
from mc_valuation.simulators.deterministic_curves import DeterministicCurves

__all__ = [
    "DeterministicCreditWithFXJump",
    "DeterministicCurves",
    "NumeraireProvider",
    "SimpleBlackEquity",
    "Simulator",
    "SimulatorState",
]
