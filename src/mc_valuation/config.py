"""
Simulation settings.
"""

from dataclasses import dataclass


@dataclass
class SimulationConfig:
    """
    Settings of a Monte Carlo valuation run.

    Attributes
    ----------
    n_paths : int
        Number of simulated paths (must be > 0)
    n_workers : int
        Number of worker processes; 1 runs every path in the calling process
    regression_order : int
        Quantile buckets per factor in continuation value regressions
        (must be >= 2)
    """
    n_paths: int
    n_workers: int = 1
    regression_order: int = 10

    def __post_init__(self):
        if self.n_paths <= 0:
            raise ValueError("n_paths must be positive")
        if self.n_workers <= 0:
            raise ValueError("n_workers must be positive")
        if self.regression_order < 2:
            raise ValueError("regression_order must be at least 2")
