"""
Random number generation for reproducible Monte Carlo paths.
"""

from mc_valuation.rng.normal import inverse_normal_cdf
from mc_valuation.rng.seeding import model_seed, path_generator

__all__ = ["inverse_normal_cdf", "model_seed", "path_generator"]
