"""
Valuation result container.
"""

from dataclasses import dataclass


@dataclass
class ValuationResult:
    """
    Container for Monte Carlo valuation results.

    Attributes
    ----------
    price : float
        Estimated present value of the portfolio
    stderr : float
        Standard error of the estimate (NaN for a single path)
    ci_lower : float
        Lower bound of 95% confidence interval
    ci_upper : float
        Upper bound of 95% confidence interval
    n_paths : int
        Number of simulation paths used
    """
    price: float
    stderr: float
    ci_lower: float
    ci_upper: float
    n_paths: int

    def __repr__(self) -> str:
        return (
            f"ValuationResult(\n"
            f"  price={self.price:.6f},\n"
            f"  stderr={self.stderr:.6f},\n"
            f"  CI95=[{self.ci_lower:.6f}, {self.ci_upper:.6f}],\n"
            f"  n_paths={self.n_paths}\n"
            f")"
        )
