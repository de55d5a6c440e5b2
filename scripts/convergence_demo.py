#!/usr/bin/env python
"""
Convergence demonstration of the Monte Carlo valuation against Black-Scholes.

Values a European call on a lognormal share for increasing path counts and
compares each estimate with the closed form price.
"""

import sys
from pathlib import Path

# Add parent directory to path to allow imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mc_valuation.analytics.black_scholes import bs_price
from mc_valuation.market.curves import FlatDiscountCurve
from mc_valuation.primitives.dates import Date
from mc_valuation.primitives.observables import ZAR, Share
from mc_valuation.products.equity_options import EuropeanOption
from mc_valuation.simulators.black_equity import SimpleBlackEquity
from mc_valuation.simulators.deterministic_curves import DeterministicCurves
from mc_valuation.valuation.coordinator import Coordinator


def main():
    """Run convergence analysis across different sample sizes."""
    # Market and contract
    value_date = Date(2016, 8, 28)
    expiry = Date(2017, 8, 28)
    share = Share("ABC")
    S0 = 100.0
    K = 100.0
    r = 0.07
    q = 0.02
    sigma = 0.22
    T = (expiry - value_date) / 365.0

    # Sample sizes to test
    n_paths_list = [1000, 5000, 20000, 100000]

    equity = SimpleBlackEquity(value_date, share, S0, sigma, r, q)
    curves = DeterministicCurves(FlatDiscountCurve(value_date, r, ZAR))
    option = EuropeanOption(share, K, expiry, "call")
    reference = bs_price(S0, K, r, T, sigma, "call", q=q)

    # Print header
    print("=" * 90)
    print("Monte Carlo Valuation Convergence")
    print("=" * 90)
    print(f"\nParameters: S0={S0}, K={K}, r={r}, q={q}, sigma={sigma}, T={T:.4f}")
    print(f"Black-Scholes price: {reference:.6f}\n")
    print("-" * 90)
    print(f"{'n_paths':<10} {'Price':<12} {'Std Error':<12} {'Error':<12} {'Error / SE':<12}")
    print("-" * 90)

    for n_paths in n_paths_list:
        coordinator = Coordinator(curves, [equity], n_paths=n_paths)
        result = coordinator.value([option], value_date)

        error = result.price - reference
        print(
            f"{n_paths:<10,} {result.price:<12.6f} {result.stderr:<12.6f} "
            f"{error:<12.6f} {error / result.stderr:<12.3f}"
        )

    print("-" * 90)
    print("\nObservations:")
    print("  • Standard error decreases as n_paths increases (O(1/√n) convergence)")
    print("  • The error stays within a few standard errors of the closed form")
    print("=" * 90)


if __name__ == "__main__":
    main()
