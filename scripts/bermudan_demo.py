#!/usr/bin/env python
"""
Bermudan option demo comparing European and Bermudan put values.

Demonstrates the early exercise premium estimated by backward induction with
regression-based continuation values.
"""

import sys
from pathlib import Path

# Add parent directory to path to allow imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mc_valuation.market.curves import FlatDiscountCurve
from mc_valuation.primitives.dates import Date
from mc_valuation.primitives.observables import ZAR, Share
from mc_valuation.products.equity_options import BermudanOption, EuropeanOption
from mc_valuation.simulators.black_equity import SimpleBlackEquity
from mc_valuation.simulators.deterministic_curves import DeterministicCurves
from mc_valuation.valuation.coordinator import Coordinator


def main():
    """Run Bermudan option valuation demo."""
    # Parameters
    value_date = Date(2016, 8, 28)
    share = Share("ABC")
    S0 = 100.0
    K = 100.0
    r = 0.07
    q = 0.02
    sigma = 0.22
    exercise_dates = [value_date.add_months(m) for m in range(1, 13)]
    n_workers = 2

    # Different path counts for convergence
    path_counts = [5000, 20000, 50000]

    equity = SimpleBlackEquity(value_date, share, S0, sigma, r, q)
    curves = DeterministicCurves(FlatDiscountCurve(value_date, r, ZAR))
    european = EuropeanOption(share, K, exercise_dates[-1], "put")
    bermudan = BermudanOption(share, K, exercise_dates, "put")

    print("=" * 100)
    print("Bermudan Option Valuation Demo - Regression-based Continuation Values")
    print("=" * 100)
    print(f"\nParameters: S0={S0}, K={K}, r={r}, q={q}, sigma={sigma}")
    print(f"Exercise dates: {len(exercise_dates)} monthly, "
          f"{exercise_dates[0]} to {exercise_dates[-1]}, workers={n_workers}")
    print("\nComparing European Put vs Bermudan Put values:")
    print("-" * 100)
    print(f"{'n_paths':<12} {'Euro Put Value':<18} {'Euro SE':<12} "
          f"{'Berm Put Value':<18} {'Berm SE':<12} {'Premium':<12}")
    print("-" * 100)

    for n_paths in path_counts:
        coordinator = Coordinator(curves, [equity], n_paths=n_paths, n_workers=n_workers)
        result_euro = coordinator.value([european], value_date)
        result_berm = coordinator.value([bermudan], value_date)

        # Premium
        premium = result_berm.price - result_euro.price

        print(f"{n_paths:<12,} "
              f"{result_euro.price:<18.6f} {result_euro.stderr:<12.6f} "
              f"{result_berm.price:<18.6f} {result_berm.stderr:<12.6f} "
              f"{premium:<12.6f}")

    print("-" * 100)
    print("\nKey Observations:")
    print("  • Bermudan put value >= European put value (early exercise premium)")
    print("  • Standard error decreases with more paths (O(1/√n))")
    print("=" * 100)


if __name__ == "__main__":
    main()
