"""
Efficient frontier for 6 stocks: HD, IBM, INTC, JNJ, JPM, KO
Monthly moments, long-only, fully invested.

Uses the portfolio_frontier package on a fixed mean vector and covariance
matrix instead of a return file.
"""

import sys
from pathlib import Path

import numpy as np

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from portfolio_frontier import MomentEstimate, PortfolioOptimizer, TargetMatcher
from portfolio_frontier.core.report import format_weight_table, points_from_moments, weight_table
from portfolio_frontier.visualization import plot_targeted_portfolios

OUTPUT_DIR = PROJECT_ROOT / 'output'

# === Monthly moments for 6 stocks ===
asset_names = ('HD', 'IBM', 'INTC', 'JNJ', 'JPM', 'KO')

expected_returns = np.array([0.015392, -0.001335, 0.013972, 0.008750, 0.014342, 0.006737])

cov_matrix = np.array([
    [0.00257569, 0.00144976, 0.00059154, 0.00051405, 0.00117486, 0.00061042],
    [0.00144976, 0.00420389, 0.00153980, 0.00077403, 0.00169090, 0.00034819],
    [0.00059154, 0.00153980, 0.00382510, 0.00072826, 0.00104477, 0.00048172],
    [0.00051405, 0.00077403, 0.00072826, 0.00159242, 0.00084915, 0.00082336],
    [0.00117486, 0.00169090, 0.00104477, 0.00084915, 0.00322618, 0.00039425],
    [0.00061042, 0.00034819, 0.00048172, 0.00082336, 0.00039425, 0.00147278]
])


def main():
    OUTPUT_DIR.mkdir(exist_ok=True)

    moments = MomentEstimate(asset_names, expected_returns, cov_matrix)
    optimizer = PortfolioOptimizer(moments)
    matcher = TargetMatcher(optimizer)

    frontier = optimizer.estimate_frontier(15)
    risks, returns = optimizer.estimate_port_moments(frontier)

    print("=" * 70)
    print("EFFICIENT FRONTIER (monthly, %)")
    print("=" * 70)
    for i, w in enumerate(frontier):
        print(f"\noptimal {i + 1}, return {returns[i] * 100:5.2f}, risk {risks[i] * 100:5.2f}")
        print(format_weight_table(weight_table(w, asset_names)))

    # Efficient portfolios at 1.2% mean and 5% std
    by_return = matcher.by_return(0.012)
    by_risk = matcher.by_risk(0.05)
    for name, result in (("1.2% Return", by_return), ("5% Risk", by_risk)):
        print(f"\n{name}: return {result.expected_return * 100:.4f}%, "
              f"risk {result.risk * 100:.4f}%")
        if result.warning is not None:
            print(f"   Note: {result.warning}")
        print(format_weight_table(weight_table(result.weights, asset_names)))

    asset_points = points_from_moments(moments.asset_risks, moments.mean, asset_names)
    frontier_points = points_from_moments(risks, returns, [str(i + 1) for i in range(len(frontier))])
    targeted = points_from_moments(
        [by_return.risk, by_risk.risk],
        [by_return.expected_return, by_risk.expected_return],
        ["1.2% Return", "5% Risk"]
    )

    output_path = OUTPUT_DIR / 'six_stocks_frontier.png'
    plot_targeted_portfolios("6 Stocks: Efficient Frontier with Targeted Portfolios",
                             frontier_points, [], targeted, asset_points,
                             save_path=str(output_path))
    print(f"\nGraph saved to {output_path}")


if __name__ == "__main__":
    main()
