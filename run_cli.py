"""
CLI entry point for the frontier analysis.

Usage:
    python run_cli.py --demo                        # Run with sample data
    python run_cli.py --period w --data-dir data    # Load data/wpartition.csv
    python run_cli.py --file returns.xlsx -k 20     # Custom file, 20 portfolios

For installed package, use: pf-analyze
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from portfolio_frontier.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
