"""
Main Runner Script for the Frontier Analysis
============================================

Runs the full workflow non-interactively:
1. Loading the return dataset (assets + benchmark indices)
2. Benchmarking market indices and the equal-weight portfolio
3. Computing k efficient portfolios and exporting the stat table
4. Finding the portfolios for a target return and a target risk
5. Saving plots

Usage:
    pf-analyze --period m --data-dir data          # Load data/mpartition.csv
    pf-analyze --file returns.xlsx --portfolios 20
    pf-analyze --demo --target-return 1.0 --target-risk 4.0
    pf-analyze --no-plots
"""

import sys
import argparse
import traceback
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import matplotlib.pyplot as plt

from portfolio_frontier.analysis import run_analysis
from portfolio_frontier.config import AnalysisConfig
from portfolio_frontier.core.loader import DataLoader, generate_sample_returns


# =============================================================================
# LOGGING SETUP
# =============================================================================

def setup_logger(script_name: str = "portfolio_frontier", log_dir: Optional[str] = None) -> logging.Logger:
    """
    Sets up a logger that writes to both file and console.

    The package logger is configured as well, so messages from the library
    modules land in the same handlers.

    Args:
        script_name: Name of the script (used in log filename)
        log_dir: Directory for log files (default: logs/ in the working directory)

    Returns:
        Configured logger instance
    """
    log_path = Path(log_dir) if log_dir else Path.cwd() / "logs"
    log_path.mkdir(parents=True, exist_ok=True)

    # Generate unique log filename
    timestamp = datetime.now().strftime("%Y_%m_%d_%H%M")
    log_filename = log_path / f"log_{script_name}_{timestamp}.txt"

    # Define format
    formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_handler = logging.FileHandler(log_filename, encoding='utf-8')
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)

    names = {script_name, "portfolio_frontier"}
    for name in names:
        configured = logging.getLogger(name)
        configured.setLevel(logging.INFO)
        configured.propagate = False

        # Clear existing handlers (prevent duplicates)
        if configured.hasHandlers():
            configured.handlers.clear()

        configured.addHandler(file_handler)
        configured.addHandler(console_handler)

    return logging.getLogger(script_name)


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Mean-Variance Efficient Frontier Analysis',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pf-analyze --period w --data-dir data          # data/wpartition.csv
  pf-analyze --file returns.xlsx --sheet Returns
  pf-analyze --demo --portfolios 20 --target-return 1.0 --target-risk 4.0
        """
    )

    parser.add_argument('--period', '-p', type=str, default='m',
                        help='Data period: d, w or m (default: m)')
    parser.add_argument('--file', '-f', type=str, default=None,
                        help='Return data file (overrides the period file)')
    parser.add_argument('--data-dir', type=str, default='.',
                        help='Directory with <period>partition.csv files (default: .)')
    parser.add_argument('--sheet', '-s', type=str, default=None,
                        help='Sheet name for Excel files (default: first sheet)')
    parser.add_argument('--benchmarks', nargs='+', default=None,
                        help='Benchmark index columns (default: DJI SP500)')
    parser.add_argument('--exclude', nargs='+', default=None,
                        help='Columns to ignore besides the date and benchmarks')
    parser.add_argument('--portfolios', '-k', type=int, default=10,
                        help='Number of efficient portfolios (default: 10)')
    parser.add_argument('--target-return', type=float, default=None,
                        help='Target return, same units as the data')
    parser.add_argument('--target-risk', type=float, default=None,
                        help='Target risk (std dev), same units as the data')
    parser.add_argument('--population-cov', action='store_true',
                        help='Divide the covariance by N instead of N-1')
    parser.add_argument('--output-dir', '-o', type=str, default='output',
                        help='Directory for plots and the exported table (default: output)')
    parser.add_argument('--demo', action='store_true',
                        help='Run on synthetic sample data')
    parser.add_argument('--no-plots', action='store_true',
                        help='Disable saving plots')
    parser.add_argument('--show-plots', action='store_true',
                        help='Show plots interactively (default: just save)')
    parser.add_argument('--log-dir', type=str, default=None,
                        help='Directory for log files (default: logs)')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the frontier analysis."""
    args = build_parser().parse_args(argv)

    logger = setup_logger("frontier_analysis", args.log_dir)

    try:
        config = AnalysisConfig.from_args(args)
        config.print_config(logger)

        dataset = None
        if args.demo:
            logger.info("Using synthetic sample data...")
            loader = DataLoader(benchmark_columns=config.benchmark_columns)
            dataset = loader.split(generate_sample_returns(benchmark_columns=config.benchmark_columns))

        run_analysis(config, dataset)

        if config.show_plots:
            plt.show()

        logger.info("Analysis completed successfully!")
        return 0

    except Exception as e:
        logger.error(f"Analysis failed: {e}")
        logger.error(traceback.format_exc())
        return 1


if __name__ == "__main__":
    sys.exit(main())
