"""
================================================================================
INTERACTIVE EFFICIENT FRONTIER SESSION
================================================================================
Walks through the analysis one stage at a time, prompting between stages:

1. Period (d/w/m) and data file
2. Benchmarks: market indices, equal-weight portfolio and assets
3. Number of optimal portfolios -> efficient frontier, weights, stat table export
4. Targeted return and targeted risk -> matching frontier portfolios

Targets are entered in the units of the data (e.g. percent per period).
================================================================================
"""

import sys
import logging
import traceback
from typing import Optional

import matplotlib.pyplot as plt

from portfolio_frontier.analysis import FrontierAnalysis, load_dataset
from portfolio_frontier.cli.main import setup_logger
from portfolio_frontier.config import AnalysisConfig
from portfolio_frontier.core.errors import InvalidParameterError
from portfolio_frontier.core.loader import DataLoader, generate_sample_returns


# ============================================================================
# PROMPTS
# ============================================================================

def prompt_period(config: AnalysisConfig):
    """Ask for the data period until a valid code is entered."""
    while True:
        code = input("Period (d/w/m): ").strip()
        try:
            config.set_period(code)
            return
        except InvalidParameterError as e:
            print(f"  {e}")


def prompt_int(label: str, minimum: int = 1) -> int:
    """Ask for an integer >= minimum."""
    while True:
        raw = input(label).strip()
        try:
            value = int(raw)
        except ValueError:
            print(f"  '{raw}' is not an integer.")
            continue
        if value < minimum:
            print(f"  Enter a number >= {minimum}.")
            continue
        return value


def prompt_float(label: str, allow_blank: bool = False) -> Optional[float]:
    """Ask for a number; blank input returns None when allowed."""
    while True:
        raw = input(label).strip()
        if not raw and allow_blank:
            return None
        try:
            return float(raw)
        except ValueError:
            print(f"  '{raw}' is not a number.")


def pause():
    input("\nPress Enter to continue...")


# ============================================================================
# MAIN INTERACTIVE FUNCTION
# ============================================================================

def run_session(config: AnalysisConfig, logger: logging.Logger, demo: bool = False) -> FrontierAnalysis:
    """
    Run the prompt-driven session on an already configured period.

    Args:
        config: Configuration with period and data location set
        logger: Logger for progress output
        demo: If True, use synthetic sample data

    Returns:
        The FrontierAnalysis with all stage results
    """
    if demo:
        logger.info("Generating sample demonstration data...")
        loader = DataLoader(benchmark_columns=config.benchmark_columns)
        dataset = loader.split(generate_sample_returns(benchmark_columns=config.benchmark_columns))
    else:
        dataset = load_dataset(config)

    analysis = FrontierAnalysis(config, dataset)

    analysis.benchmark_stage()
    if config.show_plots:
        plt.show()
    pause()

    k = prompt_int("Enter number of optimal portfolios: ")
    analysis.frontier_stage(k)
    if config.show_plots:
        plt.show()
    pause()

    analysis.frontier_range()
    period = config.period_label
    target_return = prompt_float(f"Enter {period} targeted return: ")
    target_risk = prompt_float(f"Enter {period} targeted risk: ")
    analysis.target_stage(target_return, target_risk)
    if config.show_plots:
        plt.show()

    return analysis


def main():
    """Main entry point for the interactive session."""
    print("\n" + "=" * 70)
    print("   EFFICIENT FRONTIER - INTERACTIVE SESSION")
    print("   Mean-Variance Optimization, Long-Only and Fully Invested")
    print("=" * 70)

    config = AnalysisConfig()
    prompt_period(config)

    file_path = input(
        f"Data file (Enter for {config.period}partition.csv, 'demo' for sample data): "
    ).strip().strip('"').strip("'")
    demo = file_path.lower() == 'demo'
    if file_path and not demo:
        config.data_file = file_path

    show = input("Show plots on screen? [y/N]: ").strip().lower()
    config.show_plots = show == 'y'

    logger = setup_logger("frontier_interactive")
    config.print_config(logger)

    try:
        run_session(config, logger, demo)
    except Exception as e:
        logger.error(f"Session failed: {e}")
        logger.error(traceback.format_exc())
        return 1

    print("\n" + "=" * 70)
    print("SESSION COMPLETE")
    print("=" * 70)
    print(f"\nOutput files saved to: {config.output_path()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
