"""
Interactive frontier session.

Usage:
    python run_interactive.py

For installed package, use: pf-interactive
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from portfolio_frontier.cli.interactive import main

if __name__ == "__main__":
    sys.exit(main())
