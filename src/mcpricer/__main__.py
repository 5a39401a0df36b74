"""Run the serial-vs-parallel pricing comparison with the default parameters.

Usage::

    python -m mcpricer
"""

from __future__ import annotations

import logging
import sys

from .config import SimulationParameters
from .pricer import compare_strategies

logger = logging.getLogger("mcpricer")


def main() -> int:
    """Entry point; returns the process exit status."""
    try:
        compare_strategies(SimulationParameters())
    except (ValueError, RuntimeError) as e:
        logger.error("Pricing run aborted: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
