r"""
Sequential execution backend.

This module provides the serial strategy: every path is evaluated in index
order on the calling thread, with optional progress reporting.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

import numpy as np

if TYPE_CHECKING:
    from ..pricer import EuropeanCallPricer
    from ..seeds import SeedTable

__all__ = ["SequentialBackend"]


class SequentialBackend:
    r"""
    Sequential (single-threaded) execution backend.

    Suitable for small runs, debugging, and as the reference the parallel
    backends are compared against.

    Examples
    --------
    >>> backend = SequentialBackend()
    >>> payoffs = backend.run(pricer, seeds, progress_callback=None)  # doctest: +SKIP
    """

    def run(
        self,
        pricer: "EuropeanCallPricer",
        seeds: "SeedTable",
        progress_callback: Callable[[int, int], None] | None,
    ) -> np.ndarray:
        r"""
        Evaluate all paths in order on a single thread.

        Parameters
        ----------
        pricer : EuropeanCallPricer
            The pricer supplying per-path payoffs.
        seeds : SeedTable
            One seed per path.
        progress_callback : callable or None
            Optional callback ``f(completed, total)`` for progress reporting.

        Returns
        -------
        np.ndarray
            Discounted payoffs with shape ``(len(seeds),)``.
        """
        n = len(seeds)
        payoffs = np.zeros(n, dtype=float)
        # Report progress every 1% of paths
        step = max(1, n // 100)

        for i in range(n):
            payoffs[i] = pricer.path_payoff(seeds[i])
            if progress_callback and (((i + 1) % step == 0) or (i + 1 == n)):
                progress_callback(i + 1, n)

        return payoffs
