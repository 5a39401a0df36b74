r"""
Base classes and utilities for execution backends.

This module provides:

Protocol
    :class:`ExecutionBackend` — Interface for payoff evaluation strategies

Functions
    :func:`make_blocks` — Equal, contiguous partition of the path index range
    :func:`worker_price_chunk` — Top-level worker for process-based parallelism

Helpers
    :func:`is_windows_platform` — Platform detection for backend selection
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Callable, Protocol

import numpy as np

if TYPE_CHECKING:
    from ..pricer import EuropeanCallPricer
    from ..seeds import SeedTable

__all__ = [
    "ExecutionBackend",
    "make_blocks",
    "worker_price_chunk",
    "is_windows_platform",
]


def is_windows_platform() -> bool:
    """Return True when running on a Windows platform."""
    return sys.platform.startswith("win") or (sys.platform == "cli")


def make_blocks(n: int, n_chunks: int) -> list[tuple[int, int]]:
    r"""
    Partition :math:`[0, n)` into ``n_chunks`` equal half-open blocks :math:`(i, j)`.

    Each block is owned by exactly one worker, so the blocks must neither
    overlap nor leave gaps.

    Parameters
    ----------
    n : int
        Total number of paths.
    n_chunks : int
        Number of blocks. Must divide ``n`` evenly.

    Returns
    -------
    list of tuple[int, int]
        ``(i, j)`` index pairs covering ``[0, n)`` exactly once, in order.

    Raises
    ------
    ValueError
        If ``n`` or ``n_chunks`` is not positive, or ``n % n_chunks != 0``.

    Examples
    --------
    >>> make_blocks(6, 3)
    [(0, 2), (2, 4), (4, 6)]
    """
    if n <= 0 or n_chunks <= 0:
        raise ValueError("n and n_chunks must be positive")
    if n % n_chunks != 0:
        raise ValueError(f"cannot split {n} paths into {n_chunks} equal chunks")
    size = n // n_chunks
    return [(k * size, (k + 1) * size) for k in range(n_chunks)]


def worker_price_chunk(pricer: "EuropeanCallPricer", seeds: np.ndarray) -> np.ndarray:
    r"""
    Evaluate the discounted payoffs of a contiguous chunk of seeds in a **separate worker**.

    Parameters
    ----------
    pricer : EuropeanCallPricer
        Pricer whose :meth:`~mcpricer.pricer.EuropeanCallPricer.path_payoff` is called.
        Must be pickleable when used with a process backend.
    seeds : numpy.ndarray
        The chunk's seeds, in index order.

    Returns
    -------
    numpy.ndarray
        Discounted payoffs aligned with ``seeds``.
    """
    out = np.empty(seeds.size, dtype=float)
    for k in range(seeds.size):
        out[k] = pricer.path_payoff(seeds[k])
    return out


class ExecutionBackend(Protocol):
    r"""
    Protocol defining the interface for execution backends.

    A backend fills one discounted-payoff slot per seed and returns the vector.
    It handles the details of sequential vs parallel execution and progress
    reporting; it never averages.
    """

    def run(
        self,
        pricer: "EuropeanCallPricer",
        seeds: "SeedTable",
        progress_callback: Callable[[int, int], None] | None,
    ) -> np.ndarray:
        r"""
        Evaluate every path and return the discounted payoffs.

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
            Array of discounted payoffs with shape ``(len(seeds),)``.
        """
