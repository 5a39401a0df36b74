r"""
Parallel execution backends.

This module provides:

Classes
    :class:`ThreadBackend` — Thread-based parallelism using ThreadPoolExecutor
    :class:`ProcessBackend` — Process-based parallelism using ProcessPoolExecutor

Both split the path range into one equal, contiguous chunk per worker
(:func:`~mcpricer.backends.base.make_blocks`), submit one task per chunk and
join every task before returning. The first failing task cancels the tasks
that have not started yet and its exception is re-raised, so a run either
fills every slot or produces no result at all.
"""

from __future__ import annotations

import logging
import multiprocessing as mp
from concurrent.futures import Future, ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING, Callable

import numpy as np

from .base import make_blocks, worker_price_chunk

if TYPE_CHECKING:
    from ..pricer import EuropeanCallPricer
    from ..seeds import SeedTable

logger = logging.getLogger(__name__)

__all__ = [
    "ThreadBackend",
    "ProcessBackend",
]


def _cancel_pending(futs: list[Future]) -> None:
    cancelled = sum(1 for f in futs if f.cancel())
    if cancelled:
        logger.debug("Cancelled %d pending chunk(s) after a worker failure.", cancelled)


class ThreadBackend:
    r"""
    Thread-based parallel execution backend.

    Uses :class:`concurrent.futures.ThreadPoolExecutor`. Each task writes the
    discounted payoffs of its own index range directly into the shared output
    vector; ranges are disjoint, so no locking is needed.

    Parameters
    ----------
    n_workers : int
        Number of worker threads, and number of chunks.

    Examples
    --------
    >>> backend = ThreadBackend(n_workers=4)
    >>> payoffs = backend.run(pricer, seeds, progress_callback=None)  # doctest: +SKIP
    """

    def __init__(self, n_workers: int):
        if n_workers <= 0:
            raise ValueError("n_workers must be positive")
        self.n_workers = n_workers

    def run(
        self,
        pricer: "EuropeanCallPricer",
        seeds: "SeedTable",
        progress_callback: Callable[[int, int], None] | None,
    ) -> np.ndarray:
        r"""
        Evaluate all paths in parallel using threads.

        Parameters
        ----------
        pricer : EuropeanCallPricer
            The pricer supplying per-path payoffs.
        seeds : SeedTable
            One seed per path, shared read-only by all workers.
        progress_callback : callable or None
            Optional callback ``f(completed, total)``, called once per finished chunk.

        Returns
        -------
        np.ndarray
            Discounted payoffs with shape ``(len(seeds),)``.
        """
        n = len(seeds)
        blocks = make_blocks(n, self.n_workers)
        payoffs = np.zeros(n, dtype=float)
        completed = 0

        def _work(blk: tuple[int, int]) -> tuple[int, int]:
            a, b = blk
            for k in range(a, b):
                payoffs[k] = pricer.path_payoff(seeds[k])
            return a, b

        with ThreadPoolExecutor(max_workers=len(blocks)) as ex:
            futs = [ex.submit(_work, blk) for blk in blocks]
            try:
                for f in as_completed(futs):
                    i, j = f.result()
                    completed += j - i
                    if progress_callback:
                        progress_callback(completed, n)
            except BaseException:
                _cancel_pending(futs)
                raise

        return payoffs


class ProcessBackend:
    r"""
    Process-based parallel execution backend.

    Uses :class:`concurrent.futures.ProcessPoolExecutor` with the spawn context.
    Each task evaluates its chunk in a child process and returns it; the parent
    copies the chunk into the task's own index range of the output vector.

    Parameters
    ----------
    n_workers : int
        Number of worker processes, and number of chunks.

    Notes
    -----
    The pricer must be pickleable for process-based execution.

    Examples
    --------
    >>> backend = ProcessBackend(n_workers=4)
    >>> payoffs = backend.run(pricer, seeds, progress_callback=None)  # doctest: +SKIP
    """

    def __init__(self, n_workers: int):
        if n_workers <= 0:
            raise ValueError("n_workers must be positive")
        self.n_workers = n_workers

    def run(
        self,
        pricer: "EuropeanCallPricer",
        seeds: "SeedTable",
        progress_callback: Callable[[int, int], None] | None,
    ) -> np.ndarray:
        r"""
        Evaluate all paths in parallel using processes.

        Parameters
        ----------
        pricer : EuropeanCallPricer
            The pricer supplying per-path payoffs. Must be pickleable.
        seeds : SeedTable
            One seed per path.
        progress_callback : callable or None
            Optional callback ``f(completed, total)``, called once per finished chunk.

        Returns
        -------
        np.ndarray
            Discounted payoffs with shape ``(len(seeds),)``.
        """
        n = len(seeds)
        blocks = make_blocks(n, self.n_workers)
        payoffs = np.zeros(n, dtype=float)
        completed = 0

        with ProcessPoolExecutor(
            max_workers=len(blocks),
            mp_context=mp.get_context("spawn"),
        ) as ex:
            futs = []
            for i, j in blocks:
                f = ex.submit(worker_price_chunk, pricer, seeds[i:j])
                f.blk = (i, j)  # type: ignore[attr-defined]
                futs.append(f)
            try:
                for f in as_completed(futs):
                    i, j = f.blk  # type: ignore[attr-defined]
                    payoffs[i:j] = f.result()
                    completed += j - i
                    if progress_callback:
                        progress_callback(completed, n)
            except BaseException:
                _cancel_pending(futs)
                raise

        return payoffs
