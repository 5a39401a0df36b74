r"""
mcpricer.pricer
===============

Monte Carlo pricing of a European call and the serial-vs-parallel comparison.

This module provides:

* :class:`~mcpricer.pricer.EuropeanCallPricer` – per-path payoff and run orchestration.
* :class:`~mcpricer.pricer.PricingResult` – a lightweight container for outputs.
* :func:`~mcpricer.pricer.compare_strategies` – timed serial and parallel runs over one seed table.

Execution backends
------------------

:meth:`EuropeanCallPricer.run` evaluates one discounted payoff per seed through a
backend from :mod:`mcpricer.backends` and averages the vector once every slot
is filled. ``"auto"`` runs small jobs sequentially and otherwise **prefers
threads** on POSIX and processes on Windows.

Because every path draws from a private stream derived from its own seed, the
per-path payoffs do not depend on the backend or the worker count: all
strategies return bit-identical vectors for the same :class:`~mcpricer.seeds.SeedTable`.

Confidence intervals
--------------------

The reported 95% interval for the price is

.. math::

   \bar{X} \pm z_{\alpha/2}\,\frac{s}{\sqrt{n}}

or uses a t-critical value for small runs (see :mod:`mcpricer.stats`).
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Callable

import numpy as np

from .backends import ProcessBackend, SequentialBackend, ThreadBackend, is_windows_platform
from .config import VALID_BACKENDS, SimulationParameters
from .gbm import simulate_path, simulate_price_path
from .payoff import call_payoff, discounted_payoff
from .seeds import SeedTable, generate_seeds
from .stats import ci_mean
from .timing import Timer

logger = logging.getLogger(__name__)  # pragma: no cover
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)

__all__ = ["EuropeanCallPricer", "PricingResult", "compare_strategies"]


@dataclass
class PricingResult:
    r"""
    Container for the outcome of a pricing run.

    Attributes
    ----------
    discounted_payoffs : ndarray of float
        One discounted payoff per path, in seed order.
    n_paths : int
        Number of paths evaluated.
    average_payoff : float
        Arithmetic mean of :attr:`discounted_payoffs`, the price estimate.
    std : float
        Sample standard deviation of the payoffs (``ddof=1``).
    execution_time : float
        Wall-clock time of the evaluation in seconds.
    backend : str
        Backend that actually ran (``"auto"`` is resolved).
    n_workers : int
        Worker count used (``1`` for sequential runs).
    stats : dict
        Sampling statistics, e.g. ``"se"`` and ``"ci_mean"``.
    metadata : dict
        Freeform metadata. Includes ``"simulation_name"``, ``"timestamp"``,
        ``"seed_entropy"`` and ``"parameters"``.
    """

    discounted_payoffs: np.ndarray
    n_paths: int
    average_payoff: float
    std: float
    execution_time: float
    backend: str
    n_workers: int
    stats: dict[str, Any] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)

    def result_to_string(self) -> str:
        """Multiline, human-readable summary of the run."""
        if name := self.metadata.get("simulation_name"):
            title = f"Results for pricer '{name}':"
        else:
            title = "Results for pricer:"
        lines = [
            "=" * 20 + " PRICING RESULTS " + "=" * 20,
            title,
            f"  Number of paths: {self.n_paths}",
            f"  Backend: {self.backend} ({self.n_workers} worker(s))",
            f"  Execution time: {self.execution_time:.3f} seconds",
            f"  Option payoff: {self.average_payoff:.5f}",
            f"  Std Dev (sample): {self.std:.5f}",
        ]
        ci = self.stats.get("ci_mean")
        if isinstance(ci, dict):
            lines.append(
                f"  {int(ci['confidence'] * 100)}% {ci['method']}-CI: "
                f"[{ci['low']:.5f}, {ci['high']:.5f}] (SE: {ci['se']:.5f})"
            )
        if self.metadata:
            lines.append("Metadata:")
        for k, v in self.metadata.items():
            lines.append(f"    {k}: {v}")
        lines.append("=" * 20 + " END " + "=" * 20)
        return "\n".join(lines)


class EuropeanCallPricer:
    r"""
    Monte Carlo pricer for a European call under GBM dynamics.

    Each path :math:`i` evolves from its own seed to a terminal price
    :math:`S_T^{(i)}`; the price estimate is

    .. math::
       \hat{C} = \frac{1}{N} \sum_{i=1}^{N} D \cdot \max(S_T^{(i)} - K, 0).

    Parameters
    ----------
    params : SimulationParameters, optional
        Run parameters. Defaults to :class:`SimulationParameters` defaults.
    name : str, default "European Call"
        Display name stored in result metadata.

    Examples
    --------
    >>> pricer = EuropeanCallPricer(SimulationParameters(n_paths=1_000, n_workers=4))
    >>> seeds = pricer.generate_seeds(entropy=42)
    >>> res = pricer.run(seeds=seeds, backend="thread")  # doctest: +SKIP
    >>> res.average_payoff  # doctest: +SKIP
    """

    # Minimum paths for "auto" to choose a parallel backend
    _PARALLEL_THRESHOLD = 20_000

    def __init__(self, params: SimulationParameters | None = None, name: str = "European Call"):
        self.params = params if params is not None else SimulationParameters()
        self.name = name

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, params={self.params!r})"

    # -- per-path pipeline ---------------------------------------------------

    def generate_seeds(self, entropy: int | None = None) -> SeedTable:
        """Return a fresh :class:`~mcpricer.seeds.SeedTable` with one seed per path."""
        return generate_seeds(self.params.n_paths, entropy=entropy)

    def price_path(self, seed: int) -> np.ndarray:
        """Full simulated price path for ``seed`` (for inspection)."""
        return simulate_price_path(seed, self.params)

    def simulate_path(self, seed: int) -> float:
        """Terminal price of the path driven by ``seed``."""
        return simulate_path(seed, self.params)

    def payoff(self, price: float) -> float:
        """Undiscounted call payoff at terminal ``price``."""
        return call_payoff(price, self.params.strike_price)

    def discounted_payoff(self, price: float) -> float:
        """Discounted call payoff at terminal ``price``."""
        return discounted_payoff(price, self.params)

    def path_payoff(self, seed: int) -> float:
        """Discounted payoff of the path driven by ``seed``."""
        return discounted_payoff(simulate_path(seed, self.params), self.params)

    # -- orchestration -------------------------------------------------------

    def _validate_run_params(self, seeds: SeedTable, backend: str, n_workers: int, confidence: float) -> None:
        """Validate parameters for :meth:`run`."""
        if len(seeds) != self.params.n_paths:
            raise ValueError(
                f"seed table has {len(seeds)} entries, expected n_paths={self.params.n_paths}"
            )
        if backend not in VALID_BACKENDS:
            raise ValueError(f"backend must be one of {VALID_BACKENDS}, got '{backend}'")
        if n_workers <= 0:
            raise ValueError("n_workers must be positive")
        if self.params.n_paths % n_workers != 0:
            raise ValueError(
                f"n_paths ({self.params.n_paths}) must be divisible by n_workers ({n_workers})"
            )
        if not 0.0 < confidence < 1.0:
            raise ValueError("confidence must be in the interval (0, 1)")

    def _resolve_backend_type(self, backend: str, n_workers: int) -> str:
        r"""
        Resolve ``"auto"`` to a concrete backend.

        Notes
        -----
        ``"auto"`` maps to ``"sequential"`` for one worker or fewer than
        :attr:`_PARALLEL_THRESHOLD` paths, otherwise to ``"thread"`` on POSIX
        and ``"process"`` on Windows.
        """
        if backend != "auto":
            return backend
        if n_workers <= 1 or self.params.n_paths < self._PARALLEL_THRESHOLD:
            return "sequential"
        if is_windows_platform():
            logger.info("Backend 'auto' resolved to 'process' on Windows platform.")
            return "process"
        return "thread"

    @staticmethod
    def _create_backend(
        backend: str, n_workers: int
    ) -> SequentialBackend | ThreadBackend | ProcessBackend:
        """Instantiate the backend named ``backend``."""
        if backend == "sequential":
            return SequentialBackend()
        if backend == "thread":
            return ThreadBackend(n_workers=n_workers)
        return ProcessBackend(n_workers=n_workers)

    def run(
        self,
        *,
        seeds: SeedTable | None = None,
        backend: str | None = None,
        n_workers: int | None = None,
        progress_callback: Callable[[int, int], None] | None = None,
        confidence: float = 0.95,
        ci_method: str = "auto",
    ) -> PricingResult:
        r"""
        Price the option over all paths.

        Parameters
        ----------
        seeds : SeedTable, optional
            Seeds to evaluate, one per path. A fresh entropy-seeded table is
            generated when omitted.
        backend : {"auto", "sequential", "thread", "process"}, optional
            Execution strategy. Defaults to :attr:`SimulationParameters.backend`.
        n_workers : int, optional
            Worker count for parallel backends. Defaults to
            :attr:`SimulationParameters.n_workers`; must divide ``n_paths``.
        progress_callback : callable, optional
            A function ``f(completed: int, total: int)`` called periodically.
        confidence : float, default ``0.95``
            Confidence level of the reported interval.
        ci_method : {"auto", "z", "t"}, default ``"auto"``
            Critical value family for the interval.

        Returns
        -------
        PricingResult

        Raises
        ------
        ValueError
            On a seed table of the wrong length, an unknown backend, or a worker
            count that does not divide ``n_paths``.

        Notes
        -----
        Any exception raised while evaluating a path aborts the whole run and is
        re-raised; no partial average is returned.
        """
        if seeds is None:
            seeds = self.generate_seeds()
        backend = backend or self.params.backend
        n_workers = n_workers if n_workers is not None else self.params.n_workers
        self._validate_run_params(seeds, backend, n_workers, confidence)

        backend = self._resolve_backend_type(backend, n_workers)
        if backend == "sequential":
            n_workers = 1
            logger.info("Computing %d paths sequentially...", len(seeds))
        else:
            logger.info(
                "Computing %d paths in parallel using %s backend with %d workers...",
                len(seeds), backend, n_workers,
            )

        t0 = time.time()
        payoffs = self._create_backend(backend, n_workers).run(self, seeds, progress_callback)
        exec_time = time.time() - t0

        return self._create_result(payoffs, seeds, backend, n_workers, exec_time, confidence, ci_method)

    def price_all_paths(self, seeds: SeedTable, backend: str | None = None) -> float:
        """Average discounted payoff over ``seeds`` using ``backend``."""
        return self.run(seeds=seeds, backend=backend).average_payoff

    def _create_result(
        self,
        payoffs: np.ndarray,
        seeds: SeedTable,
        backend: str,
        n_workers: int,
        execution_time: float,
        confidence: float,
        ci_method: str,
    ) -> PricingResult:
        """Assemble a :class:`PricingResult` from a filled payoff vector."""
        average = float(np.mean(payoffs))
        std_sample = float(np.std(payoffs, ddof=1)) if payoffs.size > 1 else 0.0
        ci = ci_mean(payoffs, confidence=confidence, method=ci_method)

        meta = {
            "simulation_name": self.name,
            "timestamp": time.time(),
            "seed_entropy": seeds.entropy,
            "parameters": asdict(self.params),
        }

        return PricingResult(
            discounted_payoffs=payoffs,
            n_paths=int(payoffs.size),
            average_payoff=average,
            std=std_sample,
            execution_time=execution_time,
            backend=backend,
            n_workers=n_workers,
            stats={"se": ci["se"], "ci_mean": ci},
            metadata=meta,
        )


def compare_strategies(
    params: SimulationParameters | None = None,
    *,
    seeds: SeedTable | None = None,
    parallel_backend: str | None = None,
    report: Callable[[str], None] | None = print,
) -> dict[str, PricingResult]:
    r"""
    Time the serial strategy against a parallel one over the same seed table.

    Each strategy runs inside a :class:`~mcpricer.timing.Timer` named
    ``"serial"`` / ``"parallel"``; after each run ``Option payoff = <value>``
    is passed to ``report``.

    Parameters
    ----------
    params : SimulationParameters, optional
        Run parameters. Defaults to :class:`SimulationParameters` defaults.
    seeds : SeedTable, optional
        Shared seeds. A fresh entropy-seeded table is generated when omitted.
    parallel_backend : {"auto", "sequential", "thread", "process"}, optional
        Backend of the parallel leg. Defaults to :attr:`SimulationParameters.backend`.
    report : callable, optional
        Sink for the report lines. Defaults to :func:`print`; ``None`` is silent.

    Returns
    -------
    dict[str, PricingResult]
        ``{"serial": ..., "parallel": ...}``.
    """
    pricer = EuropeanCallPricer(params)
    if seeds is None:
        seeds = pricer.generate_seeds()

    results: dict[str, PricingResult] = {}
    for label, backend in (("serial", "sequential"), ("parallel", parallel_backend or pricer.params.backend)):
        with Timer(label, report=report):
            res = pricer.run(seeds=seeds, backend=backend)
        if report is not None:
            report(f"Option payoff = {res.average_payoff:g}")
        results[label] = res
    return results
