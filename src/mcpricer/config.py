r"""
mcpricer.config
===============

Run-wide parameters for the European call pricer.

:class:`SimulationParameters` is a frozen, validated container shared by every
path evaluation. It is built once before any simulation starts and passed by
reference into each worker.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

__all__ = ["SimulationParameters", "VALID_BACKENDS"]

VALID_BACKENDS = ("auto", "sequential", "thread", "process")


@dataclass(frozen=True)
class SimulationParameters:
    r"""
    Immutable parameters of one pricing run.

    Attributes
    ----------
    spot_price : float, default 219.0
        Initial asset price :math:`S_0`.
    risk_free_rate : float, default 0.05
        Continuously compounded drift :math:`r`.
    volatility : float, default 0.5
        Volatility :math:`\sigma \ge 0`.
    strike_price : float, default 250.0
        Strike :math:`K` of the call.
    n_steps : int, default 730
        Time steps per path. The step size is :math:`\Delta t = 1 / n_{\text{steps}}`.
    n_paths : int, default 100_000
        Number of independent paths.
    discount_factor : float, default 0.9
        Multiplier converting a terminal payoff to present value.
    n_workers : int, default 8
        Number of parallel workers. Must divide :attr:`n_paths` evenly.
    backend : {"auto", "sequential", "thread", "process"}, default "thread"
        Strategy used for the parallel leg of a run.
    inclusive_last_step : bool, default False
        Apply ``n_steps + 1`` price updates instead of ``n_steps``.

    Notes
    -----
    The instance is frozen; use :meth:`with_overrides` to derive a modified copy.
    Every copy is validated again.

    Examples
    --------
    >>> params = SimulationParameters(n_paths=1_000, n_workers=4)
    >>> params.with_overrides(volatility=0.2).volatility
    0.2
    """

    spot_price: float = 219.0
    risk_free_rate: float = 0.05
    volatility: float = 0.5
    strike_price: float = 250.0
    n_steps: int = 730
    n_paths: int = 100_000
    discount_factor: float = 0.9
    n_workers: int = 8
    backend: str = "thread"
    inclusive_last_step: bool = False

    def __post_init__(self) -> None:
        r"""
        Validate field ranges and the worker partition.

        Raises
        ------
        ValueError
            If a count is not positive, the volatility is negative or not finite,
            the backend is unknown, or ``n_paths`` is not divisible by ``n_workers``.
        """
        if self.n_steps <= 0:
            raise ValueError("n_steps must be positive")
        if self.n_paths <= 0:
            raise ValueError("n_paths must be positive")
        if self.n_workers <= 0:
            raise ValueError("n_workers must be positive")
        if not math.isfinite(self.volatility) or self.volatility < 0:
            raise ValueError("volatility must be a finite, non-negative number")
        if self.backend not in VALID_BACKENDS:
            raise ValueError(f"backend must be one of {VALID_BACKENDS}, got '{self.backend}'")
        if self.n_paths % self.n_workers != 0:
            raise ValueError(
                f"n_paths ({self.n_paths}) must be divisible by n_workers ({self.n_workers})"
            )

    def with_overrides(self, **changes) -> "SimulationParameters":
        r"""
        Return a validated copy with selected fields replaced.

        Parameters
        ----------
        **changes :
            Field overrides passed to :func:`dataclasses.replace`.

        Returns
        -------
        SimulationParameters
        """
        return replace(self, **changes)

    @property
    def dt(self) -> float:
        r"""Step size :math:`\Delta t = 1 / n_{\text{steps}}`."""
        return 1.0 / self.n_steps

    @property
    def n_updates(self) -> int:
        """Number of price updates applied to each path."""
        return self.n_steps + 1 if self.inclusive_last_step else self.n_steps

    @property
    def chunk_size(self) -> int:
        """Number of paths owned by each parallel worker."""
        return self.n_paths // self.n_workers
