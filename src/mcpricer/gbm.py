r"""
Geometric Brownian Motion path simulation.

Under the risk-neutral measure the asset follows

.. math::
   dS_t = r S_t\,dt + \sigma S_t\,dW_t,

whose exact one-step solution over :math:`\Delta t` is

.. math::
   S_{t+\Delta t} = S_t \exp\!\left((r - \tfrac{1}{2}\sigma^2)\Delta t
   + \sigma \sqrt{\Delta t}\,\varepsilon\right), \qquad \varepsilon \sim \mathcal{N}(0, 1).

Every path draws its :math:`\varepsilon` values from a private Philox stream
seeded by the path's seed, so the whole trajectory is a pure function of
``(seed, params)``.
"""

from __future__ import annotations

import math

import numpy as np

from .config import SimulationParameters

__all__ = ["next_price", "path_rng", "simulate_price_path", "simulate_path"]


def _log_growth(epsilon, params: SimulationParameters):
    r"""
    Exponent of one GBM step, for a scalar or an array of ``epsilon`` draws.

    .. math::
       (r - \tfrac{1}{2}\sigma^2)\Delta t + \sigma \sqrt{\Delta t}\,\varepsilon
    """
    dt = params.dt
    sigma = params.volatility
    drift = (params.risk_free_rate - 0.5 * sigma * sigma) * dt
    return drift + sigma * epsilon * math.sqrt(dt)


def next_price(price: float, epsilon: float, params: SimulationParameters) -> float:
    r"""
    Advance ``price`` by one time step using the standard normal draw ``epsilon``.

    Parameters
    ----------
    price : float
        Current level :math:`S_t`.
    epsilon : float
        Standard normal variate :math:`\varepsilon`.
    params : SimulationParameters
        Supplies :math:`r`, :math:`\sigma` and :math:`\Delta t`.

    Returns
    -------
    float
        :math:`S_{t+\Delta t}`. Overflow yields ``inf`` and underflow ``0.0``.
    """
    with np.errstate(over="ignore", under="ignore", invalid="ignore"):
        return float(price * np.exp(_log_growth(epsilon, params)))


def path_rng(seed: int) -> np.random.Generator:
    """Return the private random stream of the path identified by ``seed``."""
    return np.random.Generator(np.random.Philox(np.random.SeedSequence(int(seed))))


def simulate_price_path(seed: int, params: SimulationParameters) -> np.ndarray:
    r"""
    Simulate the full price path driven by ``seed``.

    Parameters
    ----------
    seed : int
        Path seed, typically an entry of a :class:`~mcpricer.seeds.SeedTable`.
    params : SimulationParameters
        Model parameters. :attr:`~SimulationParameters.n_updates` steps are applied.

    Returns
    -------
    numpy.ndarray
        Array of shape ``(n_updates + 1,)`` with ``path[0] == spot_price``.

    Notes
    -----
    The growth factors :math:`\exp(\cdot)` are accumulated with
    :func:`numpy.cumprod`, i.e. by repeated multiplication in step order, which
    is the same recursion as applying :func:`next_price` once per step. Overflow
    to ``inf`` or underflow to ``0`` under extreme volatility are returned as is.
    """
    n = params.n_updates
    eps = path_rng(seed).standard_normal(n)

    with np.errstate(over="ignore", under="ignore", invalid="ignore"):
        growth = np.exp(_log_growth(eps, params))
        path = np.empty(n + 1, dtype=float)
        path[0] = params.spot_price
        path[1:] = growth
        np.cumprod(path, out=path)
    return path


def simulate_path(seed: int, params: SimulationParameters) -> float:
    """Return the terminal price of the path driven by ``seed``."""
    return float(simulate_price_path(seed, params)[-1])
