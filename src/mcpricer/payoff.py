r"""
Payoff of the European call.

.. math::
   \Phi(S_T) = \max(S_T - K, 0), \qquad
   \text{discounted payoff} = \Phi(S_T) \cdot D,

where :math:`D` is the run's discount factor.
"""

from __future__ import annotations

from .config import SimulationParameters

__all__ = ["call_payoff", "discounted_payoff"]


def call_payoff(price: float, strike: float) -> float:
    r"""
    Terminal payoff :math:`\max(S_T - K, 0)` of a call struck at ``strike``.

    Parameters
    ----------
    price : float
        Terminal price :math:`S_T`. ``inf`` yields ``inf``; ``0`` yields ``0``.
    strike : float
        Strike :math:`K`.

    Returns
    -------
    float
        Non-negative payoff for any real or infinite ``price``.

    Notes
    -----
    A ``nan`` price (a path that overflowed to ``inf`` and then met a zero
    growth factor) is not floored: ``max(nan - K, 0.0)`` returns ``nan``, so the
    fault stays visible in the payoff vector and its average.
    """
    return max(price - strike, 0.0)


def discounted_payoff(price: float, params: SimulationParameters) -> float:
    """Present value of the call payoff at terminal ``price``."""
    return call_payoff(price, params.strike_price) * params.discount_factor
