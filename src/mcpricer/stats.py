r"""
mcpricer.stats
==============

Sampling error of the Monte Carlo price estimate.

For discounted payoffs :math:`X_1, \dots, X_n` with sample mean :math:`\bar X`
and sample standard deviation :math:`s`, the standard error is
:math:`SE = s / \sqrt{n}` and the parametric confidence interval is

.. math::
   \bar X \pm c \cdot SE,

with :math:`c` a normal (z) or Student-t critical value chosen by :func:`autocrit`.
"""

from __future__ import annotations

import numpy as np
from scipy.stats import norm
from scipy.stats import t as student_t

__all__ = ["autocrit", "standard_error", "ci_mean"]

# Below this many samples "auto" uses Student-t critical values
_T_THRESHOLD = 30


def autocrit(confidence: float, n: int, method: str = "auto") -> tuple[float, str]:
    r"""
    Two-sided critical value for a ``confidence`` interval on ``n`` samples.

    Parameters
    ----------
    confidence : float
        Confidence level in :math:`(0, 1)`.
    n : int
        Sample size; Student-t uses :math:`n - 1` degrees of freedom.
    method : {"auto", "z", "t"}, default "auto"
        ``"auto"`` picks t when ``n < 30``, otherwise z.

    Returns
    -------
    tuple[float, str]
        ``(critical value, resolved method)``.
    """
    if not 0.0 < confidence < 1.0:
        raise ValueError("confidence must be in (0,1)")
    if method not in ("auto", "z", "t"):
        raise ValueError(f"method must be one of 'auto', 'z', 't', got '{method}'")
    if method == "auto":
        method = "t" if n < _T_THRESHOLD else "z"
    q = 0.5 + confidence / 2.0
    if method == "t":
        return float(student_t.ppf(q, df=max(1, n - 1))), "t"
    return float(norm.ppf(q)), "z"


def standard_error(x: np.ndarray) -> float:
    """Standard error of the sample mean (``nan`` for fewer than two samples)."""
    arr = np.asarray(x, dtype=float).ravel()
    if arr.size < 2:
        return float("nan")
    return float(np.std(arr, ddof=1) / np.sqrt(arr.size))


def ci_mean(x: np.ndarray, confidence: float = 0.95, method: str = "auto") -> dict[str, float | str]:
    r"""
    Parametric confidence interval for the mean payoff.

    Parameters
    ----------
    x : ndarray
        Discounted payoffs.
    confidence : float, default 0.95
        Confidence level.
    method : {"auto", "z", "t"}, default "auto"
        Critical value family, see :func:`autocrit`.

    Returns
    -------
    dict[str, float | str]
        Keys ``confidence``, ``method``, ``se``, ``crit``, ``low``, ``high``.
        With fewer than two samples the numeric entries are ``nan``.
    """
    arr = np.asarray(x, dtype=float).ravel()
    if arr.size < 2:
        return {
            "confidence": confidence,
            "method": method,
            "se": float("nan"),
            "crit": float("nan"),
            "low": float("nan"),
            "high": float("nan"),
        }

    mu = float(np.mean(arr))
    se = standard_error(arr)
    crit, resolved = autocrit(confidence, arr.size, method)
    if se == 0.0:
        # degenerate data -> CI collapses to the point
        return {"confidence": confidence, "method": resolved, "se": 0.0, "crit": crit, "low": mu, "high": mu}
    return {
        "confidence": confidence,
        "method": resolved,
        "se": se,
        "crit": crit,
        "low": mu - crit * se,
        "high": mu + crit * se,
    }
