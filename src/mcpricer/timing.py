r"""
Scoped wall-clock measurement.

:class:`Timer` reports ``Timer <name> started`` on entry and
``Timer <name> finished: <duration> ms`` on exit through a ``report`` callback
(``print`` by default). The measured duration stays available afterwards.

Example
-------
>>> with Timer("serial", report=lambda msg: None) as t:
...     total = sum(range(1000))
>>> t.elapsed_ms >= 0.0
True
"""

from __future__ import annotations

import time
from typing import Callable

__all__ = ["Timer"]


class Timer:
    r"""
    Context manager measuring the wall-clock duration of a block.

    Parameters
    ----------
    name : str
        Label used in the report lines.
    report : callable, optional
        Function receiving each report line. Defaults to :func:`print`.
        Pass ``None`` to measure silently.

    Attributes
    ----------
    elapsed_ms : float or None
        Duration in milliseconds, set on exit (also when the block raises).
    """

    def __init__(self, name: str, report: Callable[[str], None] | None = print):
        self.name = name
        self.report = report
        self.elapsed_ms: float | None = None
        self._t0: float | None = None

    def __enter__(self) -> "Timer":
        self.elapsed_ms = None
        if self.report is not None:
            self.report(f"Timer {self.name} started")
        self._t0 = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.elapsed_ms = (time.perf_counter() - self._t0) * 1000.0
        if self.report is not None:
            self.report(f"Timer {self.name} finished: {self.elapsed_ms:.3f} ms")

    @property
    def elapsed(self) -> float | None:
        """Duration in seconds, or ``None`` before the block has finished."""
        return None if self.elapsed_ms is None else self.elapsed_ms / 1000.0
