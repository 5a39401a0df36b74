r"""
Seed generation for independent price paths.

A single 64-bit Mersenne Twister engine, seeded from OS entropy through
:class:`numpy.random.SeedSequence`, produces one ``uint64`` seed per path.
Each seed later drives a private random stream in :mod:`mcpricer.gbm`, so a
path is fully reproducible from its seed alone.
"""

from __future__ import annotations

from typing import Iterable, Iterator

import numpy as np

__all__ = ["SeedTable", "generate_seeds"]

_UINT64_MAX = np.iinfo(np.uint64).max


class SeedTable:
    r"""
    Read-only, ordered table of per-path seeds.

    Parameters
    ----------
    seeds : numpy.ndarray
        One-dimensional ``uint64`` array. The table keeps a private read-only copy.
    entropy : int, optional
        Entropy of the :class:`~numpy.random.SeedSequence` that produced the table,
        or ``None`` for tables built from explicit values.

    Examples
    --------
    >>> table = SeedTable.from_values([1, 2, 3])
    >>> len(table), int(table[1])
    (3, 2)
    """

    __slots__ = ("_seeds", "entropy")

    def __init__(self, seeds: np.ndarray, entropy: int | None = None):
        arr = np.array(seeds, dtype=np.uint64, copy=True)
        if arr.ndim != 1:
            raise ValueError("seed table must be one-dimensional")
        arr.flags.writeable = False
        self._seeds = arr
        self.entropy = entropy

    @classmethod
    def from_values(cls, values: Iterable[int]) -> "SeedTable":
        r"""
        Build a table from explicit seed values.

        Used to pin the seeds of a run, e.g. to compare strategies on identical input.

        Raises
        ------
        ValueError
            If a value is negative or does not fit into 64 bits.
        """
        vals = [int(v) for v in values]
        if any(v < 0 or v > _UINT64_MAX for v in vals):
            raise ValueError("seeds must be in the range [0, 2**64)")
        return cls(np.array(vals, dtype=np.uint64))

    @property
    def values(self) -> np.ndarray:
        """The underlying read-only ``uint64`` array."""
        return self._seeds

    def __len__(self) -> int:
        return int(self._seeds.size)

    def __getitem__(self, idx):
        return self._seeds[idx]

    def __iter__(self) -> Iterator[np.uint64]:
        return iter(self._seeds)

    def __repr__(self) -> str:
        return f"SeedTable(n={len(self)}, entropy={self.entropy})"

    def __getstate__(self):
        return {"seeds": self._seeds, "entropy": self.entropy}

    def __setstate__(self, state):
        arr = np.array(state["seeds"], dtype=np.uint64, copy=True)
        arr.flags.writeable = False
        self._seeds = arr
        self.entropy = state["entropy"]


def generate_seeds(count: int, entropy: int | None = None) -> SeedTable:
    r"""
    Draw ``count`` independent 64-bit seeds from one entropy-seeded engine.

    Parameters
    ----------
    count : int
        Number of seeds (one per path).
    entropy : int, optional
        Fixed entropy for a reproducible table. ``None`` reads fresh entropy
        from the operating system, so tables differ from run to run.

    Returns
    -------
    SeedTable
        Fully populated table of length ``count``.

    Raises
    ------
    ValueError
        If ``count`` is not positive.
    RuntimeError
        If the operating system entropy source fails.
    """
    if count <= 0:
        raise ValueError("count must be positive")
    try:
        seed_seq = np.random.SeedSequence(entropy)
    except OSError as e:
        raise RuntimeError("entropy source unavailable; cannot seed paths") from e

    engine = np.random.Generator(np.random.MT19937(seed_seq))
    seeds = engine.integers(0, _UINT64_MAX, size=count, dtype=np.uint64, endpoint=True)
    return SeedTable(seeds, entropy=seed_seq.entropy)
