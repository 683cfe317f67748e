"""
solarga.core.genotype
=====================

Real-valued genotype used by the layout optimizer. Genes are normalized to the unit
interval; mapping them onto physical layout parameters is up to the caller.

An optional discretizer snaps every written gene onto a finite set of values.
"""

from __future__ import annotations

from collections.abc import Callable

import numpy as np

Discretizer = Callable[[np.ndarray | float], np.ndarray | float]


def lattice_discretizer(steps: int) -> Discretizer:
    """Return a discretizer snapping genes onto ``steps`` equal divisions of [0, 1].

    Half-way values round up, so with ``steps=4`` a gene of 0.125 becomes 0.25.
    """
    if steps <= 0:
        raise ValueError("steps must be > 0")

    def snap(value):
        return np.floor(np.asarray(value, dtype=np.float64) * steps + 0.5) / steps

    return snap


class RealGenotype:
    """Fixed-length vector of real-valued genes.

    Parameters
    ----------
    genes : numpy.ndarray
        One-dimensional float array. Stored as given (no snapping).
    discretizer : Discretizer | None, default None
        Applied on every gene write through :meth:`__setitem__`, :meth:`assign`
        and :meth:`from_values`.
    """

    __slots__ = ("discretizer", "genes")

    def __init__(self, genes: np.ndarray, discretizer: Discretizer | None = None):
        if genes.dtype not in (np.float32, np.float64):
            raise TypeError(f"RealGenotype genes must be float32/float64, got dtype={genes.dtype}.")
        if genes.ndim != 1:
            raise ValueError(f"RealGenotype genes must be one-dimensional, got shape={genes.shape}.")
        self.genes: np.ndarray = genes
        self.discretizer: Discretizer | None = discretizer

    @classmethod
    def random(
        cls, length: int, rng: np.random.Generator | None = None, discretizer: Discretizer | None = None
    ) -> RealGenotype:
        """Create a genotype with genes drawn uniformly from [0, 1).

        Parameters
        ----------
        length : int
            Number of genes.
        rng : numpy.random.Generator | None, default None
            Optional RNG for reproducibility. Falls back to a fresh default generator if None.
        discretizer : Discretizer | None, default None
            Snapping rule applied to the drawn values.
        """
        _rng = rng if rng is not None else np.random.default_rng()
        return cls.from_values(_rng.random(length), discretizer)

    @classmethod
    def zeros(cls, length: int, discretizer: Discretizer | None = None) -> RealGenotype:
        return cls(np.zeros(length, dtype=np.float64), discretizer)

    @classmethod
    def from_values(cls, values, discretizer: Discretizer | None = None) -> RealGenotype:
        """Build a genotype from arbitrary values, applying the discretizer."""
        genes = np.array(values, dtype=np.float64)
        if discretizer is not None:
            genes = np.asarray(discretizer(genes), dtype=np.float64)
        return cls(genes, discretizer)

    def __eq__(self, other) -> bool:
        if not isinstance(other, RealGenotype):
            return False
        return np.array_equal(self.genes, other.genes)

    def __hash__(self):
        return hash(self.genes.tobytes())

    def __len__(self) -> int:
        return self.genes.size

    def __getitem__(self, index: int) -> float:
        return float(self.genes[index])

    def __setitem__(self, index: int, value: float) -> None:
        if self.discretizer is not None:
            value = self.discretizer(value)
        self.genes[index] = value

    def __sub__(self, other: RealGenotype) -> np.ndarray:
        if not isinstance(other, RealGenotype):
            raise TypeError("Subtraction only supported between RealGenotype instances.")
        return self.genes - other.genes

    def __repr__(self) -> str:
        return f"RealGenotype(shape={self.genes.shape})"

    def assign(self, other: RealGenotype) -> None:
        """Overwrite all genes in place with a copy of ``other``'s genes."""
        if len(other) != len(self):
            raise ValueError(f"Cannot assign {len(other)} genes to a genotype of length {len(self)}.")
        self.genes[:] = other.genes

    def copy(self) -> RealGenotype:
        return RealGenotype(np.copy(self.genes), self.discretizer)
