"""Core individual abstraction.

The :class:`Individual` couples a real-valued genotype with its fitness. Fitness
is NaN until the caller evaluates the decoded layout; higher is better.

Individuals compare by identity: two candidates holding equal genes are still
distinct members of a population.
"""

from __future__ import annotations

import math

import numpy as np

from solarga.core.distance import genotype_distance
from solarga.core.genotype import Discretizer, RealGenotype, lattice_discretizer


class Individual:
    """Represents a single candidate solution.

    Parameters
    ----------
    genotype : RealGenotype
        Underlying genetic representation.
    fitness : float, default NaN
        Raw fitness value. NaN means not evaluated yet.
    """

    __slots__ = ("fitness", "genotype")

    def __init__(self, genotype: RealGenotype, fitness: float = math.nan) -> None:
        self.genotype: RealGenotype = genotype
        self.fitness: float = float(fitness)

    @classmethod
    def create(
        cls,
        length: int,
        randomize: bool = True,
        discretization_steps: int | None = None,
        *,
        discretizer: Discretizer | None = None,
        rng: np.random.Generator | None = None,
    ) -> Individual:
        """Create an unevaluated individual.

        Parameters
        ----------
        length : int
            Number of genes (must be > 0).
        randomize : bool, default True
            Draw every gene uniformly from [0, 1); otherwise all genes start at 0.
        discretization_steps : int | None, default None
            Restrict genes to ``steps`` equal divisions of [0, 1].
        discretizer : Discretizer | None, default None
            Custom snapping rule; takes precedence over ``discretization_steps``.
        rng : numpy.random.Generator | None, default None
            Source of randomness for the initial genes.
        """
        if length <= 0:
            raise ValueError("length must be > 0")
        if discretizer is None and discretization_steps is not None:
            discretizer = lattice_discretizer(discretization_steps)
        if randomize:
            genotype = RealGenotype.random(length, rng=rng, discretizer=discretizer)
        else:
            genotype = RealGenotype.zeros(length, discretizer=discretizer)
        return cls(genotype)

    @property
    def chromosome(self) -> np.ndarray:
        return self.genotype.genes

    def __len__(self) -> int:
        return len(self.genotype)

    def __repr__(self) -> str:
        return f"Individual(genotype=RealGenotype(len={len(self.genotype)}), fitness={self.fitness:.4f})"

    def compare(self, other: Individual) -> int:
        """Three-way fitness comparison: 1 if fitter, -1 if less fit, 0 otherwise (ties and NaN)."""
        if self.fitness > other.fitness:
            return 1
        if self.fitness < other.fitness:
            return -1
        return 0

    def distance(self, other: Individual) -> float:
        return genotype_distance(self.genotype, other.genotype)

    def get_gene(self, index: int) -> float:
        return self.genotype[index]

    def set_gene(self, index: int, value: float) -> None:
        self.genotype[index] = value

    def copy_genes(self, other: Individual) -> None:
        """Overwrite this chromosome with ``other``'s genes. Fitness is left as is."""
        self.genotype.assign(other.genotype)

    def copy(self) -> Individual:
        """Create a deep copy preserving fitness."""
        return Individual(genotype=self.genotype.copy(), fitness=self.fitness)
