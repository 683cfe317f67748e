"""
solarga.operators.mutation
==========================

Point mutation for real-valued genotypes.
"""

from __future__ import annotations

import numpy as np

from solarga.core.genotype import RealGenotype


class SingleGeneMutation:
    """
    Replaces exactly one gene with a fresh uniform value in [0, 1).

    The gene index is drawn from [0, length - 2]; the last gene is never picked
    unless the chromosome has a single gene. Mutation happens in place.
    """

    supported_genotypes: tuple[type[RealGenotype], ...] = (RealGenotype,)

    def __init__(self, rng: np.random.Generator | None = None):
        self.rng: np.random.Generator = rng if rng is not None else np.random.default_rng()

    def mutate(self, genotype: RealGenotype) -> int:
        """Mutate ``genotype`` and return the index of the altered gene."""
        if not isinstance(genotype, self.supported_genotypes):
            names = ", ".join(st.__name__ for st in self.supported_genotypes)
            raise TypeError(f"SingleGeneMutation is only applicable to {names}.")
        index = int(self.rng.random() * (len(genotype) - 1))
        genotype[index] = self.rng.random()
        return index
