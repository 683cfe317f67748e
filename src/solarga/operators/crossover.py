"""
solarga.operators.crossover
===========================

Blend crossover for real-valued genotypes.
"""

from __future__ import annotations

import numpy as np

from solarga.core.genotype import RealGenotype


class BlendCrossover:
    """Uniform blend crossover producing two children per couple.

    For every gene a coin with probability ``crossover_rate`` decides the blend
    direction:

        heads: child1 = beta*dad + (1-beta)*mom, child2 = beta*mom + (1-beta)*dad
        tails: the two blends are swapped

    With ``crossover_rate = 1`` and ``beta`` in {0, 1} this is a plain uniform
    crossover; with ``crossover_rate = 0`` it reduces to a fixed-direction blend.

    Parameters
    ----------
    rng : numpy.random.Generator | None, default None
        Optional RNG for deterministic behavior.
    """

    supported_genotypes: tuple[type[RealGenotype], ...] = (RealGenotype,)

    def __init__(self, rng: np.random.Generator | None = None):
        self.rng: np.random.Generator = rng if rng is not None else np.random.default_rng()

    def crossover(
        self, dad: RealGenotype, mom: RealGenotype, beta: float, crossover_rate: float
    ) -> tuple[RealGenotype, RealGenotype]:
        if not isinstance(dad, self.supported_genotypes) or not isinstance(mom, self.supported_genotypes):
            raise TypeError("BlendCrossover expects RealGenotype parents.")
        if len(dad) != len(mom):
            raise ValueError("Parents must have the same chromosome length.")
        d = dad.genes
        m = mom.genes
        forward = beta * d + (1.0 - beta) * m
        backward = beta * m + (1.0 - beta) * d
        coin = self.rng.random(len(d)) < crossover_rate
        child1 = RealGenotype.from_values(np.where(coin, forward, backward), dad.discretizer)
        child2 = RealGenotype.from_values(np.where(coin, backward, forward), dad.discretizer)
        return child1, child2
