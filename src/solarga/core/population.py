"""
solarga.core.population
=======================

Simple genetic algorithm (SGA) population.

A :class:`Population` owns the current generation, a snapshot of the last
generation accepted as valid, and one violation flag per slot. One generation
is driven from outside:

    1. the caller evaluates fitness (and layout validity) of every individual
    2. ``save_genes()`` once a generation is accepted, or ``restore_genes()`` to
       roll flagged slots back to the snapshot
    3. ``evolve(selection_rate, crossover_rate)`` (elitist selection + crossover)
    4. ``mutate(mutation_rate)``

``is_nominally_converged`` and ``get_fittest`` serve as stop test and report.
"""

from __future__ import annotations

import logging
import math
import sys
from collections.abc import Iterator
from functools import cmp_to_key

import numpy as np

from solarga.core.distance import distance_matrix
from solarga.core.genotype import Discretizer, lattice_discretizer
from solarga.core.individual import Individual
from solarga.core.parents import Parents
from solarga.operators.crossover import BlendCrossover
from solarga.operators.mutation import SingleGeneMutation
from solarga.operators.selection import SelectionMethod, SelectionStrategy, make_selection

logger = logging.getLogger(__name__)

ZERO_TOLERANCE = 1e-5


class Population:
    """Fixed-size population of real-valued individuals.

    Parameters
    ----------
    population_size : int
        Number of individuals (must be > 0).
    chromosome_length : int
        Number of genes per individual (must be > 0).
    selection_method : SelectionMethod, default ROULETTE_WHEEL
        How couples are drawn from the survivors.
    discretization_steps : int | None, default None
        Restrict genes to ``steps`` equal divisions of [0, 1].
    rng : numpy.random.Generator | None, default None
        Shared by every stochastic operation of this population.
    discretizer : Discretizer | None, default None
        Custom snapping rule; takes precedence over ``discretization_steps``.
    """

    def __init__(
        self,
        population_size: int,
        chromosome_length: int,
        selection_method: SelectionMethod | int = SelectionMethod.ROULETTE_WHEEL,
        discretization_steps: int | None = None,
        rng: np.random.Generator | None = None,
        discretizer: Discretizer | None = None,
    ) -> None:
        if population_size <= 0:
            raise ValueError("population_size must be > 0")
        if chromosome_length <= 0:
            raise ValueError("chromosome_length must be > 0")
        self.rng: np.random.Generator = rng if rng is not None else np.random.default_rng()
        if discretizer is None and discretization_steps is not None:
            discretizer = lattice_discretizer(discretization_steps)
        self.discretization_steps = discretization_steps
        self.discretizer: Discretizer | None = discretizer
        self.chromosome_length = chromosome_length

        self.selection_method = SelectionMethod(selection_method)
        self.selection: SelectionStrategy = make_selection(self.selection_method, rng=self.rng)
        self.crossover_operator = BlendCrossover(rng=self.rng)
        self.mutation_operator = SingleGeneMutation(rng=self.rng)

        self.beta: float = 0.5  # blending coefficient of the latest crossover
        self.individuals: list[Individual] = [self._new_individual() for _ in range(population_size)]
        self.saved_generation: list[Individual] = [self._new_individual() for _ in range(population_size)]
        self.violations: list[bool] = [False] * population_size
        self.survivors: list[Individual] = []
        self.mutants: list[Individual] = []

    def _new_individual(self) -> Individual:
        return Individual.create(self.chromosome_length, True, discretizer=self.discretizer, rng=self.rng)

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self.individuals)

    def __iter__(self) -> Iterator[Individual]:
        return iter(self.individuals)

    def __getitem__(self, index: int) -> Individual:
        return self.individuals[index]

    def __repr__(self) -> str:
        return (
            f"Population(size={len(self.individuals)}, chromosome_length={self.chromosome_length}, "
            f"selection={self.selection_method.name}, survivors={len(self.survivors)})"
        )

    # ------------------------------------------------------------------
    # Ranking and queries
    # ------------------------------------------------------------------
    def sort(self) -> None:
        """Order individuals by descending fitness."""
        self.individuals.sort(key=cmp_to_key(lambda a, b: b.compare(a)))

    def get_fittest(self) -> Individual | None:
        """Return the evaluated individual with the greatest fitness (first one on ties)."""
        best_fitness = -sys.float_info.max
        best: Individual | None = None
        for ind in self.individuals:
            if math.isnan(ind.fitness):
                continue
            if ind.fitness > best_fitness:
                best_fitness = ind.fitness
                best = ind
        return best

    def get_niche_count(self, selected: Individual, sigma: float) -> float:
        """Sum of triangular sharing values ``1 - r/sigma`` over individuals closer than ``sigma``."""
        niche_count = 0.0
        for ind in self.individuals:
            r = selected.distance(ind)
            if r < sigma:
                niche_count += 1.0 - r / sigma
        return niche_count

    def get_niche_counts(self, sigma: float) -> np.ndarray:
        """Niche count of every individual, in population order, from one pairwise distance matrix."""
        if sigma <= 0:
            return np.zeros(len(self.individuals))
        distances = distance_matrix(ind.genotype for ind in self.individuals)
        shares = np.where(distances < sigma, 1.0 - distances / sigma, 0.0)
        return shares.sum(axis=1)

    # ------------------------------------------------------------------
    # Constraint rollback
    # ------------------------------------------------------------------
    def save_genes(self) -> None:
        """Snapshot every genome as the last valid generation and clear all violation flags."""
        for i, ind in enumerate(self.individuals):
            self.saved_generation[i].copy_genes(ind)
            self.violations[i] = False

    def restore_genes(self) -> None:
        """Roll every flagged slot back to its snapshot genome."""
        restored = 0
        for i, ind in enumerate(self.individuals):
            if self.violations[i]:
                ind.copy_genes(self.saved_generation[i])
                restored += 1
        logger.debug("Restored %d of %d individuals from the saved generation", restored, len(self.individuals))

    def set_violation(self, index: int, violated: bool = True) -> None:
        self.violations[index] = bool(violated)

    def has_violations(self) -> bool:
        return any(self.violations)

    # ------------------------------------------------------------------
    # Simple genetic algorithm
    # ------------------------------------------------------------------
    def evolve(self, selection_rate: float, crossover_rate: float) -> None:
        self.select_survivors(selection_rate)
        self.crossover(crossover_rate)

    def select_survivors(self, selection_rate: float) -> None:
        """Keep the top ``floor(selection_rate * size)`` individuals as survivors (elitism)."""
        self.sort()
        count = math.floor(selection_rate * len(self.individuals))
        self.survivors = self.individuals[: max(0, count)]

    def crossover(self, crossover_rate: float) -> None:
        """Refill the slots after the survivor boundary with blended offspring of survivor couples."""
        number_of_survivors = len(self.survivors)
        size = len(self.individuals)
        if number_of_survivors <= 1:
            logger.debug("Crossover skipped: %d survivor(s)", number_of_survivors)
            return
        new_born = size - number_of_survivors
        if new_born <= 0:
            logger.debug("Crossover skipped: no offspring slot left")
            return

        lowest_fitness = self.individuals[number_of_survivors].fitness
        sum_of_fitness = 0.0
        for s in self.survivors:
            sum_of_fitness += s.fitness - lowest_fitness

        # each couple produces two children
        couples: list[Parents] = []
        while len(couples) * 2 < new_born:
            p = self.selection.select_parents(self.survivors, lowest_fitness, sum_of_fitness)
            # couples are told apart by reference, so a repeated couple mates again
            if not any(p is q for q in couples):
                couples.append(p)

        self.beta = float(self.rng.random())
        child_index = number_of_survivors
        for p in couples:
            g1, g2 = self.crossover_operator.crossover(p.dad.genotype, p.mom.genotype, self.beta, crossover_rate)
            if child_index < size:
                self.individuals[child_index] = Individual(g1)
            if child_index + 1 < size:
                self.individuals[child_index + 1] = Individual(g2)
            child_index += 2

    def mutate(self, mutation_rate: float) -> None:
        """Alter one gene in each of ``clamp(floor(rate * (size-1)), 1, size-2)`` individuals, never the fittest."""
        if abs(mutation_rate) < ZERO_TOLERANCE:
            return
        size = len(self.individuals)
        if size < 2:
            return
        m = math.floor(mutation_rate * (size - 1))
        if m == 0:
            m = 1
        elif m >= size - 1:
            # index 0 is exempt, so at most size - 2 distinct mutants can be drawn from [1, size - 2]
            m = size - 2

        self.mutants = []
        while len(self.mutants) < m:
            k = 1 + int(self.rng.random() * (size - 2))
            candidate = self.individuals[k]
            if not any(candidate is x for x in self.mutants):
                self.mutants.append(candidate)
        for ind in self.mutants:
            self.mutation_operator.mutate(ind.genotype)

    def is_nominally_converged(self, convergence_threshold: float) -> bool:
        """Check whether every gene of the best half of the survivors lies within
        ``convergence_threshold`` relative deviation of its mean."""
        if len(self.survivors) < 2:
            return True
        m = max(2, len(self.survivors) // 2)
        genes = np.array([s.chromosome for s in self.survivors[:m]])
        with np.errstate(divide="ignore", invalid="ignore"):
            average = genes.mean(axis=0)
            deviation = np.abs(genes / average - 1.0)
        return not bool(np.any(deviation > convergence_threshold))
