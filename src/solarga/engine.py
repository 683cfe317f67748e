from __future__ import annotations

import dataclasses
import logging
import math
import threading
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import numpy as np

from solarga.core.individual import Individual
from solarga.core.population import Population
from solarga.core.termination import (
    FitnessThresholdTermination,
    HybridTermination,
    MaxGenerationsTermination,
    TerminationCondition,
)
from solarga.operators.selection import SelectionMethod

# ---------------------------------------------------------------------------
# Engine config & stats
# ---------------------------------------------------------------------------


class SearchMethod(IntEnum):
    GLOBAL_SEARCH_UNIFORM_SELECTION = 1
    LOCAL_SEARCH_RANDOM_OPTIMIZATION = 2
    GLOBAL_SEARCH_FITNESS_SHARING = 3


_ENUM_FIELDS: dict[str, type[IntEnum]] = {
    "selection_method": SelectionMethod,
    "search_method": SearchMethod,
}


@dataclass
class GAConfig:
    population_size: int = 20
    maximum_generations: int = 5
    selection_method: SelectionMethod = SelectionMethod.ROULETTE_WHEEL
    search_method: SearchMethod = SearchMethod.GLOBAL_SEARCH_UNIFORM_SELECTION
    selection_rate: float = 0.5
    crossover_rate: float = 0.5
    mutation_rate: float = 0.1
    convergence_threshold: float = 0.01
    local_search_radius: float = 0.1
    sharing_radius: float = 0.1
    discretization_steps: int | None = None
    target_fitness: float | None = None
    seed: int | None = None

    def __post_init__(self) -> None:
        """Validate configuration parameters early to fail fast.

        Rules
        -----
        - population_size > 1
        - maximum_generations > 0
        - selection_rate, crossover_rate, mutation_rate in [0,1]
        - convergence_threshold, local_search_radius, sharing_radius >= 0
        - discretization_steps is None or > 0
        - target_fitness is None or a number; reaching it ends ``run``
        - seed is None or >= 0
        """
        self.selection_method = SelectionMethod(self.selection_method)
        self.search_method = SearchMethod(self.search_method)
        if self.population_size <= 1:
            raise ValueError("population_size must be > 1")
        if self.maximum_generations <= 0:
            raise ValueError("maximum_generations must be > 0")
        if not (0.0 <= self.selection_rate <= 1.0):
            raise ValueError("selection_rate must be in [0,1]")
        if not (0.0 <= self.crossover_rate <= 1.0):
            raise ValueError("crossover_rate must be in [0,1]")
        if not (0.0 <= self.mutation_rate <= 1.0):
            raise ValueError("mutation_rate must be in [0,1]")
        if self.convergence_threshold < 0:
            raise ValueError("convergence_threshold must be >= 0")
        if self.local_search_radius < 0:
            raise ValueError("local_search_radius must be >= 0")
        if self.sharing_radius < 0:
            raise ValueError("sharing_radius must be >= 0")
        if self.discretization_steps is not None and self.discretization_steps <= 0:
            raise ValueError("discretization_steps must be > 0 if provided")
        if self.seed is not None and self.seed < 0:
            raise ValueError("seed must be >= 0 if provided")

    def to_dict(self, compress: bool = False) -> dict[str, Any]:
        """Return the parameters as plain values; ``compress`` drops those equal to their defaults."""
        data = {k: (int(v) if isinstance(v, IntEnum) else v) for k, v in dataclasses.asdict(self).items()}
        if compress:
            defaults = dataclasses.asdict(GAConfig())
            data = {k: v for k, v in data.items() if v != defaults[k]}
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GAConfig:
        """Build a config from a possibly compressed mapping; missing fields take their defaults."""
        names = {f.name for f in dataclasses.fields(cls)}
        unknown = set(data) - names
        if unknown:
            raise ValueError(f"Unknown GAConfig fields: {sorted(unknown)}")
        kwargs = dict(data)
        for name, enum_type in _ENUM_FIELDS.items():
            if name in kwargs:
                kwargs[name] = enum_type(kwargs[name])
        return cls(**kwargs)


@dataclass
class GAStats:
    generation: int = 0
    evaluations: int = 0
    best_fitness: float = float("-inf")
    mean_fitness: float = float("-inf")
    history: list[dict[str, Any]] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class GAEngineError(RuntimeError):
    pass


# ---------------------------------------------------------------------------
# GAEngine
# ---------------------------------------------------------------------------


class GAEngine:
    """Drives a :class:`Population` generation by generation.

    Fitness values come from the caller one individual at a time
    (:meth:`evolve_individual`) or through a fitness function (:meth:`run`).
    The optional ``violation_detector`` returns True for an individual whose
    genome decodes to an invalid layout; flagged individuals are rolled back to
    the last valid generation.
    """

    def __init__(  # noqa: PLR0913
        self,
        config: GAConfig,
        chromosome_length: int,
        termination: TerminationCondition | None = None,
        violation_detector: Callable[[Individual], bool] | None = None,
        logger: logging.Logger | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.config = config
        self.termination = termination or self._default_termination(config)
        self.violation_detector = violation_detector
        self.rng: np.random.Generator = rng if rng is not None else np.random.default_rng(config.seed)
        self.logger = logger or logging.getLogger("solarga.engine")

        self.population = Population(
            config.population_size,
            chromosome_length,
            config.selection_method,
            config.discretization_steps,
            rng=self.rng,
        )
        self.converged = False
        self.compute_counter = 0
        self.stats = GAStats()
        # slot 0 holds the baseline (first evaluated individual), slot g+1 the fittest after generation g
        self.fittest_of_generations: list[Individual | None] = [None] * (config.maximum_generations + 1)
        self.population_of_generations: list[list[Individual]] = [
            [Individual.create(chromosome_length, False) for _ in range(config.population_size)]
            for _ in range(config.maximum_generations)
        ]
        self._stop_requested = threading.Event()

        if config.search_method is SearchMethod.LOCAL_SEARCH_RANDOM_OPTIMIZATION:
            self._scatter_around_firstborn()

    # -----------------------------
    # Public API
    # -----------------------------

    @property
    def generation(self) -> int:
        return self.compute_counter // self.config.population_size

    def set_firstborn(self, genes: Sequence[float]) -> None:
        """Seed individual 0 with the caller's current design, encoded as normalized genes."""
        firstborn = self.population.individuals[0]
        if len(genes) != len(firstborn):
            raise GAEngineError(f"Expected {len(firstborn)} genes for the firstborn, got {len(genes)}.")
        for i, g in enumerate(genes):
            firstborn.set_gene(i, min(1.0, max(0.0, float(g))))
        if self.config.search_method is SearchMethod.LOCAL_SEARCH_RANDOM_OPTIMIZATION:
            self._scatter_around_firstborn()

    def evolve_individual(self, index: int, fitness: float) -> bool:
        """Record the fitness of one individual; closes the generation after its last member.

        Returns the convergence flag. Once converged, further calls are ignored.
        """
        if self.converged:
            return True
        size = len(self.population)
        if not 0 <= index < size:
            raise GAEngineError(f"Individual index {index} out of range for population of {size}.")

        individual = self.population.individuals[index]
        individual.fitness = float(fitness)
        self.stats.evaluations += 1
        if self.compute_counter == 0 and index == 0:
            self.fittest_of_generations[0] = individual.copy()

        generation = self.compute_counter // size
        self.logger.debug("Generation %d, individual %d: %r", generation + 1, index, individual)
        if generation < len(self.population_of_generations):
            saved = self.population_of_generations[generation][index]
            saved.copy_genes(individual)
            saved.fitness = individual.fitness

        if self.compute_counter % size == size - 1:
            self._end_generation(generation)
        self.compute_counter += 1
        return self.converged

    def detect_violations(self) -> bool:
        """Flag every individual the violation detector rejects; return whether any was flagged."""
        if self.violation_detector is None:
            return False
        for i, ind in enumerate(self.population.individuals):
            self.population.set_violation(i, bool(self.violation_detector(ind)))
        return self.population.has_violations()

    def run(
        self, fitness_fn: Callable[[Individual], float], initial_genes: Sequence[float] | None = None
    ) -> Individual | None:
        """Evaluate and evolve until converged, stopped, or the termination condition fires.

        Parameters
        ----------
        fitness_fn : Callable[[Individual], float]
            Evaluator of a decoded individual; higher is better.
        initial_genes : Sequence[float] | None
            Optional encoding of the current design, used as the firstborn.

        Returns
        -------
        Individual | None
            The fittest evaluated individual.
        """
        if initial_genes is not None:
            self.set_firstborn(initial_genes)
        size = len(self.population)
        while (
            not self.converged
            and not self._stop_requested.is_set()
            and not self.termination.should_terminate(self.generation, self.population, self.stats.best_fitness)
        ):
            self.logger.info("Generation %d start", self.generation + 1)
            for index in range(size):
                individual = self.population.individuals[index]
                try:
                    fitness = float(fitness_fn(individual))
                except Exception as e:
                    self.logger.exception("Fitness evaluation failed for individual %d", index)
                    raise GAEngineError(f"Fitness evaluation failed for individual {index}") from e
                if self.evolve_individual(index, fitness):
                    break
        return self.population.get_fittest()

    def stop(self) -> None:
        """Request a graceful stop between generations."""
        self._stop_requested.set()

    # -----------------------------
    # Internal helpers
    # -----------------------------

    def _end_generation(self, generation: int) -> None:
        cfg = self.config
        population = self.population
        self._update_stats(generation)

        raw_fitness: list[tuple[Individual, float]] = []
        if cfg.search_method is SearchMethod.GLOBAL_SEARCH_FITNESS_SHARING:
            raw_fitness = self._share_fitness()

        population.save_genes()
        population.evolve(cfg.selection_rate, cfg.crossover_rate)
        for ind, fitness in raw_fitness:
            ind.fitness = fitness

        best = population.get_fittest()
        if best is not None and generation + 1 < len(self.fittest_of_generations):
            self.fittest_of_generations[generation + 1] = best.copy()

        if self.detect_violations():
            self.logger.warning(
                "Generation %d: %d individual(s) violate constraints; restoring saved genes",
                generation + 1,
                sum(population.violations),
            )
            population.restore_genes()
        else:
            self.converged = population.is_nominally_converged(cfg.convergence_threshold)
            if not self.converged and cfg.search_method is SearchMethod.GLOBAL_SEARCH_UNIFORM_SELECTION:
                population.mutate(cfg.mutation_rate)

        self.stats.generation = generation + 1
        self.stats.history[-1]["converged"] = self.converged
        if self.converged:
            self.logger.info("Converged after generation %d", generation + 1)

    @staticmethod
    def _default_termination(config: GAConfig) -> TerminationCondition:
        max_generations = MaxGenerationsTermination(config.maximum_generations)
        if config.target_fitness is None:
            return max_generations
        return HybridTermination([max_generations, FitnessThresholdTermination(config.target_fitness)])

    def _share_fitness(self) -> list[tuple[Individual, float]]:
        """Replace each fitness by its shared value; return the raw values to put back after selection.

        Fitness is shifted so the worst evaluated individual scores 0 before the
        division by the niche count, so crowding always lowers the score.
        """
        individuals = self.population.individuals
        raw = [(ind, ind.fitness) for ind in individuals]
        fitness = np.array([f for _, f in raw], dtype=float)
        if np.all(np.isnan(fitness)):
            return raw
        shifted = fitness - np.nanmin(fitness)
        niche_counts = np.maximum(self.population.get_niche_counts(self.config.sharing_radius), 1.0)
        shared = np.maximum(shifted / niche_counts, 1e-12)
        for ind, value in zip(individuals, shared, strict=True):
            if not math.isnan(value):
                ind.fitness = float(value)
        return raw

    def _scatter_around_firstborn(self) -> None:
        """Redraw individuals 1..N-1 uniformly within the local search radius of individual 0."""
        firstborn = self.population.individuals[0].chromosome
        radius = self.config.local_search_radius
        for ind in self.population.individuals[1:]:
            offsets = self.rng.uniform(-radius, radius, size=len(firstborn))
            for i, value in enumerate(np.clip(firstborn + offsets, 0.0, 1.0)):
                ind.set_gene(i, float(value))

    def _update_stats(self, generation: int) -> None:
        scores = [ind.fitness for ind in self.population if not math.isnan(ind.fitness)]
        if scores:
            self.stats.best_fitness = max(scores)
            self.stats.mean_fitness = sum(scores) / len(scores)
        else:
            self.stats.best_fitness = float("-inf")
            self.stats.mean_fitness = float("-inf")

        self.stats.history.append(
            {
                "generation": generation + 1,
                "best": self.stats.best_fitness,
                "mean": self.stats.mean_fitness,
                "evaluations": self.stats.evaluations,
                "converged": self.converged,
            }
        )
        self.logger.info(
            "Generation %d stats: best=%s mean=%s evals=%d",
            generation + 1,
            self.stats.best_fitness,
            self.stats.mean_fitness,
            self.stats.evaluations,
        )
