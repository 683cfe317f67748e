from abc import ABC, abstractmethod

from solarga.core.population import Population


class TerminationCondition(ABC):
    """Stop test evaluated by the driver before each generation."""

    @abstractmethod
    def should_terminate(self, generation: int, population: Population, best_fitness: float) -> bool:
        """Return True to end the search.

        Args:
            generation (int): Number of generations closed so far.
            population (Population): The population about to be evaluated.
            best_fitness (float): Best raw fitness seen in the last closed generation.
        """


class MaxGenerationsTermination(TerminationCondition):
    """Stop once ``max_generations`` generations have been closed."""

    def __init__(self, max_generations: int):
        self.max_generations = max_generations

    def should_terminate(self, generation: int, population: Population, best_fitness: float) -> bool:
        return generation >= self.max_generations


class FitnessThresholdTermination(TerminationCondition):
    """Stop as soon as a layout reaches the target yield."""

    def __init__(self, fitness_threshold: float):
        self.fitness_threshold = fitness_threshold

    def should_terminate(self, generation: int, population: Population, best_fitness: float) -> bool:
        return best_fitness >= self.fitness_threshold


class HybridTermination(TerminationCondition):
    """Stop when any of the wrapped conditions fires."""

    def __init__(self, conditions: list[TerminationCondition]):
        self.conditions = conditions

    def should_terminate(self, generation: int, population: Population, best_fitness: float) -> bool:
        return any(c.should_terminate(generation, population, best_fitness) for c in self.conditions)
