"""
solarga.operators.selection
===========================

Parent selection strategies. Each strategy picks one mating couple from the
elite survivors of a generation.

All selection strategies implement the same interface:

    select_parents(self, survivors, lowest_fitness, sum_of_fitness) -> Parents

Where:
    - survivors: elite individuals, sorted by descending fitness
    - lowest_fitness: fitness of the first individual below the survivor boundary
    - sum_of_fitness: sum of (fitness - lowest_fitness) over the survivors
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import IntEnum

import numpy as np

from solarga.core.individual import Individual
from solarga.core.parents import Parents


class SelectionMethod(IntEnum):
    ROULETTE_WHEEL = 1
    TOURNAMENT = 2


class SelectionError(ValueError):
    """Raised when the survivors cannot supply a couple."""


class SelectionStrategy:
    """Base class for all selection strategies.

    Parameters
    ----------
    rng : numpy.random.Generator | None, default None
        Optional RNG for deterministic behavior.
    """

    def __init__(self, rng: np.random.Generator | None = None):
        self.rng: np.random.Generator = rng if rng is not None else np.random.default_rng()

    def select_parents(
        self, survivors: Sequence[Individual], lowest_fitness: float, sum_of_fitness: float
    ) -> Parents:  # pragma: no cover (interface)
        raise NotImplementedError("SelectionStrategy must implement select_parents().")

    @staticmethod
    def _validate(survivors: Sequence[Individual]) -> None:
        if len(survivors) <= 1:
            raise SelectionError("Must have at least two survivors to be used as parents")

    def _pick_other(self, survivors: Sequence[Individual], chosen: Individual) -> Individual:
        others = [s for s in survivors if s is not chosen]
        return others[int(self.rng.integers(len(others)))]


class RouletteWheelSelection(SelectionStrategy):
    """
    Roulette Wheel (Fitness-Proportionate) Selection.

    Fitness is shifted by ``lowest_fitness`` so every survivor holds a non-negative
    slice of the wheel. Mom is re-spun until she differs from dad. A wheel with no
    positive slice, or no positive slice apart from dad's, falls back to a uniform
    draw since spinning could never land elsewhere.
    """

    def select_parents(
        self, survivors: Sequence[Individual], lowest_fitness: float, sum_of_fitness: float
    ) -> Parents:
        self._validate(survivors)
        if not sum_of_fitness > 0.0:
            dad = survivors[int(self.rng.integers(len(survivors)))]
        else:
            dad = self._spin(survivors, lowest_fitness, sum_of_fitness)

        if not sum_of_fitness - (dad.fitness - lowest_fitness) > 0.0:
            return Parents(dad, self._pick_other(survivors, dad))

        mom = None
        while mom is None:
            s = self._spin(survivors, lowest_fitness, sum_of_fitness)
            if s is not dad:
                mom = s
        return Parents(dad, mom)

    def _spin(self, survivors: Sequence[Individual], lowest_fitness: float, sum_of_fitness: float) -> Individual:
        position = self.rng.random() * sum_of_fitness
        wheel = 0.0
        for s in survivors:
            wheel += s.fitness - lowest_fitness
            if wheel >= position:
                return s
        return survivors[-1]


class TournamentSelection(SelectionStrategy):
    """
    Binary Tournament Selection.

    Two distinct survivors meet and the fitter one (the second on a tie) wins.
    Dad and mom come from independent tournaments; mom's is repeated until she
    differs from dad. The last survivor sits out unless that would leave fewer
    than three contestants.
    """

    def select_parents(
        self, survivors: Sequence[Individual], lowest_fitness: float = 0.0, sum_of_fitness: float = 0.0
    ) -> Parents:
        self._validate(survivors)
        n = len(survivors)
        if n == 2:
            d = self._contest(survivors, n)
            return Parents(survivors[d], survivors[1 - d])

        span = n - 1 if n > 3 else n
        d = self._contest(survivors, span)
        m = self._contest(survivors, span)
        while m == d:
            m = self._contest(survivors, span)
        return Parents(survivors[d], survivors[m])

    def _contest(self, survivors: Sequence[Individual], span: int) -> int:
        i = int(self.rng.integers(span))
        j = int(self.rng.integers(span))
        while j == i:
            j = int(self.rng.integers(span))
        return i if survivors[i].fitness > survivors[j].fitness else j


def make_selection(method: SelectionMethod | int, rng: np.random.Generator | None = None) -> SelectionStrategy:
    """Return the strategy implementing ``method``."""
    method = SelectionMethod(method)
    if method is SelectionMethod.TOURNAMENT:
        return TournamentSelection(rng=rng)
    return RouletteWheelSelection(rng=rng)
