"""
solarga.operators
=================

Stochastic operators used by :class:`solarga.core.population.Population`.

 - selection: couples drawn from the elite survivors (roulette wheel or tournament)
 - crossover: uniform blend producing two children per couple
 - mutation: one fresh gene per mutant

Every operator takes an optional ``numpy.random.Generator``; a population hands the
same generator to all of its operators so one seed replays a whole run.
"""

from __future__ import annotations

from solarga.operators.crossover import BlendCrossover
from solarga.operators.mutation import SingleGeneMutation
from solarga.operators.selection import (
    RouletteWheelSelection,
    SelectionError,
    SelectionMethod,
    SelectionStrategy,
    TournamentSelection,
    make_selection,
)

__all__ = [
    "BlendCrossover",
    "RouletteWheelSelection",
    "SelectionError",
    "SelectionMethod",
    "SelectionStrategy",
    "SingleGeneMutation",
    "TournamentSelection",
    "make_selection",
]
