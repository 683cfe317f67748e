"""Genotype distance utilities.

This module centralizes distance computations between genotypes so that
niche counting and fitness sharing rely on a consistent definition.

Public helpers:

    genotype_distance(g1, g2) -> float
        Euclidean (L2) distance between the gene vectors.

    distance_matrix(genotypes) -> numpy.ndarray
        Symmetric pairwise distance matrix with a zero diagonal.

Edge cases:
    - Different lengths -> ValueError.
    - Zero-length genotypes have distance 0.
"""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np

from .genotype import RealGenotype

__all__ = [
    "distance_matrix",
    "genotype_distance",
]


def _ensure_same_length(a: RealGenotype, b: RealGenotype) -> None:
    if len(a) != len(b):
        raise ValueError(f"Genotype lengths differ: {len(a)} vs {len(b)}.")


def genotype_distance(a: RealGenotype, b: RealGenotype) -> float:
    """Return the Euclidean distance between two genotypes."""
    _ensure_same_length(a, b)
    return float(np.linalg.norm(a - b))


def distance_matrix(genotypes: Iterable[RealGenotype]) -> np.ndarray:
    """Return a symmetric distance matrix for provided genotypes."""
    genos = list(genotypes)
    if not genos:
        return np.zeros((0, 0), dtype=float)
    for g in genos[1:]:
        _ensure_same_length(genos[0], g)
    genes = np.stack([g.genes for g in genos])
    return np.linalg.norm(genes[:, None, :] - genes[None, :, :], axis=-1)
