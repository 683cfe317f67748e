"""
Unit tests for solarga.operators.crossover
"""

import numpy as np
import pytest

from solarga.core.genotype import RealGenotype, lattice_discretizer
from solarga.operators.crossover import BlendCrossover


@pytest.fixture
def parents():
    dad = RealGenotype(np.array([0.0, 0.2, 0.4, 0.6]))
    mom = RealGenotype(np.array([1.0, 0.8, 0.6, 0.4]))
    return dad, mom


def test_uniform_crossover_with_unit_beta_copies_parents(parents):
    dad, mom = parents
    c1, c2 = BlendCrossover(rng=np.random.default_rng(0)).crossover(dad, mom, beta=1.0, crossover_rate=1.0)
    assert np.allclose(c1.genes, dad.genes)
    assert np.allclose(c2.genes, mom.genes)


def test_zero_rate_blends_in_fixed_direction(parents):
    dad, mom = parents
    c1, c2 = BlendCrossover(rng=np.random.default_rng(0)).crossover(dad, mom, beta=0.25, crossover_rate=0.0)
    assert np.allclose(c1.genes, 0.25 * mom.genes + 0.75 * dad.genes)
    assert np.allclose(c2.genes, 0.25 * dad.genes + 0.75 * mom.genes)


def test_children_genes_are_convex_combinations(parents):
    dad, mom = parents
    beta = 0.3
    c1, c2 = BlendCrossover(rng=np.random.default_rng(2)).crossover(dad, mom, beta=beta, crossover_rate=0.5)
    forward = beta * dad.genes + (1 - beta) * mom.genes
    backward = beta * mom.genes + (1 - beta) * dad.genes
    for i in range(len(dad)):
        assert np.isclose(c1.genes[i], forward[i]) or np.isclose(c1.genes[i], backward[i])
        # the two children always take opposite blends
        assert np.isclose(c1.genes[i] + c2.genes[i], dad.genes[i] + mom.genes[i])


def test_children_inherit_discretizer():
    snap = lattice_discretizer(4)
    dad = RealGenotype(np.array([0.0, 0.5]), discretizer=snap)
    mom = RealGenotype(np.array([1.0, 0.25]), discretizer=snap)
    c1, c2 = BlendCrossover(rng=np.random.default_rng(0)).crossover(dad, mom, beta=0.4, crossover_rate=0.0)
    for child in (c1, c2):
        assert child.discretizer is snap
        assert np.allclose(child.genes * 4, np.round(child.genes * 4))


def test_parents_unchanged(parents):
    dad, mom = parents
    before = dad.copy(), mom.copy()
    BlendCrossover(rng=np.random.default_rng(0)).crossover(dad, mom, beta=0.7, crossover_rate=0.5)
    assert dad == before[0] and mom == before[1]


def test_length_mismatch_raises():
    with pytest.raises(ValueError):
        BlendCrossover().crossover(RealGenotype(np.zeros(2)), RealGenotype(np.zeros(3)), 0.5, 0.5)


def test_non_real_parent_raises():
    with pytest.raises(TypeError):
        BlendCrossover().crossover(np.zeros(2), RealGenotype(np.zeros(2)), 0.5, 0.5)
