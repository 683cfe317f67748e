import numpy as np
import pytest

from solarga.core.genotype import RealGenotype, lattice_discretizer
from solarga.operators.mutation import SingleGeneMutation


def test_exactly_one_gene_changes():
    rng = np.random.default_rng(0)
    op = SingleGeneMutation(rng=rng)
    for _ in range(50):
        g = RealGenotype.random(6, rng=rng)
        before = g.copy()
        index = op.mutate(g)
        changed = np.flatnonzero(g.genes != before.genes)
        assert changed.tolist() == [index]


def test_last_gene_is_never_mutated():
    op = SingleGeneMutation(rng=np.random.default_rng(1))
    g = RealGenotype(np.full(4, 0.5))
    for _ in range(200):
        assert op.mutate(g) < 3
    assert g[3] == 0.5


def test_single_gene_chromosome_mutates_its_only_gene():
    op = SingleGeneMutation(rng=np.random.default_rng(2))
    g = RealGenotype(np.array([0.5]))
    assert op.mutate(g) == 0
    assert 0.0 <= g[0] < 1.0


def test_mutation_respects_discretizer():
    op = SingleGeneMutation(rng=np.random.default_rng(3))
    g = RealGenotype.zeros(5, discretizer=lattice_discretizer(8))
    for _ in range(20):
        op.mutate(g)
    assert np.allclose(g.genes * 8, np.round(g.genes * 8))


def test_rejects_non_real_genotype():
    with pytest.raises(TypeError, match="RealGenotype"):
        SingleGeneMutation().mutate(np.zeros(3))
