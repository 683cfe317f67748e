import numpy as np
import pytest

from solarga.core.genotype import RealGenotype, lattice_discretizer


def test_random_genotype_in_unit_interval():
    g = RealGenotype.random(50, rng=np.random.default_rng(0))
    assert len(g) == 50
    assert g.genes.dtype == np.float64
    assert np.all(g.genes >= 0.0) and np.all(g.genes < 1.0)


def test_random_genotype_reproducible_with_seed():
    g1 = RealGenotype.random(8, rng=np.random.default_rng(42))
    g2 = RealGenotype.random(8, rng=np.random.default_rng(42))
    assert g1 == g2


def test_zeros_genotype():
    g = RealGenotype.zeros(3)
    assert np.array_equal(g.genes, np.zeros(3))


def test_rejects_non_float_genes():
    with pytest.raises(TypeError):
        RealGenotype(np.array([1, 2, 3], dtype=np.int32))


def test_rejects_multidimensional_genes():
    with pytest.raises(ValueError):
        RealGenotype(np.zeros((2, 2)))


@pytest.mark.parametrize(
    "value, expected",
    [(0.0, 0.0), (0.1, 0.0), (0.125, 0.25), (0.3, 0.25), (0.62, 0.5), (0.9, 1.0)],
)
def test_lattice_discretizer_snaps_half_up(value, expected):
    snap = lattice_discretizer(4)
    assert float(snap(value)) == pytest.approx(expected)


@pytest.mark.parametrize("steps", [0, -3])
def test_lattice_discretizer_rejects_non_positive_steps(steps):
    with pytest.raises(ValueError):
        lattice_discretizer(steps)


def test_setitem_applies_discretizer():
    g = RealGenotype.zeros(2, discretizer=lattice_discretizer(10))
    g[1] = 0.437
    assert g[1] == pytest.approx(0.4)
    assert g[0] == 0.0


def test_random_with_discretizer_lands_on_lattice():
    g = RealGenotype.random(20, rng=np.random.default_rng(1), discretizer=lattice_discretizer(5))
    scaled = g.genes * 5
    assert np.allclose(scaled, np.round(scaled))


def test_assign_copies_values_not_reference():
    a = RealGenotype(np.array([0.1, 0.2, 0.3]))
    b = RealGenotype(np.array([0.7, 0.8, 0.9]))
    a.assign(b)
    assert a == b
    b[0] = 0.0
    assert a[0] == pytest.approx(0.7)


def test_assign_rejects_length_mismatch():
    with pytest.raises(ValueError):
        RealGenotype.zeros(3).assign(RealGenotype.zeros(4))


def test_copy_is_independent():
    g = RealGenotype(np.array([0.5, 0.5]), discretizer=lattice_discretizer(2))
    c = g.copy()
    assert c == g
    assert c.genes is not g.genes
    assert c.discretizer is g.discretizer


def test_subtraction():
    a = RealGenotype(np.array([0.5, 0.25]))
    b = RealGenotype(np.array([0.25, 0.25]))
    assert np.allclose(a - b, [0.25, 0.0])
    with pytest.raises(TypeError):
        _ = a - np.array([0.0, 0.0])
