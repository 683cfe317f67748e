import numpy as np

from solarga.core.genotype import RealGenotype
from solarga.core.individual import Individual
from solarga.core.parents import Parents


def _ind(value: float) -> Individual:
    return Individual(RealGenotype(np.array([value, value])))


def test_equality_ignores_order():
    a, b = _ind(0.1), _ind(0.2)
    assert Parents(a, b) == Parents(b, a)
    assert hash(Parents(a, b)) == hash(Parents(b, a))


def test_equality_is_by_reference():
    a, b = _ind(0.1), _ind(0.2)
    twin = _ind(0.2)
    assert Parents(a, b) != Parents(a, twin)


def test_not_equal_to_other_types():
    a, b = _ind(0.1), _ind(0.2)
    assert Parents(a, b) != (a, b)


def test_parents_do_not_copy_individuals():
    a, b = _ind(0.1), _ind(0.2)
    p = Parents(a, b)
    assert p.dad is a
    assert p.mom is b
