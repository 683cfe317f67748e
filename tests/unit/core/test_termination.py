from solarga.core.termination import (
    FitnessThresholdTermination,
    HybridTermination,
    MaxGenerationsTermination,
)


def test_max_generations_termination():
    term = MaxGenerationsTermination(max_generations=10)
    assert not term.should_terminate(5, [], 0.0)
    assert term.should_terminate(10, [], 0.0)
    assert term.should_terminate(15, [], 0.0)


def test_fitness_threshold_termination():
    term = FitnessThresholdTermination(fitness_threshold=0.9)
    assert not term.should_terminate(5, [], 0.5)
    assert not term.should_terminate(0, [], float("-inf"))
    assert term.should_terminate(10, [], 0.9)
    assert term.should_terminate(15, [], 1.0)


def test_hybrid_termination():
    term1 = MaxGenerationsTermination(max_generations=5)
    term2 = FitnessThresholdTermination(fitness_threshold=0.8)
    hybrid_term = HybridTermination([term1, term2])

    assert not hybrid_term.should_terminate(3, [], 0.5)
    assert hybrid_term.should_terminate(5, [], 0.5)
    assert hybrid_term.should_terminate(4, [], 0.8)
