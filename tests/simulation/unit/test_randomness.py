from signalsim.simulation.application.randomness import NumpyBernoulliSource, clamp_probability


def test_clamp_probability():
    assert clamp_probability(-1) == 0.0
    assert clamp_probability(0.4) == 0.4
    assert clamp_probability(3.0) == 1.0


def test_certain_and_impossible_events():
    source = NumpyBernoulliSource(seed=0)
    assert all(source.trial(1.0) == 1 for _ in range(100))
    assert all(source.trial(5.0) == 1 for _ in range(100))
    assert all(source.trial(0.0) == 0 for _ in range(100))


def test_same_seed_same_draws():
    a, b = NumpyBernoulliSource(seed=11), NumpyBernoulliSource(seed=11)
    assert [a.trial(0.5) for _ in range(200)] == [b.trial(0.5) for _ in range(200)]


def test_rate_is_respected_on_average():
    source = NumpyBernoulliSource(seed=2024)
    hits = sum(source.trial(0.3) for _ in range(20_000))
    assert 0.27 < hits / 20_000 < 0.33
