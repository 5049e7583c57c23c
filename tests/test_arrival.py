import random

import pytest

from mm1_queue.arrival import sample_interarrival_seconds


def test_interarrival_requires_positive_rate():
    with pytest.raises(ValueError):
        sample_interarrival_seconds(rate_per_sec=0)


def test_interarrival_reproducible_with_seeded_rng():
    rng = random.Random(123)
    a = sample_interarrival_seconds(rate_per_sec=2.0, rng=rng)
    rng = random.Random(123)
    b = sample_interarrival_seconds(rate_per_sec=2.0, rng=rng)
    assert a == b
    assert a > 0


@pytest.mark.parametrize("rate", [0.5, 1.0, 4.0])
def test_mean_interarrival_converges_to_inverse_rate(rate):
    rng = random.Random(2024)
    n = 100_000
    mean = sum(sample_interarrival_seconds(rate_per_sec=rate, rng=rng) for _ in range(n)) / n
    assert mean == pytest.approx(1 / rate, rel=0.05)
