import random

import pytest

from mm1_queue.service_time import sample_service_time_seconds


def test_service_time_rejects_non_positive_rate():
    with pytest.raises(ValueError):
        sample_service_time_seconds(rate_per_sec=0.0)
    with pytest.raises(ValueError):
        sample_service_time_seconds(rate_per_sec=-1.0)


def test_mean_service_time_converges_to_inverse_rate():
    rng = random.Random(7)
    n = 100_000
    samples = [sample_service_time_seconds(rate_per_sec=2.0, rng=rng) for _ in range(n)]
    assert min(samples) >= 0
    assert sum(samples) / n == pytest.approx(0.5, rel=0.05)
