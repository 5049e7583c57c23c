from __future__ import annotations

# Service time helpers.
#
# The server's work per job is Exponential(μ): memoryless, mean 1/μ seconds.
# Together with Poisson arrivals this is what makes the model M/M/1.

import random


def sample_service_time_seconds(*, rate_per_sec: float, rng: random.Random | None = None) -> float:
    """Sample how long the server spends on a single job.

    Args:
        rate_per_sec: μ, the service rate in jobs/second. Must be > 0.
        rng: optional RNG, owned by the service thread.

    Returns:
        Non-negative float.
    """
    if rate_per_sec <= 0:
        raise ValueError("rate_per_sec must be > 0")

    r = rng or random
    return float(r.expovariate(rate_per_sec))
