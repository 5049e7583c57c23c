"""Poisson arrivals.

Jobs arriving at rate λ form a Poisson process exactly when the gaps between
consecutive arrivals are i.i.d. Exponential(λ), mean 1/λ seconds. The arrival
thread draws one gap, waits it out, then emits a Job.
"""

from __future__ import annotations

import random


def sample_interarrival_seconds(*, rate_per_sec: float, rng: random.Random | None = None) -> float:
    """Draw the gap (seconds) before the next arrival.

    Args:
        rate_per_sec: λ in jobs/second. Must be > 0.
        rng: the arrival thread's own RNG; the module-level one if omitted.
    """
    if rate_per_sec <= 0:
        raise ValueError("rate_per_sec must be > 0")

    return float((rng or random).expovariate(rate_per_sec))
