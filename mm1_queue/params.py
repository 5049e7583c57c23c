"""Rate validation and buffer sizing.

For a stable M/M/1 queue (ρ = λ/μ < 1) the number of jobs in the system is
geometric with

    L = ρ / (1 - ρ)             (expected length)
    σ = sqrt(ρ / (1 - ρ)^2)     (standard deviation)

Every pipeline buffer is sized ``ceil(1 + L + k·σ)``. With the default k = 10
a buffer almost never fills under normal operation, so backpressure only shows
up when the server genuinely falls far behind.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .errors import InvalidArrivalRate, UnstableQueue

DEFAULT_SAFETY_MULTIPLIER = 10.0


@dataclass(frozen=True)
class QueueParams:
    """Validated rates of one queue (jobs/second)."""

    arrival_rate: float
    service_rate: float

    def __post_init__(self) -> None:
        lam = self.arrival_rate
        mu = self.service_rate
        # `not lam > 0` also rejects NaN.
        if not lam > 0 or math.isinf(lam):
            raise InvalidArrivalRate(lam)
        if not mu > lam:
            raise UnstableQueue(lam, mu)

    @property
    def utilization(self) -> float:
        return self.arrival_rate / self.service_rate

    @property
    def expected_length(self) -> float:
        rho = self.utilization
        return rho / (1 - rho)

    @property
    def sd_length(self) -> float:
        rho = self.utilization
        return math.sqrt(rho / (1 - rho) ** 2)

    def buffer_capacity(self, safety_multiplier: float = DEFAULT_SAFETY_MULTIPLIER) -> int:
        """Capacity shared by the job, completion and output buffers."""
        if not safety_multiplier >= 0:
            raise ValueError("safety_multiplier must be >= 0")
        return max(1, math.ceil(1 + self.expected_length + safety_multiplier * self.sd_length))
