"""Construction errors.

Both are raised before any worker thread starts and are never retryable: they
mean the rates describe a queue that cannot be simulated.
"""

from __future__ import annotations


class QueueConfigError(ValueError):
    """Base class for invalid queue parameters."""


class InvalidArrivalRate(QueueConfigError):
    def __init__(self, arrival_rate: float) -> None:
        super().__init__(f"arrival rate (lambda) must be positive, got {arrival_rate!r}")
        self.arrival_rate = arrival_rate


class UnstableQueue(QueueConfigError):
    def __init__(self, arrival_rate: float, service_rate: float) -> None:
        super().__init__(
            "service rate (mu) must be greater than arrival rate (lambda), "
            f"got mu={service_rate!r} lambda={arrival_rate!r}"
        )
        self.arrival_rate = arrival_rate
        self.service_rate = service_rate
