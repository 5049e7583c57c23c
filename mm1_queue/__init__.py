"""Real-time M/M/1 queue simulator.

Jobs arrive as a Poisson process, wait in a bounded FIFO buffer and are served
one at a time with exponential service times. Each completed job carries its
enter/start/end timestamps plus the derived wait and service durations.

    from mm1_queue import MM1Queue

    with MM1Queue(1.0, 2.0, seed=7) as q:
        job = q.get(timeout=5.0)

See `python -m mm1_queue.app -h` for the command-line runners.
"""

from .errors import InvalidArrivalRate, QueueConfigError, UnstableQueue
from .job import Job
from .mm1 import MM1Queue, QueueState
from .params import DEFAULT_SAFETY_MULTIPLIER, QueueParams

__all__ = [
    "DEFAULT_SAFETY_MULTIPLIER",
    "InvalidArrivalRate",
    "Job",
    "MM1Queue",
    "QueueConfigError",
    "QueueParams",
    "QueueState",
    "UnstableQueue",
]
