from __future__ import annotations

# Consumers of the completed-job stream.
#
# - `JsonLinesWriter` writes one compact JSON object per job (line-delimited).
# - `RunningSummary` keeps count, mean inter-arrival gap and mean service time.
#
# Both only see Jobs after they left the queue; neither touches the engine.

import json
import threading
from typing import Any, TextIO

from .job import Job


class JsonLinesWriter:
    """Serialize completed Jobs to a text stream, one JSON object per line."""

    def __init__(self, stream: TextIO) -> None:
        self.stream = stream
        self.written = 0

    def write(self, job: Job) -> None:
        self.stream.write(json.dumps(job.to_record(), separators=(",", ":")) + "\n")
        self.stream.flush()
        self.written += 1


class RunningSummary:
    """Running statistics over the output stream.

    The first inter-arrival gap is measured from `start`, the timestamp
    returned by `MM1Queue.start()`.
    """

    def __init__(self, start: float) -> None:
        self._lock = threading.Lock()
        self.start = start
        self._last_arrival = start
        self._count = 0
        self._gap_sum = 0.0
        self._service_sum = 0.0
        self._wait_sum = 0.0

    def add(self, job: Job) -> None:
        if job.start_service is None or job.end_service is None:
            raise ValueError(f"job {job.seq} has not completed service")
        with self._lock:
            self._count += 1
            self._gap_sum += job.enter_queue - self._last_arrival
            self._last_arrival = job.enter_queue
            self._service_sum += job.end_service - job.start_service
            self._wait_sum += job.start_service - job.enter_queue

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            n = self._count
            return {
                "type": "summary",
                "count": n,
                "mean_interarrival": self._gap_sum / n if n else None,
                "mean_service": self._service_sum / n if n else None,
                "mean_wait": self._wait_sum / n if n else None,
            }

    def format(self) -> str:
        return format_summary(self.snapshot())


def format_summary(snapshot: dict[str, Any]) -> str:
    """Render a `RunningSummary.snapshot()` (possibly received over MQTT) as one line."""
    if not snapshot.get("count"):
        return "jobs=0"
    return (
        f"jobs={snapshot['count']} mean_interarrival={snapshot['mean_interarrival']:0.4f}s "
        f"mean_service={snapshot['mean_service']:0.4f}s mean_wait={snapshot['mean_wait']:0.4f}s"
    )
