"""The record carried through the pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class Job:
    """One unit of work.

    Stamped by the arrival generator (``enter_queue``) and the server
    (``start_service``, ``end_service``). The durations are filled in by the
    completion annotator and stay ``None`` when the queue runs without it.
    Exactly one pipeline stage owns a job at any time.
    """

    seq: int
    enter_queue: float
    start_service: float | None = None
    end_service: float | None = None
    wait_duration: float | None = None
    service_duration: float | None = None

    def annotate(self) -> Job:
        """Derive wait and service durations (seconds) from the timestamps."""
        if self.start_service is None or self.end_service is None:
            raise ValueError(f"job {self.seq} has not completed service")
        self.wait_duration = self.start_service - self.enter_queue
        self.service_duration = self.end_service - self.start_service
        return self

    def to_record(self) -> dict[str, Any]:
        return {
            "seq": self.seq,
            "enter_queue": self.enter_queue,
            "start_service": self.start_service,
            "end_service": self.end_service,
            "wait_duration": self.wait_duration,
            "service_duration": self.service_duration,
        }
