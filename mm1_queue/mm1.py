from __future__ import annotations

# The M/M/1 engine.
#
# Three worker threads connected by bounded FIFO buffers:
#
#   arrival ──job queue──> service ──completion queue──> annotator ──output queue──> consumer
#
# - `arrival` waits Exponential(λ) seconds, then enqueues a new Job.
# - `service` is the single server: it takes one Job at a time, in order, and
#   holds it for Exponential(μ) seconds.
# - `annotator` fills in the derived durations. With `annotate=False` it is not
#   started and consumers read the completion queue directly.
#
# Shutdown is one broadcast `threading.Event`. Every timed wait is
# `stop_event.wait(duration)` and every blocking get/put polls with a short
# timeout, so all threads notice a stop within `poll_interval` seconds.
#
# Drop-on-shutdown: an interrupted arrival never creates its Job, a Job whose
# service is interrupted is discarded, a Job that cannot be forwarded before
# the stop is discarded, and whatever is still buffered when the buffers close
# is discarded. All discarded Jobs are counted in `dropped`.

import enum
import queue
import random
import threading
import time
from typing import Iterator

from .arrival import sample_interarrival_seconds
from .job import Job
from .params import DEFAULT_SAFETY_MULTIPLIER, QueueParams
from .service_time import sample_service_time_seconds

DEFAULT_POLL_INTERVAL = 0.05


class QueueState(enum.Enum):
    CREATED = "created"
    RUNNING = "running"
    STOPPED = "stopped"


class MM1Queue:
    """A self-contained, real-time M/M/1 queue.

    Raises `InvalidArrivalRate` or `UnstableQueue` from the constructor; no
    thread is started until `start()`.
    """

    def __init__(
        self,
        arrival_rate: float,
        service_rate: float,
        *,
        safety_multiplier: float = DEFAULT_SAFETY_MULTIPLIER,
        seed: int | None = None,
        annotate: bool = True,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self.params = QueueParams(arrival_rate=arrival_rate, service_rate=service_rate)
        self.capacity = self.params.buffer_capacity(safety_multiplier)
        if poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")
        self.annotate = annotate
        self.poll_interval = poll_interval

        self._job_q: "queue.Queue[Job]" = queue.Queue(maxsize=self.capacity)
        self._done_q: "queue.Queue[Job]" = queue.Queue(maxsize=self.capacity)
        self._out_q: "queue.Queue[Job]" = (
            queue.Queue(maxsize=self.capacity) if annotate else self._done_q
        )

        # One RNG per sampling thread. With a seed, both are derived from a
        # single master so runs are reproducible.
        master = random.Random(seed)
        self._arrival_rng = random.Random(master.getrandbits(64))
        self._service_rng = random.Random(master.getrandbits(64))

        # Monotonic clock anchored to the wall clock at construction.
        self._wall_origin = time.time()
        self._mono_origin = time.monotonic()

        # Both locks are reentrant: stop() may run from a signal handler on a
        # thread that already holds one of them.
        self._lock = threading.RLock()
        self._state = QueueState.CREATED
        self._stopping = False
        self._dropped = 0
        self._threads: list[threading.Thread] = []
        self._stop_event = threading.Event()
        self._closed = threading.Event()
        self._stopped = threading.Event()
        self._out_lock = threading.RLock()

    # -------------------- lifecycle --------------------

    def start(self) -> float:
        """Start the worker threads and return the start timestamp.

        The timestamp is on the same clock as the Job timestamps, so callers can
        use it as the baseline for the first inter-arrival gap.
        """
        with self._lock:
            if self._state is not QueueState.CREATED or self._stopping:
                raise RuntimeError(f"cannot start a queue in state {self._state.value!r}")
            self._state = QueueState.RUNNING

            workers = [("arrival", self._arrival_process), ("service", self._service_process)]
            if self.annotate:
                workers.append(("annotator", self._annotate_process))

            started = self.now()
            for name, target in workers:
                t = threading.Thread(target=target, name=f"mm1-{name}", daemon=True)
                self._threads.append(t)
                t.start()
            return started

    def stop(self) -> None:
        """Signal all workers, wait for them to exit, then close the buffers.

        Safe to call more than once and from several threads; only the first
        call does the work and every other call waits until it has finished. A
        queue that was never started goes straight to STOPPED.
        """
        with self._lock:
            first = not self._stopping
            self._stopping = True
            threads = list(self._threads)
        if not first:
            self._stopped.wait()
            return

        self._stop_event.set()
        for t in threads:
            t.join()

        # No producer is running any more, so closing cannot race a put.
        buffers = [self._job_q, self._done_q]
        if self.annotate:
            buffers.append(self._out_q)
        leftover = 0
        with self._out_lock:
            for q in buffers:
                while True:
                    try:
                        q.get_nowait()
                    except queue.Empty:
                        break
                    leftover += 1
            self._closed.set()

        with self._lock:
            self._dropped += leftover
            self._state = QueueState.STOPPED
        self._stopped.set()

    def __enter__(self) -> MM1Queue:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    # -------------------- output --------------------

    def get(self, timeout: float | None = None) -> Job | None:
        """Return the next completed Job.

        Returns None when `timeout` expires first, or once the queue is stopped.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            wait = self.poll_interval
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return None
                wait = min(wait, remaining)
            if self._closed.is_set():
                return None
            try:
                job = self._out_q.get(timeout=wait)
            except queue.Empty:
                continue
            with self._out_lock:
                if self._closed.is_set():
                    # taken while the buffers were closing
                    self._drop()
                    return None
                return job

    def completed(self) -> Iterator[Job]:
        """Yield completed Jobs in arrival order until the queue is stopped."""
        while True:
            job = self.get()
            if job is None:
                return
            yield job

    # -------------------- introspection --------------------

    def now(self) -> float:
        return self._wall_origin + (time.monotonic() - self._mono_origin)

    @property
    def state(self) -> QueueState:
        with self._lock:
            return self._state

    @property
    def dropped(self) -> int:
        """Jobs discarded by the shutdown."""
        with self._lock:
            return self._dropped

    def alive_tasks(self) -> list[str]:
        return [t.name for t in self._threads if t.is_alive()]

    # -------------------- workers --------------------

    def _arrival_process(self) -> None:
        seq = 0
        while not self._stop_event.is_set():
            dt = sample_interarrival_seconds(
                rate_per_sec=self.params.arrival_rate, rng=self._arrival_rng
            )
            if self._stop_event.wait(dt):
                return
            seq += 1
            if not self._put(self._job_q, Job(seq=seq, enter_queue=self.now())):
                return

    def _service_process(self) -> None:
        while True:
            job = self._take(self._job_q)
            if job is None:
                return
            job.start_service = self.now()
            st = sample_service_time_seconds(
                rate_per_sec=self.params.service_rate, rng=self._service_rng
            )
            if self._stop_event.wait(st):
                # interrupted mid-service
                self._drop()
                return
            job.end_service = self.now()
            if not self._put(self._done_q, job):
                return

    def _annotate_process(self) -> None:
        while True:
            job = self._take(self._done_q)
            if job is None:
                return
            if not self._put(self._out_q, job.annotate()):
                return

    def _take(self, q: "queue.Queue[Job]") -> Job | None:
        """Blocking get that gives up once the stop event is set."""
        while not self._stop_event.is_set():
            try:
                return q.get(timeout=self.poll_interval)
            except queue.Empty:
                continue
        return None

    def _put(self, q: "queue.Queue[Job]", job: Job) -> bool:
        """Blocking put (backpressure) that drops the Job once the stop event is set."""
        while not self._stop_event.is_set():
            try:
                q.put(job, timeout=self.poll_interval)
                return True
            except queue.Full:
                continue
        self._drop()
        return False

    def _drop(self) -> None:
        with self._lock:
            self._dropped += 1
