from __future__ import annotations

# MQTT sink for the completed-job stream.
#
# `MqttJobPublisher` forwards every job to `<ns>/jobs/completed` and, from a
# background thread, broadcasts running-summary snapshots on
# `<ns>/summary/updates` for observers (see `watch` in app.py).

import threading
from typing import TYPE_CHECKING, Any

from .consumers import RunningSummary
from .job import Job
from .mqtt_topics import DEFAULT_NAMESPACE, completed_jobs, summary_updates

if TYPE_CHECKING:
    from .mqtt_client import MqttClient


class MqttJobPublisher:
    """Publishes completed jobs and periodic summaries through an `MqttClient`."""

    def __init__(self, *, mqtt: MqttClient, summary: RunningSummary, namespace: str = DEFAULT_NAMESPACE) -> None:
        self.mqtt = mqtt
        self.summary = summary
        self.namespace = namespace
        self.published = 0

        # Background publisher thread control.
        self._stop_event = threading.Event()
        self._summary_thread: threading.Thread | None = None

    def start(self, *, publish_summary_every: float = 2.0) -> None:
        if publish_summary_every <= 0:
            raise ValueError("publish_summary_every must be > 0")
        self._summary_thread = threading.Thread(
            target=self._summary_publisher_loop,
            args=(publish_summary_every,),
            name="mm1-summary-publisher",
            daemon=True,
        )
        self._summary_thread.start()

    def stop(self) -> None:
        """Stop the summary thread and send one final snapshot. Call before disconnecting MQTT."""
        self._stop_event.set()
        t = self._summary_thread
        if t and t.is_alive():
            t.join(timeout=1.0)
        self._publish_summary()

    def publish_job(self, job: Job) -> None:
        self.summary.add(job)
        msg: dict[str, Any] = {"type": "job", **job.to_record()}
        self.mqtt.publish(completed_jobs(self.namespace), msg)
        self.published += 1

    def _publish_summary(self) -> None:
        self.mqtt.publish(summary_updates(self.namespace), self.summary.snapshot())

    def _summary_publisher_loop(self, interval: float) -> None:
        while not self._stop_event.wait(interval):
            self._publish_summary()
