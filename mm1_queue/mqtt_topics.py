"""MQTT topic helpers.

Topic construction lives in one place so the publisher and the watcher agree
on naming.

Topic layout (v0) under a configurable namespace (default: `mm1/v0`):

- `<ns>/jobs/completed`
    One message per completed job, in completion order.
- `<ns>/summary/updates`
    Periodic running-summary snapshots for observers.

Several simulations can share a broker by giving each its own namespace
(e.g. `--namespace mm1/alice`).
"""

from __future__ import annotations

DEFAULT_NAMESPACE = "mm1/v0"


def completed_jobs(namespace: str = DEFAULT_NAMESPACE) -> str:
    return f"{namespace}/jobs/completed"


def summary_updates(namespace: str = DEFAULT_NAMESPACE) -> str:
    """Broadcast running-summary snapshots.

    The publisher sends one every `--publish-summary-every` seconds;
    `watch` subscribes here.
    """
    return f"{namespace}/summary/updates"
