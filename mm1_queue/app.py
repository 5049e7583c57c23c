from __future__ import annotations

# Single-entrypoint runner.
#
#   python -m mm1_queue.app stream  --arrival-rate L --service-rate M [--duration S]
#   python -m mm1_queue.app summary --arrival-rate L --service-rate M [--duration S]
#   python -m mm1_queue.app publish --arrival-rate L --service-rate M [--mqtt-host H ...]
#   python -m mm1_queue.app watch   [--mqtt-host H ...]
#
# Every run stops on SIGINT/SIGTERM or after --duration seconds and exits 0.
# Invalid rates exit 1 before anything starts.
# Status lines go to stderr; stdout carries only job records or the summary.

import argparse
import signal
import sys
import threading
import time
from typing import Callable, TextIO

from .consumers import JsonLinesWriter, RunningSummary, format_summary
from .job import Job
from .mm1 import MM1Queue
from .mqtt_topics import DEFAULT_NAMESPACE, summary_updates
from .params import DEFAULT_SAFETY_MULTIPLIER


def run_stream(
    *,
    arrival_rate: float,
    service_rate: float,
    duration: float | None = None,
    seed: int | None = None,
    safety_multiplier: float = DEFAULT_SAFETY_MULTIPLIER,
    out: TextIO | None = None,
) -> int:
    """Write every completed job as a JSON line until stopped."""
    q = _build_queue("stream", arrival_rate, service_rate, seed, safety_multiplier)
    if q is None:
        return 1
    writer = JsonLinesWriter(out or sys.stdout)
    _run_queue("stream", q, lambda start: writer.write, duration=duration)
    _log("stream", f"wrote {writer.written} jobs")
    return 0


def run_summary(
    *,
    arrival_rate: float,
    service_rate: float,
    duration: float | None = None,
    seed: int | None = None,
    safety_multiplier: float = DEFAULT_SAFETY_MULTIPLIER,
    out: TextIO | None = None,
) -> int:
    """Accumulate a running summary and print it once the run ends."""
    q = _build_queue("summary", arrival_rate, service_rate, seed, safety_multiplier)
    if q is None:
        return 1
    summary: RunningSummary | None = None

    def on_start(start: float) -> Callable[[Job], None]:
        nonlocal summary
        summary = RunningSummary(start)
        return summary.add

    _run_queue("summary", q, on_start, duration=duration)
    if summary is None:
        raise RuntimeError("summary queue never started")
    print(summary.format(), file=out or sys.stdout)
    return 0


def run_publish(
    *,
    arrival_rate: float,
    service_rate: float,
    mqtt_host: str,
    mqtt_port: int,
    namespace: str = DEFAULT_NAMESPACE,
    duration: float | None = None,
    seed: int | None = None,
    safety_multiplier: float = DEFAULT_SAFETY_MULTIPLIER,
    publish_summary_every: float = 2.0,
) -> int:
    """Publish completed jobs and summary snapshots to an MQTT broker."""
    # Import MQTT dependencies only when publishing.
    from .mqtt_client import MqttClient
    from .publisher import MqttJobPublisher

    q = _build_queue("publish", arrival_rate, service_rate, seed, safety_multiplier)
    if q is None:
        return 1

    mqtt = MqttClient(client_id=f"mm1-publisher-{int(time.time())}", host=mqtt_host, port=mqtt_port)
    mqtt.start()
    _log("publish", f"connected to MQTT {mqtt_host}:{mqtt_port}, namespace={namespace}")

    publisher: MqttJobPublisher | None = None

    def on_start(start: float) -> Callable[[Job], None]:
        nonlocal publisher
        publisher = MqttJobPublisher(mqtt=mqtt, summary=RunningSummary(start), namespace=namespace)
        publisher.start(publish_summary_every=publish_summary_every)
        return publisher.publish_job

    try:
        _run_queue("publish", q, on_start, duration=duration)
    finally:
        if publisher is not None:
            publisher.stop()
            _log("publish", f"published {publisher.published} jobs")
        mqtt.stop()
    return 0


def run_watch(
    *,
    mqtt_host: str,
    mqtt_port: int,
    namespace: str = DEFAULT_NAMESPACE,
    duration: float | None = None,
    out: TextIO | None = None,
) -> int:
    """Print summary snapshots broadcast by a running `publish`."""
    from .mqtt_client import MqttClient

    mqtt = MqttClient(client_id=f"mm1-watch-{int(time.time())}", host=mqtt_host, port=mqtt_port)
    mqtt.add_handler(summary_printer(out or sys.stdout))
    mqtt.start()
    mqtt.subscribe(summary_updates(namespace))
    _log("watch", f"subscribed to {summary_updates(namespace)}")

    stop = threading.Event()
    restore = _install_signal_handlers(stop)
    try:
        _wait(stop, duration)
    finally:
        restore()
        mqtt.stop()
    return 0


# -------------------- helpers --------------------


def summary_printer(stream: TextIO) -> Callable[[str, dict], None]:
    """MQTT handler printing each summary snapshot as one line; other messages are ignored."""

    def on_message(topic: str, msg: dict) -> None:
        if msg.get("type") == "summary":
            print(format_summary(msg), file=stream, flush=True)

    return on_message


def _log(component: str, message: str) -> None:
    print(f"[{component}] {message}", file=sys.stderr, flush=True)


def _build_queue(
    component: str,
    arrival_rate: float,
    service_rate: float,
    seed: int | None,
    safety_multiplier: float,
) -> MM1Queue | None:
    try:
        q = MM1Queue(arrival_rate, service_rate, seed=seed, safety_multiplier=safety_multiplier)
    except ValueError as e:
        # QueueConfigError, or a bad safety multiplier
        print(f"error: {e}", file=sys.stderr)
        return None
    p = q.params
    _log(
        component,
        f"lambda={p.arrival_rate} mu={p.service_rate} rho={p.utilization:0.3f} "
        f"expected_length={p.expected_length:0.3f} capacity={q.capacity}",
    )
    return q


def _run_queue(
    component: str,
    q: MM1Queue,
    make_handler: Callable[[float], Callable[[Job], None]],
    *,
    duration: float | None,
) -> None:
    """Run `q` until a signal or the timer, feeding each completed job to a handler.

    `make_handler` is called with the start timestamp and returns the per-job
    handler, which runs on a dedicated consumer thread.
    """
    stop = threading.Event()
    restore = _install_signal_handlers(stop)
    consumer: threading.Thread | None = None
    try:
        handle = make_handler(q.start())

        def consume() -> None:
            for job in q.completed():
                handle(job)

        consumer = threading.Thread(target=consume, name=f"mm1-{component}-consumer", daemon=True)
        consumer.start()
        _log(component, "started" + (f" for {duration}s" if duration is not None else ", Ctrl+C to stop"))

        _wait(stop, duration)
    finally:
        q.stop()
        restore()
    if consumer is not None:
        consumer.join()
    _log(component, f"stopped, dropped {q.dropped} in-flight jobs")


def _wait(stop: threading.Event, duration: float | None) -> None:
    deadline = None if duration is None else time.monotonic() + duration
    while not stop.is_set():
        if deadline is None:
            stop.wait(0.2)
            continue
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return
        stop.wait(min(0.2, remaining))


def _install_signal_handlers(stop: threading.Event) -> Callable[[], None]:
    """Set `stop` on SIGINT/SIGTERM; returns a function restoring the old handlers."""

    def handle(signum, frame) -> None:
        _log("signal", f"quitting on signal {signal.Signals(signum).name}")
        stop.set()

    old = {sig: signal.signal(sig, handle) for sig in (signal.SIGINT, signal.SIGTERM)}

    def restore() -> None:
        for sig, h in old.items():
            signal.signal(sig, h)

    return restore


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="M/M/1 queue simulator - main entrypoint")
    sub = parser.add_subparsers(dest="cmd", required=True)

    def add_queue_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("--arrival-rate", type=float, required=True, help="λ jobs/second")
        p.add_argument("--service-rate", type=float, required=True, help="μ jobs/second, must exceed λ")
        p.add_argument("--duration", type=float, default=None, help="seconds to run (default: until signal)")
        p.add_argument("--seed", type=int, default=None)
        p.add_argument(
            "--safety-multiplier",
            type=float,
            default=DEFAULT_SAFETY_MULTIPLIER,
            help="buffer capacity = ceil(1 + L + k*sd)",
        )

    def add_mqtt_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("--mqtt-host", default="127.0.0.1")
        p.add_argument("--mqtt-port", type=int, default=1883)
        p.add_argument("--namespace", default=DEFAULT_NAMESPACE)

    p_stream = sub.add_parser("stream", help="Write completed jobs as JSON lines on stdout")
    add_queue_args(p_stream)

    p_summary = sub.add_parser("summary", help="Print count, mean inter-arrival and mean service time")
    add_queue_args(p_summary)

    p_pub = sub.add_parser("publish", help="Publish completed jobs and summaries over MQTT")
    add_queue_args(p_pub)
    add_mqtt_args(p_pub)
    p_pub.add_argument(
        "--publish-summary-every",
        type=float,
        default=2.0,
        help="seconds between broadcast summary snapshots",
    )

    p_watch = sub.add_parser("watch", help="Print summary snapshots from a running publisher")
    add_mqtt_args(p_watch)
    p_watch.add_argument("--duration", type=float, default=None)

    args = parser.parse_args(argv)

    if args.cmd == "watch":
        rc = run_watch(
            mqtt_host=args.mqtt_host,
            mqtt_port=args.mqtt_port,
            namespace=args.namespace,
            duration=args.duration,
        )
        sys.exit(rc)

    common = dict(
        arrival_rate=args.arrival_rate,
        service_rate=args.service_rate,
        duration=args.duration,
        seed=args.seed,
        safety_multiplier=args.safety_multiplier,
    )
    if args.cmd == "stream":
        rc = run_stream(**common)
    elif args.cmd == "summary":
        rc = run_summary(**common)
    else:
        rc = run_publish(
            **common,
            mqtt_host=args.mqtt_host,
            mqtt_port=args.mqtt_port,
            namespace=args.namespace,
            publish_summary_every=args.publish_summary_every,
        )
    sys.exit(rc)


if __name__ == "__main__":
    main()
