import io
from types import SimpleNamespace

from mm1_queue.app import summary_printer
from mm1_queue.mqtt_client import MqttClient


def _client():
    # never connected: only the message callback is exercised
    return MqttClient(client_id="test", host="127.0.0.1", port=1883)


def test_on_message_decodes_json_and_dispatches_to_handlers():
    c = _client()
    seen = []
    c.add_handler(lambda topic, msg: seen.append((topic, msg)))

    c._on_message(None, None, SimpleNamespace(topic="mm1/v0/summary/updates", payload=b'{"type":"summary","count":3}'))
    c._on_message(None, None, SimpleNamespace(topic="t", payload='{"type":"job"}'))

    assert seen == [
        ("mm1/v0/summary/updates", {"type": "summary", "count": 3}),
        ("t", {"type": "job"}),
    ]


def test_on_message_ignores_malformed_payloads():
    c = _client()
    seen = []
    c.add_handler(lambda topic, msg: seen.append(msg))

    for payload in (b"not json", b"\xff\xfe", b"[1, 2]", b'"text"'):
        c._on_message(None, None, SimpleNamespace(topic="t", payload=payload))
    assert seen == []


def test_failing_handler_does_not_stop_the_others():
    c = _client()
    seen = []

    def boom(topic, msg):
        raise RuntimeError("handler failure")

    c.add_handler(boom)
    c.add_handler(lambda topic, msg: seen.append(msg["n"]))
    c._on_message(None, None, SimpleNamespace(topic="t", payload=b'{"n":1}'))
    assert seen == [1]


def test_watch_prints_summary_snapshots_only():
    out = io.StringIO()
    c = _client()
    c.add_handler(summary_printer(out))

    snapshot = b'{"type":"summary","count":2,"mean_interarrival":1.0,"mean_service":0.5,"mean_wait":0.25}'
    c._on_message(None, None, SimpleNamespace(topic="mm1/v0/summary/updates", payload=snapshot))
    c._on_message(None, None, SimpleNamespace(topic="mm1/v0/jobs/completed", payload=b'{"type":"job","seq":1}'))

    lines = out.getvalue().splitlines()
    assert lines == ["jobs=2 mean_interarrival=1.0000s mean_service=0.5000s mean_wait=0.2500s"]
