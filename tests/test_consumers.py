import io
import json

import pytest

from mm1_queue import Job
from mm1_queue.consumers import JsonLinesWriter, RunningSummary, format_summary


def _job(seq, enter, start, end):
    return Job(seq=seq, enter_queue=enter, start_service=start, end_service=end).annotate()


def test_json_lines_writer_emits_one_object_per_line():
    buf = io.StringIO()
    w = JsonLinesWriter(buf)
    w.write(_job(1, 100.0, 100.5, 101.0))
    w.write(_job(2, 100.8, 101.0, 101.25))

    lines = buf.getvalue().splitlines()
    assert w.written == 2
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["seq"] == 1
    assert first["wait_duration"] == 0.5
    assert first["service_duration"] == 0.5
    assert json.loads(lines[1])["enter_queue"] == 100.8


def test_running_summary_measures_first_gap_from_start():
    s = RunningSummary(start=100.0)
    s.add(_job(1, 101.0, 101.0, 101.5))
    s.add(_job(2, 104.0, 104.5, 105.5))

    snap = s.snapshot()
    assert snap["count"] == 2
    # gaps 1.0 and 3.0
    assert snap["mean_interarrival"] == pytest.approx(2.0)
    assert snap["mean_service"] == pytest.approx(0.75)
    assert snap["mean_wait"] == pytest.approx(0.25)
    assert "jobs=2" in s.format()


def test_running_summary_empty():
    s = RunningSummary(start=0.0)
    assert s.snapshot()["mean_service"] is None
    assert s.format() == "jobs=0"
    assert format_summary({"type": "summary", "count": 0}) == "jobs=0"


def test_running_summary_rejects_unserved_job():
    with pytest.raises(ValueError):
        RunningSummary(start=0.0).add(Job(seq=1, enter_queue=1.0))
