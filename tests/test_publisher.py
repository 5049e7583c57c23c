import time

from mm1_queue import Job
from mm1_queue.consumers import RunningSummary
from mm1_queue.publisher import MqttJobPublisher


class FakeMqtt:
    """Records publishes instead of talking to a broker."""

    def __init__(self):
        self.published = []

    def publish(self, topic, message):
        self.published.append((topic, message))


def _job(seq):
    return Job(seq=seq, enter_queue=float(seq), start_service=seq + 0.25, end_service=seq + 0.5).annotate()


def test_publish_job_sends_record_and_updates_summary():
    mqtt = FakeMqtt()
    pub = MqttJobPublisher(mqtt=mqtt, summary=RunningSummary(start=0.0), namespace="t")
    pub.publish_job(_job(1))
    pub.publish_job(_job(2))

    assert pub.published == 2
    topics = [t for t, _ in mqtt.published]
    assert topics == ["t/jobs/completed", "t/jobs/completed"]
    _, msg = mqtt.published[0]
    assert msg["type"] == "job"
    assert msg["seq"] == 1
    assert msg["service_duration"] == 0.25
    assert pub.summary.snapshot()["count"] == 2


def test_summary_thread_publishes_periodically_and_on_stop():
    mqtt = FakeMqtt()
    pub = MqttJobPublisher(mqtt=mqtt, summary=RunningSummary(start=0.0), namespace="t")
    pub.start(publish_summary_every=0.05)
    pub.publish_job(_job(1))
    time.sleep(0.3)
    pub.stop()

    summaries = [m for t, m in mqtt.published if t == "t/summary/updates"]
    assert len(summaries) >= 2
    assert summaries[-1]["type"] == "summary"
    assert summaries[-1]["count"] == 1

    n = len(mqtt.published)
    time.sleep(0.15)
    assert len(mqtt.published) == n
