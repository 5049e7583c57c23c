from mm1_queue.mqtt_topics import completed_jobs, summary_updates


def test_topic_helpers():
    ns = "demo/v0"
    assert completed_jobs(ns) == "demo/v0/jobs/completed"
    assert summary_updates(ns) == "demo/v0/summary/updates"


def test_default_namespace():
    assert completed_jobs() == "mm1/v0/jobs/completed"
    assert summary_updates() == "mm1/v0/summary/updates"
