from __future__ import annotations
from app.services.signals import TaskSignal, WebhookSignalSink


def make_signal(**overrides) -> TaskSignal:
    fields = dict(
        task_id=11,
        task_type="recompute-candidate",
        status="failed",
        attempts=3,
        max_attempts=3,
        error="candidate not found: id=4",
        payload={"candidate_id": 4},
    )
    fields.update(overrides)
    return TaskSignal(**fields)


def test_signal_payload_shape():
    payload = WebhookSignalSink.build_payload(make_signal())

    assert payload["event"] == "task.failed"
    assert payload["task_id"] == 11
    assert payload["payload"] == {"candidate_id": 4}
    assert payload["error"].startswith("candidate not found")
    assert "sent_at" in payload


def test_send_without_webhook_is_disabled():
    sink = WebhookSignalSink("")

    assert sink.send({"event": "task.completed"}) == (False, "webhook not configured")
    sink(make_signal(status="completed", error=None))


def test_delivery_failure_is_logged(monkeypatch, caplog):
    sink = WebhookSignalSink("https://hooks.example.com/recompute")
    sent = []

    def fake_send(payload):
        sent.append(payload)
        return False, "signal status=500 body=oops"

    monkeypatch.setattr(sink, "send", fake_send)
    with caplog.at_level("WARNING", logger="app.services.signals"):
        sink(make_signal())

    assert sent[0]["event"] == "task.failed"
    assert "signal status=500" in caplog.text
