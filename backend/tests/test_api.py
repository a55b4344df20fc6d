from __future__ import annotations
import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.db.database import get_db
from app.main import app
from app.services.recompute_worker import RecomputationWorker

PREFIX = settings.api_prefix


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    previous_worker = app.state.worker
    app.dependency_overrides[get_db] = override_get_db
    app.state.worker = RecomputationWorker(session_factory=session_factory)
    try:
        yield TestClient(app)
    finally:
        app.state.worker.stop_queue_processor(timeout=5)
        app.state.worker = previous_worker
        app.dependency_overrides.clear()


@pytest.fixture
def headers(client):
    resp = client.post(
        f"{PREFIX}/auth/login",
        json={"username": settings.auth_username, "password": settings.auth_password},
    )
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def test_endpoints_require_token(client):
    assert client.get(f"{PREFIX}/queue/stats").status_code == 401
    assert client.get("/health").json() == {"status": "ok"}


def test_event_then_process_then_read_metrics(client, headers, candidate, posting):
    resp = client.post(f"{PREFIX}/events/candidates/{candidate.id}/skills", headers=headers)
    assert resp.status_code == 202
    assert resp.json()["status"] == "pending"

    resp = client.post(
        f"{PREFIX}/events/postings/{posting.id}/requirements",
        json={"affected_candidate_ids": [candidate.id]},
        headers=headers,
    )
    assert resp.status_code == 202
    assert resp.json()[0]["payload"] == {"candidate_id": candidate.id, "posting_id": posting.id}

    resp = client.post(f"{PREFIX}/queue/process", headers=headers)
    assert resp.json()["claimed"] == 2
    assert resp.json()["completed"] == 2

    metrics = client.get(f"{PREFIX}/candidates/{candidate.id}/metrics", headers=headers).json()
    assert metrics["hireability_score"] == pytest.approx(79)

    match = client.get(f"{PREFIX}/candidates/{candidate.id}/matches/{posting.id}", headers=headers).json()
    assert 0 <= match["total_score"] <= 100

    ranking = client.get(f"{PREFIX}/postings/{posting.id}/matches", headers=headers).json()
    assert [row["candidate_id"] for row in ranking] == [candidate.id]

    stats = client.get(f"{PREFIX}/queue/stats", headers=headers).json()
    assert stats["completed"] == 2
    assert stats["success_rate"] == pytest.approx(100.0)

    runs = client.get(f"{PREFIX}/runs", headers=headers).json()
    assert runs[0]["input_count"] == 2


def test_missing_scores_are_absent(client, headers):
    assert client.get(f"{PREFIX}/candidates/77/metrics", headers=headers).status_code == 404
    assert client.get(f"{PREFIX}/candidates/77/matches/1", headers=headers).status_code == 404
    assert client.get(f"{PREFIX}/queue/tasks/77", headers=headers).status_code == 404


def test_enqueue_and_list_tasks(client, headers):
    resp = client.post(
        f"{PREFIX}/queue/tasks",
        json={"task_type": "recompute-candidate", "payload": {"candidate_id": 1}, "priority": 9},
        headers=headers,
    )
    assert resp.status_code == 201
    task = resp.json()
    assert task["priority"] == 9
    assert task["trigger_reason"] == "api"

    bad = client.post(
        f"{PREFIX}/queue/tasks",
        json={"task_type": "delete-everything", "payload": {}},
        headers=headers,
    )
    assert bad.status_code == 422

    listed = client.get(f"{PREFIX}/queue/tasks", params={"status": "pending"}, headers=headers).json()
    assert [t["id"] for t in listed] == [task["id"]]


def test_processor_start_and_stop(client, headers):
    resp = client.post(f"{PREFIX}/queue/processor/start", json={"interval_seconds": 0.05}, headers=headers)
    assert resp.json()["is_processor_running"] is True
    assert resp.json()["interval_seconds"] == pytest.approx(0.05)

    resp = client.post(f"{PREFIX}/queue/processor/stop", headers=headers)
    assert resp.json()["is_processor_running"] is False


def test_login_rejects_bad_credentials_and_foreign_tokens(client):
    resp = client.post(f"{PREFIX}/auth/login", json={"username": "admin", "password": "nope"})
    assert resp.status_code == 401

    from jose import jwt

    unscoped = jwt.encode({"sub": "admin"}, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    resp = client.get(f"{PREFIX}/queue/stats", headers={"Authorization": f"Bearer {unscoped}"})
    assert resp.status_code == 401


def test_login_reports_token_lifetime(client):
    resp = client.post(
        f"{PREFIX}/auth/login",
        json={"username": settings.auth_username, "password": settings.auth_password},
    )
    assert resp.json()["expires_in"] == settings.jwt_expire_minutes * 60
    assert resp.json()["token_type"] == "bearer"


def test_manual_recompute_is_urgent_and_checks_targets(client, headers, candidate, posting):
    resp = client.post(
        f"{PREFIX}/events/candidates/{candidate.id}/recompute",
        params={"posting_id": posting.id},
        headers=headers,
    )
    assert resp.status_code == 202
    assert resp.json()["priority"] == 9
    assert resp.json()["task_type"] == "recompute-pair"

    missing = client.post(f"{PREFIX}/events/candidates/4040/recompute", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["detail"] == "candidate not found: id=4040"
