from __future__ import annotations
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime

import httpx

from app.models.queue_task import QueueTask

logger = logging.getLogger(__name__)


@dataclass
class TaskSignal:
    task_id: int
    task_type: str
    status: str
    attempts: int
    max_attempts: int
    error: str | None = None
    payload: dict = field(default_factory=dict)

    @classmethod
    def from_task(cls, task: QueueTask) -> "TaskSignal":
        return cls(
            task_id=task.id,
            task_type=task.task_type,
            status=task.status,
            attempts=task.attempts,
            max_attempts=task.max_attempts,
            error=task.last_error,
            payload=dict(task.payload or {}),
        )


class WebhookSignalSink:
    """Posts task outcomes to an HTTP endpoint; a blank URL disables delivery."""

    def __init__(self, webhook_url: str, timeout: float = 10):
        self.webhook_url = webhook_url
        self.timeout = timeout

    @staticmethod
    def build_payload(signal: TaskSignal) -> dict:
        body = asdict(signal)
        body["event"] = f"task.{signal.status}"
        body["sent_at"] = datetime.utcnow().isoformat()
        return body

    def send(self, payload: dict) -> tuple[bool, str]:
        if not self.webhook_url:
            return False, "webhook not configured"
        try:
            with httpx.Client(timeout=self.timeout) as client:
                resp = client.post(self.webhook_url, json=payload)
                if resp.status_code >= 300:
                    return False, f"signal status={resp.status_code} body={resp.text[:300]}"
            return True, "ok"
        except httpx.HTTPError as exc:
            return False, str(exc)

    def __call__(self, signal: TaskSignal) -> None:
        if not self.webhook_url:
            return
        ok, msg = self.send(self.build_payload(signal))
        if not ok:
            logger.warning(f"task signal delivery failed for task {signal.task_id}: {msg}")
