from __future__ import annotations
from datetime import datetime

from pydantic import BaseModel, Field

from app.models.queue_task import TaskType


class EnqueueRequest(BaseModel):
    task_type: TaskType
    payload: dict
    priority: int = Field(default=5, ge=0, le=100)
    trigger_reason: str = ""


class QueueTaskOut(BaseModel):
    id: int
    task_type: str
    payload: dict
    trigger_reason: str
    priority: int
    status: str
    attempts: int
    max_attempts: int
    last_error: str | None
    created_at: datetime
    processed_at: datetime | None
    completed_at: datetime | None

    class Config:
        from_attributes = True


class QueueStatsOut(BaseModel):
    total: int
    pending: int
    processing: int
    completed: int
    failed: int
    success_rate: float
    oldest_pending_age_seconds: float | None


class BatchResultOut(BaseModel):
    claimed: int
    completed: int
    failed: int
    store_errors: int
    skipped: bool
    error: str | None
    task_errors: list[str] = []

    class Config:
        from_attributes = True


class ProcessorStartRequest(BaseModel):
    interval_seconds: float | None = Field(default=None, gt=0)


class ProcessorStatusOut(BaseModel):
    state: str
    is_processor_running: bool
    is_currently_processing: bool
    interval_seconds: float | None
    batch_size: int
