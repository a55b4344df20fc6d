from __future__ import annotations
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_worker, require_user
from app.db.database import get_db
from app.models.queue_task import TaskStatus
from app.schemas.queue import (
    BatchResultOut,
    EnqueueRequest,
    ProcessorStartRequest,
    ProcessorStatusOut,
    QueueStatsOut,
    QueueTaskOut,
)
from app.services import task_queue
from app.services.errors import TaskNotFoundError
from app.services.recompute_worker import RecomputationWorker

router = APIRouter(prefix="/queue", tags=["queue"])


@router.post("/tasks", response_model=QueueTaskOut, status_code=201)
def enqueue_task(body: EnqueueRequest, _: str = Depends(require_user), db: Session = Depends(get_db)):
    return task_queue.enqueue(
        db,
        body.task_type.value,
        body.payload,
        body.priority,
        trigger_reason=body.trigger_reason or "api",
    )


@router.get("/tasks", response_model=list[QueueTaskOut])
def list_tasks(
    status: TaskStatus | None = None,
    limit: int = Query(default=100, ge=1, le=500),
    _: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    return task_queue.list_tasks(db, status, limit)


@router.get("/tasks/{task_id}", response_model=QueueTaskOut)
def get_task(task_id: int, _: str = Depends(require_user), db: Session = Depends(get_db)):
    task = task_queue.get_task(db, task_id)
    if not task:
        raise TaskNotFoundError(task_id)
    return task


@router.get("/stats", response_model=QueueStatsOut)
def queue_stats(_: str = Depends(require_user), db: Session = Depends(get_db)):
    return task_queue.get_queue_stats(db)


@router.post("/process", response_model=BatchResultOut)
def process_queue(_: str = Depends(require_user), worker: RecomputationWorker = Depends(get_worker)):
    return worker.process_queue()


@router.get("/processor", response_model=ProcessorStatusOut)
def processor_status(_: str = Depends(require_user), worker: RecomputationWorker = Depends(get_worker)):
    return worker.status()


@router.post("/processor/start", response_model=ProcessorStatusOut)
def start_processor(
    body: ProcessorStartRequest | None = None,
    _: str = Depends(require_user),
    worker: RecomputationWorker = Depends(get_worker),
):
    worker.start_queue_processor(body.interval_seconds if body else None)
    return worker.status()


@router.post("/processor/stop", response_model=ProcessorStatusOut)
def stop_processor(_: str = Depends(require_user), worker: RecomputationWorker = Depends(get_worker)):
    worker.stop_queue_processor()
    return worker.status()
