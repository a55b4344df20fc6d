from __future__ import annotations
import hashlib
import json
import logging
from datetime import datetime

from sqlalchemy import desc, func, update
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.queue_task import QueueTask, TaskStatus
from app.services.errors import InvalidTransitionError, TaskNotFoundError

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.PENDING: frozenset({TaskStatus.PROCESSING}),
    TaskStatus.PROCESSING: frozenset({TaskStatus.COMPLETED, TaskStatus.RETRYING, TaskStatus.FAILED}),
    TaskStatus.RETRYING: frozenset({TaskStatus.PENDING}),
    TaskStatus.COMPLETED: frozenset(),
    TaskStatus.FAILED: frozenset(),
}

TERMINAL_STATUSES = frozenset({TaskStatus.COMPLETED, TaskStatus.FAILED})


def task_dedupe_key(payload: dict) -> str:
    canonical = json.dumps(payload or {}, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _transition(task: QueueTask, target: TaskStatus) -> None:
    current = TaskStatus(task.status)
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(task.id, current.value, target.value)
    task.status = target.value
    logger.debug(f"queue task {task.id} ({task.task_type}): {current.value} -> {target.value}")


def enqueue(
    db: Session,
    task_type: str,
    payload: dict,
    priority: int = 0,
    *,
    trigger_reason: str = "",
    max_attempts: int | None = None,
    dedupe: bool | None = None,
) -> QueueTask:
    """Persist a new Pending task and return it.

    With dedupe enabled an equivalent Pending task is reused instead, and its
    priority raised if the new request is more urgent.
    """
    dedupe_key = task_dedupe_key(payload)
    if dedupe is None:
        dedupe = settings.queue_dedupe_pending
    if dedupe:
        existing = (
            db.query(QueueTask)
            .filter(
                QueueTask.task_type == task_type,
                QueueTask.dedupe_key == dedupe_key,
                QueueTask.status == TaskStatus.PENDING.value,
            )
            .order_by(QueueTask.created_at.asc(), QueueTask.id.asc())
            .first()
        )
        if existing:
            if priority > existing.priority:
                existing.priority = priority
                db.commit()
                db.refresh(existing)
            logger.debug(f"queue task {existing.id} reused for {task_type} {payload}")
            return existing

    task = QueueTask(
        task_type=task_type,
        payload=dict(payload or {}),
        dedupe_key=dedupe_key,
        trigger_reason=trigger_reason[:256],
        priority=priority,
        status=TaskStatus.PENDING.value,
        attempts=0,
        max_attempts=max(1, max_attempts or settings.queue_max_attempts),
        created_at=datetime.utcnow(),
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.debug(f"queue task {task.id} enqueued: {task_type} priority={priority} reason={trigger_reason!r}")
    return task


def claim_batch(db: Session, limit: int) -> list[QueueTask]:
    """Move up to ``limit`` Pending tasks to Processing and return them.

    Ordered by priority (high first), then creation time (old first). Each row
    is claimed with a conditional update so a concurrent claimer that got there
    first simply wins the row; the whole claim commits as one transaction.
    """
    if limit <= 0:
        return []

    try:
        candidate_ids = [
            row[0]
            for row in db.query(QueueTask.id)
            .filter(QueueTask.status == TaskStatus.PENDING.value)
            .order_by(desc(QueueTask.priority), QueueTask.created_at.asc(), QueueTask.id.asc())
            .limit(limit)
            .with_for_update(skip_locked=True)
            .all()
        ]

        now = datetime.utcnow()
        claimed: list[int] = []
        for task_id in candidate_ids:
            result = db.execute(
                update(QueueTask)
                .where(QueueTask.id == task_id, QueueTask.status == TaskStatus.PENDING.value)
                .values(
                    status=TaskStatus.PROCESSING.value,
                    processed_at=func.coalesce(QueueTask.processed_at, now),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 1:
                claimed.append(task_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    if not claimed:
        return []
    tasks = db.query(QueueTask).filter(QueueTask.id.in_(claimed)).all()
    tasks.sort(key=lambda t: (-t.priority, t.created_at, t.id))
    return tasks


def _get_task(db: Session, task_id: int) -> QueueTask:
    task = db.get(QueueTask, task_id)
    if task is None:
        raise TaskNotFoundError(task_id)
    return task


def mark_completed(db: Session, task_id: int) -> QueueTask:
    task = _get_task(db, task_id)
    if task.status == TaskStatus.COMPLETED.value:
        return task

    _transition(task, TaskStatus.COMPLETED)
    task.completed_at = datetime.utcnow()
    task.last_error = None
    db.commit()
    db.refresh(task)
    return task


def mark_failed(db: Session, task_id: int, error: str | BaseException) -> QueueTask:
    """Record a failed attempt.

    Below the attempt cap the task passes through Retrying back to Pending so
    the next batch can pick it up again; at the cap it becomes Failed.
    """
    task = _get_task(db, task_id)
    message = (str(error) or error.__class__.__name__)[:2000]

    if task.status != TaskStatus.PROCESSING.value:
        raise InvalidTransitionError(task.id, task.status, TaskStatus.FAILED.value)

    task.attempts = min(task.attempts + 1, task.max_attempts)
    task.last_error = message
    if task.attempts < task.max_attempts:
        _transition(task, TaskStatus.RETRYING)
        _transition(task, TaskStatus.PENDING)
        logger.info(f"queue task {task.id} will retry ({task.attempts}/{task.max_attempts}): {message}")
    else:
        _transition(task, TaskStatus.FAILED)
        logger.error(f"queue task {task.id} failed permanently after {task.attempts} attempts: {message}")
    db.commit()
    db.refresh(task)
    return task


def get_task(db: Session, task_id: int) -> QueueTask | None:
    return db.get(QueueTask, task_id)


def list_tasks(db: Session, status: TaskStatus | str | None = None, limit: int = 100) -> list[QueueTask]:
    query = db.query(QueueTask)
    if status is not None:
        query = query.filter(QueueTask.status == TaskStatus(status).value)
    return query.order_by(desc(QueueTask.created_at), desc(QueueTask.id)).limit(limit).all()


def get_queue_stats(db: Session) -> dict:
    counts = {status.value: 0 for status in TaskStatus}
    for status, count in db.query(QueueTask.status, func.count(QueueTask.id)).group_by(QueueTask.status).all():
        counts[status] = count
    total = sum(counts.values())

    oldest_pending = (
        db.query(func.min(QueueTask.created_at)).filter(QueueTask.status == TaskStatus.PENDING.value).scalar()
    )
    oldest_age = (datetime.utcnow() - oldest_pending).total_seconds() if oldest_pending else None

    return {
        "total": total,
        "pending": counts[TaskStatus.PENDING.value],
        "processing": counts[TaskStatus.PROCESSING.value],
        "completed": counts[TaskStatus.COMPLETED.value],
        "failed": counts[TaskStatus.FAILED.value],
        "success_rate": (counts[TaskStatus.COMPLETED.value] / total * 100) if total else 0.0,
        "oldest_pending_age_seconds": oldest_age,
    }
