from __future__ import annotations
import enum
import logging
from collections.abc import Iterable

from sqlalchemy.orm import Session

from app.models.queue_task import QueueTask, TaskType
from app.services import task_queue

logger = logging.getLogger(__name__)


class TaskPriority(enum.IntEnum):
    URGENT = 9
    HIGH = 7
    NORMAL = 5
    BULK = 2


class EventRouter:
    """Translates domain change notifications into recomputation tasks.

    No scoring happens here; every handler only enqueues.
    """

    def __init__(self, db: Session):
        self.db = db

    def _candidate_task(self, candidate_id: int, priority: TaskPriority, reason: str) -> QueueTask:
        task = task_queue.enqueue(
            self.db,
            TaskType.RECOMPUTE_CANDIDATE.value,
            {"candidate_id": candidate_id},
            int(priority),
            trigger_reason=reason,
        )
        logger.info(f"queued candidate recomputation: candidate={candidate_id} ({reason}) task={task.id}")
        return task

    def _pair_task(self, candidate_id: int, posting_id: int, priority: TaskPriority, reason: str) -> QueueTask:
        return task_queue.enqueue(
            self.db,
            TaskType.RECOMPUTE_PAIR.value,
            {"candidate_id": candidate_id, "posting_id": posting_id},
            int(priority),
            trigger_reason=reason,
        )

    def on_candidate_profile_changed(self, candidate_id: int) -> QueueTask:
        return self._candidate_task(candidate_id, TaskPriority.NORMAL, "profile updated")

    def on_candidate_skills_changed(self, candidate_id: int) -> QueueTask:
        return self._candidate_task(candidate_id, TaskPriority.NORMAL, "skills updated")

    def on_candidate_experience_changed(self, candidate_id: int) -> QueueTask:
        return self._candidate_task(candidate_id, TaskPriority.NORMAL, "experience updated")

    def on_candidate_academics_changed(self, candidate_id: int) -> QueueTask:
        return self._candidate_task(candidate_id, TaskPriority.NORMAL, "academic record updated")

    def on_document_uploaded(self, candidate_id: int, document_type: str) -> QueueTask:
        return self._candidate_task(candidate_id, TaskPriority.HIGH, f"{document_type} uploaded")

    def on_posting_requirements_changed(
        self, posting_id: int, affected_candidate_ids: Iterable[int] | None = None
    ) -> list[QueueTask]:
        if affected_candidate_ids is None:
            task = task_queue.enqueue(
                self.db,
                TaskType.RECOMPUTE_POSTING.value,
                {"posting_id": posting_id},
                int(TaskPriority.BULK),
                trigger_reason="posting requirements updated",
            )
            logger.info(f"queued posting-wide recomputation for posting={posting_id} task={task.id}")
            return [task]
        # One low-priority task per pair keeps a large posting edit from starving candidate edits.
        tasks = [
            self._pair_task(candidate_id, posting_id, TaskPriority.BULK, "posting requirements updated")
            for candidate_id in dict.fromkeys(affected_candidate_ids)
        ]
        logger.info(f"queued {len(tasks)} pair recomputations for posting={posting_id}")
        return tasks

    def on_manual_recompute(self, candidate_id: int, posting_id: int | None = None) -> QueueTask:
        if posting_id is None:
            return self._candidate_task(candidate_id, TaskPriority.URGENT, "manual trigger")
        return self._pair_task(candidate_id, posting_id, TaskPriority.URGENT, "manual trigger")

    def schedule_periodic_recomputation(self, candidate_ids: Iterable[int]) -> list[QueueTask]:
        tasks = [
            task_queue.enqueue(
                self.db,
                TaskType.RECOMPUTE_CANDIDATE.value,
                {"candidate_id": candidate_id},
                int(TaskPriority.BULK),
                trigger_reason="scheduled periodic recomputation",
            )
            for candidate_id in dict.fromkeys(candidate_ids)
        ]
        logger.info(f"scheduled periodic recomputation for {len(tasks)} candidates")
        return tasks
