from __future__ import annotations
import pytest

from app.models.candidate import CandidateSkill
from app.models.queue_task import QueueTask, TaskStatus, TaskType
from app.services import score_store, task_queue
from app.services.event_router import EventRouter, TaskPriority
from app.services.recompute_worker import RecomputationWorker


def test_candidate_events_enqueue_candidate_recompute_at_normal_priority(db):
    router = EventRouter(db)

    tasks = [
        router.on_candidate_profile_changed(1),
        router.on_candidate_skills_changed(1),
        router.on_candidate_experience_changed(1),
        router.on_candidate_academics_changed(1),
    ]

    for task in tasks:
        assert task.task_type == TaskType.RECOMPUTE_CANDIDATE.value
        assert task.payload == {"candidate_id": 1}
        assert task.priority == TaskPriority.NORMAL
        assert task.status == TaskStatus.PENDING.value
    assert [t.trigger_reason for t in tasks] == [
        "profile updated",
        "skills updated",
        "experience updated",
        "academic record updated",
    ]


def test_posting_change_enqueues_one_bulk_pair_task_per_candidate(db):
    tasks = EventRouter(db).on_posting_requirements_changed(42, [3, 1, 3, 2])

    assert [t.payload for t in tasks] == [
        {"candidate_id": 3, "posting_id": 42},
        {"candidate_id": 1, "posting_id": 42},
        {"candidate_id": 2, "posting_id": 42},
    ]
    assert {t.task_type for t in tasks} == {TaskType.RECOMPUTE_PAIR.value}
    assert {t.priority for t in tasks} == {TaskPriority.BULK}


def test_posting_change_with_no_candidates_enqueues_nothing(db):
    assert EventRouter(db).on_posting_requirements_changed(42, []) == []
    assert db.query(QueueTask).count() == 0


def test_bulk_work_is_claimed_after_candidate_edits(db):
    router = EventRouter(db)
    router.on_posting_requirements_changed(7, [1, 2])
    edit = router.on_candidate_skills_changed(5)
    upload = router.on_document_uploaded(6, "CV")

    claimed = task_queue.claim_batch(db, 4)

    assert [t.id for t in claimed[:2]] == [upload.id, edit.id]
    assert upload.priority == TaskPriority.HIGH
    assert upload.trigger_reason == "CV uploaded"


def test_manual_and_periodic_recompute(db):
    router = EventRouter(db)

    manual = router.on_manual_recompute(1)
    manual_pair = router.on_manual_recompute(1, 9)
    periodic = router.schedule_periodic_recomputation([1, 2, 2])

    assert manual.priority == manual_pair.priority == TaskPriority.URGENT
    assert manual_pair.payload == {"candidate_id": 1, "posting_id": 9}
    assert len(periodic) == 2
    assert {t.priority for t in periodic} == {TaskPriority.BULK}


def test_priority_ordering():
    assert TaskPriority.URGENT > TaskPriority.HIGH > TaskPriority.NORMAL > TaskPriority.BULK


def test_posting_change_without_candidate_list_enqueues_posting_wide_task(db):
    tasks = EventRouter(db).on_posting_requirements_changed(42)

    assert len(tasks) == 1
    assert tasks[0].task_type == TaskType.RECOMPUTE_POSTING.value
    assert tasks[0].payload == {"posting_id": 42}
    assert tasks[0].priority == TaskPriority.BULK


def test_skill_edit_refreshes_match_rows_for_that_candidate(session_factory, db, candidate, posting):
    worker = RecomputationWorker(session_factory=session_factory)
    EventRouter(db).on_manual_recompute(candidate.id, posting.id)
    worker.process_queue()
    assert score_store.get_match_score(db, candidate.id, posting.id).skill_score == pytest.approx(62.5)

    db.add(CandidateSkill(candidate_id=candidate.id, skill_id="sql", proficiency=5, years_of_experience=1))
    db.commit()
    EventRouter(db).on_candidate_skills_changed(candidate.id)
    worker.process_queue()

    db.expire_all()
    match = score_store.get_match_score(db, candidate.id, posting.id)
    assert match.skill_score == pytest.approx(100)
    assert match.details["skill"]["matched_skills"] == ["python", "sql"]
