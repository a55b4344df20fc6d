from __future__ import annotations
from datetime import datetime

import pytest

from app.models.candidate import Candidate
from app.services.errors import SnapshotNotFoundError
from app.services.snapshots import DbCandidateSnapshotProvider, DbPostingSnapshotProvider


def test_candidate_snapshot_from_tables(db, candidate):
    snapshot = DbCandidateSnapshotProvider().load(db, candidate.id)

    assert snapshot.candidate_id == candidate.id
    assert [(s.skill_id, s.proficiency, s.years_of_experience) for s in snapshot.skills] == [("python", 5, 5)]
    assert snapshot.gpa == 3.8
    assert snapshot.completed_course_count == 10
    assert snapshot.experiences[0].end_date == datetime(2023, 12, 27)
    assert snapshot.project_count == 2
    assert [(p.preference_id, p.priority) for p in snapshot.preferences] == [("remote", 4)]
    assert snapshot.as_of is not None


def test_sparse_candidate_snapshot(db):
    row = Candidate(full_name="New Person")
    db.add(row)
    db.commit()

    snapshot = DbCandidateSnapshotProvider().load(db, row.id)

    assert snapshot.skills == ()
    assert snapshot.gpa is None
    assert snapshot.experiences == ()
    assert snapshot.project_count == 0


def test_posting_snapshot_from_tables(db, posting):
    snapshot = DbPostingSnapshotProvider().load(db, posting.id)

    assert snapshot.gpa_threshold == 3.5
    assert [(s.skill_id, s.importance_weight, s.required) for s in snapshot.skills] == [
        ("python", 5, True),
        ("sql", 3, False),
    ]


def test_missing_entities_raise(db):
    with pytest.raises(SnapshotNotFoundError):
        DbCandidateSnapshotProvider().load(db, 123)
    with pytest.raises(SnapshotNotFoundError):
        DbPostingSnapshotProvider().load(db, 456)
