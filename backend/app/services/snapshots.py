from __future__ import annotations
from datetime import datetime

from sqlalchemy.orm import Session

from app.models.candidate import Candidate
from app.models.posting import Posting
from app.services.errors import SnapshotNotFoundError
from app.services.scoring import (
    CandidateSnapshot,
    ExperienceRecord,
    PostingSkillRequirement,
    PostingSnapshot,
    PreferenceEntry,
    SkillEntry,
)


class CandidateSnapshotProvider:
    def load(self, db: Session, candidate_id: int) -> CandidateSnapshot:
        raise NotImplementedError

    def active_ids(self, db: Session) -> list[int]:
        raise NotImplementedError


class PostingSnapshotProvider:
    def load(self, db: Session, posting_id: int) -> PostingSnapshot:
        raise NotImplementedError

    def active_ids(self, db: Session) -> list[int]:
        raise NotImplementedError


class DbCandidateSnapshotProvider(CandidateSnapshotProvider):
    """Assembles a read-only candidate view from the candidate tables."""

    def load(self, db: Session, candidate_id: int) -> CandidateSnapshot:
        row = db.get(Candidate, candidate_id)
        if row is None:
            raise SnapshotNotFoundError("candidate", candidate_id)

        return CandidateSnapshot(
            candidate_id=row.id,
            skills=tuple(
                SkillEntry(s.skill_id, s.proficiency, s.years_of_experience or 0.0)
                for s in sorted(row.skills, key=lambda s: s.skill_id)
            ),
            gpa=row.gpa,
            completed_course_count=row.completed_course_count or 0,
            experiences=tuple(
                ExperienceRecord(e.start_date, e.end_date)
                for e in sorted(row.experiences, key=lambda e: (e.start_date, e.id))
            ),
            project_count=len(row.projects),
            preferences=tuple(
                PreferenceEntry(p.preference_id, p.priority)
                for p in sorted(row.preferences, key=lambda p: p.preference_id)
            ),
            as_of=datetime.utcnow(),
        )

    def active_ids(self, db: Session) -> list[int]:
        return [
            row[0] for row in db.query(Candidate.id).filter(Candidate.is_active.is_(True)).order_by(Candidate.id).all()
        ]


class DbPostingSnapshotProvider(PostingSnapshotProvider):
    def load(self, db: Session, posting_id: int) -> PostingSnapshot:
        row = db.get(Posting, posting_id)
        if row is None:
            raise SnapshotNotFoundError("posting", posting_id)

        return PostingSnapshot(
            posting_id=row.id,
            skills=tuple(
                PostingSkillRequirement(s.skill_id, s.importance_weight, s.required)
                for s in sorted(row.skills, key=lambda s: s.skill_id)
            ),
            gpa_threshold=row.gpa_threshold,
        )

    def active_ids(self, db: Session) -> list[int]:
        return [row[0] for row in db.query(Posting.id).filter(Posting.is_active.is_(True)).order_by(Posting.id).all()]
