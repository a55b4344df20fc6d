from __future__ import annotations
from datetime import datetime

from sqlalchemy import desc
from sqlalchemy.orm import Session

from app.models.candidate_metrics import CandidateMetrics
from app.models.match_score import MatchScore
from app.services.scoring import CandidateScoreResult, MatchScoreResult


def upsert_candidate_metrics(db: Session, result: CandidateScoreResult) -> CandidateMetrics:
    # Every factor is rewritten together so the composite never mixes formula revisions.
    row = db.get(CandidateMetrics, result.candidate_id)
    if row is None:
        row = CandidateMetrics(candidate_id=result.candidate_id)
        db.add(row)
    row.skill_score = result.skill_score
    row.academic_score = result.academic_score
    row.experience_score = result.experience_score
    row.preference_score = result.preference_score
    row.hireability_score = result.hireability_score
    row.compute_version = result.compute_version
    row.details = result.details
    row.last_computed = datetime.utcnow()
    db.commit()
    db.refresh(row)
    return row


def get_candidate_metrics(db: Session, candidate_id: int) -> CandidateMetrics | None:
    return db.get(CandidateMetrics, candidate_id)


def upsert_match_score(db: Session, result: MatchScoreResult) -> MatchScore:
    now = datetime.utcnow()
    row = (
        db.query(MatchScore)
        .filter(MatchScore.candidate_id == result.candidate_id, MatchScore.posting_id == result.posting_id)
        .first()
    )
    if row is None:
        row = MatchScore(candidate_id=result.candidate_id, posting_id=result.posting_id, created_at=now)
        db.add(row)
    row.total_score = result.total_score
    row.skill_score = result.skill_score
    row.academic_score = result.academic_score
    row.experience_score = result.experience_score
    row.preference_score = result.preference_score
    row.compute_version = result.compute_version
    row.details = result.details
    row.updated_at = now
    db.commit()
    db.refresh(row)
    return row


def get_match_score(db: Session, candidate_id: int, posting_id: int) -> MatchScore | None:
    return (
        db.query(MatchScore)
        .filter(MatchScore.candidate_id == candidate_id, MatchScore.posting_id == posting_id)
        .first()
    )


def list_matches_for_posting(db: Session, posting_id: int, limit: int = 50) -> list[MatchScore]:
    return (
        db.query(MatchScore)
        .filter(MatchScore.posting_id == posting_id)
        .order_by(desc(MatchScore.total_score), MatchScore.candidate_id.asc())
        .limit(limit)
        .all()
    )


def list_matches_for_candidate(db: Session, candidate_id: int, limit: int = 20) -> list[MatchScore]:
    return (
        db.query(MatchScore)
        .filter(MatchScore.candidate_id == candidate_id)
        .order_by(desc(MatchScore.total_score), MatchScore.posting_id.asc())
        .limit(limit)
        .all()
    )
