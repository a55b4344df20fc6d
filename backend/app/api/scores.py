from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.deps import require_user
from app.db.database import get_db
from app.schemas.score import CandidateMetricsOut, MatchScoreOut
from app.services import score_store

router = APIRouter(tags=["scores"])


@router.get("/candidates/{candidate_id}/metrics", response_model=CandidateMetricsOut)
def get_candidate_metrics(candidate_id: int, _: str = Depends(require_user), db: Session = Depends(get_db)):
    row = score_store.get_candidate_metrics(db, candidate_id)
    if not row:
        raise HTTPException(status_code=404, detail="metrics not computed")
    return row


@router.get("/candidates/{candidate_id}/matches", response_model=list[MatchScoreOut])
def list_candidate_matches(
    candidate_id: int,
    limit: int = Query(default=20, ge=1, le=200),
    _: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    return score_store.list_matches_for_candidate(db, candidate_id, limit)


@router.get("/candidates/{candidate_id}/matches/{posting_id}", response_model=MatchScoreOut)
def get_match_score(candidate_id: int, posting_id: int, _: str = Depends(require_user), db: Session = Depends(get_db)):
    row = score_store.get_match_score(db, candidate_id, posting_id)
    if not row:
        raise HTTPException(status_code=404, detail="match score not computed")
    return row


@router.get("/postings/{posting_id}/matches", response_model=list[MatchScoreOut])
def list_posting_matches(
    posting_id: int,
    limit: int = Query(default=50, ge=1, le=500),
    _: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    return score_store.list_matches_for_posting(db, posting_id, limit)
