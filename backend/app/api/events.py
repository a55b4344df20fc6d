from __future__ import annotations
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import require_user
from app.db.database import get_db
from app.models.candidate import Candidate
from app.models.posting import Posting
from app.schemas.event import DocumentUploaded, PostingRequirementsChanged
from app.schemas.queue import QueueTaskOut
from app.services.errors import SnapshotNotFoundError
from app.services.event_router import EventRouter

router = APIRouter(prefix="/events", tags=["events"])


@router.post("/candidates/{candidate_id}/profile", response_model=QueueTaskOut, status_code=202)
def candidate_profile_changed(candidate_id: int, _: str = Depends(require_user), db: Session = Depends(get_db)):
    return EventRouter(db).on_candidate_profile_changed(candidate_id)


@router.post("/candidates/{candidate_id}/skills", response_model=QueueTaskOut, status_code=202)
def candidate_skills_changed(candidate_id: int, _: str = Depends(require_user), db: Session = Depends(get_db)):
    return EventRouter(db).on_candidate_skills_changed(candidate_id)


@router.post("/candidates/{candidate_id}/experience", response_model=QueueTaskOut, status_code=202)
def candidate_experience_changed(candidate_id: int, _: str = Depends(require_user), db: Session = Depends(get_db)):
    return EventRouter(db).on_candidate_experience_changed(candidate_id)


@router.post("/candidates/{candidate_id}/academics", response_model=QueueTaskOut, status_code=202)
def candidate_academics_changed(candidate_id: int, _: str = Depends(require_user), db: Session = Depends(get_db)):
    return EventRouter(db).on_candidate_academics_changed(candidate_id)


@router.post("/candidates/{candidate_id}/documents", response_model=QueueTaskOut, status_code=202)
def candidate_document_uploaded(
    candidate_id: int, body: DocumentUploaded, _: str = Depends(require_user), db: Session = Depends(get_db)
):
    return EventRouter(db).on_document_uploaded(candidate_id, body.document_type)


@router.post("/postings/{posting_id}/requirements", response_model=list[QueueTaskOut], status_code=202)
def posting_requirements_changed(
    posting_id: int, body: PostingRequirementsChanged, _: str = Depends(require_user), db: Session = Depends(get_db)
):
    return EventRouter(db).on_posting_requirements_changed(posting_id, body.affected_candidate_ids)


@router.post("/candidates/{candidate_id}/recompute", response_model=QueueTaskOut, status_code=202)
def candidate_manual_recompute(
    candidate_id: int,
    posting_id: int | None = None,
    _: str = Depends(require_user),
    db: Session = Depends(get_db),
):
    if db.get(Candidate, candidate_id) is None:
        raise SnapshotNotFoundError("candidate", candidate_id)
    if posting_id is not None and db.get(Posting, posting_id) is None:
        raise SnapshotNotFoundError("posting", posting_id)
    return EventRouter(db).on_manual_recompute(candidate_id, posting_id)
