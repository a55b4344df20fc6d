from __future__ import annotations
from datetime import datetime

from pydantic import BaseModel


class CandidateMetricsOut(BaseModel):
    candidate_id: int
    skill_score: float
    academic_score: float
    experience_score: float
    preference_score: float
    hireability_score: float
    compute_version: str
    details: dict
    last_computed: datetime

    class Config:
        from_attributes = True


class MatchScoreOut(BaseModel):
    candidate_id: int
    posting_id: int
    total_score: float
    skill_score: float
    academic_score: float
    experience_score: float
    preference_score: float
    compute_version: str
    details: dict
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
