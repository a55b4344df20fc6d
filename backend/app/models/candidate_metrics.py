from __future__ import annotations
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.database import Base


class CandidateMetrics(Base):
    __tablename__ = "candidate_metrics"

    candidate_id: Mapped[int] = mapped_column(ForeignKey("candidates.id"), primary_key=True)
    skill_score: Mapped[float] = mapped_column(Float, nullable=False)
    academic_score: Mapped[float] = mapped_column(Float, nullable=False)
    experience_score: Mapped[float] = mapped_column(Float, nullable=False)
    preference_score: Mapped[float] = mapped_column(Float, nullable=False)
    hireability_score: Mapped[float] = mapped_column(Float, nullable=False)
    compute_version: Mapped[str] = mapped_column(String(32), nullable=False)
    details: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    last_computed: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
