from __future__ import annotations
from app.db.database import Base, engine
from app.models import candidate, candidate_metrics, engine_run, match_score, posting, queue_task


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
