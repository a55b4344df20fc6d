from __future__ import annotations
from app.models.candidate import Candidate, CandidateExperience, CandidatePreference, CandidateProject, CandidateSkill
from app.models.candidate_metrics import CandidateMetrics
from app.models.engine_run import EngineRun
from app.models.match_score import MatchScore
from app.models.posting import Posting, PostingSkill
from app.models.queue_task import QueueTask, TaskStatus, TaskType

__all__ = [
    "Candidate",
    "CandidateExperience",
    "CandidateMetrics",
    "CandidatePreference",
    "CandidateProject",
    "CandidateSkill",
    "EngineRun",
    "MatchScore",
    "Posting",
    "PostingSkill",
    "QueueTask",
    "TaskStatus",
    "TaskType",
]
