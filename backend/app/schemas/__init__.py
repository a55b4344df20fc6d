from __future__ import annotations
from app.schemas.auth import LoginRequest, TokenResponse
from app.schemas.event import DocumentUploaded, PostingRequirementsChanged
from app.schemas.queue import (
    BatchResultOut,
    EnqueueRequest,
    ProcessorStartRequest,
    ProcessorStatusOut,
    QueueStatsOut,
    QueueTaskOut,
)
from app.schemas.run import EngineRunOut
from app.schemas.score import CandidateMetricsOut, MatchScoreOut

__all__ = [
    "LoginRequest",
    "TokenResponse",
    "DocumentUploaded",
    "PostingRequirementsChanged",
    "BatchResultOut",
    "EnqueueRequest",
    "ProcessorStartRequest",
    "ProcessorStatusOut",
    "QueueStatsOut",
    "QueueTaskOut",
    "EngineRunOut",
    "CandidateMetricsOut",
    "MatchScoreOut",
]
