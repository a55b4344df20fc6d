from __future__ import annotations
from datetime import datetime

from pydantic import BaseModel


class EngineRunOut(BaseModel):
    id: int
    run_type: str
    started_at: datetime
    finished_at: datetime | None
    input_count: int
    output_count: int
    error_count: int
    runtime_ms: int
    success: bool
    error_summary: str

    class Config:
        from_attributes = True
