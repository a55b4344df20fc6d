from __future__ import annotations
from pydantic import BaseModel


class PostingRequirementsChanged(BaseModel):
    affected_candidate_ids: list[int] | None = None


class DocumentUploaded(BaseModel):
    document_type: str
