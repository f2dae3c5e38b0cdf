# File: app/schemas/submission.py
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime
from app.models.submission import SubmissionStatus

class AuthorEntry(BaseModel):
    name: str
    email: Optional[str] = None
    organization: Optional[str] = None

class SubmissionCreate(BaseModel):
    title: str
    abstract: Optional[str] = None
    keywords: Optional[str] = None
    authors: List[AuthorEntry] = []
    membership_email: Optional[str] = None

class SubmissionFilter(BaseModel):
    """Filters for the chair submission listing"""
    status: Optional[SubmissionStatus] = None
    q: Optional[str] = Field(None, max_length=200)
    page: int = Field(1, ge=1)
    limit: int = Field(50, ge=1, le=100)

class Submission(BaseModel):
    id: int
    event_id: int
    title: str
    abstract: Optional[str] = None
    keywords: Optional[str] = None
    authors: List[Dict[str, Any]] = []
    status: SubmissionStatus
    created_at: datetime
    final_submitted_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class SubmissionListResponse(BaseModel):
    items: List[Submission]

class ChairSubmissionItem(BaseModel):
    id: int
    title: str
    status: SubmissionStatus
    created_at: datetime
    decision: Optional[str] = None
    n_assigned: int
    n_reviews: int
    avg_score: float

class ChairSubmissionListResponse(BaseModel):
    items: List[ChairSubmissionItem]
    page: int
    limit: int
