# File: app/schemas/decision.py
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from app.models.decision import DecisionType
from app.models.submission import SubmissionStatus
from app.schemas.review import ChairReviewItem

class DecisionRequest(BaseModel):
    decision: DecisionType
    reason: Optional[str] = None
    min_reviews: Optional[int] = None
    force: bool = False

class Decision(BaseModel):
    submission_id: int
    decision: DecisionType
    reason: Optional[str] = None
    decider_user_id: int
    decided_at: datetime

    class Config:
        from_attributes = True

class DecideResponse(BaseModel):
    decision: Decision
    submission_status: SubmissionStatus

class QueueItem(BaseModel):
    submission_id: int
    title: str
    status: SubmissionStatus
    n_reviews: int
    avg_score: float
    created_at: datetime

class QueueResponse(BaseModel):
    event_id: int
    min_reviews: int
    items: List[QueueItem]

class DecisionDetail(BaseModel):
    submission_id: int
    title: str
    abstract: Optional[str] = None
    keywords: Optional[str] = None
    status: SubmissionStatus
    created_at: datetime
    reviews: List[ChairReviewItem]
    n_reviews: int
    avg_score: float
    decision: Optional[Decision] = None
