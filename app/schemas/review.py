# File: app/schemas/review.py
from pydantic import BaseModel
from typing import Dict, List, Optional
from datetime import datetime
from app.models.review import ReviewStatus, SCORE_FIELDS

class ReviewScores(BaseModel):
    """Sub-scores as sent; range checks happen in the review engine"""
    score_technical: Optional[int] = None
    score_relevance: Optional[int] = None
    score_innovation: Optional[int] = None
    score_writing: Optional[int] = None

    def scores(self) -> Dict[str, Optional[int]]:
        return {field: getattr(self, field) for field in SCORE_FIELDS}

class ReviewSubmitRequest(ReviewScores):
    comments_for_author: Optional[str] = None
    comments_committee: Optional[str] = None

class ReviewSubmitResponse(BaseModel):
    submission_id: int
    overall: float

class ChairReviewItem(BaseModel):
    """Full review as the chair sees it, reviewer identity included"""
    id: int
    submission_id: int
    reviewer_user_id: Optional[int] = None
    external_reviewer_id: Optional[int] = None
    reviewer_name: Optional[str] = None
    reviewer_email: Optional[str] = None
    score_technical: Optional[int] = None
    score_relevance: Optional[int] = None
    score_innovation: Optional[int] = None
    score_writing: Optional[int] = None
    score_overall: Optional[float] = None
    comments_for_author: Optional[str] = None
    comments_committee: Optional[str] = None
    status: ReviewStatus
    submitted_at: Optional[datetime] = None

class AuthorReviewItem(BaseModel):
    """Review as its author sees it: no reviewer identity, no committee comments"""
    id: int
    score_technical: Optional[int] = None
    score_relevance: Optional[int] = None
    score_innovation: Optional[int] = None
    score_writing: Optional[int] = None
    score_overall: Optional[float] = None
    comments_for_author: Optional[str] = None
    status: ReviewStatus
    submitted_at: Optional[datetime] = None

class ChairReviewListResponse(BaseModel):
    items: List[ChairReviewItem]

class AuthorReviewListResponse(BaseModel):
    items: List[AuthorReviewItem]

class OwnReview(BaseModel):
    score_technical: Optional[int] = None
    score_relevance: Optional[int] = None
    score_innovation: Optional[int] = None
    score_writing: Optional[int] = None
    score_overall: Optional[float] = None
    comments_for_author: Optional[str] = None
    comments_committee: Optional[str] = None
    status: ReviewStatus

    class Config:
        from_attributes = True

class PaperDetail(BaseModel):
    id: int
    event_id: int
    title: str
    abstract: Optional[str] = None
    keywords: Optional[str] = None
    status: str
    pdf_path: Optional[str] = None
    existing_review: Optional[OwnReview] = None
