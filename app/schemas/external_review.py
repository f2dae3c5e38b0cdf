# File: app/schemas/external_review.py
from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime
from app.models.submission import SubmissionStatus

class ExternalReviewerCreate(BaseModel):
    name: str
    email: EmailStr

class ExternalReviewerInvite(BaseModel):
    external_reviewer_id: int
    submission_id: int
    invite_link: str
    expires_at: datetime
    submission_status: SubmissionStatus

class ExternalReviewerInfo(BaseModel):
    id: int
    name: str
    email: str

class ExternalSubmissionInfo(BaseModel):
    id: int
    event_id: int
    event_name: Optional[str] = None
    title: str
    abstract: Optional[str] = None
    keywords: Optional[str] = None
    status: SubmissionStatus

class ExternalReviewPage(BaseModel):
    reviewer: ExternalReviewerInfo
    submission: ExternalSubmissionInfo
    review_status: Optional[str] = None
