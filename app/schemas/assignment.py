# File: app/schemas/assignment.py
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from app.models.review import ReviewStatus
from app.models.submission import SubmissionStatus

class AssignRequest(BaseModel):
    reviewers: List[int]
    due_at: Optional[datetime] = None
    force: bool = False

class RejectedReviewers(BaseModel):
    not_reviewer: List[int] = []
    author: List[int] = []

class AssignResponse(BaseModel):
    accepted: List[int]
    rejected: RejectedReviewers
    submission_status: SubmissionStatus

class UnassignRequest(BaseModel):
    reviewers: List[int]
    force: bool = False

class UnassignResponse(BaseModel):
    unassigned: List[int]
    forced: bool
    submission_status: SubmissionStatus

class AssignmentItem(BaseModel):
    reviewer_id: Optional[int] = None
    external_reviewer_id: Optional[int] = None
    email: Optional[str] = None
    name: Optional[str] = None
    assigned_at: datetime
    due_at: Optional[datetime] = None
    review_status: Optional[ReviewStatus] = None
    submitted_at: Optional[datetime] = None

class AssignmentListResponse(BaseModel):
    submission_id: int
    items: List[AssignmentItem]

class ReviewerAssignmentItem(BaseModel):
    submission_id: int
    title: str
    status: SubmissionStatus
    assigned_at: datetime
    due_at: Optional[datetime] = None
    review_status: Optional[ReviewStatus] = None
    submitted_at: Optional[datetime] = None

class ReviewerAssignmentListResponse(BaseModel):
    items: List[ReviewerAssignmentItem]
