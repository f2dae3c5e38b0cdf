# File: app/api/v1/endpoints/chair.py
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app import schemas
from app.api.deps import get_request_meta, require_event_role
from app.core.permissions import EventAccess
from app.db.database import get_db
from app.models.event_role import EventRoleType
from app.models.submission import SubmissionStatus
from app.services import assignment_engine, read_models
from app.services.audit_service import RequestMeta

router = APIRouter()

chair_access = require_event_role(EventRoleType.CHAIR)

def submission_filter(
    status: Optional[SubmissionStatus] = Query(None),
    q: Optional[str] = Query(None, max_length=200),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100)
) -> schemas.SubmissionFilter:
    return schemas.SubmissionFilter(status=status, q=q, page=page, limit=limit)

@router.get("/{event_id}/submissions", response_model=schemas.ChairSubmissionListResponse)
def list_submissions(
    event_id: int,
    filters: schemas.SubmissionFilter = Depends(submission_filter),
    db: Session = Depends(get_db),
    access: EventAccess = Depends(chair_access)
):
    """All submissions of the event with assignment and review aggregates"""
    return read_models.list_chair_submissions(db, access, event_id=event_id, filters=filters)

@router.get("/{event_id}/reviewers", response_model=schemas.ReviewerListResponse)
def list_reviewers(
    event_id: int,
    db: Session = Depends(get_db),
    access: EventAccess = Depends(chair_access)
):
    return read_models.list_event_reviewers(db, access, event_id=event_id)

@router.get("/{event_id}/submissions/{submission_id}/assignments", response_model=schemas.AssignmentListResponse)
def list_assignments(
    event_id: int,
    submission_id: int,
    db: Session = Depends(get_db),
    access: EventAccess = Depends(chair_access)
):
    return read_models.list_submission_assignments(db, access, event_id=event_id, submission_id=submission_id)

@router.post("/{event_id}/submissions/{submission_id}/assign", response_model=schemas.AssignResponse)
def assign_reviewers(
    event_id: int,
    submission_id: int,
    body: schemas.AssignRequest,
    db: Session = Depends(get_db),
    access: EventAccess = Depends(chair_access),
    meta: RequestMeta = Depends(get_request_meta)
):
    return assignment_engine.assign(
        db,
        access,
        submission_id=submission_id,
        event_id=event_id,
        reviewer_ids=body.reviewers,
        due_at=body.due_at,
        force=body.force,
        meta=meta,
    )

@router.post("/{event_id}/submissions/{submission_id}/unassign", response_model=schemas.UnassignResponse)
def unassign_reviewers(
    event_id: int,
    submission_id: int,
    body: schemas.UnassignRequest,
    db: Session = Depends(get_db),
    access: EventAccess = Depends(chair_access),
    meta: RequestMeta = Depends(get_request_meta)
):
    return assignment_engine.unassign(
        db,
        access,
        submission_id=submission_id,
        event_id=event_id,
        reviewer_ids=body.reviewers,
        force=body.force,
        meta=meta,
    )

@router.get("/{event_id}/submissions/{submission_id}/reviews", response_model=schemas.ChairReviewListResponse)
def list_reviews_for_chair(
    event_id: int,
    submission_id: int,
    db: Session = Depends(get_db),
    access: EventAccess = Depends(chair_access)
):
    """Every review, with reviewer identity and committee comments"""
    return read_models.chair_reviews(db, access, event_id=event_id, submission_id=submission_id)

@router.post(
    "/{event_id}/submissions/{submission_id}/external-reviewers",
    response_model=schemas.ExternalReviewerInvite,
)
def invite_external_reviewer(
    event_id: int,
    submission_id: int,
    body: schemas.ExternalReviewerCreate,
    db: Session = Depends(get_db),
    access: EventAccess = Depends(chair_access),
    meta: RequestMeta = Depends(get_request_meta)
):
    return assignment_engine.invite_external_reviewer(
        db,
        access,
        submission_id=submission_id,
        event_id=event_id,
        name=body.name,
        email=body.email,
        meta=meta,
    )
