# File: app/api/v1/endpoints/reviewer.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app import schemas
from app.api.deps import get_request_meta, require_event_role
from app.core.permissions import EventAccess
from app.db.database import get_db
from app.models.event_role import EventRoleType
from app.services import read_models, review_engine
from app.services.audit_service import RequestMeta

router = APIRouter()

reviewer_access = require_event_role(EventRoleType.REVIEWER)

@router.get("/{event_id}/assignments", response_model=schemas.ReviewerAssignmentListResponse)
def my_assignments(
    event_id: int,
    db: Session = Depends(get_db),
    access: EventAccess = Depends(reviewer_access)
):
    return read_models.reviewer_assignments(db, access, event_id=event_id)

@router.get("/{event_id}/papers/{submission_id}", response_model=schemas.PaperDetail)
def paper_detail(
    event_id: int,
    submission_id: int,
    db: Session = Depends(get_db),
    access: EventAccess = Depends(reviewer_access)
):
    return read_models.reviewer_paper_detail(db, access, event_id=event_id, submission_id=submission_id)

@router.post("/{event_id}/papers/{submission_id}/review", response_model=schemas.ReviewSubmitResponse)
def submit_review(
    event_id: int,
    submission_id: int,
    body: schemas.ReviewSubmitRequest,
    db: Session = Depends(get_db),
    access: EventAccess = Depends(reviewer_access),
    meta: RequestMeta = Depends(get_request_meta)
):
    """Score an assigned paper; submitting again replaces the earlier review"""
    return review_engine.submit_review(
        db,
        access,
        submission_id=submission_id,
        event_id=event_id,
        scores=body.scores(),
        comments_for_author=body.comments_for_author,
        comments_committee=body.comments_committee,
        meta=meta,
    )
