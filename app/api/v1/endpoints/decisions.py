# File: app/api/v1/endpoints/decisions.py
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app import schemas
from app.api.deps import get_request_meta, require_event_role
from app.core.permissions import EventAccess
from app.db.database import get_db
from app.models.event_role import EventRoleType
from app.services import decision_engine
from app.services.audit_service import RequestMeta

router = APIRouter()

@router.get("/{event_id}/decisions/queue", response_model=schemas.QueueResponse)
def decision_queue(
    event_id: int,
    min_reviews: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    access: EventAccess = Depends(require_event_role(EventRoleType.CHAIR))
):
    """Undecided submissions with enough submitted reviews, oldest first"""
    return decision_engine.list_queue(db, access, event_id=event_id, min_reviews=min_reviews)

@router.get("/{event_id}/decisions/{submission_id}", response_model=schemas.DecisionDetail)
def decision_detail(
    event_id: int,
    submission_id: int,
    db: Session = Depends(get_db),
    access: EventAccess = Depends(require_event_role(EventRoleType.CHAIR))
):
    return decision_engine.decision_detail(db, access, submission_id=submission_id, event_id=event_id)

@router.post("/{event_id}/decisions/{submission_id}", response_model=schemas.DecideResponse)
def make_decision(
    event_id: int,
    submission_id: int,
    body: schemas.DecisionRequest,
    db: Session = Depends(get_db),
    access: EventAccess = Depends(require_event_role(EventRoleType.CHAIR)),
    meta: RequestMeta = Depends(get_request_meta)
):
    return decision_engine.decide(
        db,
        access,
        submission_id=submission_id,
        event_id=event_id,
        decision=body.decision,
        reason=body.reason,
        min_reviews=body.min_reviews,
        force=body.force,
        meta=meta,
    )
