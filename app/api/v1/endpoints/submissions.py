# File: app/api/v1/endpoints/submissions.py
import json
import logging
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session
from app import schemas
from app.api.deps import get_request_meta, require_event_role
from app.core.permissions import EventAccess
from app.db.database import get_db
from app.models.event_role import EventRoleType
from app.services import read_models, submission_service
from app.services.audit_service import RequestMeta

logger = logging.getLogger(__name__)
router = APIRouter()

def _parse_authors(raw: Optional[str]) -> list:
    """Authors arrive as a JSON array inside the multipart form"""
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("⚠️ Ignoring malformed authors field")
        return []
    return parsed if isinstance(parsed, list) else []

@router.post(
    "/events/{event_id}/submissions",
    response_model=schemas.Submission,
    status_code=status.HTTP_201_CREATED,
)
def create_submission(
    event_id: int,
    title: Optional[str] = Form(None),
    abstract: Optional[str] = Form(None),
    keywords: Optional[str] = Form(None),
    authors: Optional[str] = Form(None),
    membership_email: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    access: EventAccess = Depends(require_event_role(EventRoleType.AUTHOR)),
    meta: RequestMeta = Depends(get_request_meta)
):
    """Submit a paper (PDF) to the event"""
    return submission_service.create_submission(
        db,
        access,
        event_id=event_id,
        title=title,
        abstract=abstract,
        keywords=keywords,
        authors=_parse_authors(authors),
        membership_email=membership_email,
        stream=file.file if file else None,
        filename=file.filename if file else None,
        meta=meta,
    )

@router.get("/events/{event_id}/submissions/mine", response_model=schemas.SubmissionListResponse)
def list_my_submissions(
    event_id: int,
    db: Session = Depends(get_db),
    access: EventAccess = Depends(require_event_role(EventRoleType.AUTHOR))
):
    return {"items": submission_service.list_my_submissions(db, access, event_id=event_id)}

@router.get("/events/{event_id}/submissions/{submission_id}", response_model=schemas.Submission)
def get_my_submission(
    event_id: int,
    submission_id: int,
    db: Session = Depends(get_db),
    access: EventAccess = Depends(require_event_role(EventRoleType.AUTHOR))
):
    return submission_service.get_my_submission(db, access, event_id=event_id, submission_id=submission_id)

@router.get("/submissions/{submission_id}/reviews", response_model=schemas.AuthorReviewListResponse)
def list_reviews_for_author(
    submission_id: int,
    db: Session = Depends(get_db),
    access: EventAccess = Depends(require_event_role(EventRoleType.AUTHOR))
):
    """Reviews of the caller's own paper, reviewer identity hidden"""
    return read_models.author_reviews(db, access, event_id=access.event_id, submission_id=submission_id)
