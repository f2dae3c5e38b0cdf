# File: app/services/submission_service.py
import logging
from typing import Any, BinaryIO, Dict, Iterable, List, Optional
from sqlalchemy.orm import Session
from app.core.exceptions import NotFound, ReviewServiceError, ValidationError
from app.core.permissions import EventAccess
from app.core.validators import clean_optional_text, clean_text, normalize_email
from app.crud import submission as crud_submission
from app.models.event_role import EventRoleType
from app.models.submission import Submission
from app.services import audit_service
from app.services.audit_service import RequestMeta
from app.services.file_store import LocalFileStore, event_subdir
from app.services.unit_of_work import atomic

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 200
ABSTRACT_MAX_LENGTH = 2000
KEYWORDS_MAX_LENGTH = 300
AUTHOR_NAME_MAX_LENGTH = 100
ORGANIZATION_MAX_LENGTH = 150

def clean_authors(authors: Optional[Iterable[Any]]) -> List[Dict[str, Optional[str]]]:
    """Keep entries with a name; unusable e-mails are dropped rather than rejected"""
    cleaned = []
    for entry in authors or []:
        if hasattr(entry, "model_dump"):
            entry = entry.model_dump()
        if not isinstance(entry, dict):
            continue
        name = clean_text(entry.get("name"), AUTHOR_NAME_MAX_LENGTH)
        if not name:
            continue
        cleaned.append({
            "name": name,
            "email": normalize_email(entry.get("email")),
            "organization": clean_optional_text(entry.get("organization"), ORGANIZATION_MAX_LENGTH),
        })
    return cleaned

def create_submission(
    db: Session,
    access: EventAccess,
    *,
    event_id: int,
    title: Optional[str],
    stream: Optional[BinaryIO],
    filename: Optional[str],
    abstract: Optional[str] = None,
    keywords: Optional[str] = None,
    authors: Optional[Iterable[Any]] = None,
    membership_email: Optional[str] = None,
    file_store: Optional[LocalFileStore] = None,
    meta: Optional[RequestMeta] = None
) -> Submission:
    access.require_event(event_id).require(EventRoleType.AUTHOR)
    trace_id = audit_service.new_trace_id("SUB-CRT")
    file_store = file_store or LocalFileStore()

    clean_title = clean_text(title, TITLE_MAX_LENGTH)
    if not clean_title or stream is None:
        audit_service.record(
            db, trace_id=trace_id, actor_user_id=access.user_id, action="submission.create.fail",
            severity="warn", details={"reason": "validation", "has_file": stream is not None, "title": clean_title},
            meta=meta,
        )
        fields = {}
        if not clean_title:
            fields["title"] = "required"
        if stream is None:
            fields["file"] = "required"
        raise ValidationError("Missing title or PDF file", fields=fields)

    author_list = clean_authors(authors)
    reference = file_store.save(stream, filename or "", event_subdir(event_id, "submissions"))
    try:
        with atomic(db, trace_id=trace_id, action="submission.create", actor_user_id=access.user_id,
                    entity_type="submission", meta=meta):
            sub = crud_submission.create_for_author(
                db,
                event_id=event_id,
                author_user_id=access.user_id,
                title=clean_title,
                abstract=clean_optional_text(abstract, ABSTRACT_MAX_LENGTH),
                keywords=clean_optional_text(keywords, KEYWORDS_MAX_LENGTH),
                authors=author_list,
                pdf_path=reference,
                membership_email=normalize_email(membership_email),
            )
    except ReviewServiceError:
        file_store.delete(reference)
        raise

    audit_service.record(
        db, trace_id=trace_id, actor_user_id=access.user_id, action="submission.create.ok",
        entity_type="submission", entity_id=sub.id,
        details={"event_id": event_id, "file": reference.rsplit("/", 1)[-1], "authors_count": len(author_list)},
        meta=meta,
    )
    logger.info(f"📥 Submission {sub.id} created in event {event_id} by user {access.user_id} ({trace_id})")
    db.refresh(sub)
    return sub

def list_my_submissions(db: Session, access: EventAccess, *, event_id: int) -> List[Submission]:
    access.require_event(event_id)
    return crud_submission.list_for_author(db, event_id=event_id, author_user_id=access.user_id)

def get_my_submission(db: Session, access: EventAccess, *, event_id: int, submission_id: int) -> Submission:
    access.require_event(event_id)
    sub = crud_submission.get_for_author(
        db, submission_id=submission_id, event_id=event_id, author_user_id=access.user_id
    )
    if not sub:
        raise NotFound("Submission not found")
    return sub
