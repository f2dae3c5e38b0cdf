# File: app/services/final_submission.py
import logging
import os
import uuid
from typing import Any, BinaryIO, Dict, Optional
from sqlalchemy.orm import Session
from app.core import metrics
from app.core.config import settings
from app.core.exceptions import Forbidden, NotFound, ReviewServiceError
from app.core.permissions import EventAccess
from app.crud import submission as crud_submission
from app.models.base import utcnow
from app.services import audit_service
from app.services.audit_service import RequestMeta
from app.services.file_store import LocalFileStore, event_subdir
from app.services.membership_check import SqlMembershipChecker
from app.services.submission_states import (
    GuardData, Trigger, require_transition, sources, transition_conflict
)
from app.services.unit_of_work import atomic

logger = logging.getLogger(__name__)

def _final_name(pdf_path: Optional[str]) -> str:
    """final_<draft stem>.pdf, so the camera-ready copy sits next to its draft by name"""
    stem = os.path.splitext(os.path.basename(pdf_path or ""))[0].strip()
    return f"final_{stem or uuid.uuid4()}.pdf"

def upload_final(
    db: Session,
    access: EventAccess,
    *,
    submission_id: int,
    event_id: int,
    stream: BinaryIO,
    filename: str,
    file_store: Optional[LocalFileStore] = None,
    membership_checker: Optional[SqlMembershipChecker] = None,
    enforce_membership: Optional[bool] = None,
    meta: Optional[RequestMeta] = None
) -> Dict[str, Any]:
    """Accept the camera-ready PDF of an accepted paper from its author (or an admin)"""
    access.require_event(event_id)
    trace_id = audit_service.new_trace_id("FINAL-UP")
    file_store = file_store or LocalFileStore()

    sub = crud_submission.get_in_event(db, submission_id=submission_id, event_id=event_id)
    if not sub:
        raise NotFound("Submission not found in this event")

    guard = GuardData(
        uploader_is_author=sub.author_user_id == access.user_id,
        uploader_is_admin=access.is_admin,
    )
    if not (guard.uploader_is_author or guard.uploader_is_admin):
        raise Forbidden("Forbidden")
    target = require_transition(sub.status, Trigger.FINAL_UPLOADED, guard)

    enforce = settings.MEMBERSHIP_ENFORCE if enforce_membership is None else enforce_membership
    if enforce:
        checker = membership_checker or SqlMembershipChecker()
        email = sub.membership_email or (sub.author.email if sub.author else None)
        result = checker.check(email)
        if not result.ok:
            audit_service.record(
                db,
                trace_id=trace_id,
                actor_user_id=access.user_id,
                action="final.check_failed",
                entity_type="submission",
                entity_id=sub.id,
                severity="warn",
                details={"reason": result.reason or "invalid", "email": email},
                meta=meta,
            )
            logger.warning(f"🚫 Final upload for submission {sub.id} blocked: {result.reason} ({trace_id})")
            raise Forbidden(result.reason or "Membership invalid", reason=result.reason)

    subdir = event_subdir(event_id, "final")
    reference = file_store.reference_for(subdir, _final_name(sub.pdf_path))
    # Staged privately; only the upload whose status flip commits is moved into place
    pending = file_store.save(stream, filename, subdir, stored_name=f".pending_{uuid.uuid4().hex}.pdf")
    submitted_at = utcnow()
    try:
        with atomic(db, trace_id=trace_id, action="final.upload", actor_user_id=access.user_id,
                    entity_type="submission", entity_id=sub.id, meta=meta):
            moved = crud_submission.transition_status(
                db, sub.id, sources(Trigger.FINAL_UPLOADED), target,
                final_pdf_path=reference,
                final_submitted_at=submitted_at,
            )
            if not moved:
                db.refresh(sub)
                logger.warning(f"⚠️ Submission {sub.id} left final_required before upload committed ({trace_id})")
                raise transition_conflict(sub.status, Trigger.FINAL_UPLOADED)
    except ReviewServiceError:
        file_store.delete(pending)
        raise
    file_store.move(pending, reference)

    metrics.final_uploads_total.inc()
    audit_service.record(
        db,
        trace_id=trace_id,
        actor_user_id=access.user_id,
        action="final.upload_ok",
        entity_type="submission",
        entity_id=submission_id,
        details={"event_id": event_id, "file": os.path.basename(reference)},
        meta=meta,
    )
    logger.info(f"✅ Final PDF for submission {submission_id} stored at {reference} ({trace_id})")

    return {
        "submission_id": submission_id,
        "status": target,
        "final_pdf_path": reference,
        "final_submitted_at": submitted_at,
    }
