# File: app/services/review_engine.py
import logging
from typing import Any, Dict, Mapping, Optional, Tuple
from sqlalchemy.orm import Session
from app.core import metrics
from app.core.exceptions import Forbidden, NotFound, ValidationError
from app.core.permissions import EventAccess
from app.core.validators import clean_optional_text
from app.db.upsert import insert_for
from app.models.assignment import Assignment
from app.models.base import utcnow
from app.models.event_role import EventRoleType
from app.models.external_reviewer import ExternalReviewer
from app.models.review import Review, ReviewStatus, SCORE_FIELDS
from app.models.submission import Submission
from app.services import audit_service
from app.services.audit_service import RequestMeta
from app.services.unit_of_work import atomic

logger = logging.getLogger(__name__)

COMMENT_MAX_LENGTH = 5000

def validate_scores(scores: Mapping[str, Any]) -> Tuple[Dict[str, int], float]:
    """Check the four sub-scores are integers 1..5 and return them with their mean (2 dp)"""
    errors = {}
    clean: Dict[str, int] = {}
    for field in SCORE_FIELDS:
        value = scores.get(field)
        if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= 5:
            errors[field] = "must be an integer between 1 and 5"
        else:
            clean[field] = value
    if errors:
        raise ValidationError(
            "Scores must be integers 1..5 (technical, relevance, innovation, writing)",
            fields=errors,
        )
    overall = round(sum(clean.values()) / len(SCORE_FIELDS), 2)
    return clean, overall

def _review_values(
    scores: Mapping[str, Any],
    comments_for_author: Optional[str],
    comments_committee: Optional[str]
) -> Dict[str, Any]:
    clean, overall = validate_scores(scores)
    return {
        **clean,
        "score_overall": overall,
        "comments_for_author": clean_optional_text(comments_for_author, COMMENT_MAX_LENGTH),
        "comments_committee": clean_optional_text(comments_committee, COMMENT_MAX_LENGTH),
        "status": ReviewStatus.SUBMITTED,
        "submitted_at": utcnow(),
    }

def _upsert_review(db: Session, key: Dict[str, int], values: Dict[str, Any]) -> None:
    """Insert the review or overwrite the reviewer's existing row in place"""
    now = values["submitted_at"]
    stmt = insert_for(db, Review).values(**key, **values, created_at=now, updated_at=now)
    stmt = stmt.on_conflict_do_update(
        index_elements=list(key.keys()),
        set_={**values, "updated_at": now},
    )
    db.execute(stmt)

def submit_review(
    db: Session,
    access: EventAccess,
    *,
    submission_id: int,
    event_id: int,
    scores: Mapping[str, Any],
    comments_for_author: Optional[str] = None,
    comments_committee: Optional[str] = None,
    meta: Optional[RequestMeta] = None
) -> Dict[str, Any]:
    """Score a submission as an assigned reviewer; resubmitting overwrites the earlier review"""
    access.require_event(event_id).require(EventRoleType.REVIEWER)
    trace_id = audit_service.new_trace_id("REV-SUB")
    values = _review_values(scores, comments_for_author, comments_committee)

    assigned = db.query(Assignment.id).join(
        Submission, Submission.id == Assignment.submission_id
    ).filter(
        Assignment.submission_id == submission_id,
        Assignment.reviewer_user_id == access.user_id,
        Submission.event_id == event_id
    ).first()
    if not assigned:
        logger.warning(f"⚠️ User {access.user_id} tried to review submission {submission_id} without assignment ({trace_id})")
        raise Forbidden("Not assigned")

    key = {"submission_id": submission_id, "reviewer_user_id": access.user_id}
    with atomic(db, trace_id=trace_id, action="review.submit", actor_user_id=access.user_id,
                entity_type="submission", entity_id=submission_id, meta=meta):
        _upsert_review(db, key, values)

    metrics.reviews_submitted_total.inc()
    audit_service.record(
        db,
        trace_id=trace_id,
        actor_user_id=access.user_id,
        action="review.submit",
        entity_type="submission",
        entity_id=submission_id,
        details={
            "scores": {field: values[field] for field in SCORE_FIELDS},
            "overall": values["score_overall"],
            "cfa_len": len(values["comments_for_author"] or ""),
            "cc_len": len(values["comments_committee"] or ""),
        },
        meta=meta,
    )
    logger.info(f"📝 Review for submission {submission_id} by user {access.user_id}: overall {values['score_overall']} ({trace_id})")
    return {"submission_id": submission_id, "overall": values["score_overall"]}

def resolve_invite(db: Session, token: str) -> Tuple[ExternalReviewer, Submission]:
    """External reviewer behind a live invite token, with the submission they were invited to"""
    reviewer = db.query(ExternalReviewer).filter(
        ExternalReviewer.invite_token == token,
        ExternalReviewer.expires_at > utcnow()
    ).first() if token else None
    if not reviewer:
        raise NotFound("Invalid or expired review link")

    sub = db.query(Submission).join(
        Assignment, Assignment.submission_id == Submission.id
    ).filter(
        Assignment.external_reviewer_id == reviewer.id
    ).first()
    if not sub:
        raise NotFound("No submission found for reviewer")
    return reviewer, sub

def external_review_page(db: Session, token: str) -> Dict[str, Any]:
    reviewer, sub = resolve_invite(db, token)
    review = db.query(Review).filter(
        Review.submission_id == sub.id,
        Review.external_reviewer_id == reviewer.id
    ).first()
    return {
        "reviewer": {"id": reviewer.id, "name": reviewer.name, "email": reviewer.email},
        "submission": {
            "id": sub.id,
            "event_id": sub.event_id,
            "event_name": sub.event.name if sub.event else None,
            "title": sub.title,
            "abstract": sub.abstract,
            "keywords": sub.keywords,
            "status": sub.status,
        },
        "review_status": review.status.value if review else None,
    }

def submit_external_review(
    db: Session,
    *,
    token: str,
    scores: Mapping[str, Any],
    comments_for_author: Optional[str] = None,
    comments_committee: Optional[str] = None,
    meta: Optional[RequestMeta] = None
) -> Dict[str, Any]:
    """Same scoring as ``submit_review``, keyed by an invite token instead of a user"""
    trace_id = audit_service.new_trace_id("EXT-REV")
    values = _review_values(scores, comments_for_author, comments_committee)
    reviewer, sub = resolve_invite(db, token)
    reviewer_id, submission_id = reviewer.id, sub.id

    key = {"submission_id": submission_id, "external_reviewer_id": reviewer_id}
    with atomic(db, trace_id=trace_id, action="review.external_submit",
                entity_type="submission", entity_id=submission_id, meta=meta):
        _upsert_review(db, key, values)

    metrics.reviews_submitted_total.inc()
    audit_service.record(
        db,
        trace_id=trace_id,
        actor_user_id=None,
        action="review.external_submit",
        entity_type="submission",
        entity_id=submission_id,
        details={"external_reviewer_id": reviewer_id, "overall": values["score_overall"]},
        meta=meta,
    )
    logger.info(f"📝 External review for submission {submission_id} by reviewer {reviewer_id}: overall {values['score_overall']} ({trace_id})")
    return {"submission_id": submission_id, "overall": values["score_overall"]}
