# File: app/services/assignment_engine.py
"""
Reviewer assignment and unassignment.

Eligibility is checked against the live role store on every call. Assignment
and review rows are written with ON CONFLICT upserts, so repeating an
``assign`` call is a no-op for reviewers who are already on the paper.
"""
import logging
import secrets
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.exceptions import Conflict, NotFound, ValidationError
from app.core.permissions import EventAccess
from app.crud import event_roles
from app.crud import submission as crud_submission
from app.db.upsert import insert_for
from app.models.assignment import Assignment
from app.models.base import utcnow
from app.models.event_role import EventRoleType
from app.models.external_reviewer import ExternalReviewer
from app.models.review import Review, ReviewStatus
from app.models.submission import Submission
from app.services import audit_service
from app.services.audit_service import RequestMeta
from app.services.submission_states import GuardData, Trigger, next_status
from app.services.unit_of_work import atomic

logger = logging.getLogger(__name__)

def _unique_ids(ids: Iterable[Any]) -> List[int]:
    """Integer ids in request order, duplicates and non-integers dropped"""
    seen: List[int] = []
    for raw in ids or []:
        if isinstance(raw, bool):
            continue
        try:
            value = int(raw)
        except (TypeError, ValueError):
            continue
        if value > 0 and value not in seen:
            seen.append(value)
    return seen

def _load_submission(db: Session, submission_id: int, event_id: int) -> Submission:
    sub = crud_submission.get_in_event(db, submission_id=submission_id, event_id=event_id)
    if not sub:
        raise NotFound("Submission not found in this event")
    return sub

def _apply_edge(db: Session, sub: Submission, trigger: Trigger, guard: GuardData) -> None:
    """Move ``sub`` along ``trigger`` only if its row still holds the status read earlier"""
    target = next_status(sub.status, trigger, guard)
    if not target:
        return
    if crud_submission.transition_status(db, sub.id, [sub.status], target):
        logger.info(f"🔄 Submission {sub.id} moved {sub.status.value} -> {target.value}")
    else:
        logger.info(f"⏭️ Submission {sub.id} left {sub.status.value} concurrently; {trigger.value} not applied")

def assign(
    db: Session,
    access: EventAccess,
    *,
    submission_id: int,
    event_id: int,
    reviewer_ids: Iterable[Any],
    due_at: Optional[datetime] = None,
    force: bool = False,
    meta: Optional[RequestMeta] = None
) -> Dict[str, Any]:
    """Assign eligible reviewers to a submission.

    Returns ``{"accepted": [...], "rejected": {"not_reviewer": [...], "author": [...]},
    "submission_status": ...}``.
    """
    access.require_event(event_id).require(EventRoleType.CHAIR)
    trace_id = audit_service.new_trace_id("CHAIR-ASN")

    reviewers = _unique_ids(reviewer_ids)
    if not reviewers:
        raise ValidationError("Invalid input", fields={"reviewers": "at least one reviewer id is required"})

    sub = _load_submission(db, submission_id, event_id)

    if not force and crud_submission.get_decision(db, sub.id):
        logger.warning(f"⚠️ Assign refused for decided submission {sub.id} ({trace_id})")
        raise Conflict("Already decided; use force to override")

    rejected_author = [rid for rid in reviewers if rid == sub.author_user_id]
    candidates = [rid for rid in reviewers if rid != sub.author_user_id]

    eligible = event_roles.filter_role_holders(db, event_id, EventRoleType.REVIEWER, candidates)
    accepted = [rid for rid in candidates if rid in eligible]
    rejected_not_reviewer = [rid for rid in candidates if rid not in eligible]

    assignments = Assignment.__table__
    with atomic(db, trace_id=trace_id, action="chair.assign", actor_user_id=access.user_id,
                entity_type="submission", entity_id=sub.id, meta=meta):
        for rid in accepted:
            now = utcnow()
            stmt = insert_for(db, Assignment).values(
                submission_id=sub.id,
                reviewer_user_id=rid,
                assigned_by_user_id=access.user_id,
                assigned_at=now,
                due_at=due_at,
                created_at=now,
                updated_at=now,
            )
            # Existing rows only get a new due date when one was supplied
            stmt = stmt.on_conflict_do_update(
                index_elements=["submission_id", "reviewer_user_id"],
                set_={"due_at": func.coalesce(stmt.excluded.due_at, assignments.c.due_at)},
            )
            db.execute(stmt)

            db.execute(
                insert_for(db, Review).values(
                    submission_id=sub.id,
                    reviewer_user_id=rid,
                    status=ReviewStatus.ASSIGNED,
                    created_at=now,
                    updated_at=now,
                ).on_conflict_do_nothing(index_elements=["submission_id", "reviewer_user_id"])
            )

        guard = GuardData(assignment_count=crud_submission.count_assignments(db, sub.id))
        _apply_edge(db, sub, Trigger.ASSIGNED, guard)

    audit_service.record(
        db,
        trace_id=trace_id,
        actor_user_id=access.user_id,
        action="chair.assign",
        entity_type="submission",
        entity_id=sub.id,
        details={
            "event_id": event_id,
            "accepted": accepted,
            "rejected_not_reviewer": rejected_not_reviewer,
            "rejected_author": rejected_author,
            "due_at": due_at,
            "forced": force,
        },
        meta=meta,
    )
    logger.info(
        f"✅ Submission {sub.id}: assigned {accepted}, not reviewer {rejected_not_reviewer}, "
        f"author {rejected_author} ({trace_id})"
    )

    db.refresh(sub)
    return {
        "accepted": accepted,
        "rejected": {"not_reviewer": rejected_not_reviewer, "author": rejected_author},
        "submission_status": sub.status,
    }

def unassign(
    db: Session,
    access: EventAccess,
    *,
    submission_id: int,
    event_id: int,
    reviewer_ids: Iterable[Any],
    force: bool = False,
    meta: Optional[RequestMeta] = None
) -> Dict[str, Any]:
    """Remove reviewers from a submission.

    Reviewers who already submitted block the call unless ``force`` is set, in
    which case their submitted reviews are deleted too.
    """
    access.require_event(event_id).require(EventRoleType.CHAIR)
    trace_id = audit_service.new_trace_id("CHAIR-UNAS")

    reviewers = _unique_ids(reviewer_ids)
    if not reviewers:
        raise ValidationError("Invalid input", fields={"reviewers": "at least one reviewer id is required"})

    sub = _load_submission(db, submission_id, event_id)

    submitted = [
        row.reviewer_user_id
        for row in db.query(Review.reviewer_user_id).filter(
            Review.submission_id == sub.id,
            Review.reviewer_user_id.in_(reviewers),
            Review.status == ReviewStatus.SUBMITTED
        ).order_by(Review.reviewer_user_id.asc()).all()
    ]
    if submitted and not force:
        logger.warning(f"⚠️ Unassign refused on submission {sub.id}: reviewers {submitted} already submitted ({trace_id})")
        raise Conflict("Some reviewers already submitted", reviewers=submitted)

    with atomic(db, trace_id=trace_id, action="chair.unassign", actor_user_id=access.user_id,
                entity_type="submission", entity_id=sub.id, meta=meta):
        db.query(Assignment).filter(
            Assignment.submission_id == sub.id,
            Assignment.reviewer_user_id.in_(reviewers)
        ).delete(synchronize_session=False)

        review_rows = db.query(Review).filter(
            Review.submission_id == sub.id,
            Review.reviewer_user_id.in_(reviewers)
        )
        if not force:
            review_rows = review_rows.filter(Review.status != ReviewStatus.SUBMITTED)
        review_rows.delete(synchronize_session=False)

        guard = GuardData(
            assignment_count=crud_submission.count_assignments(db, sub.id),
            submitted_review_count=crud_submission.count_submitted_reviews(db, sub.id),
        )
        _apply_edge(db, sub, Trigger.ALL_UNASSIGNED, guard)

    audit_service.record(
        db,
        trace_id=trace_id,
        actor_user_id=access.user_id,
        action="chair.unassign",
        entity_type="submission",
        entity_id=sub.id,
        details={"reviewers": reviewers, "forced": force, "had_submitted": bool(submitted)},
        meta=meta,
    )
    logger.info(f"✅ Submission {sub.id}: unassigned {reviewers} (forced={force}) ({trace_id})")

    db.refresh(sub)
    return {"unassigned": reviewers, "forced": force, "submission_status": sub.status}

def invite_external_reviewer(
    db: Session,
    access: EventAccess,
    *,
    submission_id: int,
    event_id: int,
    name: str,
    email: str,
    meta: Optional[RequestMeta] = None
) -> Dict[str, Any]:
    """Create a token-keyed external reviewer on one submission and return the invite link"""
    access.require_event(event_id).require(EventRoleType.CHAIR)
    trace_id = audit_service.new_trace_id("CHAIR-EXT")

    sub = _load_submission(db, submission_id, event_id)
    if crud_submission.get_decision(db, sub.id):
        raise Conflict("Already decided")

    token = secrets.token_urlsafe(32)
    expires_at = utcnow() + timedelta(days=settings.EXTERNAL_REVIEW_TTL_DAYS)

    with atomic(db, trace_id=trace_id, action="chair.external_invite", actor_user_id=access.user_id,
                entity_type="submission", entity_id=sub.id, meta=meta):
        reviewer = ExternalReviewer(
            event_id=event_id,
            name=name,
            email=email,
            invite_token=token,
            expires_at=expires_at,
            invited_by_user_id=access.user_id,
        )
        db.add(reviewer)
        db.flush()

        db.add(Assignment(
            submission_id=sub.id,
            external_reviewer_id=reviewer.id,
            assigned_by_user_id=access.user_id,
        ))
        db.add(Review(
            submission_id=sub.id,
            external_reviewer_id=reviewer.id,
            status=ReviewStatus.ASSIGNED,
        ))
        db.flush()

        guard = GuardData(assignment_count=crud_submission.count_assignments(db, sub.id))
        _apply_edge(db, sub, Trigger.ASSIGNED, guard)

    audit_service.record(
        db,
        trace_id=trace_id,
        actor_user_id=access.user_id,
        action="chair.external_invite",
        entity_type="submission",
        entity_id=sub.id,
        details={"external_reviewer_id": reviewer.id, "email": email, "expires_at": expires_at},
        meta=meta,
    )
    logger.info(f"📨 External reviewer {reviewer.id} invited to submission {sub.id} ({trace_id})")

    db.refresh(sub)
    return {
        "external_reviewer_id": reviewer.id,
        "submission_id": sub.id,
        "invite_link": f"{settings.FRONTEND_URL.rstrip('/')}/external-review/{token}",
        "expires_at": expires_at,
        "submission_status": sub.status,
    }
