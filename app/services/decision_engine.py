# File: app/services/decision_engine.py
"""
Decision queue and the single-decision write path.

A submission gets at most one decision, ever. Concurrent ``decide`` calls are
settled by the unique ``decisions.submission_id`` constraint: the insert uses
ON CONFLICT DO NOTHING and a zero rowcount means another decider won.
"""
import logging
from typing import Any, Dict, Optional, Union
from sqlalchemy.orm import Session
from app.core import metrics
from app.core.config import settings
from app.core.exceptions import Conflict, Forbidden, NotFound, ValidationError
from app.core.permissions import EventAccess
from app.core.validators import clean_optional_text
from app.crud import submission as crud_submission
from app.db.upsert import insert_for
from app.models.base import utcnow
from app.models.decision import Decision, DecisionType
from app.models.event_role import EventRoleType
from app.services import audit_service, read_models
from app.services.audit_service import RequestMeta
from app.services.submission_states import (
    GuardData, Trigger, require_transition, sources, transition_conflict
)
from app.services.unit_of_work import atomic

logger = logging.getLogger(__name__)

REASON_MAX_LENGTH = 2000

TRIGGERS = {
    DecisionType.ACCEPT: Trigger.ACCEPTED,
    DecisionType.REJECT: Trigger.REJECTED,
}

def resolve_min_reviews(min_reviews: Optional[int]) -> int:
    if min_reviews is None:
        return settings.DECISION_MIN_REVIEWS
    if isinstance(min_reviews, bool) or not isinstance(min_reviews, int) or min_reviews < 1:
        raise ValidationError("Invalid min_reviews", fields={"min_reviews": "must be an integer >= 1"})
    return min_reviews

def _decision_type(decision: Union[DecisionType, str]) -> DecisionType:
    if isinstance(decision, DecisionType):
        return decision
    try:
        return DecisionType(str(decision or "").strip().lower())
    except ValueError:
        raise ValidationError("Invalid input", fields={"decision": "must be 'accept' or 'reject'"})

def decision_payload(decision: Optional[Decision]) -> Optional[Dict[str, Any]]:
    if decision is None:
        return None
    return {
        "submission_id": decision.submission_id,
        "decision": decision.decision,
        "reason": decision.reason,
        "decider_user_id": decision.decider_user_id,
        "decided_at": decision.decided_at,
    }

def list_queue(db: Session, access: EventAccess, *, event_id: int, min_reviews: Optional[int] = None) -> Dict[str, Any]:
    """Undecided submissions that reached quorum, oldest first"""
    access.require_event(event_id).require(EventRoleType.CHAIR)
    minimum = resolve_min_reviews(min_reviews)
    items = crud_submission.decision_queue(db, event_id=event_id, min_reviews=minimum)
    return {"event_id": event_id, "min_reviews": minimum, "items": items}

def decide(
    db: Session,
    access: EventAccess,
    *,
    submission_id: int,
    event_id: int,
    decision: Union[DecisionType, str],
    reason: Optional[str] = None,
    min_reviews: Optional[int] = None,
    force: bool = False,
    meta: Optional[RequestMeta] = None
) -> Dict[str, Any]:
    access.require_event(event_id).require(EventRoleType.CHAIR)
    trace_id = audit_service.new_trace_id("CHAIR-DEC")

    verdict = _decision_type(decision)
    minimum = resolve_min_reviews(min_reviews)
    clean_reason = clean_optional_text(reason, REASON_MAX_LENGTH)
    if force and not access.is_admin:
        raise Forbidden("Only an administrator can force a decision")

    sub = crud_submission.get_in_event(db, submission_id=submission_id, event_id=event_id)
    if not sub:
        raise NotFound("Submission not found in this event")

    have = crud_submission.count_submitted_reviews(db, sub.id)
    guard = GuardData(submitted_review_count=have, quorum_met=have >= minimum, forced=force)
    if not guard.quorum_met and not force:
        logger.warning(f"⚠️ Decision on submission {sub.id} refused: {have}/{minimum} reviews ({trace_id})")
        raise Conflict("Insufficient submitted reviews", have=have, want=minimum)

    with atomic(db, trace_id=trace_id, action="chair.decision", actor_user_id=access.user_id,
                entity_type="submission", entity_id=sub.id, meta=meta):
        now = utcnow()
        result = db.execute(
            insert_for(db, Decision).values(
                submission_id=sub.id,
                event_id=event_id,
                decision=verdict,
                reason=clean_reason,
                decider_user_id=access.user_id,
                decided_at=now,
                created_at=now,
                updated_at=now,
            ).on_conflict_do_nothing(index_elements=["submission_id"])
        )
        if result.rowcount == 0:
            db.rollback()
            existing = decision_payload(crud_submission.get_decision(db, sub.id))
            logger.warning(f"⚠️ Submission {sub.id} already decided ({trace_id})")
            raise Conflict("Already decided", decision=existing)

        trigger = TRIGGERS[verdict]
        target = require_transition(sub.status, trigger, guard)
        # Accept and reject lead to one target from every source status
        if not crud_submission.transition_status(db, sub.id, sources(trigger), target):
            db.refresh(sub)
            raise transition_conflict(sub.status, trigger)

    metrics.decisions_made_total.inc(verdict.value)
    audit_service.record(
        db,
        trace_id=trace_id,
        actor_user_id=access.user_id,
        action="chair.decision",
        entity_type="submission",
        entity_id=sub.id,
        details={
            "event_id": event_id,
            "decision": verdict,
            "new_status": target,
            "forced": force,
            "reason_len": len(clean_reason or ""),
        },
        meta=meta,
    )
    logger.info(f"⚖️ Submission {sub.id} decided {verdict.value} -> {target.value} ({trace_id})")

    return {
        "decision": decision_payload(crud_submission.get_decision(db, sub.id)),
        "submission_status": target,
    }

def decision_detail(db: Session, access: EventAccess, *, submission_id: int, event_id: int) -> Dict[str, Any]:
    """Submission with its submitted reviews, their average and the decision if any"""
    access.require_event(event_id).require(EventRoleType.CHAIR)
    sub = crud_submission.get_in_event(db, submission_id=submission_id, event_id=event_id)
    if not sub:
        raise NotFound("Submission not found in this event")

    reviews = read_models.chair_review_items(db, sub.id, submitted_only=True)
    scores = [r["score_overall"] for r in reviews if r["score_overall"] is not None]
    return {
        "submission_id": sub.id,
        "title": sub.title,
        "abstract": sub.abstract,
        "keywords": sub.keywords,
        "status": sub.status,
        "created_at": sub.created_at,
        "reviews": reviews,
        "n_reviews": len(reviews),
        "avg_score": round(sum(scores) / len(scores), 2) if scores else 0.0,
        "decision": decision_payload(crud_submission.get_decision(db, sub.id)),
    }
