# File: app/services/read_models.py
"""Read-only views for chairs, reviewers and authors."""
from typing import Any, Dict, List
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.core.exceptions import Forbidden, NotFound
from app.core.permissions import EventAccess
from app.crud import event_roles
from app.crud import submission as crud_submission
from app.models.assignment import Assignment
from app.models.event_role import EventRoleType
from app.models.external_reviewer import ExternalReviewer
from app.models.review import Review, ReviewStatus
from app.models.submission import Submission
from app.models.user import User
from app.schemas.submission import SubmissionFilter

def _submission_in_event(db: Session, submission_id: int, event_id: int) -> Submission:
    sub = crud_submission.get_in_event(db, submission_id=submission_id, event_id=event_id)
    if not sub:
        raise NotFound("Submission not found in this event")
    return sub

def _newest_reviews_first(query):
    return query.order_by(Review.submitted_at.desc().nullslast(), Review.id.desc())

# --- chair -----------------------------------------------------------------

def list_chair_submissions(db: Session, access: EventAccess, *, event_id: int, filters: SubmissionFilter) -> Dict[str, Any]:
    access.require_event(event_id).require(EventRoleType.CHAIR)
    items = crud_submission.list_for_chair(db, event_id=event_id, filters=filters)
    return {"items": items, "page": filters.page, "limit": filters.limit}

def list_event_reviewers(db: Session, access: EventAccess, *, event_id: int) -> Dict[str, Any]:
    """Reviewers of the event with how many papers each is assigned overall"""
    access.require_event(event_id).require(EventRoleType.CHAIR)
    reviewers = event_roles.list_role_holders(db, event_id, EventRoleType.REVIEWER)

    counts = {}
    if reviewers:
        counts = dict(
            db.query(Assignment.reviewer_user_id, func.count(Assignment.id))
            .filter(Assignment.reviewer_user_id.in_([u.id for u in reviewers]))
            .group_by(Assignment.reviewer_user_id)
            .all()
        )

    items = [
        {"id": u.id, "email": u.email, "full_name": u.full_name, "n_assigned_total": counts.get(u.id, 0)}
        for u in reviewers
    ]
    return {"event_id": event_id, "items": items}

def list_submission_assignments(db: Session, access: EventAccess, *, event_id: int, submission_id: int) -> Dict[str, Any]:
    access.require_event(event_id).require(EventRoleType.CHAIR)
    sub = _submission_in_event(db, submission_id, event_id)

    reviews = {
        (r.reviewer_user_id, r.external_reviewer_id): r
        for r in db.query(Review).filter(Review.submission_id == sub.id).all()
    }
    assignments = (
        db.query(Assignment)
        .filter(Assignment.submission_id == sub.id)
        .order_by(Assignment.assigned_at.asc(), Assignment.id.asc())
        .all()
    )

    items = []
    for a in assignments:
        person = a.reviewer or a.external_reviewer
        review = reviews.get((a.reviewer_user_id, a.external_reviewer_id))
        items.append({
            "reviewer_id": a.reviewer_user_id,
            "external_reviewer_id": a.external_reviewer_id,
            "email": person.email if person else None,
            "name": (person.full_name if a.reviewer else person.name) if person else None,
            "assigned_at": a.assigned_at,
            "due_at": a.due_at,
            "review_status": review.status if review else None,
            "submitted_at": review.submitted_at if review else None,
        })
    return {"submission_id": sub.id, "items": items}

def chair_review_items(db: Session, submission_id: int, submitted_only: bool = False) -> List[Dict[str, Any]]:
    """Every review with reviewer identity and committee comments"""
    query = (
        db.query(Review, User, ExternalReviewer)
        .outerjoin(User, User.id == Review.reviewer_user_id)
        .outerjoin(ExternalReviewer, ExternalReviewer.id == Review.external_reviewer_id)
        .filter(Review.submission_id == submission_id)
    )
    if submitted_only:
        query = query.filter(Review.status == ReviewStatus.SUBMITTED)

    items = []
    for review, user, external in _newest_reviews_first(query).all():
        items.append({
            "id": review.id,
            "submission_id": review.submission_id,
            "reviewer_user_id": review.reviewer_user_id,
            "external_reviewer_id": review.external_reviewer_id,
            "reviewer_name": user.full_name if user else (external.name if external else None),
            "reviewer_email": user.email if user else (external.email if external else None),
            "score_technical": review.score_technical,
            "score_relevance": review.score_relevance,
            "score_innovation": review.score_innovation,
            "score_writing": review.score_writing,
            "score_overall": review.score_overall,
            "comments_for_author": review.comments_for_author,
            "comments_committee": review.comments_committee,
            "status": review.status,
            "submitted_at": review.submitted_at,
        })
    return items

def chair_reviews(db: Session, access: EventAccess, *, event_id: int, submission_id: int) -> Dict[str, Any]:
    access.require_event(event_id).require(EventRoleType.CHAIR)
    sub = _submission_in_event(db, submission_id, event_id)
    return {"items": chair_review_items(db, sub.id)}

# --- author ----------------------------------------------------------------

def author_reviews(db: Session, access: EventAccess, *, event_id: int, submission_id: int) -> Dict[str, Any]:
    """Submitted reviews of the caller's own paper, without reviewer identity or committee comments"""
    access.require_event(event_id)
    sub = crud_submission.get_for_author(
        db, submission_id=submission_id, event_id=event_id, author_user_id=access.user_id
    )
    if not sub:
        raise Forbidden("Forbidden")

    query = db.query(Review).filter(
        Review.submission_id == sub.id,
        Review.status == ReviewStatus.SUBMITTED
    )
    items = [
        {
            "id": r.id,
            "score_technical": r.score_technical,
            "score_relevance": r.score_relevance,
            "score_innovation": r.score_innovation,
            "score_writing": r.score_writing,
            "score_overall": r.score_overall,
            "comments_for_author": r.comments_for_author,
            "status": r.status,
            "submitted_at": r.submitted_at,
        }
        for r in _newest_reviews_first(query).all()
    ]
    return {"items": items}

# --- reviewer --------------------------------------------------------------

def reviewer_assignments(db: Session, access: EventAccess, *, event_id: int) -> Dict[str, Any]:
    access.require_event(event_id).require(EventRoleType.REVIEWER)
    rows = (
        db.query(Assignment, Submission, Review)
        .join(Submission, Submission.id == Assignment.submission_id)
        .outerjoin(Review, (Review.submission_id == Assignment.submission_id)
                   & (Review.reviewer_user_id == Assignment.reviewer_user_id))
        .filter(Assignment.reviewer_user_id == access.user_id, Submission.event_id == event_id)
        .order_by(Assignment.assigned_at.desc(), Assignment.id.desc())
        .all()
    )
    items = [
        {
            "submission_id": sub.id,
            "title": sub.title,
            "status": sub.status,
            "assigned_at": a.assigned_at,
            "due_at": a.due_at,
            "review_status": review.status if review else None,
            "submitted_at": review.submitted_at if review else None,
        }
        for a, sub, review in rows
    ]
    return {"items": items}

def reviewer_paper_detail(db: Session, access: EventAccess, *, event_id: int, submission_id: int) -> Dict[str, Any]:
    """Paper as an assigned reviewer sees it, with their own review so far"""
    access.require_event(event_id).require(EventRoleType.REVIEWER)
    assignment = (
        db.query(Assignment)
        .join(Submission, Submission.id == Assignment.submission_id)
        .filter(
            Assignment.submission_id == submission_id,
            Assignment.reviewer_user_id == access.user_id,
            Submission.event_id == event_id
        )
        .first()
    )
    if not assignment:
        raise Forbidden("Not assigned")

    sub = assignment.submission
    own = db.query(Review).filter(
        Review.submission_id == sub.id,
        Review.reviewer_user_id == access.user_id
    ).first()
    return {
        "id": sub.id,
        "event_id": sub.event_id,
        "title": sub.title,
        "abstract": sub.abstract,
        "keywords": sub.keywords,
        "status": sub.status.value,
        "pdf_path": sub.pdf_path,
        "existing_review": {
            "score_technical": own.score_technical,
            "score_relevance": own.score_relevance,
            "score_innovation": own.score_innovation,
            "score_writing": own.score_writing,
            "score_overall": own.score_overall,
            "comments_for_author": own.comments_for_author,
            "comments_committee": own.comments_committee,
            "status": own.status,
        } if own else None,
    }
