# File: app/crud/submission.py
from typing import Any, Dict, Iterable, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase
from app.models.assignment import Assignment
from app.models.decision import Decision
from app.models.review import Review, ReviewStatus
from app.models.submission import Submission, SubmissionStatus
from app.schemas.submission import SubmissionCreate, SubmissionFilter

def escape_like(value: str) -> str:
    """Make % and _ match literally in a LIKE pattern"""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")

class CRUDSubmission(CRUDBase[Submission, SubmissionCreate, SubmissionCreate]):

    def get_in_event(self, db: Session, *, submission_id: int, event_id: int) -> Optional[Submission]:
        """Submission by id, only if it belongs to the event"""
        return db.query(Submission).filter(
            Submission.id == submission_id,
            Submission.event_id == event_id
        ).first()

    def create_for_author(
        self,
        db: Session,
        *,
        event_id: int,
        author_user_id: int,
        title: str,
        abstract: Optional[str],
        keywords: Optional[str],
        authors: List[Dict[str, Any]],
        pdf_path: str,
        membership_email: Optional[str] = None
    ) -> Submission:
        db_obj = Submission(
            event_id=event_id,
            author_user_id=author_user_id,
            title=title,
            abstract=abstract,
            keywords=keywords,
            authors=authors,
            pdf_path=pdf_path,
            membership_email=membership_email,
            status=SubmissionStatus.SUBMITTED,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get_for_author(self, db: Session, *, submission_id: int, event_id: int, author_user_id: int) -> Optional[Submission]:
        return db.query(Submission).filter(
            Submission.id == submission_id,
            Submission.event_id == event_id,
            Submission.author_user_id == author_user_id
        ).first()

    def list_for_author(self, db: Session, *, event_id: int, author_user_id: int) -> List[Submission]:
        return (
            db.query(Submission)
            .filter(Submission.event_id == event_id, Submission.author_user_id == author_user_id)
            .order_by(Submission.created_at.desc(), Submission.id.desc())
            .all()
        )

    def count_assignments(self, db: Session, submission_id: int) -> int:
        return db.query(func.count(Assignment.id)).filter(
            Assignment.submission_id == submission_id
        ).scalar() or 0

    def count_submitted_reviews(self, db: Session, submission_id: int) -> int:
        return db.query(func.count(Review.id)).filter(
            Review.submission_id == submission_id,
            Review.status == ReviewStatus.SUBMITTED
        ).scalar() or 0

    def get_decision(self, db: Session, submission_id: int) -> Optional[Decision]:
        return db.query(Decision).filter(Decision.submission_id == submission_id).first()

    def transition_status(
        self,
        db: Session,
        submission_id: int,
        from_statuses: Iterable[SubmissionStatus],
        new_status: SubmissionStatus,
        **values: Any
    ) -> bool:
        """Conditional status write; False when the row has left ``from_statuses`` since it was read.

        The caller owns the transaction.
        """
        changed = db.query(Submission).filter(
            Submission.id == submission_id,
            Submission.status.in_(list(from_statuses))
        ).update({"status": new_status, **values}, synchronize_session=False)
        return changed == 1

    def _aggregates(self, db: Session):
        review_agg = (
            db.query(
                Review.submission_id.label("submission_id"),
                func.count(Review.id).label("n_reviews"),
                func.avg(Review.score_overall).label("avg_score"),
            )
            .filter(Review.status == ReviewStatus.SUBMITTED)
            .group_by(Review.submission_id)
            .subquery()
        )
        assignment_agg = (
            db.query(
                Assignment.submission_id.label("submission_id"),
                func.count(Assignment.id).label("n_assigned"),
            )
            .group_by(Assignment.submission_id)
            .subquery()
        )
        return review_agg, assignment_agg

    def list_for_chair(self, db: Session, *, event_id: int, filters: SubmissionFilter) -> List[Dict[str, Any]]:
        """Submissions in an event with assignment/review aggregates, newest first"""
        review_agg, assignment_agg = self._aggregates(db)
        query = (
            db.query(
                Submission,
                func.coalesce(assignment_agg.c.n_assigned, 0).label("n_assigned"),
                func.coalesce(review_agg.c.n_reviews, 0).label("n_reviews"),
                func.coalesce(review_agg.c.avg_score, 0.0).label("avg_score"),
                Decision.decision.label("decision"),
            )
            .outerjoin(assignment_agg, assignment_agg.c.submission_id == Submission.id)
            .outerjoin(review_agg, review_agg.c.submission_id == Submission.id)
            .outerjoin(Decision, Decision.submission_id == Submission.id)
            .filter(Submission.event_id == event_id)
        )
        if filters.status:
            query = query.filter(Submission.status == filters.status)
        if filters.q:
            pattern = escape_like(filters.q.lower())
            query = query.filter(func.lower(Submission.title).like(f"%{pattern}%", escape="\\"))

        rows = (
            query.order_by(Submission.created_at.desc(), Submission.id.desc())
            .offset((filters.page - 1) * filters.limit)
            .limit(filters.limit)
            .all()
        )
        return [
            {
                "id": sub.id,
                "title": sub.title,
                "status": sub.status,
                "created_at": sub.created_at,
                "decision": decision.value if decision else None,
                "n_assigned": int(n_assigned),
                "n_reviews": int(n_reviews),
                "avg_score": float(avg_score or 0.0),
            }
            for sub, n_assigned, n_reviews, avg_score, decision in rows
        ]

    def decision_queue(self, db: Session, *, event_id: int, min_reviews: int) -> List[Dict[str, Any]]:
        """Undecided submissions with at least ``min_reviews`` submitted reviews, oldest first"""
        review_agg, _ = self._aggregates(db)
        n_reviews = func.coalesce(review_agg.c.n_reviews, 0)
        rows = (
            db.query(
                Submission,
                n_reviews.label("n_reviews"),
                func.coalesce(review_agg.c.avg_score, 0.0).label("avg_score"),
            )
            .outerjoin(review_agg, review_agg.c.submission_id == Submission.id)
            .outerjoin(Decision, Decision.submission_id == Submission.id)
            .filter(
                Submission.event_id == event_id,
                Decision.id.is_(None),
                Submission.status.in_([SubmissionStatus.SUBMITTED, SubmissionStatus.UNDER_REVIEW]),
                n_reviews >= min_reviews
            )
            .order_by(Submission.created_at.asc(), Submission.id.asc())
            .all()
        )
        return [
            {
                "submission_id": sub.id,
                "title": sub.title,
                "status": sub.status,
                "n_reviews": int(count),
                "avg_score": float(avg or 0.0),
                "created_at": sub.created_at,
            }
            for sub, count, avg in rows
        ]

submission = CRUDSubmission(Submission)
