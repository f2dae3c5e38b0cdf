from datetime import datetime, timedelta

import pytest

from app.core.exceptions import Conflict, Forbidden, NotFound, ValidationError
from app.core.permissions import resolve_effective_roles
from app.crud import submission as crud_submission
from app.db.database import SessionLocal
from app.models import (
    Assignment,
    AuditLog,
    Decision,
    DecisionType,
    EventRoleType,
    ExternalReviewer,
    Review,
    ReviewStatus,
    Submission,
    SubmissionStatus,
)
from app.services import assignment_engine, decision_engine, review_engine

SCORES = {"score_technical": 4, "score_relevance": 4, "score_innovation": 3, "score_writing": 5}


def test_assign_moves_submission_to_under_review(db, access_for, chair, reviewer, submission, event):
    result = assignment_engine.assign(
        db, access_for(chair, event), submission_id=submission.id, event_id=event.id, reviewer_ids=[reviewer.id]
    )
    assert result["accepted"] == [reviewer.id]
    assert result["rejected"] == {"not_reviewer": [], "author": []}
    assert result["submission_status"] is SubmissionStatus.UNDER_REVIEW

    review = db.query(Review).filter(Review.submission_id == submission.id).one()
    assert review.reviewer_user_id == reviewer.id
    assert review.status is ReviewStatus.ASSIGNED

    audit = db.query(AuditLog).filter(AuditLog.action == "chair.assign").one()
    assert audit.trace_id.startswith("CHAIR-ASN-")
    assert audit.details["accepted"] == [reviewer.id]


def test_assign_splits_ineligible_reviewers(db, access_for, chair, reviewer, author, user_factory, submission, event):
    outsider = user_factory("Otto Outsider")
    result = assignment_engine.assign(
        db,
        access_for(chair, event),
        submission_id=submission.id,
        event_id=event.id,
        reviewer_ids=[reviewer.id, outsider.id, author.id, reviewer.id, "junk"],
    )
    assert result["accepted"] == [reviewer.id]
    assert result["rejected"] == {"not_reviewer": [outsider.id], "author": [author.id]}
    assert db.query(Assignment).count() == 1


def test_author_who_is_also_reviewer_cannot_review_own_paper(db, access_for, chair, author, grant, submission, event):
    grant(event, author, EventRoleType.REVIEWER)
    result = assignment_engine.assign(
        db, access_for(chair, event), submission_id=submission.id, event_id=event.id, reviewer_ids=[author.id]
    )
    assert result["accepted"] == []
    assert result["rejected"]["author"] == [author.id]
    assert result["submission_status"] is SubmissionStatus.SUBMITTED


def test_repeated_assign_is_idempotent_and_keeps_due_date(db, access_for, chair, reviewer, submission, event):
    access = access_for(chair, event)
    due = datetime(2026, 12, 1, 12, 0, 0)
    assignment_engine.assign(
        db, access, submission_id=submission.id, event_id=event.id, reviewer_ids=[reviewer.id], due_at=due
    )
    assignment_engine.assign(db, access, submission_id=submission.id, event_id=event.id, reviewer_ids=[reviewer.id])

    rows = db.query(Assignment).filter(Assignment.submission_id == submission.id).all()
    assert len(rows) == 1
    assert rows[0].due_at.replace(tzinfo=None) == due
    assert db.query(Review).count() == 1

    later = due + timedelta(days=7)
    assignment_engine.assign(
        db, access, submission_id=submission.id, event_id=event.id, reviewer_ids=[reviewer.id], due_at=later
    )
    db.expire_all()
    assert db.query(Assignment).one().due_at.replace(tzinfo=None) == later


def test_assign_keeps_submitted_review(db, access_for, chair, reviewer, submission, event):
    access = access_for(chair, event)
    assignment_engine.assign(db, access, submission_id=submission.id, event_id=event.id, reviewer_ids=[reviewer.id])
    review_engine.submit_review(
        db, access_for(reviewer, event), submission_id=submission.id, event_id=event.id, scores=SCORES
    )
    assignment_engine.assign(db, access, submission_id=submission.id, event_id=event.id, reviewer_ids=[reviewer.id])

    db.expire_all()
    assert db.query(Review).one().status is ReviewStatus.SUBMITTED


def test_assign_requires_chair(db, access_for, reviewer, submission, event):
    with pytest.raises(Forbidden):
        assignment_engine.assign(
            db, access_for(reviewer, event), submission_id=submission.id, event_id=event.id, reviewer_ids=[reviewer.id]
        )


def test_assign_empty_list_is_invalid(db, access_for, chair, submission, event):
    with pytest.raises(ValidationError):
        assignment_engine.assign(db, access_for(chair, event), submission_id=submission.id, event_id=event.id, reviewer_ids=[])


def test_assign_submission_from_other_event_is_not_found(
    db, access_for, chair, reviewer, event, event_factory, user_factory, submission_factory
):
    other = event_factory("Elsewhere")
    foreign = submission_factory(other, user_factory("Foreign Author"))
    with pytest.raises(NotFound):
        assignment_engine.assign(
            db, access_for(chair, event), submission_id=foreign.id, event_id=event.id, reviewer_ids=[reviewer.id]
        )


def test_assign_after_decision_needs_force(db, access_for, chair, reviewer, submission, event):
    db.add(Decision(submission_id=submission.id, event_id=event.id, decision=DecisionType.REJECT, decider_user_id=chair.id))
    db.commit()
    access = access_for(chair, event)

    with pytest.raises(Conflict) as excinfo:
        assignment_engine.assign(db, access, submission_id=submission.id, event_id=event.id, reviewer_ids=[reviewer.id])
    assert excinfo.value.message == "Already decided; use force to override"

    result = assignment_engine.assign(
        db, access, submission_id=submission.id, event_id=event.id, reviewer_ids=[reviewer.id], force=True
    )
    assert result["accepted"] == [reviewer.id]


def test_unassign_last_reviewer_reverts_status(db, access_for, chair, reviewer, submission, event):
    access = access_for(chair, event)
    assignment_engine.assign(db, access, submission_id=submission.id, event_id=event.id, reviewer_ids=[reviewer.id])

    result = assignment_engine.unassign(
        db, access, submission_id=submission.id, event_id=event.id, reviewer_ids=[reviewer.id]
    )
    assert result == {"unassigned": [reviewer.id], "forced": False, "submission_status": SubmissionStatus.SUBMITTED}
    assert db.query(Assignment).count() == 0
    assert db.query(Review).count() == 0


def test_unassign_one_of_two_keeps_under_review(db, access_for, chair, reviewer, second_reviewer, submission, event):
    access = access_for(chair, event)
    assignment_engine.assign(
        db, access, submission_id=submission.id, event_id=event.id, reviewer_ids=[reviewer.id, second_reviewer.id]
    )
    result = assignment_engine.unassign(
        db, access, submission_id=submission.id, event_id=event.id, reviewer_ids=[reviewer.id]
    )
    assert result["submission_status"] is SubmissionStatus.UNDER_REVIEW


def test_unassign_submitted_reviewer_requires_force(db, access_for, chair, reviewer, submission, event):
    access = access_for(chair, event)
    assignment_engine.assign(db, access, submission_id=submission.id, event_id=event.id, reviewer_ids=[reviewer.id])
    review_engine.submit_review(
        db, access_for(reviewer, event), submission_id=submission.id, event_id=event.id, scores=SCORES
    )

    with pytest.raises(Conflict) as excinfo:
        assignment_engine.unassign(db, access, submission_id=submission.id, event_id=event.id, reviewer_ids=[reviewer.id])
    assert excinfo.value.context["reviewers"] == [reviewer.id]
    db.expire_all()
    assert db.query(Assignment).count() == 1
    kept = db.query(Review).one()
    assert kept.status is ReviewStatus.SUBMITTED
    assert (kept.score_technical, kept.score_relevance, kept.score_innovation, kept.score_writing) == (4, 4, 3, 5)
    assert kept.score_overall == 4.0
    assert db.get(Submission, submission.id).status is SubmissionStatus.UNDER_REVIEW

    result = assignment_engine.unassign(
        db, access, submission_id=submission.id, event_id=event.id, reviewer_ids=[reviewer.id], force=True
    )
    assert result["forced"] is True
    assert result["submission_status"] is SubmissionStatus.SUBMITTED
    assert db.query(Review).count() == 0


def test_invite_external_reviewer(db, access_for, chair, submission, event, monkeypatch):
    from app.core.config import settings

    monkeypatch.setattr(settings, "FRONTEND_URL", "https://review.example.org/")
    result = assignment_engine.invite_external_reviewer(
        db, access_for(chair, event), submission_id=submission.id, event_id=event.id,
        name="Eve External", email="eve@example.org",
    )
    external = db.query(ExternalReviewer).one()
    assert result["invite_link"] == f"https://review.example.org/external-review/{external.invite_token}"
    assert result["submission_status"] is SubmissionStatus.UNDER_REVIEW

    review = db.query(Review).filter(Review.external_reviewer_id == external.id).one()
    assert review.reviewer_user_id is None
    assert review.status is ReviewStatus.ASSIGNED


def test_invite_refused_after_decision(db, access_for, chair, submission, event):
    db.add(Decision(submission_id=submission.id, event_id=event.id, decision=DecisionType.ACCEPT, decider_user_id=chair.id))
    db.commit()
    with pytest.raises(Conflict):
        assignment_engine.invite_external_reviewer(
            db, access_for(chair, event), submission_id=submission.id, event_id=event.id,
            name="Late", email="late@example.org",
        )


def _decide_concurrently_after(monkeypatch, method, admin, event, submission_id):
    """Force-accept from a second session right after the first ``method`` call returns."""
    real = getattr(crud_submission, method)
    state = {"done": False}

    def _interleaved(*args, **kwargs):
        result = real(*args, **kwargs)
        if not state["done"]:
            state["done"] = True
            other = SessionLocal()
            try:
                decision_engine.decide(
                    other, resolve_effective_roles(other, admin.id, event.id),
                    submission_id=submission_id, event_id=event.id, decision="accept", force=True,
                )
            finally:
                other.close()
        return result

    monkeypatch.setattr(crud_submission, method, _interleaved)


def test_assign_does_not_undo_concurrent_decision(db, access_for, admin, chair, reviewer, submission, event, monkeypatch):
    _decide_concurrently_after(monkeypatch, "get_decision", admin, event, submission.id)

    result = assignment_engine.assign(
        db, access_for(chair, event), submission_id=submission.id, event_id=event.id, reviewer_ids=[reviewer.id]
    )

    assert result["submission_status"] is SubmissionStatus.FINAL_REQUIRED
    db.expire_all()
    assert db.get(Submission, submission.id).status is SubmissionStatus.FINAL_REQUIRED
    assert db.query(Decision).one().decision is DecisionType.ACCEPT


def test_unassign_does_not_undo_concurrent_decision(db, access_for, admin, chair, reviewer, submission, event, monkeypatch):
    access = access_for(chair, event)
    assignment_engine.assign(db, access, submission_id=submission.id, event_id=event.id, reviewer_ids=[reviewer.id])
    _decide_concurrently_after(monkeypatch, "get_in_event", admin, event, submission.id)

    result = assignment_engine.unassign(
        db, access, submission_id=submission.id, event_id=event.id, reviewer_ids=[reviewer.id]
    )

    assert result["submission_status"] is SubmissionStatus.FINAL_REQUIRED
    db.expire_all()
    assert db.get(Submission, submission.id).status is SubmissionStatus.FINAL_REQUIRED
    assert db.query(Assignment).count() == 0
    assert db.query(Decision).one().decision is DecisionType.ACCEPT
