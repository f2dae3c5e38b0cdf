import pytest

from app.core import metrics
from app.core.exceptions import Conflict, Forbidden, NotFound, ValidationError
from app.core.permissions import resolve_effective_roles
from app.db.database import SessionLocal
from app.models import AuditLog, Decision, DecisionType, EventRoleType, Submission, SubmissionStatus
from app.services import assignment_engine, decision_engine, review_engine

SCORES = {"score_technical": 4, "score_relevance": 4, "score_innovation": 4, "score_writing": 5}


@pytest.fixture
def reviewed(db, access_for, chair, reviewer, submission, event):
    assignment_engine.assign(
        db, access_for(chair, event), submission_id=submission.id, event_id=event.id, reviewer_ids=[reviewer.id]
    )
    review_engine.submit_review(
        db, access_for(reviewer, event), submission_id=submission.id, event_id=event.id, scores=SCORES
    )
    return submission


def test_accept_requires_final_upload(db, access_for, chair, reviewed, event):
    before = metrics.decisions_made_total.value("accept")
    result = decision_engine.decide(
        db, access_for(chair, event), submission_id=reviewed.id, event_id=event.id,
        decision="accept", reason="Strong paper",
    )
    assert result["submission_status"] is SubmissionStatus.FINAL_REQUIRED
    assert result["decision"]["decision"] is DecisionType.ACCEPT
    assert result["decision"]["reason"] == "Strong paper"
    assert metrics.decisions_made_total.value("accept") == before + 1

    audit = db.query(AuditLog).filter(AuditLog.action == "chair.decision").one()
    assert audit.trace_id.startswith("CHAIR-DEC-")
    assert audit.details["new_status"] == "final_required"


def test_reject_ends_in_decision_made(db, access_for, chair, reviewed, event):
    result = decision_engine.decide(
        db, access_for(chair, event), submission_id=reviewed.id, event_id=event.id, decision=DecisionType.REJECT
    )
    assert result["submission_status"] is SubmissionStatus.DECISION_MADE


def test_quorum_is_enforced(db, access_for, chair, reviewed, event):
    with pytest.raises(Conflict) as excinfo:
        decision_engine.decide(
            db, access_for(chair, event), submission_id=reviewed.id, event_id=event.id,
            decision="accept", min_reviews=2,
        )
    assert excinfo.value.message == "Insufficient submitted reviews"
    assert excinfo.value.context == {"have": 1, "want": 2}
    assert db.query(Decision).count() == 0


def test_only_admin_may_force(db, access_for, chair, admin, submission, event):
    with pytest.raises(Forbidden):
        decision_engine.decide(
            db, access_for(chair, event), submission_id=submission.id, event_id=event.id,
            decision="reject", force=True,
        )

    result = decision_engine.decide(
        db, access_for(admin, event), submission_id=submission.id, event_id=event.id,
        decision="reject", force=True,
    )
    assert result["submission_status"] is SubmissionStatus.DECISION_MADE


def test_second_decision_conflicts_with_existing(db, access_for, chair, reviewed, event):
    access = access_for(chair, event)
    decision_engine.decide(db, access, submission_id=reviewed.id, event_id=event.id, decision="accept")

    with pytest.raises(Conflict) as excinfo:
        decision_engine.decide(db, access, submission_id=reviewed.id, event_id=event.id, decision="reject")
    assert excinfo.value.message == "Already decided"
    assert excinfo.value.context["decision"]["decision"] is DecisionType.ACCEPT

    db.expire_all()
    assert db.query(Decision).count() == 1
    assert db.get(Submission, reviewed.id).status is SubmissionStatus.FINAL_REQUIRED


def test_concurrent_deciders_produce_one_decision(db, chair, user_factory, grant, reviewed, event):
    other_chair = user_factory("Cleo Chair")
    grant(event, other_chair, EventRoleType.CHAIR)

    first, second = SessionLocal(), SessionLocal()
    try:
        first_access = resolve_effective_roles(first, chair.id, event.id)
        second_access = resolve_effective_roles(second, other_chair.id, event.id)
        # Both sessions have seen the undecided submission before either writes
        assert first.get(Submission, reviewed.id).status is SubmissionStatus.UNDER_REVIEW
        assert second.get(Submission, reviewed.id).status is SubmissionStatus.UNDER_REVIEW

        winner = decision_engine.decide(
            first, first_access, submission_id=reviewed.id, event_id=event.id, decision="reject"
        )
        with pytest.raises(Conflict) as excinfo:
            decision_engine.decide(
                second, second_access, submission_id=reviewed.id, event_id=event.id, decision="accept"
            )
    finally:
        first.close()
        second.close()

    assert winner["submission_status"] is SubmissionStatus.DECISION_MADE
    assert excinfo.value.context["decision"]["decider_user_id"] == chair.id
    db.expire_all()
    assert db.query(Decision).one().decision is DecisionType.REJECT


def test_invalid_verdict_and_min_reviews(db, access_for, chair, reviewed, event):
    access = access_for(chair, event)
    with pytest.raises(ValidationError):
        decision_engine.decide(db, access, submission_id=reviewed.id, event_id=event.id, decision="maybe")
    with pytest.raises(ValidationError):
        decision_engine.decide(db, access, submission_id=reviewed.id, event_id=event.id, decision="accept", min_reviews=0)


def test_unknown_submission_is_not_found(db, access_for, chair, event):
    with pytest.raises(NotFound):
        decision_engine.decide(db, access_for(chair, event), submission_id=424242, event_id=event.id, decision="accept")


def test_queue_lists_undecided_with_quorum(db, access_for, chair, author, reviewed, submission_factory, event):
    waiting = submission_factory(event, author, title="Not reviewed yet")
    access = access_for(chair, event)

    queue = decision_engine.list_queue(db, access, event_id=event.id)
    assert queue["min_reviews"] == 1
    assert [item["submission_id"] for item in queue["items"]] == [reviewed.id]
    assert queue["items"][0]["avg_score"] == 4.25
    assert waiting.id not in [item["submission_id"] for item in queue["items"]]

    decision_engine.decide(db, access, submission_id=reviewed.id, event_id=event.id, decision="accept")
    assert decision_engine.list_queue(db, access, event_id=event.id)["items"] == []


def test_queue_respects_min_reviews(db, access_for, chair, reviewed, event):
    queue = decision_engine.list_queue(db, access_for(chair, event), event_id=event.id, min_reviews=3)
    assert queue["items"] == []


def test_decision_detail(db, access_for, chair, reviewed, event):
    access = access_for(chair, event)
    detail = decision_engine.decision_detail(db, access, submission_id=reviewed.id, event_id=event.id)
    assert detail["n_reviews"] == 1
    assert detail["avg_score"] == 4.25
    assert detail["decision"] is None

    decision_engine.decide(db, access, submission_id=reviewed.id, event_id=event.id, decision="reject")
    detail = decision_engine.decision_detail(db, access, submission_id=reviewed.id, event_id=event.id)
    assert detail["decision"]["decision"] is DecisionType.REJECT
