import pytest

from app.core.exceptions import Conflict
from app.models import SubmissionStatus
from app.services.submission_states import (
    TRANSITIONS,
    GuardData,
    Trigger,
    has_edge,
    next_status,
    require_transition,
    sources,
)

S = SubmissionStatus


def test_first_assignment_moves_to_under_review():
    assert next_status(S.SUBMITTED, Trigger.ASSIGNED, GuardData(assignment_count=1)) is S.UNDER_REVIEW


def test_assignment_without_rows_does_not_move():
    assert next_status(S.SUBMITTED, Trigger.ASSIGNED, GuardData(assignment_count=0)) is None


def test_further_assignments_keep_status():
    # under_review has no ASSIGNED edge, so the engine leaves it alone
    assert next_status(S.UNDER_REVIEW, Trigger.ASSIGNED, GuardData(assignment_count=3)) is None


def test_last_unassign_reverts_when_nothing_submitted():
    guard = GuardData(assignment_count=0, submitted_review_count=0)
    assert next_status(S.UNDER_REVIEW, Trigger.ALL_UNASSIGNED, guard) is S.SUBMITTED


@pytest.mark.parametrize(
    "guard",
    [
        GuardData(assignment_count=1, submitted_review_count=0),
        GuardData(assignment_count=0, submitted_review_count=1),
    ],
)
def test_unassign_keeps_under_review_while_work_remains(guard):
    assert next_status(S.UNDER_REVIEW, Trigger.ALL_UNASSIGNED, guard) is None


@pytest.mark.parametrize("start", [S.SUBMITTED, S.UNDER_REVIEW])
def test_accept_and_reject_targets(start):
    guard = GuardData(submitted_review_count=2, quorum_met=True)
    assert next_status(start, Trigger.ACCEPTED, guard) is S.FINAL_REQUIRED
    assert next_status(start, Trigger.REJECTED, guard) is S.DECISION_MADE


def test_decision_needs_quorum_or_force():
    assert next_status(S.UNDER_REVIEW, Trigger.ACCEPTED, GuardData()) is None
    assert next_status(S.UNDER_REVIEW, Trigger.ACCEPTED, GuardData(forced=True)) is S.FINAL_REQUIRED


@pytest.mark.parametrize("start", [S.DECISION_MADE, S.FINAL_REQUIRED, S.FINAL_SUBMITTED])
def test_decided_submissions_cannot_be_decided_again(start):
    guard = GuardData(quorum_met=True, forced=True)
    assert next_status(start, Trigger.ACCEPTED, guard) is None
    assert next_status(start, Trigger.REJECTED, guard) is None


def test_final_upload_by_author_or_admin():
    assert next_status(S.FINAL_REQUIRED, Trigger.FINAL_UPLOADED, GuardData(uploader_is_author=True)) is S.FINAL_SUBMITTED
    assert next_status(S.FINAL_REQUIRED, Trigger.FINAL_UPLOADED, GuardData(uploader_is_admin=True)) is S.FINAL_SUBMITTED
    assert next_status(S.FINAL_REQUIRED, Trigger.FINAL_UPLOADED, GuardData()) is None


def test_final_submitted_is_terminal():
    assert not any(current is S.FINAL_SUBMITTED for current, _ in TRANSITIONS)
    for trigger in Trigger:
        assert not has_edge(S.FINAL_SUBMITTED, trigger)


def test_only_backward_edge_is_unassign():
    order = [S.SUBMITTED, S.UNDER_REVIEW, S.DECISION_MADE, S.FINAL_REQUIRED, S.FINAL_SUBMITTED]
    backward = [
        (current, trigger)
        for (current, trigger), target in TRANSITIONS.items()
        if order.index(target) < order.index(current)
    ]
    assert backward == [(S.UNDER_REVIEW, Trigger.ALL_UNASSIGNED)]


def test_require_transition_raises_conflict_with_status():
    with pytest.raises(Conflict) as excinfo:
        require_transition(S.SUBMITTED, Trigger.FINAL_UPLOADED, GuardData(uploader_is_author=True))
    assert excinfo.value.status_code == 409
    assert excinfo.value.context["status"] == "submitted"
    assert "final_uploaded not allowed" in excinfo.value.message


def test_sources_lists_every_status_with_the_edge():
    assert set(sources(Trigger.ACCEPTED)) == {S.SUBMITTED, S.UNDER_REVIEW}
    assert sources(Trigger.FINAL_UPLOADED) == (S.FINAL_REQUIRED,)
    assert sources(Trigger.ALL_UNASSIGNED) == (S.UNDER_REVIEW,)
