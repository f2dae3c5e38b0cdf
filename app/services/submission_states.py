"""
Submission lifecycle state machine.

    submitted                --assigned-->        under_review
    under_review             --all_unassigned-->  submitted
    submitted | under_review --accepted-->        final_required
    submitted | under_review --rejected-->        decision_made
    final_required           --final_uploaded-->  final_submitted

The only backward edge is under_review -> submitted, taken when the last
assignment is removed and no review has been submitted. Everything here is
pure: engines compute the next status, then persist it themselves with a
write that is conditional on the status they started from.
"""

from dataclasses import dataclass
import enum
from typing import Dict, Optional, Tuple

from app.core.exceptions import Conflict
from app.models.submission import SubmissionStatus


class Trigger(enum.Enum):
    ASSIGNED = "assigned"
    ALL_UNASSIGNED = "all_unassigned"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    FINAL_UPLOADED = "final_uploaded"


@dataclass(frozen=True)
class GuardData:
    """Facts an engine has gathered inside its transaction."""

    assignment_count: int = 0
    submitted_review_count: int = 0
    quorum_met: bool = False
    forced: bool = False
    uploader_is_author: bool = False
    uploader_is_admin: bool = False


S = SubmissionStatus

TRANSITIONS: Dict[Tuple[SubmissionStatus, Trigger], SubmissionStatus] = {
    (S.SUBMITTED, Trigger.ASSIGNED): S.UNDER_REVIEW,
    (S.UNDER_REVIEW, Trigger.ALL_UNASSIGNED): S.SUBMITTED,
    (S.SUBMITTED, Trigger.ACCEPTED): S.FINAL_REQUIRED,
    (S.UNDER_REVIEW, Trigger.ACCEPTED): S.FINAL_REQUIRED,
    (S.SUBMITTED, Trigger.REJECTED): S.DECISION_MADE,
    (S.UNDER_REVIEW, Trigger.REJECTED): S.DECISION_MADE,
    (S.FINAL_REQUIRED, Trigger.FINAL_UPLOADED): S.FINAL_SUBMITTED,
}


def _guard_holds(trigger: Trigger, guard: GuardData) -> bool:
    if trigger is Trigger.ASSIGNED:
        return guard.assignment_count >= 1
    if trigger is Trigger.ALL_UNASSIGNED:
        return guard.assignment_count == 0 and guard.submitted_review_count == 0
    if trigger in (Trigger.ACCEPTED, Trigger.REJECTED):
        return guard.quorum_met or guard.forced
    if trigger is Trigger.FINAL_UPLOADED:
        return guard.uploader_is_author or guard.uploader_is_admin
    return False


def has_edge(current: SubmissionStatus, trigger: Trigger) -> bool:
    return (current, trigger) in TRANSITIONS


def sources(trigger: Trigger) -> Tuple[SubmissionStatus, ...]:
    """Every status with an outgoing edge for ``trigger``."""
    return tuple(current for current, edge in TRANSITIONS if edge is trigger)


def next_status(current: SubmissionStatus, trigger: Trigger, guard: GuardData) -> Optional[SubmissionStatus]:
    """Target status, or None when there is no edge or its guard does not hold."""
    target = TRANSITIONS.get((current, trigger))
    if target is None or not _guard_holds(trigger, guard):
        return None
    return target


def transition_conflict(current: SubmissionStatus, trigger: Trigger) -> Conflict:
    return Conflict(
        f"Invalid status {current.value}; {trigger.value} not allowed",
        status=current.value,
    )


def require_transition(current: SubmissionStatus, trigger: Trigger, guard: GuardData) -> SubmissionStatus:
    """Like ``next_status`` but an impossible transition is a Conflict."""
    target = next_status(current, trigger, guard)
    if target is None:
        raise transition_conflict(current, trigger)
    return target
