from .base import BaseModel
from .user import User, GlobalRole
from .event import Event
from .event_role import EventRole, EventRoleType, ALL_EVENT_ROLES
from .submission import Submission, SubmissionStatus
from .external_reviewer import ExternalReviewer
from .assignment import Assignment
from .review import Review, ReviewStatus, SCORE_FIELDS
from .decision import Decision, DecisionType
from .audit_log import AuditLog

__all__ = [
    "BaseModel", "User", "GlobalRole", "Event", "EventRole", "EventRoleType", "ALL_EVENT_ROLES",
    "Submission", "SubmissionStatus", "ExternalReviewer", "Assignment",
    "Review", "ReviewStatus", "SCORE_FIELDS", "Decision", "DecisionType", "AuditLog",
]
