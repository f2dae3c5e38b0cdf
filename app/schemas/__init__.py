# File: app/schemas/__init__.py
from .event import (
    Event, EventCreate, EventRoleGrant, EventRoleResponse, MyEventRoles,
    ReviewerItem, ReviewerListResponse
)
from .submission import (
    AuthorEntry, SubmissionCreate, SubmissionFilter, Submission, SubmissionListResponse,
    ChairSubmissionItem, ChairSubmissionListResponse
)
from .assignment import (
    AssignRequest, AssignResponse, RejectedReviewers, UnassignRequest, UnassignResponse,
    AssignmentItem, AssignmentListResponse, ReviewerAssignmentItem, ReviewerAssignmentListResponse
)
from .review import (
    ReviewScores, ReviewSubmitRequest, ReviewSubmitResponse, ChairReviewItem, AuthorReviewItem,
    ChairReviewListResponse, AuthorReviewListResponse, OwnReview, PaperDetail
)
from .decision import (
    DecisionRequest, Decision, DecideResponse, QueueItem, QueueResponse, DecisionDetail
)
from .external_review import (
    ExternalReviewerCreate, ExternalReviewerInvite, ExternalReviewerInfo,
    ExternalSubmissionInfo, ExternalReviewPage
)
from .final import FinalUploadResponse
