# File: app/models/review.py
from sqlalchemy import Column, Integer, Float, Text, ForeignKey, DateTime, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from app.models.base import BaseModel
import enum

class ReviewStatus(enum.Enum):
    ASSIGNED = "assigned"
    SUBMITTED = "submitted"

# Sub-score columns, in the order reviewers fill them in
SCORE_FIELDS = ("score_technical", "score_relevance", "score_innovation", "score_writing")

class Review(BaseModel):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("submission_id", "reviewer_user_id", name="uq_reviews_submission_reviewer"),
        UniqueConstraint("submission_id", "external_reviewer_id", name="uq_reviews_submission_external"),
    )

    submission_id = Column(Integer, ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False, index=True)
    reviewer_user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    external_reviewer_id = Column(Integer, ForeignKey("external_reviewers.id"), nullable=True, index=True)

    status = Column(
        Enum(ReviewStatus, values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=ReviewStatus.ASSIGNED,
    )

    # Scores (1..5), empty until submitted
    score_technical = Column(Integer, nullable=True)
    score_relevance = Column(Integer, nullable=True)
    score_innovation = Column(Integer, nullable=True)
    score_writing = Column(Integer, nullable=True)
    score_overall = Column(Float, nullable=True)

    comments_for_author = Column(Text, nullable=True)
    comments_committee = Column(Text, nullable=True)

    submitted_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    submission = relationship("Submission", back_populates="reviews")
    reviewer = relationship("User", foreign_keys=[reviewer_user_id])
    external_reviewer = relationship("ExternalReviewer", back_populates="reviews")
