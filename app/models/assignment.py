# File: app/models/assignment.py
from sqlalchemy import Column, Integer, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from app.models.base import BaseModel, utcnow

class Assignment(BaseModel):
    __tablename__ = "assignments"
    __table_args__ = (
        UniqueConstraint("submission_id", "reviewer_user_id", name="uq_assignments_submission_reviewer"),
        UniqueConstraint("submission_id", "external_reviewer_id", name="uq_assignments_submission_external"),
    )

    submission_id = Column(Integer, ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False, index=True)

    # Exactly one of these is set
    reviewer_user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    external_reviewer_id = Column(Integer, ForeignKey("external_reviewers.id"), nullable=True, index=True)

    assigned_by_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    assigned_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    due_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    submission = relationship("Submission", back_populates="assignments")
    reviewer = relationship("User", foreign_keys=[reviewer_user_id])
    external_reviewer = relationship("ExternalReviewer", back_populates="assignments")
