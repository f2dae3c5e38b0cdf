# File: app/models/submission.py
from sqlalchemy import Column, String, Text, Integer, ForeignKey, DateTime, Enum, JSON
from sqlalchemy.orm import relationship
from app.models.base import BaseModel
import enum

class SubmissionStatus(enum.Enum):
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    DECISION_MADE = "decision_made"
    FINAL_REQUIRED = "final_required"
    FINAL_SUBMITTED = "final_submitted"

class Submission(BaseModel):
    __tablename__ = "submissions"

    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    author_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(200), nullable=False)
    abstract = Column(Text, nullable=True)
    keywords = Column(String(300), nullable=True)
    authors = Column(JSON, nullable=False, default=list)

    # Lifecycle
    status = Column(
        Enum(SubmissionStatus, values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=SubmissionStatus.SUBMITTED,
        index=True,
    )

    # Files (opaque references returned by the file store)
    pdf_path = Column(String(500), nullable=True)
    final_pdf_path = Column(String(500), nullable=True)
    final_submitted_at = Column(DateTime(timezone=True), nullable=True)

    # Optional e-mail used for the membership check on final upload
    membership_email = Column(String(255), nullable=True)

    # Relationships
    event = relationship("Event", back_populates="submissions")
    author = relationship("User", foreign_keys=[author_user_id])
    assignments = relationship("Assignment", back_populates="submission")
    reviews = relationship("Review", back_populates="submission")
    decision = relationship("Decision", back_populates="submission", uselist=False)
