# File: app/models/decision.py
from sqlalchemy import Column, Integer, Text, ForeignKey, DateTime, Enum
from sqlalchemy.orm import relationship
from app.models.base import BaseModel, utcnow
import enum

class DecisionType(enum.Enum):
    ACCEPT = "accept"
    REJECT = "reject"

class Decision(BaseModel):
    """Immutable verdict; the unique submission_id is what keeps it single."""

    __tablename__ = "decisions"

    submission_id = Column(
        Integer,
        ForeignKey("submissions.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    decision = Column(
        Enum(DecisionType, values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
    )
    reason = Column(Text, nullable=True)
    decider_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    decided_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    submission = relationship("Submission", back_populates="decision")
    decider = relationship("User", foreign_keys=[decider_user_id])
