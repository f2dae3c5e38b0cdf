# File: app/models/external_reviewer.py
from sqlalchemy import Column, String, Integer, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from app.models.base import BaseModel

class ExternalReviewer(BaseModel):
    __tablename__ = "external_reviewers"

    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)

    # Invitation tracking
    invite_token = Column(String(255), nullable=False, unique=True, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    invited_by_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Relationships
    assignments = relationship("Assignment", back_populates="external_reviewer")
    reviews = relationship("Review", back_populates="external_reviewer")
