# File: app/models/event.py
from sqlalchemy import Column, String, Text, Date, ForeignKey, Integer
from sqlalchemy.orm import relationship
from app.models.base import BaseModel

class Event(BaseModel):
    __tablename__ = "events"

    name = Column(String(255), nullable=False, unique=True)
    description = Column(Text)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)

    # Metadata
    created_by_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Relationships
    roles = relationship("EventRole", back_populates="event", cascade="all, delete-orphan")
    submissions = relationship("Submission", back_populates="event")
