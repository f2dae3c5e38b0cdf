# File: app/models/event_role.py
from sqlalchemy import Column, Integer, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from app.models.base import BaseModel
import enum

class EventRoleType(enum.Enum):
    AUTHOR = "author"
    REVIEWER = "reviewer"
    CHAIR = "chair"

ALL_EVENT_ROLES = frozenset(role.value for role in EventRoleType)

class EventRole(BaseModel):
    __tablename__ = "event_roles"
    __table_args__ = (
        UniqueConstraint("event_id", "user_id", "role", name="uq_event_roles_event_user_role"),
    )

    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(
        Enum(EventRoleType, values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
    )
    granted_by_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Relationships
    event = relationship("Event", back_populates="roles")
    user = relationship("User", foreign_keys=[user_id])
