# File: app/schemas/event.py
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime, date
from app.models.event_role import EventRoleType

class EventBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

class EventCreate(EventBase):
    pass

class Event(EventBase):
    id: int
    created_by_user_id: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True

class EventRoleGrant(BaseModel):
    user_id: int
    role: EventRoleType

class EventRoleResponse(BaseModel):
    event_id: int
    user_id: int
    role: EventRoleType
    created: bool

class MyEventRoles(BaseModel):
    event_id: int
    roles: List[str]
    is_admin: bool

class ReviewerItem(BaseModel):
    id: int
    email: str
    full_name: str
    n_assigned_total: int

class ReviewerListResponse(BaseModel):
    event_id: int
    items: List[ReviewerItem]
