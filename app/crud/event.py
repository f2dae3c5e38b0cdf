# File: app/crud/event.py
from typing import List, Optional
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase
from app.models.event import Event
from app.schemas.event import EventCreate

class CRUDEvent(CRUDBase[Event, EventCreate, EventCreate]):

    def get_by_name(self, db: Session, *, name: str) -> Optional[Event]:
        return db.query(Event).filter(Event.name == name).first()

    def list_recent(self, db: Session, *, skip: int = 0, limit: int = 100) -> List[Event]:
        return (
            db.query(Event)
            .order_by(Event.start_date.desc(), Event.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def create_with_owner(self, db: Session, *, obj_in: EventCreate, created_by_user_id: int) -> Event:
        event_data = obj_in.model_dump()
        event_data["created_by_user_id"] = created_by_user_id

        db_obj = Event(**event_data)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

event = CRUDEvent(Event)
