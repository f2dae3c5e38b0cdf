# File: app/crud/event_roles.py
"""Role store: which event-scoped roles a user holds, and who is a global admin."""
from typing import Iterable, List, Optional, Set
from sqlalchemy.orm import Session
from app.db.upsert import insert_for
from app.models.event_role import EventRole, EventRoleType
from app.models.user import User, GlobalRole

def get_roles(db: Session, event_id: int, user_id: int) -> Set[str]:
    """Get the set of role names a user holds in an event"""
    rows = db.query(EventRole.role).filter(
        EventRole.event_id == event_id,
        EventRole.user_id == user_id
    ).all()
    return {row.role.value for row in rows}

def is_global_admin(db: Session, user_id: int) -> bool:
    return db.query(User.id).filter(
        User.id == user_id,
        User.role == GlobalRole.ADMIN,
        User.is_active == True
    ).first() is not None

def has_role(db: Session, event_id: int, user_id: int, role: EventRoleType) -> bool:
    return db.query(EventRole.id).filter(
        EventRole.event_id == event_id,
        EventRole.user_id == user_id,
        EventRole.role == role
    ).first() is not None

def filter_role_holders(db: Session, event_id: int, role: EventRoleType, user_ids: Iterable[int]) -> Set[int]:
    """Return the subset of ``user_ids`` holding ``role`` in the event, read live"""
    candidates = list(user_ids)
    if not candidates:
        return set()
    rows = db.query(EventRole.user_id).filter(
        EventRole.event_id == event_id,
        EventRole.role == role,
        EventRole.user_id.in_(candidates)
    ).all()
    return {row.user_id for row in rows}

def grant_role(
    db: Session,
    event_id: int,
    user_id: int,
    role: EventRoleType,
    granted_by_user_id: Optional[int] = None
) -> bool:
    """Grant a role; returns False when the (event, user, role) triple already existed"""
    stmt = insert_for(db, EventRole).values(
        event_id=event_id,
        user_id=user_id,
        role=role,
        granted_by_user_id=granted_by_user_id,
    ).on_conflict_do_nothing(index_elements=["event_id", "user_id", "role"])
    result = db.execute(stmt)
    db.commit()
    return result.rowcount > 0

def revoke_role(db: Session, event_id: int, user_id: int, role: EventRoleType) -> bool:
    """Remove a role. Reviews already submitted under it are left untouched."""
    deleted = db.query(EventRole).filter(
        EventRole.event_id == event_id,
        EventRole.user_id == user_id,
        EventRole.role == role
    ).delete(synchronize_session=False)
    db.commit()
    return deleted > 0

def list_role_holders(db: Session, event_id: int, role: EventRoleType) -> List[User]:
    return (
        db.query(User)
        .join(EventRole, EventRole.user_id == User.id)
        .filter(
            EventRole.event_id == event_id,
            EventRole.role == role,
            User.is_active == True
        )
        .order_by(User.full_name.asc())
        .all()
    )
