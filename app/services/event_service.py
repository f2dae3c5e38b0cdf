# File: app/services/event_service.py
import logging
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session
from app import crud
from app.core.exceptions import Conflict, Forbidden, NotFound, ValidationError
from app.core.permissions import EventAccess
from app.crud import event_roles
from app.models.event import Event
from app.models.event_role import EventRoleType
from app.models.user import User
from app.schemas.event import EventCreate
from app.services import audit_service
from app.services.audit_service import RequestMeta
from app.services.unit_of_work import atomic

logger = logging.getLogger(__name__)

# Author is self-service; these are handed out by chairs
GRANTABLE_ROLES = {EventRoleType.REVIEWER, EventRoleType.CHAIR}

def get_event_or_404(db: Session, event_id: int) -> Event:
    event = crud.event.get(db, id=event_id)
    if not event:
        raise NotFound("Event not found")
    return event

def create_event(db: Session, actor: User, obj_in: EventCreate, meta: Optional[RequestMeta] = None) -> Event:
    if not actor.is_admin:
        raise Forbidden("Forbidden")
    if obj_in.start_date and obj_in.end_date and obj_in.end_date < obj_in.start_date:
        raise ValidationError("Invalid dates", fields={"end_date": "must not be before start_date"})
    if crud.event.get_by_name(db, name=obj_in.name):
        raise Conflict("Event name already exists")

    trace_id = audit_service.new_trace_id("EVT-CRT")
    with atomic(db, trace_id=trace_id, action="event.create", actor_user_id=actor.id, entity_type="event", meta=meta):
        event = crud.event.create_with_owner(db, obj_in=obj_in, created_by_user_id=actor.id)

    audit_service.record(
        db, trace_id=trace_id, actor_user_id=actor.id, action="event.create",
        entity_type="event", entity_id=event.id, details={"name": event.name}, meta=meta,
    )
    logger.info(f"🎉 Event {event.id} '{event.name}' created by user {actor.id}")
    return event

def register_author(db: Session, user: User, event_id: int, meta: Optional[RequestMeta] = None) -> Dict[str, Any]:
    """Self-registration: the caller becomes an author of the event"""
    get_event_or_404(db, event_id)
    trace_id = audit_service.new_trace_id("EVT-ROLE")

    with atomic(db, trace_id=trace_id, action="event.register", actor_user_id=user.id, entity_type="event",
                entity_id=event_id, meta=meta):
        created = event_roles.grant_role(db, event_id, user.id, EventRoleType.AUTHOR, granted_by_user_id=user.id)
    if not created:
        raise Conflict("Already registered")

    audit_service.record(
        db, trace_id=trace_id, actor_user_id=user.id, action="event.register",
        entity_type="event", entity_id=event_id, details={"role": EventRoleType.AUTHOR}, meta=meta,
    )
    logger.info(f"✅ User {user.id} registered as author in event {event_id}")
    return {"event_id": event_id, "user_id": user.id, "role": EventRoleType.AUTHOR, "created": True}

def _target_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id, User.is_active == True).first()
    if not user:
        raise NotFound("User not found")
    return user

def grant_event_role(
    db: Session,
    access: EventAccess,
    *,
    event_id: int,
    user_id: int,
    role: EventRoleType,
    meta: Optional[RequestMeta] = None
) -> Dict[str, Any]:
    """Grant reviewer or chair; granting an existing role is a no-op with ``created=False``"""
    access.require_event(event_id).require(EventRoleType.CHAIR)
    if role not in GRANTABLE_ROLES:
        raise ValidationError("Invalid role", fields={"role": "must be 'reviewer' or 'chair'"})
    _target_user(db, user_id)
    trace_id = audit_service.new_trace_id("EVT-ROLE")

    with atomic(db, trace_id=trace_id, action="event.role_grant", actor_user_id=access.user_id,
                entity_type="event", entity_id=event_id, meta=meta):
        created = event_roles.grant_role(db, event_id, user_id, role, granted_by_user_id=access.user_id)

    audit_service.record(
        db, trace_id=trace_id, actor_user_id=access.user_id, action="event.role_grant",
        entity_type="event", entity_id=event_id,
        details={"user_id": user_id, "role": role, "created": created}, meta=meta,
    )
    logger.info(f"🔑 Event {event_id}: {role.value} granted to user {user_id} (new={created})")
    return {"event_id": event_id, "user_id": user_id, "role": role, "created": created}

def revoke_event_role(
    db: Session,
    access: EventAccess,
    *,
    event_id: int,
    user_id: int,
    role: EventRoleType,
    meta: Optional[RequestMeta] = None
) -> Dict[str, Any]:
    """Remove a role. Reviews already submitted under it stay as they are."""
    access.require_event(event_id).require(EventRoleType.CHAIR)
    if role not in GRANTABLE_ROLES:
        raise ValidationError("Invalid role", fields={"role": "must be 'reviewer' or 'chair'"})
    trace_id = audit_service.new_trace_id("EVT-ROLE")

    with atomic(db, trace_id=trace_id, action="event.role_revoke", actor_user_id=access.user_id,
                entity_type="event", entity_id=event_id, meta=meta):
        removed = event_roles.revoke_role(db, event_id, user_id, role)
    if not removed:
        raise NotFound("Role not found")

    audit_service.record(
        db, trace_id=trace_id, actor_user_id=access.user_id, action="event.role_revoke",
        entity_type="event", entity_id=event_id, details={"user_id": user_id, "role": role}, meta=meta,
    )
    logger.info(f"🔒 Event {event_id}: {role.value} revoked from user {user_id}")
    return {"event_id": event_id, "user_id": user_id, "role": role, "created": False}

def my_roles(access: EventAccess) -> Dict[str, Any]:
    return {"event_id": access.event_id, "roles": sorted(access.roles), "is_admin": access.is_admin}
