# File: app/api/v1/endpoints/events.py
from typing import List
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from app import crud, schemas
from app.api.deps import get_current_active_user, get_request_meta, require_event_role
from app.core.permissions import EventAccess
from app.db.database import get_db
from app.models.event_role import EventRoleType
from app.models.user import User
from app.services import event_service
from app.services.audit_service import RequestMeta

router = APIRouter()

@router.post("/", response_model=schemas.Event, status_code=status.HTTP_201_CREATED)
def create_event(
    event_in: schemas.EventCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    meta: RequestMeta = Depends(get_request_meta)
):
    """Create a conference event (administrators only)"""
    return event_service.create_event(db, current_user, event_in, meta=meta)

@router.get("/", response_model=List[schemas.Event])
def list_events(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    return crud.event.list_recent(db, skip=skip, limit=limit)

@router.post("/{event_id}/register", response_model=schemas.EventRoleResponse)
def register_for_event(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
    meta: RequestMeta = Depends(get_request_meta)
):
    """Register the caller as an author of the event"""
    return event_service.register_author(db, current_user, event_id, meta=meta)

@router.get("/{event_id}/my-roles", response_model=schemas.MyEventRoles)
def my_event_roles(
    event_id: int,
    access: EventAccess = Depends(require_event_role())
):
    return event_service.my_roles(access)

@router.post("/{event_id}/roles", response_model=schemas.EventRoleResponse)
def grant_event_role(
    event_id: int,
    grant: schemas.EventRoleGrant,
    db: Session = Depends(get_db),
    access: EventAccess = Depends(require_event_role(EventRoleType.CHAIR)),
    meta: RequestMeta = Depends(get_request_meta)
):
    """Grant reviewer or chair to a user in this event"""
    return event_service.grant_event_role(
        db, access, event_id=event_id, user_id=grant.user_id, role=grant.role, meta=meta
    )

@router.delete("/{event_id}/roles/{user_id}/{role}", response_model=schemas.EventRoleResponse)
def revoke_event_role(
    event_id: int,
    user_id: int,
    role: EventRoleType,
    db: Session = Depends(get_db),
    access: EventAccess = Depends(require_event_role(EventRoleType.CHAIR)),
    meta: RequestMeta = Depends(get_request_meta)
):
    return event_service.revoke_event_role(
        db, access, event_id=event_id, user_id=user_id, role=role, meta=meta
    )
