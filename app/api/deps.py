# File: app/api/deps.py
import json
from typing import Any, Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.core.exceptions import NotFound, ValidationError
from app.core.permissions import EventAccess, authorize
from app.core.security import decode_token
from app.db.database import get_db
from app.models.submission import Submission
from app.models.user import User
from app.services.audit_service import RequestMeta

security = HTTPBearer()

def get_current_user(
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(credentials.credentials)
    if payload is None:
        raise credentials_exception

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise credentials_exception

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise credentials_exception
    return user

def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    if not current_user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user")
    return current_user

def get_request_meta(request: Request) -> RequestMeta:
    forwarded = request.headers.get("x-forwarded-for")
    ip = forwarded.split(",")[0].strip() if forwarded else (request.client.host if request.client else None)
    return RequestMeta(ip=ip, user_agent=request.headers.get("user-agent"))

def _positive_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None

async def _body_event_id(request: Request) -> Optional[int]:
    if "application/json" not in request.headers.get("content-type", ""):
        return None
    try:
        body = await request.json()
    except json.JSONDecodeError:
        return None
    return _positive_int(body.get("event_id")) if isinstance(body, dict) else None

async def resolve_event_id(request: Request, db: Session) -> int:
    """Event id from the path, then the JSON body, then the submission the path points at"""
    event_id = _positive_int(request.path_params.get("event_id"))
    if event_id:
        return event_id

    event_id = await _body_event_id(request)
    if event_id:
        return event_id

    submission_id = _positive_int(request.path_params.get("submission_id"))
    if submission_id:
        owner = db.query(Submission.event_id).filter(Submission.id == submission_id).first()
        if not owner:
            raise NotFound("Submission not found")
        return owner.event_id

    raise ValidationError("Event ID required", fields={"event_id": "required"})

def require_event_role(*roles):
    """Dependency factory: the caller must hold one of ``roles`` in the resolved event.

    With no roles, holding any role in the event is enough. The resolved
    EventAccess is returned and also left on ``request.state.event_access``.
    """
    async def dependency(
        request: Request,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_active_user)
    ) -> EventAccess:
        event_id = await resolve_event_id(request, db)
        access = authorize(db, current_user.id, event_id, roles)
        request.state.event_access = access
        return access

    return dependency
