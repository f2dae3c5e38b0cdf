# File: app/core/permissions.py
from dataclasses import dataclass
from typing import FrozenSet, Iterable
from sqlalchemy.orm import Session
from app.core.exceptions import Forbidden, NotFound
from app.crud import event_roles
from app.models.event_role import ALL_EVENT_ROLES, EventRoleType

def _role_name(role) -> str:
    return role.value if isinstance(role, EventRoleType) else str(role)

@dataclass(frozen=True)
class EventAccess:
    """Roles the acting user holds in one event, resolved once per request"""
    user_id: int
    event_id: int
    roles: FrozenSet[str]
    is_admin: bool = False

    def has_any(self, *roles) -> bool:
        """True if the user holds any of ``roles``; no roles means any resolvable role"""
        if not roles:
            return bool(self.roles)
        return any(_role_name(role) in self.roles for role in roles)

    def require(self, *roles) -> "EventAccess":
        if not self.has_any(*roles):
            raise Forbidden("Forbidden", required=sorted(_role_name(r) for r in roles))
        return self

    def require_event(self, event_id: int) -> "EventAccess":
        """Guard against an access object resolved for a different event"""
        if self.event_id != event_id:
            raise NotFound("Not found in this event")
        return self

def resolve_effective_roles(db: Session, user_id: int, event_id: int) -> EventAccess:
    """Admins hold every event role (chair included); everyone else gets what the role store says"""
    if event_roles.is_global_admin(db, user_id):
        return EventAccess(user_id=user_id, event_id=event_id, roles=ALL_EVENT_ROLES, is_admin=True)

    roles = event_roles.get_roles(db, event_id, user_id)
    return EventAccess(user_id=user_id, event_id=event_id, roles=frozenset(roles), is_admin=False)

def authorize(db: Session, user_id: int, event_id: int, allowed_roles: Iterable = ()) -> EventAccess:
    """Resolve roles and reject the caller unless they intersect ``allowed_roles``"""
    access = resolve_effective_roles(db, user_id, event_id)
    return access.require(*tuple(allowed_roles))
