from .event import event
from .submission import submission
from . import event_roles

__all__ = ["event", "submission", "event_roles"]
