"""
Audit sink.

Every mutating operation records one row in ``audit_logs`` and mirrors it to
the ``audit`` logger. Recording is best-effort: a failure here is logged and
swallowed so the caller's already committed result stands.
"""

from dataclasses import dataclass
from datetime import date, datetime
import enum
import logging
import secrets
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.audit_log import AuditLog

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("audit")

SEVERITIES = {"info", "warn", "error", "debug"}
REDACTED_KEYS = {"password", "token", "session_token", "authorization", "cookie", "set-cookie"}
MAX_STR = 1000
MAX_ITEMS = 100

_LOG_LEVELS = {
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "debug": logging.DEBUG,
}


@dataclass(frozen=True)
class RequestMeta:
    """Client details attached to audit rows when the call came over HTTP."""

    ip: Optional[str] = None
    user_agent: Optional[str] = None


def new_trace_id(prefix: str) -> str:
    return f"{prefix}-{secrets.token_hex(3).upper()}"


def _scalar(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        if len(value) > MAX_STR:
            return value[:MAX_STR] + f"...[trimmed {len(value) - MAX_STR}]"
        return value
    if isinstance(value, enum.Enum):
        return _scalar(value.value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return None


def _flat(value: Any, placeholder: str) -> Any:
    scalar = _scalar(value)
    if scalar is None and value is not None:
        return placeholder
    return scalar


def sanitize_details(details: Any) -> Dict[str, Any]:
    """Redact secrets, trim long strings, cap lists and flatten nested dicts one level."""
    source = details if isinstance(details, dict) else {"value": details}
    out: Dict[str, Any] = {}
    for key, value in source.items():
        name = str(key)
        if name.lower() in REDACTED_KEYS:
            out[name] = "[REDACTED]"
        elif isinstance(value, (list, tuple, set)):
            out[name] = [_scalar(item) for item in list(value)[:MAX_ITEMS]]
        elif isinstance(value, dict):
            out[name] = {
                str(k): "[REDACTED]" if str(k).lower() in REDACTED_KEYS else _flat(v, "[object]")
                for k, v in value.items()
            }
        else:
            out[name] = _flat(value, "[unserializable]")
    return out


def record(
    db: Session,
    *,
    trace_id: Optional[str],
    actor_user_id: Optional[int],
    action: str,
    entity_type: Optional[str] = None,
    entity_id: Any = None,
    severity: str = "info",
    details: Any = None,
    meta: Optional[RequestMeta] = None,
) -> None:
    sev = severity if severity in SEVERITIES else "info"
    clean = sanitize_details(details or {})
    entity_ref = str(entity_id) if entity_id is not None else None

    try:
        db.add(AuditLog(
            trace_id=trace_id,
            actor_user_id=actor_user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_ref,
            severity=sev,
            details=clean,
            ip=meta.ip if meta else None,
            user_agent=meta.user_agent[:255] if meta and meta.user_agent else None,
        ))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Audit insert failed for {action} ({trace_id}): {str(e)}")
        return

    audit_logger.log(
        _LOG_LEVELS[sev],
        f"{action} trace={trace_id} actor={actor_user_id} {entity_type}={entity_ref} details={clean}",
    )
