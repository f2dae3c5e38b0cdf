# File: app/services/unit_of_work.py
import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.core.exceptions import ServerError
from app.services import audit_service
from app.services.audit_service import RequestMeta

logger = logging.getLogger(__name__)

@contextmanager
def atomic(
    db: Session,
    *,
    trace_id: str,
    action: str,
    actor_user_id: Optional[int] = None,
    entity_type: Optional[str] = None,
    entity_id: Any = None,
    meta: Optional[RequestMeta] = None
) -> Iterator[Session]:
    """Commit the block as one transaction; any failure rolls everything back.

    Database errors become a generic ServerError; the detail goes to the log
    and the audit sink only.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"💥 {action} failed ({trace_id})")
        audit_service.record(
            db,
            trace_id=trace_id,
            actor_user_id=actor_user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            severity="error",
            details={"error": str(e)},
            meta=meta,
        )
        raise ServerError() from e
    except Exception:
        db.rollback()
        raise
