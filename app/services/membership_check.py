# File: app/services/membership_check.py
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from app.core.config import settings
from app.core.validators import normalize_email

logger = logging.getLogger(__name__)

OK_ACCOUNT_STATUSES = {"active", "approved"}

@dataclass
class MembershipResult:
    ok: bool
    reason: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=dict)

class SqlMembershipChecker:
    """Looks members up in the external read-only ``member_status_v`` view.

    A member passes when their account is active or approved and paid.
    """

    def __init__(self, url: Optional[str] = None, view: str = "public.member_status_v"):
        self.url = url if url is not None else settings.IRC_MEMBERSHIP_CHECK_URL
        self.view = view
        self._engine: Optional[Engine] = None

    def _get_engine(self) -> Optional[Engine]:
        if not self.url:
            return None
        if self._engine is None:
            self._engine = create_engine(self.url, pool_pre_ping=True)
        return self._engine

    def check(self, email: Optional[str]) -> MembershipResult:
        normalized = normalize_email(email)
        if not normalized:
            return MembershipResult(ok=False, reason="invalid_email")

        engine = self._get_engine()
        if engine is None:
            return MembershipResult(ok=False, reason="unconfigured")

        try:
            with engine.connect() as conn:
                row = conn.execute(
                    text(
                        f"SELECT email, account_status, is_paid, approved_at FROM {self.view} "
                        "WHERE lower(email) = :email LIMIT 1"
                    ),
                    {"email": normalized},
                ).mappings().first()
        except SQLAlchemyError as e:
            logger.error(f"❌ Membership lookup failed for {normalized}: {str(e)}")
            return MembershipResult(ok=False, reason="error", meta={"error": str(e)})

        if row is None:
            return MembershipResult(ok=False, reason="invalid no data found", meta={"found": False})

        status_ok = str(row["account_status"] or "").lower() in OK_ACCOUNT_STATUSES
        paid_ok = bool(row["is_paid"])
        meta = {
            "account_status": row["account_status"],
            "is_paid": paid_ok,
            "approved_at": row["approved_at"],
        }
        if status_ok and paid_ok:
            return MembershipResult(ok=True, meta=meta)
        return MembershipResult(ok=False, reason="invalid", meta=meta)
