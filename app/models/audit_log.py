# File: app/models/audit_log.py
from sqlalchemy import Column, String, Integer, JSON
from app.models.base import BaseModel

class AuditLog(BaseModel):
    __tablename__ = "audit_logs"

    trace_id = Column(String(64), nullable=True, index=True)
    actor_user_id = Column(Integer, nullable=True, index=True)
    action = Column(String(100), nullable=False, index=True)
    entity_type = Column(String(50), nullable=True)
    entity_id = Column(String(64), nullable=True)
    severity = Column(String(10), nullable=False, default="info")  # info | warn | error | debug
    details = Column(JSON, nullable=False, default=dict)
    ip = Column(String(64), nullable=True)
    user_agent = Column(String(255), nullable=True)
