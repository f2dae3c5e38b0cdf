# File: app/models/user.py
from sqlalchemy import Column, String, Boolean, Enum
from app.models.base import BaseModel
import enum

class GlobalRole(enum.Enum):
    ADMIN = "admin"
    USER = "user"

class User(BaseModel):
    __tablename__ = "users"

    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=False)
    role = Column(
        Enum(GlobalRole, values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=GlobalRole.USER,
    )
    is_active = Column(Boolean, default=True, nullable=False)

    @property
    def is_admin(self) -> bool:
        return self.role == GlobalRole.ADMIN
