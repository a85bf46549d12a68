from sqlalchemy import Column, String, DateTime, Enum as SQLEnum
from sqlalchemy.orm import deferred, validates
from datetime import datetime
import enum

from fyp_repository.core.database import Base
from fyp_repository.core.security import get_password_hash, verify_password
from fyp_repository.core.types import GUID, generate_uuid


class AdminRole(str, enum.Enum):
    """Admin roles (carried in tokens, not used for route gating)"""
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class Admin(Base):
    """Moderator account"""
    __tablename__ = "admins"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, index=True, nullable=False)

    # Deferred: plain selects never load the hash; use undefer() where it is needed
    password_hash = deferred(Column(String(255), nullable=False))

    role = Column(SQLEnum(AdminRole), default=AdminRole.ADMIN, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)

    @validates("email")
    def _normalize_email(self, key, value):
        return value.strip().lower() if value else value

    @property
    def password(self):
        raise AttributeError("password is write-only")

    @password.setter
    def password(self, plain_password: str) -> None:
        """Hash on assignment; the plaintext is never stored"""
        self.password_hash = get_password_hash(plain_password)

    def check_password(self, plain_password: str) -> bool:
        return verify_password(plain_password, self.password_hash)

    def __repr__(self):
        return f"<Admin {self.email}>"
