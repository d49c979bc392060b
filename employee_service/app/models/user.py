from sqlalchemy import Column, String, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship
from ..core.database import Base
from .employee import utcnow
import enum
import uuid


class UserRole(str, enum.Enum):
    """Coarse account role for system access, independent of the org chart"""
    ADMIN = "ADMIN"
    VIEWER = "VIEWER"


def generate_user_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    """Login account, optionally linked to one Employee"""
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=generate_user_id)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(SQLEnum(UserRole, name="user_role"), default=UserRole.VIEWER, nullable=False)
    profile_photo_url = Column(String(500), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    employee = relationship("Employee", back_populates="user", uselist=False)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
