from sqlalchemy import Column, Integer, String, Date, DateTime, Numeric, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from ..core.database import Base
import enum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EmployeeRole(str, enum.Enum):
    """Organizational role, listed from highest to lowest authority"""
    CEO = "CEO"
    CTO = "CTO"
    DIRECTOR = "DIRECTOR"
    SENIOR_MANAGER = "SENIOR_MANAGER"
    MANAGER = "MANAGER"
    TEAM_LEAD = "TEAM_LEAD"
    SENIOR_EMPLOYEE = "SENIOR_EMPLOYEE"
    JUNIOR_EMPLOYEE = "JUNIOR_EMPLOYEE"
    INTERN = "INTERN"


class Employee(Base):
    """Employee record - a node in the reporting hierarchy"""
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    employee_number = Column(String(50), unique=True, nullable=False, index=True)

    # Personal information
    name = Column(String(150), nullable=False, index=True)
    surname = Column(String(150), nullable=False, index=True)
    birth_date = Column(Date, nullable=True)
    salary = Column(Numeric(12, 2), nullable=True)
    email = Column(String(255), unique=True, nullable=True, index=True)
    phone_number = Column(String(50), nullable=True)
    profile_url = Column(String(500), nullable=True)

    # Position
    role = Column(SQLEnum(EmployeeRole, name="employee_role"), nullable=False, index=True)
    department = Column(String(150), nullable=True, index=True)
    manager_id = Column(Integer, ForeignKey("employees.id"), nullable=True, index=True)

    # Optional 1:1 link to a login account
    user_id = Column(String(32), ForeignKey("users.id"), unique=True, nullable=True, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    manager = relationship("Employee", remote_side=[id], back_populates="subordinates")
    subordinates = relationship("Employee", back_populates="manager")
    user = relationship("User", back_populates="employee")

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.surname}"

    def __repr__(self):
        return f"<Employee(id={self.id}, employee_number={self.employee_number}, role={self.role}, manager_id={self.manager_id})>"
