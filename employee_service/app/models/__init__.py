from .employee import Employee, EmployeeRole
from .user import User, UserRole

__all__ = [
    "Employee",
    "EmployeeRole",
    "User",
    "UserRole",
]
