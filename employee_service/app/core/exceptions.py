"""
Hierarchy rule violations raised by the service layer.

These carry no HTTP semantics; the API layer maps them onto the shared
API exceptions.
"""
from typing import Any, Dict, List, Optional


class HierarchyError(Exception):
    """Base class for every rejected hierarchy operation"""
    code = "HIERARCHY_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_details(self) -> Optional[Dict[str, Any]]:
        return None


class InvalidRole(HierarchyError, ValueError):
    code = "INVALID_ROLE"

    def __init__(self, value: Any):
        super().__init__(f"Invalid role: {value!r}")
        self.value = value


class SelfManagementError(HierarchyError):
    code = "SELF_MANAGEMENT"

    def __init__(self, employee_id: Optional[int] = None):
        super().__init__("Employee cannot be their own manager")
        self.employee_id = employee_id


class ManagerNotFound(HierarchyError):
    code = "MANAGER_NOT_FOUND"

    def __init__(self, manager_id: Any):
        super().__init__("Manager not found")
        self.manager_id = manager_id

    def to_details(self):
        return {"manager_id": self.manager_id}


class RankViolation(HierarchyError):
    code = "RANK_VIOLATION"

    def __init__(self, manager_role, subordinate_role, message: Optional[str] = None):
        super().__init__(
            message
            or f"A {manager_role.value} cannot manage a {subordinate_role.value}: "
               f"the manager must hold a strictly higher role"
        )
        self.manager_role = manager_role
        self.subordinate_role = subordinate_role

    def to_details(self):
        return {
            "manager_role": self.manager_role.value,
            "subordinate_role": self.subordinate_role.value,
        }


class CeoMustHaveNoManager(HierarchyError):
    code = "CEO_MUST_HAVE_NO_MANAGER"

    def __init__(self):
        super().__init__("A CEO cannot have a manager")


class HasSubordinates(HierarchyError):
    code = "HAS_SUBORDINATES"

    def __init__(self, subordinates: List[Dict[str, Any]]):
        super().__init__(
            "Cannot delete employee with subordinates. Please reassign subordinates first."
        )
        self.subordinates = subordinates

    @property
    def subordinate_ids(self) -> List[int]:
        return [s["id"] for s in self.subordinates]

    def to_details(self):
        return {
            "subordinate_count": len(self.subordinates),
            "subordinates": self.subordinates,
        }


class InsufficientPermission(HierarchyError):
    code = "INSUFFICIENT_PERMISSION"

    def __init__(self, action: str, target_role=None, message: Optional[str] = None):
        role_text = f" {target_role.value}" if target_role is not None else ""
        super().__init__(message or f"Not allowed to {action}{role_text} with your role")
        self.action = action
        self.target_role = target_role

    def to_details(self):
        return {
            "action": self.action,
            "target_role": self.target_role.value if self.target_role is not None else None,
        }


class CannotPromoteFurther(HierarchyError):
    code = "CANNOT_PROMOTE_FURTHER"

    def __init__(self, employee_id: Optional[int] = None):
        super().__init__("Employee already holds the highest role")
        self.employee_id = employee_id


class EmployeeNotFound(HierarchyError):
    code = "EMPLOYEE_NOT_FOUND"

    def __init__(self, employee_id: Any):
        super().__init__("Employee not found")
        self.employee_id = employee_id


class DuplicateEmployee(HierarchyError):
    code = "DUPLICATE_EMPLOYEE"

    def __init__(self, field: str, value: Any):
        label = "Employee number" if field == "employee_number" else field.replace("_", " ").capitalize()
        super().__init__(f"{label} already exists")
        self.field = field
        self.value = value

    def to_details(self):
        return {"field": self.field, "value": self.value}
