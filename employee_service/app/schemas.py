from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from shared.constants import MIN_PASSWORD_LENGTH
from .models import EmployeeRole, UserRole


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


# Employee Schemas
class EmployeeBase(BaseModel):
    birth_date: Optional[date] = None
    salary: Optional[Decimal] = Field(default=None, ge=0)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = None
    department: Optional[str] = None
    profile_url: Optional[str] = None
    manager_id: Optional[int] = None

    @field_validator('email', 'phone_number', 'department', 'profile_url', mode='before')
    @classmethod
    def empty_string_is_none(cls, v):
        return _blank_to_none(v)


class EmployeeCreate(EmployeeBase):
    employee_number: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=150)
    surname: str = Field(min_length=1, max_length=150)
    role: EmployeeRole

    @field_validator('role', mode='before')
    @classmethod
    def normalize_role(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v


class EmployeeUpdate(EmployeeBase):
    employee_number: Optional[str] = Field(default=None, min_length=1, max_length=50)
    name: Optional[str] = Field(default=None, min_length=1, max_length=150)
    surname: Optional[str] = Field(default=None, min_length=1, max_length=150)
    role: Optional[EmployeeRole] = None

    @field_validator('role', mode='before')
    @classmethod
    def normalize_role(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v


class EmployeeBrief(BaseModel):
    id: int
    employee_number: str
    name: str
    surname: str
    role: EmployeeRole
    department: Optional[str] = None
    email: Optional[str] = None

    class Config:
        from_attributes = True


class LinkedUserOut(BaseModel):
    id: str
    email: str
    name: str
    role: UserRole

    class Config:
        from_attributes = True


class EmployeeOut(BaseModel):
    id: int
    employee_number: str
    name: str
    surname: str
    birth_date: Optional[date] = None
    salary: Optional[Decimal] = None
    role: EmployeeRole
    email: Optional[str] = None
    phone_number: Optional[str] = None
    department: Optional[str] = None
    profile_url: Optional[str] = None
    manager_id: Optional[int] = None
    user_id: Optional[str] = None
    manager: Optional[EmployeeBrief] = None
    subordinates: List[EmployeeBrief] = []
    user: Optional[LinkedUserOut] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PaginationOut(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class EmployeeListResponse(BaseModel):
    employees: List[EmployeeOut]
    pagination: PaginationOut


class HierarchyNode(BaseModel):
    id: int
    employee_number: str
    name: str
    surname: str
    role: EmployeeRole
    department: Optional[str] = None
    email: Optional[str] = None
    profile_url: Optional[str] = None
    manager_id: Optional[int] = None
    children: List["HierarchyNode"] = []


HierarchyNode.model_rebuild()


class RoleOption(BaseModel):
    role: EmployeeRole
    rank: int


class DeleteResponse(BaseModel):
    message: str
    id: int


# Dashboard Schemas
class TopManager(BaseModel):
    id: int
    name: str
    role: EmployeeRole
    department: Optional[str] = None
    subordinates_count: int


class LatestHire(BaseModel):
    id: int
    name: str
    role: EmployeeRole
    department: Optional[str] = None
    hired_date: datetime


class DashboardStats(BaseModel):
    total_employees: int
    departments_count: int
    top_managers: List[TopManager]
    latest_hires: List[LatestHire]


# CSV import
class ImportRowError(BaseModel):
    row: int
    employee_number: Optional[str] = None
    code: str
    message: str


class ImportResult(BaseModel):
    created: int
    errors: List[ImportRowError]


# Auth Schemas
class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    name: str = Field(min_length=1, max_length=255)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class AccountEmployeeOut(BaseModel):
    """Slice of the linked employee shown with the account"""
    id: int
    employee_number: str
    name: str
    surname: str
    role: EmployeeRole
    department: Optional[str] = None

    class Config:
        from_attributes = True


class AccountOut(BaseModel):
    id: str
    email: EmailStr
    name: str
    role: UserRole
    profile_photo_url: Optional[str] = None
    employee: Optional[AccountEmployeeOut] = None
    created_at: datetime

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    user: AccountOut
    token: str


class CreateUserRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    name: str = Field(min_length=1, max_length=255)
    role: UserRole = UserRole.VIEWER
    employee_id: Optional[int] = None


class LinkUserRequest(BaseModel):
    user_id: str
    employee_id: Optional[int] = None


class ProfilePhotoRequest(BaseModel):
    photo_url: str = Field(min_length=1, max_length=500)
