"""
Root conftest.py - Sets environment variables before any module imports.

The settings module builds the database engine at import time, so the
SQLite test database and the JWT secret must be in place first.
"""

import os
import tempfile

TEST_DB_DIR = tempfile.mkdtemp(prefix="employee-tests-")
os.environ["DATABASE_URL_OVERRIDE"] = f"sqlite+aiosqlite:///{TEST_DB_DIR}/employees.db"
os.environ["JWT_SECRET"] = "test-secret-key"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pytest
from httpx import AsyncClient, ASGITransport

from employee_service.app.core.database import AsyncSessionLocal, drop_db, init_db
from employee_service.app.core.exceptions import EmployeeNotFound
from employee_service.app.core.security import generate_jwt_token, hash_password
from employee_service.app.models import Employee, EmployeeRole, User, UserRole


# ============================================
# Database
# ============================================

@pytest.fixture(autouse=True)
async def reset_db():
    """Fresh schema for every test"""
    await drop_db()
    await init_db()
    yield


@pytest.fixture
async def client():
    """
    Async HTTP client for testing FastAPI endpoints.

    ASGITransport does not run the lifespan; tables come from reset_db.
    """
    from employee_service.app.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ============================================
# Factories
# ============================================

@pytest.fixture
def employee_factory():
    """Insert an employee row directly, bypassing the hierarchy checks"""
    counter = {"n": 0}

    async def create(role: EmployeeRole, manager_id: Optional[int] = None, **fields) -> Employee:
        counter["n"] += 1
        data = {
            "employee_number": f"E{counter['n']:04d}",
            "name": f"Name{counter['n']}",
            "surname": f"Surname{counter['n']}",
            "role": role,
            "manager_id": manager_id,
        }
        data.update(fields)
        async with AsyncSessionLocal() as session:
            async with session.begin():
                employee = Employee(**data)
                session.add(employee)
            return employee

    return create


@dataclass
class Account:
    user: User
    employee: Optional[Employee]
    token: str

    @property
    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture
def account_factory(employee_factory):
    """Create a login account, optionally linked to a new employee of `employee_role`"""
    counter = {"n": 0}

    async def create(
        account_role: UserRole = UserRole.ADMIN,
        employee_role: Optional[EmployeeRole] = None,
        manager_id: Optional[int] = None,
    ) -> Account:
        counter["n"] += 1
        email = f"user{counter['n']}@example.com"
        async with AsyncSessionLocal() as session:
            async with session.begin():
                user = User(
                    email=email,
                    name=f"User {counter['n']}",
                    password_hash=hash_password("secret123"),
                    role=account_role,
                )
                session.add(user)

        employee = None
        if employee_role is not None:
            employee = await employee_factory(employee_role, manager_id=manager_id, user_id=user.id)

        token = generate_jwt_token(user.id, user.email, account_role.value)
        return Account(user=user, employee=employee, token=token)

    return create


# ============================================
# In-memory employee store
# ============================================

@dataclass
class FakeEmployee:
    id: int
    role: EmployeeRole
    manager_id: Optional[int] = None
    name: str = ""
    surname: str = ""
    employee_number: str = ""
    department: Optional[str] = None
    email: Optional[str] = None
    profile_url: Optional[str] = None


@dataclass
class InMemoryStore:
    """Dict-backed stand-in for EmployeeStore"""
    employees: Dict[int, FakeEmployee] = field(default_factory=dict)
    updates: List[Dict[str, Any]] = field(default_factory=list)

    def add(self, id: int, role: EmployeeRole, manager_id: Optional[int] = None, name: str = "") -> FakeEmployee:
        employee = FakeEmployee(
            id=id,
            role=role,
            manager_id=manager_id,
            name=name or f"Name{id}",
            surname=f"Surname{id}",
            employee_number=f"E{id:04d}",
        )
        self.employees[id] = employee
        return employee

    async def find_by_id(self, employee_id, with_relations=False):
        return self.employees.get(employee_id)

    async def find_by_manager(self, manager_id):
        return [e for e in self.employees.values() if e.manager_id == manager_id]

    async def count_subordinates(self, employee_id):
        return len(await self.find_by_manager(employee_id))

    async def update(self, employee_id, data):
        employee = self.employees.get(employee_id)
        if employee is None:
            raise EmployeeNotFound(employee_id)
        for key, value in data.items():
            setattr(employee, key, value)
        self.updates.append({"id": employee_id, **data})
        return employee


@pytest.fixture
def store():
    return InMemoryStore()
