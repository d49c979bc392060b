"""Admin bootstrap script"""
from sqlalchemy import select

from employee_service.app.core.database import AsyncSessionLocal
from employee_service.app.models import Employee, EmployeeRole, User, UserRole
from employee_service.create_admin import create_admin


async def load_employee(employee_number):
    async with AsyncSessionLocal() as session:
        result = await session.execute(select(Employee).where(Employee.employee_number == employee_number))
        return result.scalar_one_or_none()


async def test_creates_admin_and_ceo():
    ceo = await create_admin("boss@example.com", "secret123", "Ada", "Boss", "EMP001")

    assert ceo.role == EmployeeRole.CEO
    async with AsyncSessionLocal() as session:
        user = (await session.execute(select(User).where(User.email == "boss@example.com"))).scalar_one()
    assert user.role == UserRole.ADMIN
    assert ceo.user_id == user.id


async def test_rerun_is_idempotent():
    first = await create_admin("boss@example.com", "secret123", "Ada", "Boss", "EMP001")
    second = await create_admin("boss@example.com", "secret123", "Ada", "Boss", "EMP001")
    assert second.id == first.id


async def test_does_not_link_non_ceo(employee_factory):
    await employee_factory(EmployeeRole.INTERN, employee_number="EMP001")

    assert await create_admin("boss@example.com", "secret123", "Ada", "Boss", "EMP001") is None

    intern = await load_employee("EMP001")
    assert intern.role == EmployeeRole.INTERN
    assert intern.user_id is None


async def test_does_not_link_account_twice():
    await create_admin("boss@example.com", "secret123", "Ada", "Boss", "EMP001")

    assert await create_admin("boss@example.com", "secret123", "Ada", "Boss", "EMP002") is None
    assert await load_employee("EMP002") is None


async def test_ceo_linked_to_other_account_is_left_alone(account_factory):
    other = await account_factory(UserRole.ADMIN, EmployeeRole.CEO)

    assert await create_admin("boss@example.com", "secret123", "Ada", "Boss", other.employee.employee_number) is None

    ceo = await load_employee(other.employee.employee_number)
    assert ceo.user_id == other.user.id
