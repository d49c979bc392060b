"""Employee service - store, CRUD and read queries"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_, case, asc, desc
from sqlalchemy.orm import selectinload, aliased
from typing import Any, Dict, List, Optional, Tuple
from shared.validators import validate_pagination
from ..models import Employee
from ..core.database import AsyncSessionLocal
from ..core.exceptions import DuplicateEmployee, EmployeeNotFound, InsufficientPermission
from .role_service import (
    Caller,
    OrgCaller,
    MANAGERIAL_ROLES,
    ROLE_RANKS,
    can_create,
    can_delete,
    can_manage,
    parse_role,
    rank_of,
)
from . import hierarchy_service
import logging

logger = logging.getLogger(__name__)

EMPLOYEE_RELATIONS = (
    selectinload(Employee.manager),
    selectinload(Employee.subordinates),
    selectinload(Employee.user),
)

# Fields that may be explicitly cleared on update
NULLABLE_FIELDS = {
    "manager_id",
    "email",
    "phone_number",
    "department",
    "profile_url",
    "birth_date",
    "salary",
}

role_rank = case(
    *[(Employee.role == role, rank) for role, rank in ROLE_RANKS.items()],
    else_=len(ROLE_RANKS) + 1,
)

SORT_COLUMNS = {
    "employee_number": Employee.employee_number,
    "name": Employee.name,
    "surname": Employee.surname,
    "email": Employee.email,
    "department": Employee.department,
    "salary": Employee.salary,
    "birth_date": Employee.birth_date,
    "created_at": Employee.created_at,
    "role": role_rank,
}


class EmployeeStore:
    """Employee persistence bound to one session / transaction"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, employee_id: int, with_relations: bool = False) -> Optional[Employee]:
        stmt = select(Employee).where(Employee.id == employee_id)
        if with_relations:
            stmt = stmt.options(*EMPLOYEE_RELATIONS).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_manager(self, manager_id: int) -> List[Employee]:
        result = await self.session.execute(
            select(Employee).where(Employee.manager_id == manager_id)
        )
        return list(result.scalars().all())

    async def find_by_number(self, employee_number: str) -> Optional[Employee]:
        result = await self.session.execute(
            select(Employee).where(Employee.employee_number == employee_number)
        )
        return result.scalar_one_or_none()

    async def find_by_email(self, email: str) -> Optional[Employee]:
        result = await self.session.execute(
            select(Employee).where(func.lower(Employee.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def count_subordinates(self, employee_id: int) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(Employee).where(Employee.manager_id == employee_id)
        )
        return int(result.scalar_one())

    async def list_all(self) -> List[Employee]:
        result = await self.session.execute(select(Employee).order_by(Employee.id))
        return list(result.scalars().all())

    async def create(self, data: Dict[str, Any]) -> Employee:
        employee = Employee(**data)
        self.session.add(employee)
        await self.session.flush()
        return employee

    async def update(self, employee_id: int, data: Dict[str, Any]) -> Employee:
        employee = await self.find_by_id(employee_id)
        if employee is None:
            raise EmployeeNotFound(employee_id)
        for key, value in data.items():
            setattr(employee, key, value)
        await self.session.flush()
        return employee

    async def delete(self, employee_id: int) -> None:
        employee = await self.find_by_id(employee_id)
        if employee is None:
            raise EmployeeNotFound(employee_id)
        await self.session.delete(employee)
        await self.session.flush()


async def _ensure_unique(store: EmployeeStore, data: Dict[str, Any], exclude_id: Optional[int] = None) -> None:
    number = data.get("employee_number")
    if number:
        existing = await store.find_by_number(number)
        if existing is not None and existing.id != exclude_id:
            raise DuplicateEmployee("employee_number", number)

    email = data.get("email")
    if email:
        existing = await store.find_by_email(email)
        if existing is not None and existing.id != exclude_id:
            raise DuplicateEmployee("email", email)


async def create_in_store(store: EmployeeStore, caller: Caller, data: Dict[str, Any]) -> Employee:
    """Authorize, validate and insert one employee inside an open transaction"""
    data = dict(data)
    role = parse_role(data["role"])
    if not can_create(caller.rank, role):
        raise InsufficientPermission("create", role)

    await _ensure_unique(store, data)
    data["role"] = role
    data["manager_id"] = await hierarchy_service.check_mutation(
        store, role=role, manager_id=data.get("manager_id")
    )

    employee = await store.create(data)
    logger.info(f"Employee {employee.employee_number} created as {role.value} by {caller.user_id}")
    return employee


async def create_employee(caller: Caller, data: Dict[str, Any]) -> Employee:
    """Create an employee"""
    async with AsyncSessionLocal() as session:
        async with session.begin():
            store = EmployeeStore(session)
            employee = await create_in_store(store, caller, data)
            return await store.find_by_id(employee.id, with_relations=True)


async def update_employee(caller: Caller, employee_id: int, changes: Dict[str, Any]) -> Employee:
    """Update employee fields, role and/or manager"""
    changes = {k: v for k, v in changes.items() if v is not None or k in NULLABLE_FIELDS}

    async with AsyncSessionLocal() as session:
        async with session.begin():
            store = EmployeeStore(session)
            employee = await store.find_by_id(employee_id)
            if employee is None:
                raise EmployeeNotFound(employee_id)

            current_role = parse_role(employee.role)
            new_role = parse_role(changes["role"]) if "role" in changes else current_role
            role_changed = new_role != current_role
            manager_given = "manager_id" in changes
            new_manager_id = changes["manager_id"] if manager_given else employee.manager_id
            manager_changed = new_manager_id != employee.manager_id

            is_self = isinstance(caller, OrgCaller) and caller.employee_id == employee.id
            if is_self:
                if role_changed or manager_changed:
                    raise InsufficientPermission(
                        "update", current_role,
                        message="You cannot change your own role or manager",
                    )
            elif not can_manage(caller.rank, rank_of(current_role)):
                raise InsufficientPermission("update", current_role)

            if role_changed and not can_create(caller.rank, new_role):
                raise InsufficientPermission("assign", new_role)

            await _ensure_unique(store, changes, exclude_id=employee.id)

            if role_changed or manager_changed:
                changes["manager_id"] = await hierarchy_service.check_mutation(
                    store,
                    role=new_role,
                    manager_id=new_manager_id,
                    employee_id=employee.id,
                    manager_explicit=manager_given,
                    previous_role=current_role,
                )
            if "role" in changes:
                changes["role"] = new_role

            await store.update(employee.id, changes)
            logger.info(f"Employee {employee_id} updated by {caller.user_id}: {sorted(changes)}")
            return await store.find_by_id(employee_id, with_relations=True)


async def delete_employee(caller: Caller, employee_id: int) -> None:
    """Delete an employee that nobody reports to"""
    async with AsyncSessionLocal() as session:
        async with session.begin():
            store = EmployeeStore(session)
            employee = await store.find_by_id(employee_id)
            if employee is None:
                raise EmployeeNotFound(employee_id)

            if not can_delete(caller.rank, rank_of(employee.role)):
                raise InsufficientPermission("delete", parse_role(employee.role))

            await hierarchy_service.check_deletion(store, employee)
            await store.delete(employee_id)
            logger.info(f"Employee {employee_id} deleted by {caller.user_id}")


async def promote_employee(caller: Caller, employee_id: int) -> Employee:
    """Promote an employee one role up"""
    async with AsyncSessionLocal() as session:
        async with session.begin():
            store = EmployeeStore(session)
            await hierarchy_service.promote(store, caller, employee_id)
            return await store.find_by_id(employee_id, with_relations=True)


# Read queries

def like_pattern(term: str) -> str:
    """Substring pattern with LIKE wildcards in `term` matched literally"""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


async def get_employee(employee_id: int) -> Optional[Employee]:
    """Get employee by ID with manager, subordinates and account"""
    async with AsyncSessionLocal() as session:
        return await EmployeeStore(session).find_by_id(employee_id, with_relations=True)


async def list_employees(
    search: Optional[str] = None,
    role=None,
    department: Optional[str] = None,
    manager_id: Optional[int] = None,
    sort_field: str = "employee_number",
    sort_direction: str = "asc",
    page: int = 1,
    limit: int = 50,
) -> Tuple[List[Employee], int]:
    """Search, filter, sort and paginate employees"""
    page, limit = validate_pagination(page, limit)
    conditions = []
    if search:
        pattern = like_pattern(search)
        conditions.append(or_(
            Employee.name.ilike(pattern, escape="\\"),
            Employee.surname.ilike(pattern, escape="\\"),
            Employee.employee_number.ilike(pattern, escape="\\"),
            Employee.email.ilike(pattern, escape="\\"),
            Employee.department.ilike(pattern, escape="\\"),
        ))
    if role:
        conditions.append(Employee.role == parse_role(role))
    if department:
        conditions.append(Employee.department.ilike(like_pattern(department), escape="\\"))
    if manager_id is not None:
        conditions.append(Employee.manager_id == manager_id)

    column = SORT_COLUMNS.get(sort_field, Employee.employee_number)
    direction = desc if sort_direction == "desc" else asc

    async with AsyncSessionLocal() as session:
        total = (await session.execute(
            select(func.count()).select_from(Employee).where(*conditions)
        )).scalar_one()

        result = await session.execute(
            select(Employee)
            .options(*EMPLOYEE_RELATIONS)
            .where(*conditions)
            .order_by(direction(column), Employee.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), int(total)


async def get_hierarchy() -> List[Dict[str, Any]]:
    """Org chart forest, serialized"""
    async with AsyncSessionLocal() as session:
        employees = await EmployeeStore(session).list_all()
    roots = hierarchy_service.build_hierarchy(employees)
    return hierarchy_service.tree_to_dict(roots)


async def get_departments() -> List[str]:
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(Employee.department)
            .where(Employee.department.is_not(None), Employee.department != "")
            .distinct()
            .order_by(Employee.department)
        )
        return [d for d in result.scalars().all() if d]


async def get_potential_managers(exclude_id: Optional[int] = None, for_role=None) -> List[Employee]:
    """Employees in managerial roles, optionally only those able to manage `for_role`"""
    async with AsyncSessionLocal() as session:
        stmt = select(Employee).where(Employee.role.in_(MANAGERIAL_ROLES))
        if exclude_id is not None:
            stmt = stmt.where(Employee.id != exclude_id)
        result = await session.execute(stmt)
        managers = list(result.scalars().all())

    if for_role is not None:
        target_rank = rank_of(for_role)
        managers = [m for m in managers if can_manage(rank_of(m.role), target_rank)]
    return sorted(managers, key=hierarchy_service.authority_order)


async def get_available_for_users() -> List[Employee]:
    """Employees that are not yet linked to a login account"""
    async with AsyncSessionLocal() as session:
        result = await session.execute(
            select(Employee).where(Employee.user_id.is_(None)).order_by(Employee.name, Employee.surname)
        )
        return list(result.scalars().all())


async def get_dashboard_stats() -> Dict[str, Any]:
    """Headline numbers for the dashboard"""
    subordinate = aliased(Employee)
    subordinate_count = func.count(subordinate.id)

    async with AsyncSessionLocal() as session:
        total_employees = (await session.execute(
            select(func.count()).select_from(Employee)
        )).scalar_one()

        departments_count = (await session.execute(
            select(func.count(func.distinct(Employee.department))).where(Employee.department.is_not(None))
        )).scalar_one()

        top_managers = (await session.execute(
            select(Employee, subordinate_count.label("subordinates_count"))
            .outerjoin(subordinate, subordinate.manager_id == Employee.id)
            .where(Employee.role.in_(MANAGERIAL_ROLES))
            .group_by(Employee.id)
            .order_by(subordinate_count.desc(), Employee.id)
            .limit(3)
        )).all()

        latest_hires = (await session.execute(
            select(Employee).order_by(Employee.created_at.desc(), Employee.id.desc()).limit(5)
        )).scalars().all()

    return {
        "total_employees": int(total_employees),
        "departments_count": int(departments_count),
        "top_managers": [
            {
                "id": manager.id,
                "name": manager.full_name,
                "role": parse_role(manager.role).value,
                "department": manager.department,
                "subordinates_count": int(count),
            }
            for manager, count in top_managers
        ],
        "latest_hires": [
            {
                "id": employee.id,
                "name": employee.full_name,
                "role": parse_role(employee.role).value,
                "department": employee.department,
                "hired_date": employee.created_at,
            }
            for employee in latest_hires
        ],
    }
