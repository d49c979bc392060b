"""Promotion state machine"""
import pytest

from employee_service.app.core.exceptions import (
    CannotPromoteFurther,
    EmployeeNotFound,
    InsufficientPermission,
    RankViolation,
)
from employee_service.app.models import EmployeeRole, UserRole
from employee_service.app.services.hierarchy_service import next_role, promote
from employee_service.app.services.role_service import ROLE_SEQUENCE, OrgCaller, SystemCaller, rank_of


def caller_with(role: EmployeeRole) -> OrgCaller:
    return OrgCaller(user_id="caller", account_role=UserRole.ADMIN, employee_id=100, role=role)


def test_next_role_moves_exactly_one_step():
    for role in ROLE_SEQUENCE[1:]:
        assert rank_of(next_role(role)) == rank_of(role) - 1


def test_next_role_of_ceo_fails():
    with pytest.raises(CannotPromoteFurther):
        next_role(EmployeeRole.CEO)


async def test_promote_intern(store):
    store.add(1, EmployeeRole.DIRECTOR)
    store.add(2, EmployeeRole.INTERN, manager_id=1)

    promoted = await promote(store, caller_with(EmployeeRole.DIRECTOR), 2)

    assert promoted.role is EmployeeRole.JUNIOR_EMPLOYEE
    assert promoted.manager_id == 1


async def test_promote_ceo_fails(store):
    store.add(1, EmployeeRole.CEO)
    with pytest.raises(CannotPromoteFurther) as exc_info:
        await promote(store, caller_with(EmployeeRole.CEO), 1)
    assert exc_info.value.employee_id == 1


async def test_promote_missing_employee(store):
    with pytest.raises(EmployeeNotFound):
        await promote(store, caller_with(EmployeeRole.CEO), 99)


async def test_promote_beyond_caller_rank_denied(store):
    store.add(1, EmployeeRole.CEO)
    store.add(2, EmployeeRole.MANAGER, manager_id=1)

    with pytest.raises(InsufficientPermission) as exc_info:
        await promote(store, caller_with(EmployeeRole.MANAGER), 2)

    assert exc_info.value.target_role is EmployeeRole.SENIOR_MANAGER
    assert store.employees[2].role is EmployeeRole.MANAGER


async def test_promote_to_callers_own_rank_allowed(store):
    store.add(1, EmployeeRole.CEO)
    store.add(2, EmployeeRole.TEAM_LEAD, manager_id=1)

    promoted = await promote(store, caller_with(EmployeeRole.MANAGER), 2)

    assert promoted.role is EmployeeRole.MANAGER


async def test_promote_into_managers_rank_is_rank_violation(store):
    store.add(1, EmployeeRole.MANAGER)
    store.add(2, EmployeeRole.TEAM_LEAD, manager_id=1)

    with pytest.raises(RankViolation):
        await promote(store, caller_with(EmployeeRole.CEO), 2)
    assert store.updates == []


async def test_promote_to_ceo_clears_manager(store):
    store.add(1, EmployeeRole.CEO)
    store.add(2, EmployeeRole.CTO, manager_id=1)

    # A CEO caller may promote up to its own rank
    promoted = await promote(store, caller_with(EmployeeRole.CEO), 2)

    assert promoted.role is EmployeeRole.CEO
    assert promoted.manager_id is None


async def test_system_caller_cannot_promote(store):
    store.add(1, EmployeeRole.INTERN)
    with pytest.raises(InsufficientPermission):
        await promote(store, SystemCaller(user_id="sys", account_role=UserRole.ADMIN), 1)
