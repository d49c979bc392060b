"""Hierarchy service - consistency checks, org chart tree and promotion.

Every mutation of the reporting lines goes through `check_mutation` (or
`check_deletion`) before anything is written. The checks only read from the
store, so a failed check leaves the data untouched.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple
from ..core.exceptions import (
    CannotPromoteFurther,
    CeoMustHaveNoManager,
    EmployeeNotFound,
    HasSubordinates,
    InsufficientPermission,
    ManagerNotFound,
    RankViolation,
    SelfManagementError,
)
from ..models import Employee, EmployeeRole
from .role_service import Caller, ROLE_SEQUENCE, can_manage, can_promote, parse_role, rank_of
import logging

logger = logging.getLogger(__name__)


def authority_order(employee) -> tuple:
    """Sibling ordering: rank ascending, then name, id as tie breaker"""
    return (rank_of(employee.role), employee.name or "", employee.id or 0)


def employee_summary(employee) -> Dict[str, Any]:
    return {
        "id": employee.id,
        "employee_number": employee.employee_number,
        "name": employee.name,
        "surname": employee.surname,
        "role": parse_role(employee.role).value,
    }


# Consistency checker

async def check_mutation(
    store,
    *,
    role,
    manager_id: Optional[int],
    employee_id: Optional[int] = None,
    manager_explicit: bool = True,
    previous_role=None,
) -> Optional[int]:
    """
    Validate a create / update / promote before it is written.

    Args:
        store: EmployeeStore bound to the current transaction
        role: role the employee will hold after the mutation
        manager_id: manager the employee will report to (None for a root)
        employee_id: id of the employee being changed, None on create
        manager_explicit: False when manager_id was carried over from the
            stored record rather than supplied by the caller
        previous_role: stored role, used to re-check existing subordinates

    Returns:
        The manager id to persist (cleared for a CEO with an inherited manager)
    """
    role = parse_role(role)

    if employee_id is not None and manager_id is not None and manager_id == employee_id:
        raise SelfManagementError(employee_id)

    manager = None
    if manager_id is not None:
        manager = await store.find_by_id(manager_id)
        if manager is None:
            raise ManagerNotFound(manager_id)

    if role == EmployeeRole.CEO and manager is not None:
        if manager_explicit:
            raise CeoMustHaveNoManager()
        logger.info(f"Clearing manager {manager_id} of employee {employee_id}: a CEO reports to no one")
        manager, manager_id = None, None

    if manager is not None and not can_manage(rank_of(manager.role), rank_of(role)):
        raise RankViolation(parse_role(manager.role), role)

    if employee_id is not None and previous_role is not None and parse_role(previous_role) != role:
        for subordinate in await store.find_by_manager(employee_id):
            if not can_manage(rank_of(role), rank_of(subordinate.role)):
                raise RankViolation(
                    role,
                    parse_role(subordinate.role),
                    message=(
                        f"Employee {subordinate.employee_number} ({parse_role(subordinate.role).value}) "
                        f"would no longer report to a higher role; reassign them first"
                    ),
                )

    return manager_id


async def check_deletion(store, employee) -> None:
    """Block deletion while anyone still reports to the employee"""
    if await store.count_subordinates(employee.id) == 0:
        return
    subordinates = sorted(await store.find_by_manager(employee.id), key=lambda e: e.id)
    raise HasSubordinates([employee_summary(s) for s in subordinates])


# Promotion

def next_role(role) -> EmployeeRole:
    """The role one step closer to CEO"""
    role = parse_role(role)
    if role == EmployeeRole.CEO:
        raise CannotPromoteFurther()
    return ROLE_SEQUENCE[rank_of(role) - 2]


async def promote(store, caller: Caller, employee_id: int) -> Employee:
    """Move an employee exactly one role up, within the caller's authority"""
    employee = await store.find_by_id(employee_id)
    if employee is None:
        raise EmployeeNotFound(employee_id)

    try:
        new_role = next_role(employee.role)
    except CannotPromoteFurther:
        raise CannotPromoteFurther(employee.id)

    if not can_promote(caller.rank, rank_of(new_role)):
        raise InsufficientPermission(
            "promote", new_role,
            message=f"Not allowed to promote an employee to {new_role.value}: it would exceed your own role",
        )

    manager_id = await check_mutation(
        store,
        role=new_role,
        manager_id=employee.manager_id,
        employee_id=employee.id,
        manager_explicit=False,
        previous_role=employee.role,
    )

    logger.info(f"Promoting employee {employee.id}: {parse_role(employee.role).value} -> {new_role.value}")
    return await store.update(employee.id, {"role": new_role, "manager_id": manager_id})


# Tree builder

@dataclass
class TreeNode:
    employee: Any
    children: List["TreeNode"] = field(default_factory=list)


def build_hierarchy(employees: Iterable) -> List[TreeNode]:
    """
    Materialize the manager adjacency list into a forest.

    Roots are employees without a manager. Children are ordered by
    authority (rank, then name). Employees that cannot be reached from a
    root (dangling manager id, or a cycle written around the checks) are
    left out and reported in the log.
    """
    by_id = {e.id: e for e in employees}
    children: Dict[Optional[int], List[int]] = defaultdict(list)
    for employee in by_id.values():
        children[employee.manager_id].append(employee.id)
    for ids in children.values():
        ids.sort(key=lambda i: authority_order(by_id[i]))

    roots = [TreeNode(by_id[i]) for i in children.get(None, [])]
    visited = set()
    stack = list(reversed(roots))

    while stack:
        node = stack.pop()
        node_id = node.employee.id
        if node_id in visited:
            continue
        visited.add(node_id)
        for child_id in children.get(node_id, []):
            if child_id in visited:
                logger.warning(f"Employee {child_id} reached twice while building hierarchy; skipping")
                continue
            child = TreeNode(by_id[child_id])
            node.children.append(child)
            stack.append(child)

    unreachable = sorted(set(by_id) - visited)
    if unreachable:
        logger.warning(f"Employees not reachable from any root (broken reporting lines): {unreachable}")

    return roots


def iter_hierarchy(roots: List[TreeNode]) -> Iterator[Tuple[int, Any]]:
    """Pre-order walk yielding (depth, employee)"""
    stack = [(0, node) for node in reversed(roots)]
    while stack:
        depth, node = stack.pop()
        yield depth, node.employee
        stack.extend((depth + 1, child) for child in reversed(node.children))


def node_fields(employee) -> Dict[str, Any]:
    return {
        "id": employee.id,
        "employee_number": employee.employee_number,
        "name": employee.name,
        "surname": employee.surname,
        "role": parse_role(employee.role).value,
        "department": employee.department,
        "email": employee.email,
        "profile_url": employee.profile_url,
        "manager_id": employee.manager_id,
    }


def tree_to_dict(roots: List[TreeNode], fields: Callable[[Any], Dict[str, Any]] = node_fields) -> List[Dict[str, Any]]:
    """Serialize the forest to nested dicts with a `children` key"""
    result: List[Dict[str, Any]] = []
    stack = [(node, result) for node in reversed(roots)]
    while stack:
        node, siblings = stack.pop()
        item = fields(node.employee)
        item["children"] = []
        siblings.append(item)
        stack.extend((child, item["children"]) for child in reversed(node.children))
    return result
