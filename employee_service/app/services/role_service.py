"""Role service - rank table and the authorization rules built on it.

Ranks run from 1 (CEO, highest authority) to 9 (INTERN). A lower number
always means more authority. `None` stands for a caller that has no
employee record (a pure system account).
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Optional, Union
from ..core.exceptions import InvalidRole
from ..models import EmployeeRole, UserRole

ROLE_SEQUENCE = (
    EmployeeRole.CEO,
    EmployeeRole.CTO,
    EmployeeRole.DIRECTOR,
    EmployeeRole.SENIOR_MANAGER,
    EmployeeRole.MANAGER,
    EmployeeRole.TEAM_LEAD,
    EmployeeRole.SENIOR_EMPLOYEE,
    EmployeeRole.JUNIOR_EMPLOYEE,
    EmployeeRole.INTERN,
)

ROLE_RANKS = MappingProxyType({role: rank for rank, role in enumerate(ROLE_SEQUENCE, start=1)})
RANK_ROLES = MappingProxyType({rank: role for role, rank in ROLE_RANKS.items()})

HIGHEST_RANK = ROLE_RANKS[EmployeeRole.CEO]

# Roles that may appear as someone's manager in pickers and dashboards
MANAGERIAL_ROLES = ROLE_SEQUENCE[:ROLE_RANKS[EmployeeRole.TEAM_LEAD]]


def parse_role(value: Union[EmployeeRole, str]) -> EmployeeRole:
    """Coerce an enum member or its name into an EmployeeRole"""
    if isinstance(value, EmployeeRole):
        return value
    if isinstance(value, str):
        try:
            return EmployeeRole(value.strip().upper())
        except ValueError:
            pass
    raise InvalidRole(value)


def rank_of(role: Union[EmployeeRole, str]) -> int:
    """Rank of a role, 1 = CEO ... 9 = INTERN"""
    return ROLE_RANKS[parse_role(role)]


def role_for_rank(rank: int) -> EmployeeRole:
    try:
        return RANK_ROLES[rank]
    except (KeyError, TypeError):
        raise InvalidRole(rank)


# Decision functions

def can_create(caller_rank: Optional[int], target_role: Union[EmployeeRole, str]) -> bool:
    """Callers create strictly below their own rank; system callers create anything but a CEO"""
    target_rank = rank_of(target_role)
    if caller_rank is None:
        return target_rank != HIGHEST_RANK
    return target_rank > caller_rank


def can_manage(manager_rank: Optional[int], subordinate_rank: Optional[int]) -> bool:
    if manager_rank is None or subordinate_rank is None:
        return False
    return manager_rank < subordinate_rank


def can_delete(caller_rank: Optional[int], target_rank: int) -> bool:
    if caller_rank is None:
        return False
    return target_rank > caller_rank


def can_promote(caller_rank: Optional[int], resulting_rank: int) -> bool:
    """The promoted role may reach, but never exceed, the caller's own rank"""
    if caller_rank is None:
        return False
    return resulting_rank >= caller_rank


def available_roles(caller_rank: Optional[int]) -> List[EmployeeRole]:
    """Roles the caller is allowed to create, highest authority first"""
    return [role for role in ROLE_SEQUENCE if can_create(caller_rank, role)]


# Caller identity

@dataclass(frozen=True)
class OrgCaller:
    """Authenticated account linked to an employee record"""
    user_id: str
    account_role: UserRole
    employee_id: int
    role: EmployeeRole

    @property
    def rank(self) -> int:
        return rank_of(self.role)

    @property
    def is_admin(self) -> bool:
        return self.account_role == UserRole.ADMIN


@dataclass(frozen=True)
class SystemCaller:
    """Authenticated account with no place in the org chart"""
    user_id: str
    account_role: UserRole

    @property
    def rank(self) -> None:
        return None

    @property
    def is_admin(self) -> bool:
        return self.account_role == UserRole.ADMIN


Caller = Union[OrgCaller, SystemCaller]
