from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status
from typing import List, Literal, Optional
from shared.exceptions import NotFoundError, ValidationError
from shared.validators import total_pages
from shared.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..schemas import (
    DashboardStats,
    DeleteResponse,
    EmployeeBrief,
    EmployeeCreate,
    EmployeeListResponse,
    EmployeeOut,
    EmployeeUpdate,
    HierarchyNode,
    ImportResult,
    PaginationOut,
    RoleOption,
)
from ..models import EmployeeRole
from ..core.config import settings
from ..services import csv_service
from ..services.employee_service import (
    create_employee,
    delete_employee,
    get_available_for_users,
    get_dashboard_stats,
    get_departments,
    get_employee,
    get_hierarchy,
    get_potential_managers,
    list_employees,
    promote_employee,
    update_employee,
)
from ..services.role_service import Caller, available_roles, rank_of
from .dependencies import get_caller, require_admin
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/employees", tags=["employees"])

SortField = Literal[
    "employee_number", "name", "surname", "email", "department",
    "salary", "birth_date", "created_at", "role",
]


@router.get("", response_model=EmployeeListResponse)
async def list_employees_endpoint(
    search: Optional[str] = Query(default=None),
    role: Optional[EmployeeRole] = Query(default=None),
    department: Optional[str] = Query(default=None),
    manager_id: Optional[int] = Query(default=None),
    sort_field: SortField = Query(default="employee_number"),
    sort_direction: Literal["asc", "desc"] = Query(default="asc"),
    page: int = Query(default=DEFAULT_PAGE, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    caller: Caller = Depends(get_caller),
):
    """Search, filter, sort and paginate employees"""
    employees, total = await list_employees(
        search=search,
        role=role,
        department=department,
        manager_id=manager_id,
        sort_field=sort_field,
        sort_direction=sort_direction,
        page=page,
        limit=limit,
    )
    return EmployeeListResponse(
        employees=[EmployeeOut.model_validate(e) for e in employees],
        pagination=PaginationOut(page=page, limit=limit, total=total, pages=total_pages(total, limit)),
    )


@router.post("", response_model=EmployeeOut, status_code=status.HTTP_201_CREATED)
async def create_employee_endpoint(payload: EmployeeCreate, caller: Caller = Depends(require_admin)):
    return await create_employee(caller, payload.model_dump())


@router.get("/hierarchy", response_model=List[HierarchyNode])
async def hierarchy_endpoint(caller: Caller = Depends(get_caller)):
    """Org chart as a forest rooted at employees without a manager"""
    return await get_hierarchy()


@router.get("/departments", response_model=List[str])
async def departments_endpoint(caller: Caller = Depends(get_caller)):
    return await get_departments()


@router.get("/potential-managers", response_model=List[EmployeeBrief])
async def potential_managers_endpoint(
    exclude_id: Optional[int] = Query(default=None),
    role: Optional[EmployeeRole] = Query(default=None, description="Only managers able to manage this role"),
    caller: Caller = Depends(get_caller),
):
    return await get_potential_managers(exclude_id=exclude_id, for_role=role)


@router.get("/available-roles", response_model=List[RoleOption])
async def available_roles_endpoint(caller: Caller = Depends(get_caller)):
    """Roles the current caller is allowed to create"""
    return [RoleOption(role=role, rank=rank_of(role)) for role in available_roles(caller.rank)]


@router.get("/available-for-users", response_model=List[EmployeeBrief])
async def available_for_users_endpoint(caller: Caller = Depends(require_admin)):
    """Employees without a linked login account"""
    return await get_available_for_users()


@router.get("/dashboard-stats", response_model=DashboardStats)
async def dashboard_stats_endpoint(caller: Caller = Depends(get_caller)):
    return await get_dashboard_stats()


@router.get("/export")
async def export_endpoint(caller: Caller = Depends(get_caller)):
    """Download all employees as CSV"""
    content = await csv_service.export_employees_csv()
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="employees.csv"'},
    )


@router.post("/import", response_model=ImportResult)
async def import_endpoint(file: UploadFile = File(...), caller: Caller = Depends(require_admin)):
    """
    Import employees from a .csv or .xlsx file

    Valid rows are created, invalid rows are reported with their line number.
    """
    content = await file.read()
    max_size = settings.MAX_IMPORT_FILE_SIZE_MB * 1024 * 1024
    if len(content) > max_size:
        raise ValidationError(
            f"File too large. Maximum size: {settings.MAX_IMPORT_FILE_SIZE_MB}MB",
            error_code="FILE_TOO_LARGE",
        )

    try:
        return await csv_service.import_employees(caller, content, file.filename or "")
    except ValueError as e:
        raise ValidationError(str(e), error_code="INVALID_FILE")


@router.get("/{employee_id}", response_model=EmployeeOut)
async def get_employee_endpoint(employee_id: int, caller: Caller = Depends(get_caller)):
    employee = await get_employee(employee_id)
    if not employee:
        raise NotFoundError("Employee")
    return employee


@router.put("/{employee_id}", response_model=EmployeeOut)
async def update_employee_endpoint(
    employee_id: int,
    payload: EmployeeUpdate,
    caller: Caller = Depends(require_admin),
):
    """Update fields; send manager_id null to make the employee a root"""
    return await update_employee(caller, employee_id, payload.model_dump(exclude_unset=True))


@router.delete("/{employee_id}", response_model=DeleteResponse)
async def delete_employee_endpoint(employee_id: int, caller: Caller = Depends(require_admin)):
    await delete_employee(caller, employee_id)
    return DeleteResponse(message="Employee deleted successfully", id=employee_id)


@router.post("/{employee_id}/promote", response_model=EmployeeOut)
async def promote_employee_endpoint(employee_id: int, caller: Caller = Depends(require_admin)):
    """Move the employee one role up"""
    return await promote_employee(caller, employee_id)
