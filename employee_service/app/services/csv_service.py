"""
CSV export / spreadsheet import of employees.

Import accepts .csv and .xlsx files. Rows are processed in file order inside
one transaction, each through the same authorization and hierarchy checks as
a single create. Managers are referenced by employee number, so a file may
introduce a manager and their reports together as long as the manager row
comes first.
"""
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, List, Optional
import pandas as pd
from pydantic import ValidationError as PydanticValidationError
from ..core.database import AsyncSessionLocal
from ..core.exceptions import HierarchyError, ManagerNotFound
from ..schemas import EmployeeCreate
from .employee_service import EmployeeStore, create_in_store
from .hierarchy_service import build_hierarchy, iter_hierarchy
from .role_service import Caller, parse_role
import logging

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "employee_number",
    "name",
    "surname",
    "email",
    "phone_number",
    "birth_date",
    "salary",
    "role",
    "department",
    "profile_url",
    "manager_employee_number",
]

REQUIRED_COLUMNS = {"employee_number", "name", "surname", "role"}

SUPPORTED_FORMATS = ['.csv', '.xlsx']


async def export_employees_csv() -> str:
    """All employees as CSV text, managers before their reports"""
    async with AsyncSessionLocal() as session:
        employees = await EmployeeStore(session).list_all()

    numbers = {e.id: e.employee_number for e in employees}
    ordered = [e for _, e in iter_hierarchy(build_hierarchy(employees))]
    reached = {e.id for e in ordered}
    # Broken reporting lines are still exported, after everyone reachable
    ordered.extend(sorted((e for e in employees if e.id not in reached), key=lambda e: e.employee_number))

    rows = [
        {
            "employee_number": e.employee_number,
            "name": e.name,
            "surname": e.surname,
            "email": e.email,
            "phone_number": e.phone_number,
            "birth_date": e.birth_date.isoformat() if e.birth_date else None,
            "salary": str(e.salary) if e.salary is not None else None,
            "role": parse_role(e.role).value,
            "department": e.department,
            "profile_url": e.profile_url,
            "manager_employee_number": numbers.get(e.manager_id),
        }
        for e in ordered
    ]

    df = pd.DataFrame(rows, columns=EXPORT_COLUMNS)
    logger.info(f"Exported {len(df)} employees")
    return df.to_csv(index=False)


def read_table(content: bytes, filename: str) -> pd.DataFrame:
    """Parse an uploaded file into a DataFrame of strings"""
    file_ext = Path(filename or "").suffix.lower() or '.csv'
    if file_ext not in SUPPORTED_FORMATS:
        raise ValueError(f"Unsupported file format: {file_ext}")

    try:
        if file_ext == '.csv':
            df = pd.read_csv(BytesIO(content), dtype=str, keep_default_na=False)
        else:
            df = pd.read_excel(BytesIO(content), engine='openpyxl', dtype=str, keep_default_na=False)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise ValueError(f"Could not read {file_ext} file: {e}")

    df.columns = [str(col).strip().lower() for col in df.columns]
    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(f"Missing required columns: {', '.join(sorted(missing))}")
    return df


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def row_to_payload(row: Dict[str, Any]) -> Dict[str, Any]:
    payload = {
        column: _clean(row.get(column))
        for column in EXPORT_COLUMNS
        if column != "manager_employee_number"
    }
    # Spreadsheet dates arrive as "YYYY-MM-DD 00:00:00"
    if payload.get("birth_date"):
        payload["birth_date"] = payload["birth_date"].split(" ")[0].split("T")[0]
    return payload


async def import_employees(caller: Caller, content: bytes, filename: str) -> Dict[str, Any]:
    """
    Create employees from an uploaded table.

    Returns:
        {"created": int, "errors": [{row, employee_number, code, message}]}
        where `row` is the line number in the file (header is line 1)
    """
    df = read_table(content, filename)
    created = 0
    errors: List[Dict[str, Any]] = []

    async with AsyncSessionLocal() as session:
        async with session.begin():
            store = EmployeeStore(session)

            for index, row in enumerate(df.to_dict('records')):
                line = index + 2
                payload = row_to_payload(row)
                number = payload.get("employee_number")

                try:
                    manager_number = _clean(row.get("manager_employee_number"))
                    if manager_number:
                        manager = await store.find_by_number(manager_number)
                        if manager is None:
                            raise ManagerNotFound(manager_number)
                        payload["manager_id"] = manager.id

                    data = EmployeeCreate(**payload).model_dump()
                    await create_in_store(store, caller, data)
                    created += 1
                except PydanticValidationError as e:
                    message = "; ".join(
                        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
                    )
                    errors.append({"row": line, "employee_number": number, "code": "VALIDATION_ERROR", "message": message})
                except HierarchyError as e:
                    errors.append({"row": line, "employee_number": number, "code": e.code, "message": e.message})

    if errors:
        logger.warning(f"Import by {caller.user_id}: {created} created, {len(errors)} rows rejected")
    else:
        logger.info(f"Import by {caller.user_id}: {created} created")
    return {"created": created, "errors": errors}
