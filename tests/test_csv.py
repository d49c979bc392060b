"""CSV export and spreadsheet import"""
from io import BytesIO, StringIO

import pandas as pd
import pytest

from employee_service.app.models import EmployeeRole, UserRole


@pytest.fixture
async def ceo(account_factory):
    return await account_factory(UserRole.ADMIN, EmployeeRole.CEO)


def upload(content: bytes, filename: str = "employees.csv", media_type: str = "text/csv"):
    return {"file": (filename, content, media_type)}


async def test_export(client, ceo, employee_factory):
    await employee_factory(EmployeeRole.DIRECTOR, manager_id=ceo.employee.id, department="R&D")

    response = await client.get("/api/employees/export", headers=ceo.headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    df = pd.read_csv(StringIO(response.text), dtype=str, keep_default_na=False)
    assert len(df) == 2
    director = df[df["role"] == "DIRECTOR"].iloc[0]
    assert director["manager_employee_number"] == ceo.employee.employee_number
    assert director["department"] == "R&D"


async def test_import_creates_valid_rows_and_reports_invalid(client, ceo):
    csv = (
        "employee_number,name,surname,role,department,manager_employee_number\n"
        f"D-1,Dana,Scully,DIRECTOR,Ops,{ceo.employee.employee_number}\n"
        "M-1,Fox,Mulder,MANAGER,Ops,D-1\n"
        "X-1,Walter,Skinner,CTO,Ops,M-1\n"
        "X-2,No,Boss,INTERN,Ops,NOPE\n"
        "X-3,Bad,Role,JANITOR,Ops,\n"
        "X-4,The,Boss,CEO,,\n"
    ).encode()

    response = await client.post("/api/employees/import", files=upload(csv), headers=ceo.headers)

    assert response.status_code == 200
    result = response.json()
    assert result["created"] == 2
    errors = {e["row"]: e["code"] for e in result["errors"]}
    assert errors == {
        4: "RANK_VIOLATION",
        5: "MANAGER_NOT_FOUND",
        6: "VALIDATION_ERROR",
        7: "INSUFFICIENT_PERMISSION",
    }

    response = await client.get("/api/employees", params={"search": "Mulder"}, headers=ceo.headers)
    mulder = response.json()["employees"][0]
    assert mulder["manager"]["employee_number"] == "D-1"


async def test_import_xlsx(client, ceo):
    buffer = BytesIO()
    pd.DataFrame([
        {"employee_number": "T-1", "name": "Tess", "surname": "Ting", "role": "INTERN", "birth_date": "2001-02-03"},
    ]).to_excel(buffer, index=False, engine="openpyxl")

    response = await client.post(
        "/api/employees/import",
        files=upload(
            buffer.getvalue(),
            filename="employees.xlsx",
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        ),
        headers=ceo.headers,
    )

    assert response.json() == {"created": 1, "errors": []}


async def test_import_missing_columns(client, ceo):
    response = await client.post(
        "/api/employees/import", files=upload(b"name,surname\nA,B\n"), headers=ceo.headers
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_FILE"


async def test_import_unsupported_format(client, ceo):
    response = await client.post(
        "/api/employees/import", files=upload(b"{}", filename="employees.json"), headers=ceo.headers
    )
    assert response.status_code == 400


async def test_import_requires_admin(client, account_factory):
    viewer = await account_factory(UserRole.VIEWER)
    response = await client.post(
        "/api/employees/import", files=upload(b"employee_number,name,surname,role\n"), headers=viewer.headers
    )
    assert response.status_code == 403


async def test_export_reimports_when_numbers_sort_before_manager(client, ceo, employee_factory):
    manager = await employee_factory(EmployeeRole.MANAGER, manager_id=ceo.employee.id, employee_number="Z-MGR")
    dev = await employee_factory(EmployeeRole.JUNIOR_EMPLOYEE, manager_id=manager.id, employee_number="A-DEV")

    exported = (await client.get("/api/employees/export", headers=ceo.headers)).text
    assert exported.index("Z-MGR,") < exported.index("A-DEV,")

    for employee in (dev, manager):
        response = await client.delete(f"/api/employees/{employee.id}", headers=ceo.headers)
        assert response.status_code == 200

    response = await client.post("/api/employees/import", files=upload(exported.encode()), headers=ceo.headers)

    result = response.json()
    assert result["created"] == 2
    # Only the existing CEO row is refused
    assert [(e["row"], e["code"]) for e in result["errors"]] == [(2, "INSUFFICIENT_PERMISSION")]

    response = await client.get("/api/employees", params={"search": "A-DEV"}, headers=ceo.headers)
    assert response.json()["employees"][0]["manager"]["employee_number"] == "Z-MGR"
