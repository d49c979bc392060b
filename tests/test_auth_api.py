"""Account endpoints"""
from employee_service.app.models import EmployeeRole, UserRole


async def register(client, email, password="secret123", name="Test User"):
    return await client.post("/api/auth/register", json={"email": email, "password": password, "name": name})


async def test_first_account_is_admin_then_viewers(client):
    first = await register(client, "first@example.com")
    second = await register(client, "second@example.com")

    assert first.status_code == 201
    assert first.json()["user"]["role"] == "ADMIN"
    assert first.json()["token"]
    assert second.json()["user"]["role"] == "VIEWER"


async def test_register_duplicate_email(client):
    await register(client, "dup@example.com")
    response = await register(client, "DUP@example.com")
    assert response.status_code == 409


async def test_register_short_password(client):
    response = await register(client, "short@example.com", password="12345")
    assert response.status_code == 422


async def test_login_and_me(client):
    await register(client, "me@example.com", name="Me Myself")

    response = await client.post("/api/auth/login", json={"email": "me@example.com", "password": "secret123"})
    assert response.status_code == 200
    token = response.json()["token"]

    response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["email"] == "me@example.com"
    assert response.json()["employee"] is None


async def test_login_wrong_password(client):
    await register(client, "me@example.com")
    response = await client.post("/api/auth/login", json={"email": "me@example.com", "password": "nope-nope"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "AUTH_ERROR"


async def test_invalid_token(client):
    response = await client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


async def test_create_user_linked_to_employee(client, account_factory, employee_factory):
    admin = await account_factory(UserRole.ADMIN)
    employee = await employee_factory(EmployeeRole.MANAGER)

    response = await client.post(
        "/api/auth/create-user",
        json={"email": "mgr@example.com", "password": "secret123", "name": "Mgr", "employee_id": employee.id},
        headers=admin.headers,
    )
    assert response.status_code == 201
    body = response.json()
    assert body["role"] == "VIEWER"
    assert body["employee"]["id"] == employee.id
    assert body["employee"]["role"] == "MANAGER"

    response = await client.post(
        "/api/auth/create-user",
        json={"email": "other@example.com", "password": "secret123", "name": "Other", "employee_id": employee.id},
        headers=admin.headers,
    )
    assert response.status_code == 409


async def test_create_user_requires_admin(client, account_factory):
    viewer = await account_factory(UserRole.VIEWER)
    response = await client.post(
        "/api/auth/create-user",
        json={"email": "x@example.com", "password": "secret123", "name": "X"},
        headers=viewer.headers,
    )
    assert response.status_code == 403


async def test_link_and_unlink(client, account_factory, employee_factory):
    admin = await account_factory(UserRole.ADMIN)
    target = await account_factory(UserRole.VIEWER)
    first = await employee_factory(EmployeeRole.INTERN)
    second = await employee_factory(EmployeeRole.INTERN)

    response = await client.post(
        "/api/auth/link-user", json={"user_id": target.user.id, "employee_id": first.id}, headers=admin.headers
    )
    assert response.json()["employee"]["id"] == first.id

    # Relinking moves the account off the previous employee
    response = await client.post(
        "/api/auth/link-user", json={"user_id": target.user.id, "employee_id": second.id}, headers=admin.headers
    )
    assert response.json()["employee"]["id"] == second.id

    response = await client.get("/api/employees/available-for-users", headers=admin.headers)
    assert [e["id"] for e in response.json()] == [first.id]

    response = await client.post(
        "/api/auth/link-user", json={"user_id": target.user.id, "employee_id": None}, headers=admin.headers
    )
    assert response.json()["employee"] is None


async def test_linked_account_acts_with_employee_rank(client, account_factory, employee_factory):
    admin = await account_factory(UserRole.ADMIN)
    lead = await employee_factory(EmployeeRole.TEAM_LEAD)

    await client.post(
        "/api/auth/create-user",
        json={"email": "lead@example.com", "password": "secret123", "name": "Lead", "role": "ADMIN", "employee_id": lead.id},
        headers=admin.headers,
    )
    login = await client.post("/api/auth/login", json={"email": "lead@example.com", "password": "secret123"})
    headers = {"Authorization": f"Bearer {login.json()['token']}"}

    response = await client.post(
        "/api/employees",
        json={"employee_number": "M9", "name": "A", "surname": "B", "role": "MANAGER"},
        headers=headers,
    )
    assert response.status_code == 403

    response = await client.post(
        "/api/employees",
        json={"employee_number": "I9", "name": "A", "surname": "B", "role": "INTERN", "manager_id": lead.id},
        headers=headers,
    )
    assert response.status_code == 201


async def test_profile_photo(client, account_factory):
    account = await account_factory(UserRole.VIEWER)

    response = await client.put(
        "/api/auth/profile-photo", json={"photo_url": "https://cdn.example.com/p.png"}, headers=account.headers
    )
    assert response.json()["profile_photo_url"] == "https://cdn.example.com/p.png"

    response = await client.delete("/api/auth/profile-photo", headers=account.headers)
    assert response.json()["profile_photo_url"] is None
