import pytest
from httpx import AsyncClient


async def _create(client: AsyncClient, headers, email="maria@colegio.edu.py", password="clave123", role="user"):
    return await client.post(
        "/api/v1/users",
        json={"email": email, "password": password, "full_name": "María López", "role": role},
        headers=headers,
    )


@pytest.mark.asyncio
async def test_admin_creates_user(client: AsyncClient, admin_headers) -> None:
    resp = await _create(client, admin_headers)
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "User created successfully"
    assert body["user_id"]

    login = await client.post(
        "/api/v1/auth/login", json={"email": "maria@colegio.edu.py", "password": "clave123"}
    )
    assert login.status_code == 200
    assert login.json()["user"]["roles"] == ["user"]
    assert login.json()["user"]["portal"] == "ADMIN"


@pytest.mark.asyncio
async def test_create_user_validation(client: AsyncClient, admin_headers) -> None:
    short = await _create(client, admin_headers, password="12345")
    assert short.status_code == 400
    assert short.json()["success"] is False
    assert "at least 6" in short.json()["error"]

    assert (await _create(client, admin_headers)).status_code == 200
    dup = await _create(client, admin_headers, email="MARIA@colegio.edu.py")
    assert dup.status_code == 400
    assert dup.json() == {"success": False, "error": "Email is already registered"}


@pytest.mark.asyncio
async def test_non_admin_is_forbidden(client: AsyncClient, staff_headers) -> None:
    resp = await _create(client, staff_headers)
    assert resp.status_code == 403
    assert resp.json() == {"success": False, "error": "Only administrators can perform this action"}

    assert (await client.get("/api/v1/users", headers=staff_headers)).status_code == 403


@pytest.mark.asyncio
async def test_missing_token_is_unauthorized(client: AsyncClient) -> None:
    resp = await client.post("/api/v1/users", json={"email": "x@colegio.edu.py", "password": "clave123"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_admin_cannot_delete_self(client: AsyncClient, admin_user, admin_headers) -> None:
    resp = await client.delete(f"/api/v1/users/{admin_user.id}", headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_delete_reset_and_assign_role(client: AsyncClient, admin_headers) -> None:
    user_id = (await _create(client, admin_headers, role=None)).json()["user_id"]

    users = (await client.get("/api/v1/users", headers=admin_headers)).json()["users"]
    created = [u for u in users if u["id"] == user_id][0]
    assert created["roles"] == []
    assert created["portal"] == "UNASSIGNED"

    resp = await client.put(f"/api/v1/users/{user_id}/role", json={"role": "parent"}, headers=admin_headers)
    assert resp.json()["success"] is True
    users = (await client.get("/api/v1/users", headers=admin_headers)).json()["users"]
    assert [u for u in users if u["id"] == user_id][0]["portal"] == "PARENT"

    short = await client.post(
        f"/api/v1/users/{user_id}/reset-password", json={"new_password": "abc"}, headers=admin_headers
    )
    assert short.status_code == 400
    resp = await client.post(
        f"/api/v1/users/{user_id}/reset-password", json={"new_password": "nueva-clave"}, headers=admin_headers
    )
    assert resp.status_code == 200
    login = await client.post(
        "/api/v1/auth/login", json={"email": "maria@colegio.edu.py", "password": "nueva-clave"}
    )
    assert login.status_code == 200

    resp = await client.delete(f"/api/v1/users/{user_id}", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["message"] == "User deleted successfully"
    users = (await client.get("/api/v1/users", headers=admin_headers)).json()["users"]
    assert user_id not in [u["id"] for u in users]

    missing = await client.delete(f"/api/v1/users/{user_id}", headers=admin_headers)
    assert missing.status_code == 404
