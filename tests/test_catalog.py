import pytest
from httpx import AsyncClient

from .helpers import auth_headers, create_concept, create_student, make_user


@pytest.mark.asyncio
async def test_debt_concept_crud(client: AsyncClient, staff_headers) -> None:
    concept = await create_concept(client, staff_headers, "Matrícula", 450000)

    dup = await client.post(
        "/api/v1/debt-concepts", json={"name": "Matrícula", "amount": "1"}, headers=staff_headers
    )
    assert dup.status_code == 409

    bad = await client.post(
        "/api/v1/debt-concepts", json={"name": "Gratis", "amount": "0"}, headers=staff_headers
    )
    assert bad.status_code == 422

    resp = await client.patch(
        f"/api/v1/debt-concepts/{concept['id']}", json={"amount": "500000"}, headers=staff_headers
    )
    assert resp.status_code == 200
    assert resp.json()["amount"] in ("500000.00", "500000")

    deleted = await client.delete(f"/api/v1/debt-concepts/{concept['id']}", headers=staff_headers)
    assert deleted.status_code == 200
    assert deleted.json() == {"id": concept["id"], "deleted": True, "archived": False}
    assert (await client.get(f"/api/v1/debt-concepts/{concept['id']}", headers=staff_headers)).status_code == 404


@pytest.mark.asyncio
async def test_referenced_concept_is_archived(client: AsyncClient, staff_headers) -> None:
    concept = await create_concept(client, staff_headers, "Cuota Marzo", 300000)
    await create_student(client, staff_headers, concept_ids=[concept["id"]])

    resp = await client.delete(f"/api/v1/debt-concepts/{concept['id']}", headers=staff_headers)
    assert resp.status_code == 200
    assert resp.json()["archived"] is True

    active = (await client.get("/api/v1/debt-concepts?active_only=true", headers=staff_headers)).json()
    assert concept["id"] not in [c["id"] for c in active]
    everything = (await client.get("/api/v1/debt-concepts", headers=staff_headers)).json()
    assert concept["id"] in [c["id"] for c in everything]


@pytest.mark.asyncio
async def test_grade_crud_and_delete_guard(client: AsyncClient, staff_headers) -> None:
    resp = await client.post(
        "/api/v1/grades",
        json={"name": "1er Grado", "level": 1, "monthly_fee": "250000"},
        headers=staff_headers,
    )
    assert resp.status_code == 201, resp.text
    grade = resp.json()

    assert (
        await client.post("/api/v1/grades", json={"name": "Cero", "level": 0}, headers=staff_headers)
    ).status_code == 422

    student = await client.post(
        "/api/v1/students",
        json={"first_name": "Luis", "last_name": "Gómez", "grade_id": grade["id"]},
        headers=staff_headers,
    )
    assert student.status_code == 201
    assert student.json()["grade"] == "1er Grado"

    blocked = await client.delete(f"/api/v1/grades/{grade['id']}", headers=staff_headers)
    assert blocked.status_code == 409
    assert blocked.json()["detail"] == "Cannot delete grade: there are students associated with it"

    await client.delete(f"/api/v1/students/{student.json()['id']}", headers=staff_headers)
    assert (await client.delete(f"/api/v1/grades/{grade['id']}", headers=staff_headers)).status_code == 204


@pytest.mark.asyncio
async def test_catalog_requires_staff(client: AsyncClient, db_session) -> None:
    nobody = await make_user(db_session, "nobody@colegio.edu.py")
    resp = await client.get("/api/v1/grades", headers=auth_headers(nobody))
    assert resp.status_code == 403
