from datetime import date
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.ledger import add_months, school_today
from app.core.models import DebtConcept

from .helpers import create_concept, create_student, open_debts


@pytest.mark.asyncio
async def test_student_creation_charges_selected_concepts(client: AsyncClient, staff_headers) -> None:
    concept = await create_concept(client, staff_headers, "Matrícula", 450000)
    student = await create_student(client, staff_headers, concept_ids=[concept["id"]])

    debts = await open_debts(client, staff_headers, student["id"])
    assert len(debts) == 1
    debt = debts[0]
    assert Decimal(debt["amount"]) == Decimal("450000")
    assert debt["status"] == "pending"
    assert debt["notes"] == "Deuda asignada al crear estudiante - Matrícula"
    assert date.fromisoformat(debt["due_date"]) == add_months(school_today(), 1)
    assert debt["display_name"] == "Matrícula"
    assert debt["is_overdue"] is False


@pytest.mark.asyncio
async def test_assign_concepts_later(client: AsyncClient, staff_headers) -> None:
    student = await create_student(client, staff_headers)
    concept = await create_concept(client, staff_headers, "Cuota Agosto", 300000)

    resp = await client.post(
        f"/api/v1/debts/student/{student['id']}/concepts",
        json={"concept_ids": [concept["id"]], "due_date": "2000-01-10"},
        headers=staff_headers,
    )
    assert resp.status_code == 201, resp.text
    created = resp.json()
    assert created[0]["notes"] == "Concepto agregado - Cuota Agosto"
    assert created[0]["is_overdue"] is True

    summary = (
        await client.get(f"/api/v1/debts/student/{student['id']}/summary", headers=staff_headers)
    ).json()
    assert summary["open_count"] == 1
    assert summary["overdue_count"] == 1
    assert Decimal(summary["open_total"]) == Decimal("300000")


@pytest.mark.asyncio
async def test_assign_inactive_concept_rejected(client: AsyncClient, staff_headers) -> None:
    student = await create_student(client, staff_headers)
    concept = await create_concept(client, staff_headers, "Viejo", 1000)
    await client.patch(
        f"/api/v1/debt-concepts/{concept['id']}", json={"is_active": False}, headers=staff_headers
    )
    resp = await client.post(
        f"/api/v1/debts/student/{student['id']}/concepts",
        json={"concept_ids": [concept["id"]]},
        headers=staff_headers,
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_two_late_fees_accumulate(client: AsyncClient, staff_headers) -> None:
    concept = await create_concept(client, staff_headers, "Cuota Septiembre", 300000)
    student = await create_student(client, staff_headers, concept_ids=[concept["id"]])
    debt_id = (await open_debts(client, staff_headers, student["id"]))[0]["id"]

    for _ in range(2):
        resp = await client.post(
            f"/api/v1/debts/{debt_id}/late-fee", json={"fee_amount": "10000"}, headers=staff_headers
        )
        assert resp.status_code == 200, resp.text

    debt = resp.json()
    assert Decimal(debt["amount"]) == Decimal("320000")
    assert debt["status"] == "pending"
    assert debt["notes"].count("Mora aplicada: 10.000 Gs") == 2
    assert debt["notes"].endswith("Mora aplicada: 10.000 Gs | Mora aplicada: 10.000 Gs")

    history = (await client.get(f"/api/v1/debts/{debt_id}/history", headers=staff_headers)).json()
    assert [e["action"] for e in history] == ["CREATE", "LATE_FEE", "LATE_FEE"]


@pytest.mark.asyncio
async def test_late_fee_on_partially_paid_debt_stays_partial(client: AsyncClient, staff_headers) -> None:
    concept = await create_concept(client, staff_headers, "Cuota Octubre", 300000)
    student = await create_student(client, staff_headers, concept_ids=[concept["id"]])
    debt_id = (await open_debts(client, staff_headers, student["id"]))[0]["id"]
    await client.post(
        "/api/v1/payments",
        json={"student_id": student["id"], "debt_ids": [debt_id], "amount": "100000"},
        headers=staff_headers,
    )

    debt = (
        await client.post(f"/api/v1/debts/{debt_id}/late-fee", json={"fee_amount": 15000}, headers=staff_headers)
    ).json()
    assert debt["status"] == "partial"
    assert Decimal(debt["amount"]) == Decimal("215000")


@pytest.mark.asyncio
@pytest.mark.parametrize("fee", ["0", "-100", "0.001"])
async def test_late_fee_must_be_positive(client: AsyncClient, staff_headers, fee) -> None:
    concept = await create_concept(client, staff_headers, "Cuota Noviembre", 300000)
    student = await create_student(client, staff_headers, concept_ids=[concept["id"]])
    debt_id = (await open_debts(client, staff_headers, student["id"]))[0]["id"]

    resp = await client.post(f"/api/v1/debts/{debt_id}/late-fee", json={"fee_amount": fee}, headers=staff_headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_delete_debt_blocked_by_payment_history(client: AsyncClient, staff_headers) -> None:
    concept = await create_concept(client, staff_headers, "Kermesse", 50000)
    student = await create_student(client, staff_headers, concept_ids=[concept["id"]])
    concept2 = await create_concept(client, staff_headers, "Taller", 20000)
    await client.post(
        f"/api/v1/debts/student/{student['id']}/concepts",
        json={"concept_ids": [concept2["id"]]},
        headers=staff_headers,
    )
    debts = {d["concept_name"]: d for d in await open_debts(client, staff_headers, student["id"])}
    await client.post(
        "/api/v1/payments",
        json={"student_id": student["id"], "debt_ids": [debts["Kermesse"]["id"]], "amount": "1000"},
        headers=staff_headers,
    )

    blocked = await client.delete(f"/api/v1/debts/{debts['Kermesse']['id']}", headers=staff_headers)
    assert blocked.status_code == 409
    ok = await client.delete(f"/api/v1/debts/{debts['Taller']['id']}", headers=staff_headers)
    assert ok.status_code == 204
    missing = await client.get(f"/api/v1/debts/{debts['Taller']['id']}", headers=staff_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_zero_amount_concept_is_not_charged(
    client: AsyncClient, staff_headers, db_session: AsyncSession
) -> None:
    concept = DebtConcept(name="Donación voluntaria", amount=Decimal("0"), is_active=True)
    db_session.add(concept)
    await db_session.commit()
    student = await create_student(client, staff_headers)

    resp = await client.post(
        f"/api/v1/debts/student/{student['id']}/concepts",
        json={"concept_ids": [str(concept.id)]},
        headers=staff_headers,
    )
    assert resp.status_code == 400
    assert await open_debts(client, staff_headers, student["id"]) == []
