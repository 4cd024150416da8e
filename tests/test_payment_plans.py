from datetime import date
from decimal import Decimal
from uuid import UUID

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.payment_plans import service as plan_service
from app.api.v1.payment_plans.schemas import PaymentPlanCreate
from app.core.models import DebtConcept, PaymentPlan, StudentDebt

from .helpers import create_student


async def _create_plan(client: AsyncClient, headers, student_id, total, count, start="2025-01-15", name="Plan 2025"):
    return await client.post(
        "/api/v1/payment-plans",
        json={
            "student_id": student_id,
            "name": name,
            "total_amount": str(total),
            "number_of_installments": count,
            "start_date": start,
        },
        headers=headers,
    )


@pytest.mark.asyncio
async def test_create_plan_generates_installments(
    client: AsyncClient, staff_headers, db_session: AsyncSession
) -> None:
    student = await create_student(client, staff_headers)
    resp = await _create_plan(client, staff_headers, student["id"], 120000, 12)
    assert resp.status_code == 201, resp.text
    plan = resp.json()

    assert Decimal(plan["monthly_payment"]) == Decimal("10000")
    assert Decimal(plan["rounding_difference"]) == Decimal("0")
    assert plan["status"] == "active"
    installments = plan["installments"]
    assert len(installments) == 12
    assert [i["installment_number"] for i in installments] == list(range(1, 13))
    assert all(Decimal(i["amount"]) == Decimal("10000") for i in installments)
    dues = [date.fromisoformat(i["due_date"]) for i in installments]
    assert dues[0] == date(2025, 1, 15)
    assert all(d.day == 15 for d in dues)
    assert [d.month for d in dues] == list(range(1, 13))
    assert installments[0]["display_name"] == "Plan 2025 - Cuota 1"
    assert installments[2]["notes"] == "Plan 2025 - Cuota 3 de 12"

    concept = (
        await db_session.execute(select(DebtConcept).where(DebtConcept.name == "Cuota Plan de Pago"))
    ).scalar_one()
    assert concept.amount == Decimal("0")

    # The generic concept is reused by later plans
    await _create_plan(client, staff_headers, student["id"], 30000, 3, name="Plan B")
    concepts = (
        await db_session.execute(select(DebtConcept).where(DebtConcept.name == "Cuota Plan de Pago"))
    ).scalars().all()
    assert len(concepts) == 1


@pytest.mark.asyncio
async def test_plan_keeps_rounding_drift(client: AsyncClient, staff_headers) -> None:
    student = await create_student(client, staff_headers)
    plan = (await _create_plan(client, staff_headers, student["id"], 100, 3)).json()
    assert [Decimal(i["amount"]) for i in plan["installments"]] == [Decimal("33")] * 3
    assert Decimal(plan["rounding_difference"]) == Decimal("1")


@pytest.mark.asyncio
@pytest.mark.parametrize("total,count", [(0, 3), (1000, 0), (1, 3)])
async def test_invalid_plans_rejected(client: AsyncClient, staff_headers, total, count) -> None:
    student = await create_student(client, staff_headers)
    resp = await _create_plan(client, staff_headers, student["id"], total, count)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_plan_completes_when_all_installments_paid(client: AsyncClient, staff_headers) -> None:
    student = await create_student(client, staff_headers)
    plan = (await _create_plan(client, staff_headers, student["id"], 20000, 2)).json()
    debt_ids = [i["id"] for i in plan["installments"]]

    receipt = (
        await client.post(
            "/api/v1/payments",
            json={"student_id": student["id"], "debt_ids": debt_ids, "amount": "20000"},
            headers=staff_headers,
        )
    ).json()
    assert [c["name"] for c in receipt["paid_concepts"]] == ["Plan 2025 - Cuota 1", "Plan 2025 - Cuota 2"]

    detail = (await client.get(f"/api/v1/payment-plans/{plan['id']}", headers=staff_headers)).json()
    assert detail["status"] == "completed"
    assert detail["paid_installments"] == 2
    assert Decimal(detail["paid_amount"]) == Decimal("20000")

    await client.post(f"/api/v1/payments/{receipt['payment_ids'][1]}/cancel", headers=staff_headers)
    detail = (await client.get(f"/api/v1/payment-plans/{plan['id']}", headers=staff_headers)).json()
    assert detail["status"] == "active"
    assert detail["paid_installments"] == 1


@pytest.mark.asyncio
async def test_update_plan_only_touches_name_and_description(client: AsyncClient, staff_headers) -> None:
    student = await create_student(client, staff_headers)
    plan = (await _create_plan(client, staff_headers, student["id"], 30000, 3)).json()

    resp = await client.patch(
        f"/api/v1/payment-plans/{plan['id']}",
        json={"name": "Plan renombrado", "description": "Acuerdo con la familia", "total_amount": "1"},
        headers=staff_headers,
    )
    assert resp.status_code == 200
    updated = resp.json()
    assert updated["name"] == "Plan renombrado"
    assert updated["description"] == "Acuerdo con la familia"
    assert Decimal(updated["total_amount"]) == Decimal("30000")


@pytest.mark.asyncio
async def test_delete_plan(client: AsyncClient, staff_headers) -> None:
    student = await create_student(client, staff_headers)
    unused = (await _create_plan(client, staff_headers, student["id"], 30000, 3, name="Sin pagos")).json()
    used = (await _create_plan(client, staff_headers, student["id"], 30000, 3, name="Con pagos")).json()
    await client.post(
        "/api/v1/payments",
        json={"student_id": student["id"], "debt_ids": [used["installments"][0]["id"]], "amount": "5000"},
        headers=staff_headers,
    )

    assert (await client.delete(f"/api/v1/payment-plans/{used['id']}", headers=staff_headers)).status_code == 409
    assert (await client.delete(f"/api/v1/payment-plans/{unused['id']}", headers=staff_headers)).status_code == 204

    plans = (await client.get(f"/api/v1/payment-plans?student_id={student['id']}", headers=staff_headers)).json()
    assert [p["name"] for p in plans] == ["Con pagos"]
    debts = (await client.get(f"/api/v1/debts/student/{student['id']}", headers=staff_headers)).json()
    assert len(debts) == 3


@pytest.mark.asyncio
async def test_installment_concept_cannot_be_charged_directly(
    client: AsyncClient, staff_headers, db_session: AsyncSession
) -> None:
    student = await create_student(client, staff_headers)
    await _create_plan(client, staff_headers, student["id"], 30000, 3)
    concept = (
        await db_session.execute(select(DebtConcept).where(DebtConcept.name == "Cuota Plan de Pago"))
    ).scalar_one()

    resp = await client.post(
        "/api/v1/students",
        json={"first_name": "Luis", "last_name": "Ortiz", "concept_ids": [str(concept.id)]},
        headers=staff_headers,
    )
    assert resp.status_code == 400

    resp = await client.post(
        f"/api/v1/debts/student/{student['id']}/concepts",
        json={"concept_ids": [str(concept.id)]},
        headers=staff_headers,
    )
    assert resp.status_code == 400

    debts = (await client.get(f"/api/v1/debts/student/{student['id']}", headers=staff_headers)).json()
    assert len(debts) == 3
    assert all(Decimal(d["amount"]) > Decimal("0.01") for d in debts)
    students = (await client.get("/api/v1/students", headers=staff_headers)).json()
    assert [s["first_name"] for s in students] == ["Ana"]


@pytest.mark.asyncio
async def test_failed_plan_creation_commits_nothing(
    client: AsyncClient, staff_headers, db_session: AsyncSession, monkeypatch
) -> None:
    student = await create_student(client, staff_headers)

    async def failing_record_event(*args, **kwargs):
        raise RuntimeError("ledger write failed")

    monkeypatch.setattr(plan_service, "record_event", failing_record_event)
    payload = PaymentPlanCreate(
        student_id=UUID(student["id"]),
        name="Plan 2025",
        total_amount=Decimal("120000"),
        number_of_installments=12,
        start_date=date(2025, 1, 15),
    )
    with pytest.raises(RuntimeError):
        await plan_service.create_plan(db_session, payload)

    for model in (PaymentPlan, StudentDebt, DebtConcept):
        assert (await db_session.execute(select(func.count(model.id)))).scalar() == 0
    resp = await client.get(f"/api/v1/payment-plans?student_id={student['id']}", headers=staff_headers)
    assert resp.status_code == 200
    assert resp.json() == []
