"""
Payment plan generator: splits a total into fixed monthly installment debts.
"""

from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.debts.service import list_student_debts
from app.core.config import settings
from app.core.enums import DebtStatus, LedgerAction, PaymentPlanStatus, PaymentStatus
from app.core.exceptions import ConstraintError, NotFoundError, ValidationError
from app.core.ledger import installment_schedule
from app.core.ledger_events import debt_snapshot, record_event
from app.core.logger import log
from app.core.models import DebtConcept, Payment, PaymentPlan, Student, StudentDebt
from app.core.money import round_money, to_decimal

from .schemas import PaymentPlanCreate, PaymentPlanDetail, PaymentPlanResponse, PaymentPlanUpdate


def _plan_snapshot(plan: PaymentPlan) -> dict:
    return {
        "name": plan.name,
        "total_amount": str(plan.total_amount),
        "monthly_payment": str(plan.monthly_payment),
        "number_of_installments": plan.number_of_installments,
        "start_date": plan.start_date.isoformat(),
        "status": plan.status,
    }


async def get_or_create_installment_concept(db: AsyncSession) -> DebtConcept:
    """Generic concept every installment debt points at. Looked up by name."""
    result = await db.execute(
        select(DebtConcept).where(DebtConcept.name == settings.installment_concept_name)
    )
    concept = result.scalar_one_or_none()
    if concept:
        return concept
    concept = DebtConcept(
        name=settings.installment_concept_name,
        description="Cuota generada por un plan de pago",
        amount=Decimal("0"),
        is_recurring=False,
        is_active=True,
    )
    db.add(concept)
    await db.flush()
    log.info(f"Created installment concept '{concept.name}'")
    return concept


async def create_plan(
    db: AsyncSession,
    payload: PaymentPlanCreate,
    changed_by: Optional[UUID] = None,
) -> PaymentPlanDetail:
    schedule = installment_schedule(payload.total_amount, payload.number_of_installments, payload.start_date)
    student = await db.get(Student, payload.student_id)
    if not student:
        raise NotFoundError("Student not found")

    name = payload.name.strip()
    try:
        concept = await get_or_create_installment_concept(db)
        plan = PaymentPlan(
            student_id=payload.student_id,
            name=name,
            description=payload.description,
            total_amount=round_money(payload.total_amount),
            monthly_payment=schedule[0].amount,
            number_of_installments=payload.number_of_installments,
            start_date=payload.start_date,
            status=PaymentPlanStatus.active.value,
        )
        db.add(plan)
        await db.flush()

        debts = [
            StudentDebt(
                student_id=payload.student_id,
                concept_id=concept.id,
                amount=line.amount,
                due_date=line.due_date,
                status=DebtStatus.pending.value,
                installment_number=line.installment_number,
                payment_plan_id=plan.id,
                notes=f"{name} - Cuota {line.installment_number} de {payload.number_of_installments}",
            )
            for line in schedule
        ]
        db.add_all(debts)
        await db.flush()

        await record_event(
            db, plan.student_id, "payment_plans", plan.id,
            LedgerAction.CREATE, None, _plan_snapshot(plan), changed_by,
        )
        for debt in debts:
            await record_event(
                db, plan.student_id, "student_debts", debt.id,
                LedgerAction.CREATE, None, debt_snapshot(debt), changed_by,
            )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValidationError("Could not create payment plan")
    except Exception:
        await db.rollback()
        log.error(f"Payment plan for student {payload.student_id} rolled back")
        raise

    log.info(
        f"Payment plan {plan.id} created for student {plan.student_id}: "
        f"{plan.number_of_installments} x {plan.monthly_payment}"
    )
    return await get_plan(db, plan.id)


async def _plan_progress(db: AsyncSession, plan_ids: List[UUID]) -> Dict[UUID, Tuple[int, Decimal]]:
    if not plan_ids:
        return {}
    paid_counts = dict(
        (
            await db.execute(
                select(StudentDebt.payment_plan_id, func.count(StudentDebt.id))
                .where(
                    StudentDebt.payment_plan_id.in_(plan_ids),
                    StudentDebt.status == DebtStatus.paid.value,
                )
                .group_by(StudentDebt.payment_plan_id)
            )
        ).all()
    )
    paid_amounts = dict(
        (
            await db.execute(
                select(StudentDebt.payment_plan_id, func.coalesce(func.sum(Payment.amount), 0))
                .join(Payment, Payment.debt_id == StudentDebt.id)
                .where(
                    StudentDebt.payment_plan_id.in_(plan_ids),
                    Payment.status == PaymentStatus.active.value,
                )
                .group_by(StudentDebt.payment_plan_id)
            )
        ).all()
    )
    return {
        pid: (int(paid_counts.get(pid, 0)), to_decimal(paid_amounts.get(pid, 0)))
        for pid in plan_ids
    }


def _to_response(plan: PaymentPlan, progress: Tuple[int, Decimal]) -> PaymentPlanResponse:
    out = PaymentPlanResponse.model_validate(plan)
    out.rounding_difference = round_money(
        to_decimal(plan.total_amount) - to_decimal(plan.monthly_payment) * plan.number_of_installments
    )
    out.paid_installments, out.paid_amount = progress
    return out


async def list_plans(
    db: AsyncSession,
    student_id: Optional[UUID] = None,
    status: Optional[PaymentPlanStatus] = None,
) -> List[PaymentPlanResponse]:
    stmt = select(PaymentPlan)
    if student_id is not None:
        stmt = stmt.where(PaymentPlan.student_id == student_id)
    if status is not None:
        stmt = stmt.where(PaymentPlan.status == status.value)
    stmt = stmt.order_by(PaymentPlan.created_at.desc())
    plans = list((await db.execute(stmt)).scalars().all())
    progress = await _plan_progress(db, [p.id for p in plans])
    return [_to_response(p, progress[p.id]) for p in plans]


async def get_plan(db: AsyncSession, plan_id: UUID) -> Optional[PaymentPlanDetail]:
    plan = await db.get(PaymentPlan, plan_id)
    if not plan:
        return None
    progress = await _plan_progress(db, [plan.id])
    base = _to_response(plan, progress[plan.id])
    debts = await list_student_debts(db, plan.student_id, open_only=False)
    installments = sorted(
        (d for d in debts if d.payment_plan_id == plan.id),
        key=lambda d: d.installment_number or 0,
    )
    return PaymentPlanDetail(**base.model_dump(), installments=installments)


async def update_plan(
    db: AsyncSession,
    plan_id: UUID,
    payload: PaymentPlanUpdate,
) -> Optional[PaymentPlanDetail]:
    plan = await db.get(PaymentPlan, plan_id)
    if not plan:
        return None
    data = payload.model_dump(exclude_unset=True)
    if data.get("name") is not None:
        plan.name = data["name"].strip()
    if "description" in data:
        plan.description = data["description"]
    await db.commit()
    return await get_plan(db, plan_id)


async def delete_plan(
    db: AsyncSession,
    plan_id: UUID,
    changed_by: Optional[UUID] = None,
) -> bool:
    """Delete the plan and its installment debts. Blocked once any installment has payments."""
    plan = await db.get(PaymentPlan, plan_id)
    if not plan:
        return False
    used = await db.execute(
        select(Payment.id)
        .join(StudentDebt, Payment.debt_id == StudentDebt.id)
        .where(StudentDebt.payment_plan_id == plan_id)
        .limit(1)
    )
    if used.scalar_one_or_none() is not None:
        log.warning(f"Refused to delete payment plan {plan_id}: installments have payments")
        raise ConstraintError("Cannot delete payment plan: installments have registered payments")
    try:
        await record_event(
            db, plan.student_id, "payment_plans", plan.id,
            LedgerAction.DELETE, _plan_snapshot(plan), None, changed_by,
        )
        await db.execute(delete(StudentDebt).where(StudentDebt.payment_plan_id == plan_id))
        await db.delete(plan)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    log.info(f"Payment plan {plan_id} deleted")
    return True


async def refresh_plan_status(db: AsyncSession, plan_id: UUID) -> None:
    """Mark the plan completed when every installment is paid, active otherwise. Caller must commit."""
    plan = await db.get(PaymentPlan, plan_id)
    if not plan or plan.status == PaymentPlanStatus.cancelled.value:
        return
    open_count = (
        await db.execute(
            select(func.count(StudentDebt.id)).where(
                StudentDebt.payment_plan_id == plan_id,
                StudentDebt.status != DebtStatus.paid.value,
            )
        )
    ).scalar()
    plan.status = (
        PaymentPlanStatus.active.value if open_count else PaymentPlanStatus.completed.value
    )
