"""Debt ledger service: concept assignment, late fees, deletion and reads."""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.enums import OPEN_DEBT_STATUSES, DebtStatus, LedgerAction, PaymentStatus
from app.core.exceptions import ConstraintError, NotFoundError, ValidationError
from app.core.ledger import (
    add_months,
    append_note,
    debt_display_name,
    derive_status,
    is_overdue,
    late_fee_note,
    school_today,
)
from app.core.ledger_events import debt_snapshot, record_event
from app.core.logger import log
from app.core.models import DebtConcept, LedgerEvent, Payment, PaymentPlan, Student, StudentDebt
from app.core.money import is_settled, round_money, to_decimal

from .schemas import AssignConceptsRequest, DebtResponse, LedgerEventResponse, StudentDebtSummary


def debt_with_names_query():
    return (
        select(StudentDebt, DebtConcept.name, PaymentPlan.name)
        .outerjoin(DebtConcept, StudentDebt.concept_id == DebtConcept.id)
        .outerjoin(PaymentPlan, StudentDebt.payment_plan_id == PaymentPlan.id)
    )


def _to_response(
    debt: StudentDebt,
    concept_name: Optional[str],
    plan_name: Optional[str],
    today: Optional[date] = None,
) -> DebtResponse:
    return DebtResponse(
        id=debt.id,
        student_id=debt.student_id,
        concept_id=debt.concept_id,
        concept_name=concept_name,
        display_name=debt_display_name(concept_name, plan_name, debt.installment_number),
        amount=to_decimal(debt.amount),
        due_date=debt.due_date,
        status=debt.status,
        installment_number=debt.installment_number,
        payment_plan_id=debt.payment_plan_id,
        plan_name=plan_name,
        notes=debt.notes,
        is_overdue=is_overdue(debt.due_date, today),
        created_at=debt.created_at,
        updated_at=debt.updated_at,
    )


async def has_active_payments(
    db: AsyncSession,
    debt_id: UUID,
    exclude_payment_id: Optional[UUID] = None,
) -> bool:
    stmt = select(Payment.id).where(
        Payment.debt_id == debt_id,
        Payment.status == PaymentStatus.active.value,
    )
    if exclude_payment_id is not None:
        stmt = stmt.where(Payment.id != exclude_payment_id)
    return (await db.execute(stmt.limit(1))).scalar_one_or_none() is not None


async def load_assignable_concepts(db: AsyncSession, concept_ids: List[UUID]) -> List[DebtConcept]:
    """Active catalog concepts by id. The plan installment concept is never charged directly."""
    result = await db.execute(
        select(DebtConcept).where(
            DebtConcept.id.in_(concept_ids),
            DebtConcept.is_active.is_(True),
            DebtConcept.name != settings.installment_concept_name,
        )
    )
    concepts = list(result.scalars().all())
    if len(concepts) != len(set(concept_ids)):
        raise ValidationError("Invalid or inactive debt concept selection")
    return concepts


async def add_concept_debts(
    db: AsyncSession,
    student_id: UUID,
    concepts: List[DebtConcept],
    note_prefix: str,
    changed_by: Optional[UUID],
    due_date: Optional[date] = None,
) -> List[StudentDebt]:
    """Create one pending debt per concept at the concept's amount. Caller must commit."""
    for concept in concepts:
        if is_settled(concept.amount):
            raise ValidationError(f"Debt concept '{concept.name}' has no amount to charge")
    due = due_date or add_months(school_today(), 1)
    created: List[StudentDebt] = []
    for concept in concepts:
        debt = StudentDebt(
            student_id=student_id,
            concept_id=concept.id,
            amount=round_money(concept.amount),
            due_date=due,
            status=DebtStatus.pending.value,
            notes=f"{note_prefix} - {concept.name}",
        )
        db.add(debt)
        created.append(debt)
    await db.flush()
    for debt in created:
        await record_event(
            db, student_id, "student_debts", debt.id,
            LedgerAction.CREATE, None, debt_snapshot(debt), changed_by,
        )
    return created


async def assign_concepts(
    db: AsyncSession,
    student_id: UUID,
    payload: AssignConceptsRequest,
    changed_by: Optional[UUID],
) -> List[DebtResponse]:
    student = await db.get(Student, student_id)
    if not student:
        raise NotFoundError("Student not found")
    concepts = await load_assignable_concepts(db, payload.concept_ids)
    try:
        debts = await add_concept_debts(
            db, student_id, concepts,
            note_prefix="Concepto agregado",
            changed_by=changed_by,
            due_date=payload.due_date,
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    names = {c.id: c.name for c in concepts}
    return [_to_response(d, names.get(d.concept_id), None) for d in debts]


async def list_student_debts(
    db: AsyncSession,
    student_id: UUID,
    open_only: bool = True,
    today: Optional[date] = None,
) -> List[DebtResponse]:
    """Debts ordered by due date, earliest first (the settlement order offered to the cashier)."""
    stmt = debt_with_names_query().where(StudentDebt.student_id == student_id)
    if open_only:
        stmt = stmt.where(StudentDebt.status.in_(OPEN_DEBT_STATUSES))
    stmt = stmt.order_by(StudentDebt.due_date, StudentDebt.installment_number, StudentDebt.created_at)
    result = await db.execute(stmt)
    today = today or school_today()
    return [_to_response(debt, c_name, p_name, today) for debt, c_name, p_name in result.all()]


async def get_debt(db: AsyncSession, debt_id: UUID) -> Optional[DebtResponse]:
    row = (await db.execute(debt_with_names_query().where(StudentDebt.id == debt_id))).one_or_none()
    if not row:
        return None
    debt, c_name, p_name = row
    return _to_response(debt, c_name, p_name)


async def apply_late_fee(
    db: AsyncSession,
    debt_id: UUID,
    fee_amount: Decimal,
    changed_by: Optional[UUID],
) -> DebtResponse:
    """Add a surcharge to the balance and append it to the notes trail. Not idempotent."""
    fee = round_money(fee_amount)
    if fee <= 0:
        raise ValidationError("Late fee amount must be greater than zero")
    debt = await db.get(StudentDebt, debt_id)
    if not debt:
        raise NotFoundError("Debt not found")

    old = debt_snapshot(debt)
    debt.amount = round_money(to_decimal(debt.amount) + fee)
    debt.notes = append_note(debt.notes, late_fee_note(fee))
    debt.status = derive_status(debt.amount, await has_active_payments(db, debt.id)).value
    try:
        await record_event(
            db, debt.student_id, "student_debts", debt.id,
            LedgerAction.LATE_FEE, old, debt_snapshot(debt), changed_by,
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    log.info(f"Late fee {fee} applied to debt {debt_id}; balance now {debt.amount}")
    return await get_debt(db, debt_id)


async def delete_debt(
    db: AsyncSession,
    debt_id: UUID,
    changed_by: Optional[UUID],
) -> bool:
    """Remove a debt line. Blocked while any payment (active or cancelled) references it."""
    debt = await db.get(StudentDebt, debt_id)
    if not debt:
        return False
    used = await db.execute(select(Payment.id).where(Payment.debt_id == debt_id).limit(1))
    if used.scalar_one_or_none() is not None:
        raise ConstraintError("Cannot delete debt: it has payment history")
    await record_event(
        db, debt.student_id, "student_debts", debt.id,
        LedgerAction.DELETE, debt_snapshot(debt), None, changed_by,
    )
    await db.delete(debt)
    await db.commit()
    return True


async def get_debt_history(db: AsyncSession, debt_id: UUID) -> List[LedgerEventResponse]:
    result = await db.execute(
        select(LedgerEvent)
        .where(LedgerEvent.entity_id == debt_id)
        .order_by(LedgerEvent.created_at)
    )
    return [LedgerEventResponse.model_validate(e) for e in result.scalars().all()]


async def get_student_debt_summary(
    db: AsyncSession,
    student_id: UUID,
    today: Optional[date] = None,
) -> StudentDebtSummary:
    today = today or school_today()
    open_filter = (StudentDebt.student_id == student_id, StudentDebt.status.in_(OPEN_DEBT_STATUSES))
    open_total, open_count = (
        await db.execute(
            select(func.coalesce(func.sum(StudentDebt.amount), 0), func.count(StudentDebt.id)).where(*open_filter)
        )
    ).one()
    overdue_count = (
        await db.execute(
            select(func.count(StudentDebt.id)).where(*open_filter, StudentDebt.due_date < today)
        )
    ).scalar()
    paid_count = (
        await db.execute(
            select(func.count(StudentDebt.id)).where(
                StudentDebt.student_id == student_id,
                StudentDebt.status == DebtStatus.paid.value,
            )
        )
    ).scalar()
    return StudentDebtSummary(
        student_id=student_id,
        open_total=to_decimal(open_total),
        open_count=open_count or 0,
        overdue_count=overdue_count or 0,
        paid_count=paid_count or 0,
    )
