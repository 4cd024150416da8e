"""
Payment engine: settles a list of debts with one amount and reverses single payments.

Each call is one unit of work; payments, debt balances and ledger events are
committed together or rolled back together.
"""

import time
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.debts.service import debt_with_names_query, has_active_payments
from app.api.v1.payment_plans.service import refresh_plan_status
from app.core.enums import OPEN_DEBT_STATUSES, LedgerAction, PaymentStatus
from app.core.exceptions import NotFoundError, ValidationError
from app.core.ledger import OpenDebt, allocate_payment, debt_display_name, derive_status, school_today
from app.core.ledger_events import debt_snapshot, record_event
from app.core.logger import log
from app.core.models import DebtConcept, Payment, PaymentPlan, Student, StudentDebt
from app.core.money import round_money, to_decimal

from .schemas import PaidConcept, PaymentCreate, PaymentResponse, ReceiptResponse


def generate_receipt_number() -> str:
    return f"REC-{int(time.time() * 1000)}"


def _payment_snapshot(p: Payment) -> dict:
    return {
        "amount": str(p.amount),
        "debt_id": str(p.debt_id) if p.debt_id else None,
        "status": p.status,
        "receipt_number": p.receipt_number,
    }


def _to_response(p: Payment, concept_name: Optional[str] = None) -> PaymentResponse:
    return PaymentResponse(
        id=p.id,
        student_id=p.student_id,
        debt_id=p.debt_id,
        concept_name=concept_name,
        amount=to_decimal(p.amount),
        payment_date=p.payment_date,
        payment_method=p.payment_method,
        receipt_number=p.receipt_number,
        notes=p.notes,
        registered_by=p.registered_by,
        status=p.status,
        cancelled_at=p.cancelled_at,
        cancelled_by=p.cancelled_by,
        created_at=p.created_at,
    )


async def _load_selected_debts(
    db: AsyncSession,
    student_id: UUID,
    debt_ids: List[UUID],
) -> Dict[UUID, tuple]:
    if not debt_ids:
        raise ValidationError("At least one debt must be selected")
    if len(set(debt_ids)) != len(debt_ids):
        raise ValidationError("A debt cannot be selected more than once")
    result = await db.execute(debt_with_names_query().where(StudentDebt.id.in_(debt_ids)))
    rows = {debt.id: (debt, c_name, p_name) for debt, c_name, p_name in result.all()}
    for debt_id in debt_ids:
        row = rows.get(debt_id)
        if row is None:
            raise ValidationError(f"Debt {debt_id} not found")
        debt = row[0]
        if debt.student_id != student_id:
            raise ValidationError(f"Debt {debt_id} does not belong to this student")
        if debt.status not in OPEN_DEBT_STATUSES:
            raise ValidationError(f"Debt {debt_id} is already paid")
    return rows


async def apply_payment(
    db: AsyncSession,
    payload: PaymentCreate,
    registered_by: Optional[UUID] = None,
) -> ReceiptResponse:
    """
    Apply ``payload.amount`` to the selected debts in the given order.

    All validation runs before the first write; a rejected payment leaves the
    ledger untouched.
    """
    student = await db.get(Student, payload.student_id)
    if not student:
        raise NotFoundError("Student not found")
    rows = await _load_selected_debts(db, payload.student_id, payload.debt_ids)
    allocations = allocate_payment(
        [OpenDebt(id=debt_id, balance=to_decimal(rows[debt_id][0].amount)) for debt_id in payload.debt_ids],
        payload.amount,
    )

    receipt_number = (payload.receipt_number or "").strip() or generate_receipt_number()
    payment_date = payload.payment_date or school_today()
    payments: List[Payment] = []
    paid_concepts: List[PaidConcept] = []
    touched_plans = set()
    try:
        for alloc in allocations:
            debt, concept_name, plan_name = rows[alloc.debt_id]
            old = debt_snapshot(debt)
            payment = Payment(
                student_id=payload.student_id,
                debt_id=debt.id,
                amount=alloc.applied,
                payment_date=payment_date,
                payment_method=payload.payment_method,
                receipt_number=receipt_number,
                notes=payload.notes,
                registered_by=registered_by,
                status=PaymentStatus.active.value,
            )
            db.add(payment)
            debt.amount = alloc.new_balance
            debt.status = alloc.status.value
            await db.flush()
            payments.append(payment)
            paid_concepts.append(
                PaidConcept(
                    name=debt_display_name(concept_name, plan_name, debt.installment_number),
                    amount=alloc.applied,
                )
            )
            if debt.payment_plan_id:
                touched_plans.add(debt.payment_plan_id)

            await record_event(
                db, debt.student_id, "payments", payment.id,
                LedgerAction.CREATE, None, _payment_snapshot(payment), registered_by,
            )
            await record_event(
                db, debt.student_id, "student_debts", debt.id,
                LedgerAction.PAYMENT, old, debt_snapshot(debt), registered_by,
            )
        for plan_id in touched_plans:
            await refresh_plan_status(db, plan_id)
        await db.commit()
    except Exception:
        await db.rollback()
        log.error(f"Payment for student {payload.student_id} rolled back")
        raise

    total = round_money(sum((a.applied for a in allocations), to_decimal(0)))
    log.info(
        f"Payment {receipt_number}: {total} applied to {len(allocations)} debt(s) "
        f"of student {payload.student_id}"
    )
    return ReceiptResponse(
        receipt_number=receipt_number,
        payment_date=payment_date,
        student_name=student.full_name,
        student_identification=student.identification,
        payment_method=payload.payment_method,
        amount=total,
        paid_concepts=paid_concepts,
        notes=payload.notes,
        payment_ids=[p.id for p in payments],
    )


async def cancel_payment(
    db: AsyncSession,
    payment_id: UUID,
    cancelled_by: Optional[UUID] = None,
) -> PaymentResponse:
    """Reverse one payment row and give its amount back to the debt."""
    payment = await db.get(Payment, payment_id)
    if not payment:
        raise NotFoundError("Payment not found")
    if payment.status != PaymentStatus.active.value:
        raise ValidationError("Only active payments can be cancelled")

    try:
        old_payment = _payment_snapshot(payment)
        payment.status = PaymentStatus.cancelled.value
        payment.cancelled_at = datetime.now(timezone.utc)
        payment.cancelled_by = cancelled_by
        await record_event(
            db, payment.student_id, "payments", payment.id,
            LedgerAction.CANCEL, old_payment, _payment_snapshot(payment), cancelled_by,
        )

        if payment.debt_id:
            debt = await db.get(StudentDebt, payment.debt_id)
            if debt:
                old_debt = debt_snapshot(debt)
                debt.amount = round_money(to_decimal(debt.amount) + to_decimal(payment.amount))
                still_paid = await has_active_payments(db, debt.id, exclude_payment_id=payment.id)
                debt.status = derive_status(debt.amount, still_paid).value
                await record_event(
                    db, debt.student_id, "student_debts", debt.id,
                    LedgerAction.RESTORE, old_debt, debt_snapshot(debt), cancelled_by,
                )
                if debt.payment_plan_id:
                    await refresh_plan_status(db, debt.payment_plan_id)
        await db.commit()
    except Exception:
        await db.rollback()
        log.error(f"Cancellation of payment {payment_id} rolled back")
        raise

    log.info(f"Payment {payment_id} cancelled, {payment.amount} restored")
    return await get_payment(db, payment_id)


def _payment_query():
    return (
        select(Payment, DebtConcept.name, PaymentPlan.name, StudentDebt.installment_number)
        .outerjoin(StudentDebt, Payment.debt_id == StudentDebt.id)
        .outerjoin(DebtConcept, StudentDebt.concept_id == DebtConcept.id)
        .outerjoin(PaymentPlan, StudentDebt.payment_plan_id == PaymentPlan.id)
    )


async def list_payments(
    db: AsyncSession,
    student_id: Optional[UUID] = None,
    status: Optional[PaymentStatus] = None,
) -> List[PaymentResponse]:
    stmt = _payment_query()
    if student_id is not None:
        stmt = stmt.where(Payment.student_id == student_id)
    if status is not None:
        stmt = stmt.where(Payment.status == status.value)
    stmt = stmt.order_by(Payment.payment_date.desc(), Payment.created_at.desc())
    result = await db.execute(stmt)
    return [
        _to_response(p, debt_display_name(c_name, p_name, n) if p.debt_id else None)
        for p, c_name, p_name, n in result.all()
    ]


async def get_payment(db: AsyncSession, payment_id: UUID) -> Optional[PaymentResponse]:
    row = (await db.execute(_payment_query().where(Payment.id == payment_id))).one_or_none()
    if not row:
        return None
    p, c_name, p_name, n = row
    return _to_response(p, debt_display_name(c_name, p_name, n) if p.debt_id else None)


async def get_receipt(db: AsyncSession, payment_id: UUID) -> ReceiptResponse:
    """Rebuild the receipt of the settlement a payment belongs to (same receipt number)."""
    payment = await db.get(Payment, payment_id)
    if not payment:
        raise NotFoundError("Payment not found")
    student = await db.get(Student, payment.student_id)

    stmt = _payment_query().where(Payment.student_id == payment.student_id)
    if payment.receipt_number:
        stmt = stmt.where(Payment.receipt_number == payment.receipt_number)
    else:
        stmt = stmt.where(Payment.id == payment.id)
    rows = (await db.execute(stmt.order_by(Payment.created_at))).all()

    return ReceiptResponse(
        receipt_number=payment.receipt_number or str(payment.id),
        payment_date=payment.payment_date,
        student_name=student.full_name if student else "",
        student_identification=student.identification if student else None,
        payment_method=payment.payment_method,
        amount=round_money(sum((to_decimal(p.amount) for p, *_ in rows), to_decimal(0))),
        paid_concepts=[
            PaidConcept(name=debt_display_name(c_name, p_name, n), amount=to_decimal(p.amount))
            for p, c_name, p_name, n in rows
        ],
        notes=payment.notes,
        payment_ids=[p.id for p, *_ in rows],
    )
