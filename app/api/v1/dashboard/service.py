from datetime import date
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import OPEN_DEBT_STATUSES, PaymentStatus
from app.core.ledger import school_today
from app.core.models import Payment, Student, StudentDebt
from app.core.money import to_decimal

from .schemas import DashboardSummary


async def get_summary(db: AsyncSession, today: Optional[date] = None) -> DashboardSummary:
    today = today or school_today()
    total_students = (await db.execute(select(func.count(Student.id)))).scalar() or 0
    active_students = (
        await db.execute(select(func.count(Student.id)).where(Student.is_active.is_(True)))
    ).scalar() or 0
    outstanding = (
        await db.execute(
            select(func.coalesce(func.sum(StudentDebt.amount), 0)).where(
                StudentDebt.status.in_(OPEN_DEBT_STATUSES)
            )
        )
    ).scalar()
    overdue = (
        await db.execute(
            select(func.count(StudentDebt.id)).where(
                StudentDebt.status.in_(OPEN_DEBT_STATUSES),
                StudentDebt.due_date < today,
            )
        )
    ).scalar() or 0
    collected = (
        await db.execute(
            select(func.coalesce(func.sum(Payment.amount), 0)).where(
                Payment.status == PaymentStatus.active.value
            )
        )
    ).scalar()
    return DashboardSummary(
        total_students=total_students,
        active_students=active_students,
        outstanding_total=to_decimal(outstanding),
        overdue_debts=overdue,
        collected_total=to_decimal(collected),
    )
