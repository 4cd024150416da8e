"""Student directory service. Deleting a student removes everything the student owns."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.debts.service import add_concept_debts, load_assignable_concepts
from app.core.enums import OPEN_DEBT_STATUSES
from app.core.exceptions import ValidationError
from app.core.ledger import school_today
from app.core.logger import log
from app.core.models import (
    DebtConcept,
    Grade,
    LedgerEvent,
    Payment,
    PaymentPlan,
    Student,
    StudentDebt,
    StudentGuardian,
)
from app.core.money import to_decimal

from .schemas import StudentCreate, StudentResponse, StudentUpdate, StudentWithBalance


async def _check_grade(db: AsyncSession, grade_id: Optional[UUID]) -> Optional[Grade]:
    if grade_id is None:
        return None
    grade = await db.get(Grade, grade_id)
    if not grade:
        raise ValidationError("Invalid grade")
    return grade


async def create_student(
    db: AsyncSession,
    payload: StudentCreate,
    changed_by: Optional[UUID] = None,
) -> StudentResponse:
    grade = await _check_grade(db, payload.grade_id)

    concepts: List[DebtConcept] = []
    if payload.concept_ids:
        concepts = await load_assignable_concepts(db, payload.concept_ids)

    student = Student(
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        identification=(payload.identification or "").strip() or None,
        date_of_birth=payload.date_of_birth,
        grade=payload.grade or (grade.name if grade else None),
        grade_id=payload.grade_id,
        enrollment_date=payload.enrollment_date or school_today(),
        guardian_name=payload.guardian_name,
        guardian_phone=payload.guardian_phone,
        guardian_email=payload.guardian_email,
        address=payload.address,
        is_active=payload.is_active,
    )
    try:
        db.add(student)
        await db.flush()
        if concepts:
            await add_concept_debts(
                db,
                student.id,
                concepts,
                note_prefix="Deuda asignada al crear estudiante",
                changed_by=changed_by,
            )
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    await db.refresh(student)
    log.info(f"Student {student.id} created with {len(concepts)} concept debt(s)")
    return StudentResponse.model_validate(student)


async def list_students(
    db: AsyncSession,
    search: Optional[str] = None,
    active_only: bool = False,
    grade_id: Optional[UUID] = None,
) -> List[StudentWithBalance]:
    open_subq = (
        select(
            StudentDebt.student_id,
            func.coalesce(func.sum(StudentDebt.amount), 0).label("open_total"),
            func.count(StudentDebt.id).label("open_count"),
        )
        .where(StudentDebt.status.in_(OPEN_DEBT_STATUSES))
        .group_by(StudentDebt.student_id)
    ).subquery()

    stmt = select(
        Student,
        func.coalesce(open_subq.c.open_total, 0),
        func.coalesce(open_subq.c.open_count, 0),
    ).outerjoin(open_subq, open_subq.c.student_id == Student.id)
    if search:
        pattern = f"%{search.strip().lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(Student.first_name).like(pattern),
                func.lower(Student.last_name).like(pattern),
                func.lower(func.coalesce(Student.identification, "")).like(pattern),
            )
        )
    if active_only:
        stmt = stmt.where(Student.is_active.is_(True))
    if grade_id is not None:
        stmt = stmt.where(Student.grade_id == grade_id)
    stmt = stmt.order_by(Student.last_name, Student.first_name)
    result = await db.execute(stmt)
    out = []
    for student, open_total, open_count in result.all():
        row = StudentWithBalance.model_validate(student)
        row.open_debt_total = to_decimal(open_total)
        row.open_debt_count = int(open_count or 0)
        out.append(row)
    return out


async def get_student(db: AsyncSession, student_id: UUID) -> Optional[StudentResponse]:
    student = await db.get(Student, student_id)
    return StudentResponse.model_validate(student) if student else None


async def update_student(
    db: AsyncSession,
    student_id: UUID,
    payload: StudentUpdate,
) -> Optional[StudentResponse]:
    student = await db.get(Student, student_id)
    if not student:
        return None
    data = payload.model_dump(exclude_unset=True)
    if "grade_id" in data:
        await _check_grade(db, data["grade_id"])
    for field in ("first_name", "last_name"):
        if data.get(field) is not None:
            data[field] = data[field].strip()
    for field, value in data.items():
        setattr(student, field, value)
    await db.commit()
    await db.refresh(student)
    return StudentResponse.model_validate(student)


async def delete_student(db: AsyncSession, student_id: UUID) -> bool:
    """Delete the student with guardian links, plans, debts, payments and ledger events."""
    student = await db.get(Student, student_id)
    if not student:
        return False
    try:
        await db.execute(delete(Payment).where(Payment.student_id == student_id))
        await db.execute(delete(LedgerEvent).where(LedgerEvent.student_id == student_id))
        await db.execute(delete(StudentDebt).where(StudentDebt.student_id == student_id))
        await db.execute(delete(PaymentPlan).where(PaymentPlan.student_id == student_id))
        await db.execute(delete(StudentGuardian).where(StudentGuardian.student_id == student_id))
        await db.delete(student)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    log.info(f"Student {student_id} deleted with all owned ledger rows")
    return True

