"""Guardian links between parent accounts and students."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User, UserRole
from app.core.enums import AppRole
from app.core.exceptions import ConstraintError, NotFoundError
from app.core.logger import log
from app.core.models import Student, StudentGuardian

from .schemas import GuardianLinkCreate, GuardianResponse


def _to_response(link: StudentGuardian, user: User) -> GuardianResponse:
    return GuardianResponse(
        id=link.id,
        student_id=link.student_id,
        guardian_user_id=link.guardian_user_id,
        relationship=link.relationship,
        guardian_name=user.full_name,
        guardian_email=user.email,
        created_at=link.created_at,
    )


async def list_guardians(db: AsyncSession, student_id: UUID) -> List[GuardianResponse]:
    result = await db.execute(
        select(StudentGuardian, User)
        .join(User, StudentGuardian.guardian_user_id == User.id)
        .where(StudentGuardian.student_id == student_id)
        .order_by(StudentGuardian.created_at)
    )
    return [_to_response(link, user) for link, user in result.all()]


async def link_guardian(
    db: AsyncSession,
    student_id: UUID,
    payload: GuardianLinkCreate,
) -> GuardianResponse:
    """Link a user to a student and grant the parent role when missing."""
    if not await db.get(Student, student_id):
        raise NotFoundError("Student not found")
    user = await db.get(User, payload.guardian_user_id)
    if not user:
        raise NotFoundError("User not found")

    existing = await db.execute(
        select(StudentGuardian.id).where(
            StudentGuardian.student_id == student_id,
            StudentGuardian.guardian_user_id == payload.guardian_user_id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ConstraintError("This guardian is already assigned to the student")

    has_parent_role = await db.execute(
        select(UserRole.id).where(
            UserRole.user_id == user.id,
            UserRole.role == AppRole.parent.value,
        )
    )
    try:
        if has_parent_role.scalar_one_or_none() is None:
            db.add(UserRole(user_id=user.id, role=AppRole.parent.value))
        link = StudentGuardian(
            student_id=student_id,
            guardian_user_id=user.id,
            relationship=payload.relationship,
        )
        db.add(link)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConstraintError("This guardian is already assigned to the student")
    log.info(f"User {user.id} linked as guardian of student {student_id}")
    return _to_response(link, user)


async def unlink_guardian(db: AsyncSession, student_id: UUID, link_id: UUID) -> bool:
    """Remove the link only; the user's parent role is kept."""
    link: Optional[StudentGuardian] = await db.get(StudentGuardian, link_id)
    if not link or link.student_id != student_id:
        return False
    await db.delete(link)
    await db.commit()
    return True
