"""
Ledger event recording. Call on every ledger mutation, before the commit of the same action.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import LedgerAction
from app.core.models import LedgerEvent


async def record_event(
    db: AsyncSession,
    student_id: UUID,
    entity_type: str,
    entity_id: UUID,
    action: LedgerAction,
    old_value: Optional[dict],
    new_value: Optional[dict],
    changed_by: Optional[UUID],
) -> None:
    """Append one ledger event. Caller must commit."""
    db.add(
        LedgerEvent(
            student_id=student_id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=action.value,
            old_value=old_value,
            new_value=new_value,
            changed_by=changed_by,
        )
    )


def debt_snapshot(debt) -> dict:
    return {"amount": str(debt.amount), "status": debt.status, "notes": debt.notes}
