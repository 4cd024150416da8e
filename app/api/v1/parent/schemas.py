from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from app.api.v1.debts.schemas import StudentDebtSummary


class ParentStudentResponse(BaseModel):
    id: UUID
    full_name: str
    identification: Optional[str] = None
    grade: Optional[str] = None
    relationship: Optional[str] = None
    summary: StudentDebtSummary
