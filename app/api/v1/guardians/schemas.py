from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class GuardianLinkCreate(BaseModel):
    guardian_user_id: UUID
    relationship: Optional[str] = Field("padre", max_length=50)


class GuardianResponse(BaseModel):
    id: UUID
    student_id: UUID
    guardian_user_id: UUID
    relationship: Optional[str] = None
    guardian_name: Optional[str] = None
    guardian_email: str
    created_at: datetime
