from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import require_staff
from app.db.session import get_db

from .schemas import DashboardSummary
from . import service

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get(
    "/summary",
    response_model=DashboardSummary,
    dependencies=[Depends(require_staff)],
)
async def dashboard_summary(db: AsyncSession = Depends(get_db)) -> DashboardSummary:
    return await service.get_summary(db)
