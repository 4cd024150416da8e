from decimal import Decimal

from pydantic import BaseModel


class DashboardSummary(BaseModel):
    total_students: int
    active_students: int
    outstanding_total: Decimal
    overdue_debts: int
    collected_total: Decimal
