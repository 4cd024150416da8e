"""
Pure debt ledger rules shared by the payment engine, late fees and plan generation.

Nothing here touches the database; services load rows, call these functions and
persist the result in one transaction.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Sequence, Union
from uuid import UUID
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

from app.core.config import settings
from app.core.enums import DebtStatus
from app.core.exceptions import ValidationError
from app.core.money import Number, format_amount, is_settled, round_money, round_whole, to_decimal

NOTE_SEPARATOR = " | "


def derive_status(balance: Number, has_active_payments: bool) -> DebtStatus:
    """Status transition used by every ledger mutator."""
    if is_settled(balance):
        return DebtStatus.paid
    if has_active_payments:
        return DebtStatus.partial
    return DebtStatus.pending


# --- Settlement ---
@dataclass(frozen=True)
class OpenDebt:
    id: UUID
    balance: Decimal


@dataclass(frozen=True)
class Allocation:
    debt_id: UUID
    applied: Decimal
    new_balance: Decimal
    status: DebtStatus


def allocate_payment(debts: Sequence[OpenDebt], total: Number) -> List[Allocation]:
    """Distribute ``total`` over ``debts`` in the given order.

    The amount is rounded to cents first. Raises ValidationError when no debt
    is selected, the rounded amount is not positive or it exceeds the selected
    balance. Debts left untouched once the amount is exhausted get no allocation.
    """
    if not debts:
        raise ValidationError("At least one debt must be selected")
    amount = round_money(total)
    if amount <= 0:
        raise ValidationError("Payment amount must be greater than zero")
    selected_total = sum((to_decimal(d.balance) for d in debts), Decimal("0"))
    if amount > selected_total:
        raise ValidationError("Payment amount cannot exceed the selected debt total")

    remaining = amount
    allocations: List[Allocation] = []
    for debt in debts:
        if remaining <= 0:
            break
        balance = to_decimal(debt.balance)
        applied = round_money(min(remaining, balance))
        if applied <= 0:
            continue
        new_balance = round_money(balance - applied)
        allocations.append(
            Allocation(
                debt_id=debt.id,
                applied=applied,
                new_balance=new_balance,
                status=derive_status(new_balance, has_active_payments=True),
            )
        )
        remaining = round_money(remaining - applied)
    return allocations


# --- Late fee ---
def late_fee_note(fee: Number) -> str:
    return f"Mora aplicada: {format_amount(fee)} {settings.currency_label}"


def append_note(existing: Optional[str], fragment: str) -> str:
    return f"{existing}{NOTE_SEPARATOR}{fragment}" if existing else fragment


# --- Installments ---
@dataclass(frozen=True)
class InstallmentLine:
    installment_number: int
    amount: Decimal
    due_date: date


def monthly_installment(total: Number, installments: int) -> Decimal:
    if to_decimal(total) <= 0:
        raise ValidationError("Total amount must be greater than zero")
    if installments < 1:
        raise ValidationError("Number of installments must be at least 1")
    return round_whole(to_decimal(total) / Decimal(installments))


def installment_schedule(total: Number, installments: int, start_date: date) -> List[InstallmentLine]:
    """Fixed-amount monthly schedule; the rounding difference is not redistributed."""
    monthly = monthly_installment(total, installments)
    if monthly <= 0:
        raise ValidationError("Total amount is too small for the number of installments")
    return [
        InstallmentLine(
            installment_number=i + 1,
            amount=monthly,
            due_date=add_months(start_date, i),
        )
        for i in range(installments)
    ]


# --- Dates ---
def add_months(start: date, months: int) -> date:
    """Calendar-month step; clamps to the last day when the month is shorter."""
    return start + relativedelta(months=months)


def school_today() -> date:
    return datetime.now(ZoneInfo(settings.school_timezone)).date()


def is_overdue(due_date: Union[date, str], today: Optional[date] = None) -> bool:
    """Strictly before today; a debt due today is not overdue."""
    if isinstance(due_date, str):
        due_date = date.fromisoformat(due_date)
    return due_date < (today or school_today())


def debt_display_name(
    concept_name: Optional[str],
    plan_name: Optional[str] = None,
    installment_number: Optional[int] = None,
) -> str:
    """Label shown on debt lists and receipts."""
    if plan_name:
        return f"{plan_name} - Cuota {installment_number}"
    return concept_name or "Sin concepto"
