from datetime import date, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from app.core.enums import DebtStatus
from app.core.exceptions import ValidationError
from app.core.ledger import (
    OpenDebt,
    allocate_payment,
    append_note,
    debt_display_name,
    derive_status,
    installment_schedule,
    is_overdue,
    late_fee_note,
    monthly_installment,
    school_today,
)
from app.core.money import format_amount, round_money


def test_derive_status() -> None:
    assert derive_status(Decimal("0"), has_active_payments=True) == DebtStatus.paid
    assert derive_status(Decimal("0.01"), has_active_payments=False) == DebtStatus.paid
    assert derive_status(Decimal("0.02"), has_active_payments=True) == DebtStatus.partial
    assert derive_status(Decimal("500"), has_active_payments=False) == DebtStatus.pending


def test_allocate_payment_in_caller_order() -> None:
    debts = [
        OpenDebt(id=uuid4(), balance=Decimal("5000")),
        OpenDebt(id=uuid4(), balance=Decimal("3000")),
        OpenDebt(id=uuid4(), balance=Decimal("2000")),
    ]
    allocations = allocate_payment(debts, Decimal("6000"))

    assert [a.debt_id for a in allocations] == [debts[0].id, debts[1].id]
    assert allocations[0].applied == Decimal("5000.00")
    assert allocations[0].status == DebtStatus.paid
    assert allocations[1].applied == Decimal("1000.00")
    assert allocations[1].new_balance == Decimal("2000.00")
    assert allocations[1].status == DebtStatus.partial
    assert sum(a.applied for a in allocations) == Decimal("6000")


def test_allocate_payment_exact_total_settles_everything() -> None:
    debts = [OpenDebt(id=uuid4(), balance=Decimal("33.33")), OpenDebt(id=uuid4(), balance=Decimal("66.67"))]
    allocations = allocate_payment(debts, "100")
    assert all(a.status == DebtStatus.paid for a in allocations)
    assert sum(a.applied for a in allocations) == Decimal("100.00")


@pytest.mark.parametrize(
    "balances,total",
    [
        ([], Decimal("10")),
        ([Decimal("10")], Decimal("0")),
        ([Decimal("10")], Decimal("-5")),
        ([Decimal("10")], Decimal("0.004")),
        ([Decimal("10"), Decimal("5")], Decimal("16")),
    ],
)
def test_allocate_payment_rejects(balances, total) -> None:
    with pytest.raises(ValidationError):
        allocate_payment([OpenDebt(id=uuid4(), balance=b) for b in balances], total)


def test_installment_schedule_monthly_dates() -> None:
    lines = installment_schedule(Decimal("120000"), 12, date(2025, 1, 15))

    assert len(lines) == 12
    assert [line.installment_number for line in lines] == list(range(1, 13))
    assert all(line.amount == Decimal("10000") for line in lines)
    assert all(line.due_date.day == 15 for line in lines)
    assert [line.due_date.month for line in lines] == list(range(1, 13))
    assert lines[0].due_date == date(2025, 1, 15)
    assert lines[-1].due_date == date(2025, 12, 15)


def test_installment_schedule_keeps_rounding_drift() -> None:
    lines = installment_schedule(Decimal("100"), 3, date(2025, 3, 1))
    assert [line.amount for line in lines] == [Decimal("33")] * 3
    assert sum(line.amount for line in lines) == Decimal("99")


def test_installment_schedule_clamps_end_of_month() -> None:
    lines = installment_schedule(Decimal("300"), 3, date(2025, 1, 31))
    assert [line.due_date for line in lines] == [date(2025, 1, 31), date(2025, 2, 28), date(2025, 3, 31)]


def test_monthly_installment_rounds_half_away_from_zero() -> None:
    assert monthly_installment(Decimal("5"), 2) == Decimal("3")
    assert monthly_installment(Decimal("250"), 2) == Decimal("125")


@pytest.mark.parametrize("total,count", [(Decimal("0"), 3), (Decimal("100"), 0), (Decimal("1"), 3)])
def test_installment_schedule_rejects(total, count) -> None:
    with pytest.raises(ValidationError):
        installment_schedule(total, count, date(2025, 1, 1))


def test_is_overdue() -> None:
    assert is_overdue("2099-01-01") is False
    assert is_overdue("2000-01-01") is True
    assert is_overdue(school_today()) is False
    today = date(2025, 6, 10)
    assert is_overdue(today - timedelta(days=1), today=today) is True
    assert is_overdue(today, today=today) is False


def test_late_fee_note_formatting() -> None:
    assert format_amount(Decimal("10000")) == "10.000"
    assert format_amount(Decimal("1234567.5")) == "1.234.567,5"
    assert late_fee_note(Decimal("10000")) == "Mora aplicada: 10.000 Gs"
    assert append_note(None, "a") == "a"
    assert append_note("a", "b") == "a | b"


def test_round_money_half_up() -> None:
    assert round_money("0.125") == Decimal("0.13")
    assert round_money("-0.125") == Decimal("-0.13")


def test_debt_display_name() -> None:
    assert debt_display_name("Cuota Plan de Pago", "Plan 2025", 3) == "Plan 2025 - Cuota 3"
    assert debt_display_name("Matrícula") == "Matrícula"
    assert debt_display_name(None) == "Sin concepto"
