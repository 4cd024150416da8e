from app.core.models.debt_concept import DebtConcept
from app.core.models.grade import Grade
from app.core.models.student import Student
from app.core.models.student_guardian import StudentGuardian
from app.core.models.payment_plan import PaymentPlan
from app.core.models.student_debt import StudentDebt
from app.core.models.payment import Payment
from app.core.models.ledger_event import LedgerEvent

__all__ = [
    "DebtConcept",
    "Grade",
    "LedgerEvent",
    "Payment",
    "PaymentPlan",
    "Student",
    "StudentDebt",
    "StudentGuardian",
]
