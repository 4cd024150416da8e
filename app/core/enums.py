from enum import Enum


class AppRole(str, Enum):
    admin = "admin"
    user = "user"
    parent = "parent"


class Portal(str, Enum):
    """Landing view set resolved from a user's roles."""

    ADMIN = "ADMIN"
    PARENT = "PARENT"
    UNASSIGNED = "UNASSIGNED"


class DebtStatus(str, Enum):
    pending = "pending"
    partial = "partial"
    paid = "paid"


class PaymentStatus(str, Enum):
    active = "active"
    cancelled = "cancelled"


class PaymentPlanStatus(str, Enum):
    active = "active"
    completed = "completed"
    cancelled = "cancelled"


class LedgerAction(str, Enum):
    CREATE = "CREATE"
    PAYMENT = "PAYMENT"
    CANCEL = "CANCEL"
    RESTORE = "RESTORE"
    LATE_FEE = "LATE_FEE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


OPEN_DEBT_STATUSES = (DebtStatus.pending.value, DebtStatus.partial.value)
