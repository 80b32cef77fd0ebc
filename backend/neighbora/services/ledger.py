# neighbora/services/ledger.py
"""
Common-expense ledger reconciliation.

`reconcile` is a pure function of (amount owed, payments):

    total_paid == 0              -> pending
    0 < total_paid < total_owed  -> partial
    total_paid >= total_owed     -> paid   (overpayment is accepted as-is)

`overdue` is not a reconciliation result: it depends on the clock, so it is
exposed as the derived flag `is_overdue` instead of a stored status.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Literal, Optional, Union

from neighbora.utils.documents import as_utc, from_money, now_utc

ExpenseStatus = Literal["pending", "partial", "paid", "overdue"]
LedgerStatus = Literal["pending", "partial", "paid"]

Money = Union[Decimal, int, str]

STATUS_RANK = {"pending": 0, "partial": 1, "paid": 2}


@dataclass(frozen=True)
class Reconciliation:
    total_paid: Decimal
    status: LedgerStatus


def to_money(value) -> Decimal:
    amount = from_money(value)
    if not amount.is_finite():
        raise ValueError(f"Invalid money amount: {value!r}")
    return amount


def reconcile(total_owed: Money, payments: Iterable[Money]) -> Reconciliation:
    owed = to_money(total_owed)
    total_paid = sum((to_money(p) for p in payments), Decimal("0"))

    if total_paid <= 0:
        status = "pending"
    elif total_paid < owed:
        status = "partial"
    else:
        status = "paid"
    return Reconciliation(total_paid=total_paid, status=status)


def reconcile_expense(expense: dict) -> Reconciliation:
    """Reconcile a stored expense document."""
    total = (expense.get("amounts") or {}).get("total")
    return reconcile(total, (p.get("amount") for p in expense.get("payments") or []))


def is_overdue(due_date: Optional[datetime], status: str, now: Optional[datetime] = None) -> bool:
    if due_date is None or status == "paid":
        return False
    return (now or now_utc()) > as_utc(due_date)
