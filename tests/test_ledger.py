from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from bson import Decimal128

from neighbora.core.errors import ValidationFailure
from neighbora.services.ledger import STATUS_RANK, is_overdue, reconcile, reconcile_expense
from neighbora.utils.documents import to_decimal128


@pytest.mark.parametrize("payments, total_paid, status", [
    ([], Decimal("0"), "pending"),
    ([Decimal("40000")], Decimal("40000"), "partial"),
    ([Decimal("40000"), Decimal("60000")], Decimal("100000"), "paid"),
    ([Decimal("150000")], Decimal("150000"), "paid"),
])
def test_reconcile_scenarios(payments, total_paid, status):
    result = reconcile(Decimal("100000"), payments)
    assert result.total_paid == total_paid
    assert result.status == status


def test_overpayment_is_not_clamped():
    result = reconcile("100", ["60", "60"])
    assert result.total_paid == Decimal("120")
    assert result.status == "paid"


def test_decimal_sum_is_exact():
    result = reconcile(Decimal("0.3"), [Decimal("0.1"), Decimal("0.1"), Decimal("0.1")])
    assert result.total_paid == Decimal("0.3")
    assert result.status == "paid"


def test_reconcile_is_idempotent():
    payments = [Decimal("10"), Decimal("25.50")]
    assert reconcile(Decimal("50"), payments) == reconcile(Decimal("50"), payments)


def test_status_never_decreases_as_payments_are_appended():
    payments = []
    last_rank = STATUS_RANK[reconcile(Decimal("90"), payments).status]
    for amount in ("10", "30", "0.01", "49.99", "5"):
        payments.append(Decimal(amount))
        rank = STATUS_RANK[reconcile(Decimal("90"), payments).status]
        assert rank >= last_rank
        last_rank = rank
    assert last_rank == STATUS_RANK["paid"]


def test_reconcile_rejects_non_finite_amounts():
    with pytest.raises(ValueError):
        reconcile(Decimal("100"), [Decimal("NaN")])


def test_reconcile_expense_reads_decimal128():
    doc = {
        "amounts": {"total": Decimal128("100000")},
        "payments": [{"amount": Decimal128("30000")}, {"amount": Decimal128("20000")}],
    }
    result = reconcile_expense(doc)
    assert result.total_paid == Decimal("50000")
    assert result.status == "partial"


def test_is_overdue():
    now = datetime(2024, 4, 1, tzinfo=timezone.utc)
    past_due = datetime(2024, 3, 10)  # naive UTC, as stored
    future_due = now + timedelta(days=3)

    assert is_overdue(past_due, "pending", now) is True
    assert is_overdue(past_due, "partial", now) is True
    assert is_overdue(past_due, "paid", now) is False
    assert is_overdue(future_due, "pending", now) is False
    assert is_overdue(None, "pending", now) is False


def test_money_beyond_decimal128_is_a_validation_failure():
    with pytest.raises(ValidationFailure):
        to_decimal128("1" * 40)
