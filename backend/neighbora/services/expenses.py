# neighbora/services/expenses.py
"""
Common-expense workflows that must keep `status` in step with `payments`.

record_payment / update_expense:
  read -> append or change -> reconcile -> compare-and-set on `version`
  A lost race re-reads and tries again, up to PAYMENT_MAX_RETRIES, then Conflict.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pymongo.database import Database

from neighbora.core.errors import Conflict, NotFound
from neighbora.repositories import expenses as repo
from neighbora.services.ledger import is_overdue, reconcile, reconcile_expense
from neighbora.utils.documents import (
    db_now,
    from_money,
    parse_object_id,
    serialize,
    store_dt,
    to_decimal128,
)

logger = logging.getLogger("neighbora.expenses")


def encode_amounts(amounts: Dict[str, Any]) -> Dict[str, Any]:
    return {k: to_decimal128(v) for k, v in amounts.items() if v is not None}


def encode_details(details: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [{**d, "amount": to_decimal128(d["amount"])} for d in details]


def status_filter(status: Optional[str], now: Optional[datetime] = None) -> Dict[str, Any]:
    """`overdue` is derived: unpaid and past the due date."""
    if not status:
        return {}
    if status == "overdue":
        return {"status": {"$ne": "paid"}, "dueDate": {"$lt": now or db_now()}}
    return {"status": status}


def present(expense: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Serialize with the derived ledger fields."""
    rec = reconcile_expense(expense)
    total = from_money((expense.get("amounts") or {}).get("total"))
    out = serialize(expense)
    out["totalPaid"] = rec.total_paid
    out["balance"] = total - rec.total_paid
    out["isOverdue"] = is_overdue(expense.get("dueDate"), expense.get("status", rec.status), now)
    return out


def create_expense(db: Database, data: Dict[str, Any], created_by: str) -> Dict[str, Any]:
    doc = {
        "condominiumId": parse_object_id(data["condominiumId"], "condominium ID"),
        "propertyId": parse_object_id(data["propertyId"], "property ID"),
        "period": data["period"],
        "amounts": encode_amounts(data["amounts"]),
        "issueDate": store_dt(data["issueDate"]),
        "dueDate": store_dt(data["dueDate"]),
        "expenseDetails": encode_details(data.get("expenseDetails") or []),
        "notes": data.get("notes"),
        "createdBy": created_by,
    }
    created = repo.create(db, doc)
    logger.info("Common expense created: %s", created["_id"])
    return created


def _retrying_update(db: Database, expense_id: str, build_update, max_retries: int) -> Dict[str, Any]:
    for attempt in range(1, max_retries + 1):
        current = repo.get(db, expense_id)
        if current is None:
            raise NotFound("Common expense not found")
        updated = repo.compare_and_set(db, current, build_update(current))
        if updated is not None:
            return updated
        logger.info("Concurrent update on expense %s, retry %d/%d", expense_id, attempt, max_retries)
    raise Conflict("Common expense was modified concurrently, please retry")


def record_payment(db: Database, expense_id: str, payment: Dict[str, Any], registered_by: str,
                   max_retries: int = 5) -> Dict[str, Any]:
    entry = {
        "amount": to_decimal128(payment["amount"]),
        "paymentDate": store_dt(payment["paymentDate"]),
        "paymentMethod": payment["paymentMethod"],
        "receipt": payment.get("receipt"),
        "notes": payment.get("notes"),
        "registeredBy": registered_by or "system",
    }

    def build(current: Dict[str, Any]) -> Dict[str, Any]:
        amounts = [p.get("amount") for p in current.get("payments") or []] + [entry["amount"]]
        rec = reconcile((current.get("amounts") or {}).get("total"), amounts)
        return {
            "$push": {"payments": entry},
            "$set": {"status": rec.status, "lastModifiedBy": registered_by},
        }

    updated = _retrying_update(db, expense_id, build, max_retries)
    logger.info("Payment recorded for expense %s (status=%s)", expense_id, updated["status"])
    return updated


def update_expense(db: Database, expense_id: str, fields: Dict[str, Any], modified_by: str,
                   max_retries: int = 5) -> Dict[str, Any]:
    """Update amounts / details / notes; status is re-derived against the new total."""
    changes: Dict[str, Any] = {"lastModifiedBy": modified_by}
    if fields.get("expenseDetails") is not None:
        changes["expenseDetails"] = encode_details(fields["expenseDetails"])
    if "notes" in fields:
        changes["notes"] = fields["notes"]
    new_amounts = encode_amounts(fields["amounts"]) if fields.get("amounts") else None

    def build(current: Dict[str, Any]) -> Dict[str, Any]:
        update_set = dict(changes)
        if new_amounts is not None:
            update_set["amounts"] = new_amounts
            payments = [p.get("amount") for p in current.get("payments") or []]
            update_set["status"] = reconcile(new_amounts["total"], payments).status
        return {"$set": update_set}

    updated = _retrying_update(db, expense_id, build, max_retries)
    logger.info("Common expense updated: %s", expense_id)
    return updated


def stats_for_condominium(db: Database, condominium_id: str) -> Dict[str, Any]:
    expenses = repo.find(db, {"condominiumId": parse_object_id(condominium_id, "condominium ID")})
    by_status: Dict[str, Dict[str, Any]] = {}
    total_amount = Decimal("0")
    total_paid = Decimal("0")
    overdue = 0
    for expense in expenses:
        amount = from_money((expense.get("amounts") or {}).get("total"))
        rec = reconcile_expense(expense)
        total_amount += amount
        total_paid += rec.total_paid
        bucket = by_status.setdefault(expense.get("status", rec.status), {"count": 0, "totalAmount": Decimal("0")})
        bucket["count"] += 1
        bucket["totalAmount"] += amount
        if is_overdue(expense.get("dueDate"), expense.get("status", rec.status)):
            overdue += 1
    return {
        "totalExpenses": len(expenses),
        "totalAmount": total_amount,
        "totalPaid": total_paid,
        "overdue": overdue,
        "byStatus": [{"_id": status, **bucket} for status, bucket in sorted(by_status.items())],
    }
