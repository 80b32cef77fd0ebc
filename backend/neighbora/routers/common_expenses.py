"""
# neighbora/routers/common_expenses.py - Monthly common expenses per property

Every expense returned here carries the derived ledger fields:
- `totalPaid`: sum of `payments[].amount`
- `balance`: `amounts.total - totalPaid` (negative on overpayment)
- `isOverdue`: unpaid and past `dueDate`

`status` is written only by the services in `neighbora.services.expenses`, always
together with the payments it was derived from.
"""
import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from pymongo.database import Database

from neighbora.core.auth import get_principal
from neighbora.core.errors import NotFound
from neighbora.core.security import require_admin
from neighbora.database import get_db, store_errors
from neighbora.repositories import expenses as expenses_repo
from neighbora.repositories import properties as properties_repo
from neighbora.schemas.common import ok
from neighbora.schemas.expense import PERIOD_REGEX, CommonExpenseCreate, CommonExpenseUpdate, PaymentCreate
from neighbora.schemas.principal import Principal
from neighbora.services import expenses as expense_service
from neighbora.utils.documents import db_now, page_params, pagination, parse_object_id

logger = logging.getLogger("neighbora.expenses")

router = APIRouter(prefix="/admin/common-expenses", tags=["Admin: Common Expenses"])

StatusFilter = Literal["pending", "partial", "paid", "overdue"]


def _max_retries(request: Request) -> int:
    return request.app.state.settings.payment_max_retries


def _query(owner_field: str, owner_id: str, period: Optional[str], status_: Optional[str]) -> dict:
    query = {owner_field: parse_object_id(owner_id, owner_field.replace("Id", " ID"))}
    if period:
        query["period"] = period
    query.update(expense_service.status_filter(status_, db_now()))
    return query


@router.get("/user/current")
def current_user_expenses(db: Database = Depends(get_db), principal: Principal = Depends(get_principal)):
    with store_errors("Error retrieving common expenses"):
        prop = properties_repo.find_for_user(db, principal.uid)
        if not prop:
            raise NotFound("No property found for this user")
        expenses = expenses_repo.find(db, {"propertyId": prop["_id"]})
    return ok({
        "property": {
            "id": str(prop["_id"]),
            "number": prop.get("number"),
            "block": prop.get("block"),
            "type": prop.get("type"),
        },
        "commonExpenses": [expense_service.present(e) for e in expenses],
    })


@router.get("/property/{property_id}")
def property_expenses(
    property_id: str,
    period: Optional[str] = Query(None, pattern=PERIOD_REGEX),
    status_: Optional[StatusFilter] = Query(None, alias="status"),
    db: Database = Depends(get_db),
    _: Principal = Depends(get_principal),
):
    query = _query("propertyId", property_id, period, status_)
    with store_errors("Error retrieving common expenses"):
        expenses = expenses_repo.find(db, query)
    return ok({"commonExpenses": [expense_service.present(e) for e in expenses]})


@router.get("/condominium/{condominium_id}/stats")
def expense_stats(condominium_id: str, db: Database = Depends(get_db), _: Principal = Depends(require_admin)):
    with store_errors("Error retrieving statistics"):
        stats = expense_service.stats_for_condominium(db, condominium_id)
    return ok(stats)


@router.get("/condominium/{condominium_id}")
def condominium_expenses(
    condominium_id: str,
    period: Optional[str] = Query(None, pattern=PERIOD_REGEX),
    status_: Optional[StatusFilter] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Database = Depends(get_db),
    _: Principal = Depends(require_admin),
):
    query = _query("condominiumId", condominium_id, period, status_)
    paging = page_params(page, limit)
    with store_errors("Error retrieving common expenses"):
        expenses = expenses_repo.find(db, query, paging["skip"], paging["limit"])
        total = expenses_repo.count(db, query)
    return ok({
        "commonExpenses": [expense_service.present(e) for e in expenses],
        "pagination": pagination(page, limit, total),
    })


@router.get("/{expense_id}")
def get_expense(expense_id: str, db: Database = Depends(get_db), _: Principal = Depends(get_principal)):
    with store_errors("Error retrieving common expense"):
        expense = expenses_repo.get(db, expense_id)
    if not expense:
        raise NotFound("Common expense not found")
    return ok(expense_service.present(expense))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_expense(
    body: CommonExpenseCreate,
    db: Database = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    with store_errors("Error creating common expense",
                      "A common expense already exists for this property and period"):
        expense = expense_service.create_expense(db, body.model_dump(), principal.uid)
    return ok(expense_service.present(expense), message="Common expense created successfully")


@router.put("/{expense_id}")
def update_expense(
    expense_id: str,
    body: CommonExpenseUpdate,
    request: Request,
    db: Database = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    with store_errors("Error updating common expense"):
        expense = expense_service.update_expense(
            db, expense_id, body.model_dump(exclude_unset=True), principal.uid, _max_retries(request)
        )
    return ok(expense_service.present(expense), message="Common expense updated successfully")


@router.delete("/{expense_id}")
def delete_expense(expense_id: str, db: Database = Depends(get_db), _: Principal = Depends(require_admin)):
    with store_errors("Error deleting common expense"):
        expense = expenses_repo.delete(db, expense_id)
    if not expense:
        raise NotFound("Common expense not found")
    logger.info("Common expense deleted: %s", expense_id)
    return ok(message="Common expense deleted successfully")


@router.post("/{expense_id}/payment")
def record_payment(
    expense_id: str,
    body: PaymentCreate,
    request: Request,
    db: Database = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    with store_errors("Error recording payment"):
        expense = expense_service.record_payment(
            db, expense_id, body.model_dump(), principal.uid, _max_retries(request)
        )
    return ok(expense_service.present(expense), message="Payment recorded successfully")
