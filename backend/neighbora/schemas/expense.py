"""
neighbora/schemas/expense.py - Pydantic models for common expenses and payments.

Money is `Decimal` end to end; it is stored as BSON Decimal128.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, model_validator

PaymentMethod = Literal["transfer", "cash", "check", "webpay", "other"]
PERIOD_REGEX = r"^\d{4}-(0[1-9]|1[0-2])$"
# Sums of many amounts must stay exact under the default decimal context (28 digits)
MONEY_DIGITS = 20


class Amounts(BaseModel):
    commonExpense: Decimal = Field(..., ge=0, max_digits=MONEY_DIGITS, decimal_places=2)
    reserveFund:   Decimal = Field(Decimal("0"), ge=0, max_digits=MONEY_DIGITS, decimal_places=2)
    water:         Optional[Decimal] = Field(None, ge=0, max_digits=MONEY_DIGITS, decimal_places=2)
    gas:           Optional[Decimal] = Field(None, ge=0, max_digits=MONEY_DIGITS, decimal_places=2)
    other:         Optional[Decimal] = Field(None, ge=0, max_digits=MONEY_DIGITS, decimal_places=2)
    total:         Decimal = Field(..., ge=0, max_digits=MONEY_DIGITS, decimal_places=2)


class ExpenseDetail(BaseModel):
    concept:    str = Field(..., min_length=1)
    category:   str = Field(..., min_length=1)
    amount:     Decimal = Field(..., ge=0, max_digits=MONEY_DIGITS, decimal_places=2)
    percentage: Optional[float] = Field(None, ge=0, le=100)


class CommonExpenseCreate(BaseModel):
    condominiumId:  str
    propertyId:     str
    period:         str = Field(..., pattern=PERIOD_REGEX, description="YYYY-MM")
    amounts:        Amounts
    issueDate:      datetime
    dueDate:        datetime
    expenseDetails: List[ExpenseDetail] = Field(default_factory=list)
    notes:          Optional[str] = None

    @model_validator(mode="after")
    def _due_after_issue(self):
        if self.dueDate < self.issueDate:
            raise ValueError("dueDate cannot be before issueDate")
        return self


class CommonExpenseUpdate(BaseModel):
    amounts:        Optional[Amounts] = None
    expenseDetails: Optional[List[ExpenseDetail]] = None
    notes:          Optional[str] = None


class PaymentCreate(BaseModel):
    amount:        Decimal = Field(..., gt=0, max_digits=MONEY_DIGITS, decimal_places=2)
    paymentDate:   datetime
    paymentMethod: PaymentMethod
    receipt:       Optional[str] = None
    notes:         Optional[str] = None
