from decimal import Decimal
from pydantic import BaseModel, Field
from typing import List, Optional
from poultry_ledger.utils.balance import BalanceType


class BalanceSchema(BaseModel):
    amount: float
    type: BalanceType


class OpeningBalanceUpdate(BaseModel):
    amount: Decimal = Field(..., ge=0)
    type: BalanceType


class AccountResponse(BaseModel):
    kind: str
    id: str
    name: str
    group_id: Optional[str] = None
    natural_side: BalanceType
    opening_balance: BalanceSchema
    outstanding_balance: BalanceSchema


class StatementAccount(BaseModel):
    id: str
    name: str
    kind: str
    natural_side: BalanceType


class StatementEntrySchema(BaseModel):
    id: str
    txn_key: str
    date: Optional[str] = None
    particulars: str
    side: BalanceType
    amount: float
    birds: int
    weight: float
    balance: float


class StatementTotals(BaseModel):
    principal: float
    receipts: float
    discount_and_other: float
    birds: int
    weight: float
    closing_balance: BalanceSchema


class StatementResponse(BaseModel):
    account: StatementAccount
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    opening_balance: BalanceSchema
    entries: List[StatementEntrySchema]
    totals: StatementTotals
    reconciled: bool
