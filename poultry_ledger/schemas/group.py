from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime
from poultry_ledger.models.account import LedgerType
from poultry_ledger.models.group import GroupType


class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: GroupType
    parent_id: Optional[str] = None
    includes_all_vendors: bool = False


class GroupUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[GroupType] = None
    parent_id: Optional[str] = None
    includes_all_vendors: Optional[bool] = None


class ParentGroup(BaseModel):
    id: str
    name: str
    type: GroupType

    model_config = ConfigDict(from_attributes=True)


class GroupResponse(BaseModel):
    id: str
    name: str
    slug: str
    type: GroupType
    parent_id: Optional[str] = None
    parent: Optional[ParentGroup] = None
    is_predefined: bool
    includes_all_vendors: bool
    ledger_count: int = 0
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class GroupLedger(BaseModel):
    id: str
    name: str
    ledger_type: LedgerType

    model_config = ConfigDict(from_attributes=True)


class GroupDetailResponse(GroupResponse):
    child_groups: List[GroupResponse] = []
    ledgers: List[GroupLedger] = []


class GroupListResponse(BaseModel):
    total: int
    groups: List[GroupResponse]


# ===== GROUP SUMMARY =====

class GroupSummaryRow(BaseModel):
    type: str
    id: str
    name: str
    debit: float
    credit: float
    transaction_debit: float
    transaction_credit: float
    birds: int
    weight: float
    discount_and_other: float
    closing_balance: float


class GroupSummaryTotals(BaseModel):
    debit: float
    credit: float
    transaction_debit: float
    transaction_credit: float
    birds: int
    weight: float
    discount_and_other: float


class GroupSummaryGroup(BaseModel):
    id: str
    name: str
    type: str


class GroupSummaryResponse(BaseModel):
    group: GroupSummaryGroup
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    rows: List[GroupSummaryRow]
    totals: GroupSummaryTotals
