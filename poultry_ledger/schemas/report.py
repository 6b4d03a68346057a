from __future__ import annotations

from pydantic import BaseModel
from typing import List


class ReportGroup(BaseModel):
    id: str
    name: str
    type: str
    balance: float
    debit_total: float
    credit_total: float
    children: List[ReportGroup] = []


class ReportSection(BaseModel):
    groups: List[ReportGroup]
    total: float


class ProfitAndLossTotals(BaseModel):
    total_income: float
    total_expenses: float
    net_profit: float


class ProfitAndLossResponse(BaseModel):
    income: ReportSection
    expenses: ReportSection
    totals: ProfitAndLossTotals


class BalanceSheetTotals(BaseModel):
    total_assets: float
    total_liabilities: float
    capital: float
    total_liabilities_and_capital: float
    difference: float


class BalanceSheetResponse(BaseModel):
    assets: ReportSection
    liabilities: ReportSection
    totals: BalanceSheetTotals
