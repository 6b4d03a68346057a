from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from poultry_ledger.core.config import LedgerConfig
from poultry_ledger.core.dependencies import get_db, get_ledger_config
from poultry_ledger.services.report_service import ReportService
from poultry_ledger.schemas.report import BalanceSheetResponse, ProfitAndLossResponse

router = APIRouter()


@router.get("/profit-and-loss", response_model=ProfitAndLossResponse)
def get_profit_and_loss(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    config: LedgerConfig = Depends(get_ledger_config),
):
    """ Income against expenses for the period """
    if start_date and end_date and start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_date must not be after end_date"
        )
    return ReportService(db, config).profit_and_loss(start_date, end_date)


@router.get("/balance-sheet", response_model=BalanceSheetResponse)
def get_balance_sheet(
    as_on: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    config: LedgerConfig = Depends(get_ledger_config),
):
    return ReportService(db, config).balance_sheet(as_on)
