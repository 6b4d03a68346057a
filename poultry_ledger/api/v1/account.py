from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from poultry_ledger.core.config import LedgerConfig
from poultry_ledger.core.dependencies import get_db, get_ledger_config
from poultry_ledger.services.account_service import get_account, update_opening_balance
from poultry_ledger.services.report_service import ReportService
from poultry_ledger.services.transaction_aggregator import AccountKind, AccountRef
from poultry_ledger.schemas.account import (
    AccountResponse,
    BalanceSchema,
    OpeningBalanceUpdate,
    StatementResponse,
)
from poultry_ledger.logger_config import logger

router = APIRouter()


def _account_response(account: AccountRef) -> AccountResponse:
    return AccountResponse(
        kind=account.kind.value,
        id=account.id,
        name=account.display_name,
        group_id=account.group_id,
        natural_side=account.natural_side,
        opening_balance=BalanceSchema(amount=float(account.opening.amount), type=account.opening.type),
        outstanding_balance=BalanceSchema(amount=float(account.outstanding.amount), type=account.outstanding.type),
    )


@router.get("/{kind}/{account_id}", response_model=AccountResponse)
def get_account_route(
    kind: AccountKind,
    account_id: str,
    db: Session = Depends(get_db)
):
    """
    Get a ledger, customer or vendor with its stored balances
    """
    return _account_response(get_account(db, kind, account_id))


@router.get("/{kind}/{account_id}/statement", response_model=StatementResponse)
def get_statement(
    kind: AccountKind,
    account_id: str,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    config: LedgerConfig = Depends(get_ledger_config),
):
    """
    Chronological statement with running balance.
    Without end_date the stored outstanding balance is corrected if it drifted.
    """
    if start_date and end_date and start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_date must not be after end_date"
        )
    return ReportService(db, config).statement(kind, account_id, start_date, end_date)


@router.put("/{kind}/{account_id}/opening-balance", response_model=AccountResponse)
def update_opening_balance_route(
    kind: AccountKind,
    account_id: str,
    balance_data: OpeningBalanceUpdate,
    db: Session = Depends(get_db),
    config: LedgerConfig = Depends(get_ledger_config),
):
    """ Change the opening balance; the outstanding balance moves by the same amount """
    try:
        account = update_opening_balance(db, kind, account_id, balance_data.amount, balance_data.type, config)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    logger.info(f"Opening balance updated for {kind.value} {account_id}")
    return _account_response(account)
