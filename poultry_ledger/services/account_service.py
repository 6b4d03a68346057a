from decimal import Decimal
from typing import Callable, List, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.orm.exc import StaleDataError

from poultry_ledger.common.exceptions import AccountNotFoundError, ConcurrentUpdateError
from poultry_ledger.core.config import LedgerConfig
from poultry_ledger.logger_config import logger
from poultry_ledger.models.account import Customer, Ledger, Vendor
from poultry_ledger.services.transaction_aggregator import AccountKind, AccountRef
from poultry_ledger.utils.balance import (
    Balance,
    BalanceType,
    add_to_balance,
    subtract_from_balance,
    sync_outstanding_balance,
    to_decimal,
)

ACCOUNT_MODELS = {
    AccountKind.LEDGER: Ledger,
    AccountKind.CUSTOMER: Customer,
    AccountKind.VENDOR: Vendor,
}

AccountModel = Union[Ledger, Customer, Vendor]

# ==================== QUERY OPERATIONS ====================

def get_account_model(db: Session, kind: AccountKind, account_id: str) -> AccountModel:
    """Get a ledger, customer or vendor row, or raise AccountNotFoundError."""
    kind = AccountKind(kind)
    model = ACCOUNT_MODELS[kind]
    query = db.query(model)
    if model is Ledger:
        query = query.options(joinedload(Ledger.group))
    account = query.filter(model.id == account_id).first()
    if not account:
        raise AccountNotFoundError(f"{kind.value.title()} {account_id} not found")
    return account


def get_account(db: Session, kind: AccountKind, account_id: str) -> AccountRef:
    return AccountRef.from_model(get_account_model(db, kind, account_id))


def list_accounts(db: Session, kind: AccountKind, group_id: Optional[str] = None) -> List[AccountRef]:
    model = ACCOUNT_MODELS[AccountKind(kind)]
    query = db.query(model).filter(model.is_active.is_(True))
    if group_id:
        query = query.filter(model.group_id == group_id)
    if model is Ledger:
        query = query.options(joinedload(Ledger.group))
    return [AccountRef.from_model(account) for account in query.all()]


# ==================== BALANCE WRITES ====================

def _write_balance(
    db: Session,
    kind: AccountKind,
    account_id: str,
    mutate: Callable[[AccountModel], None],
    config: LedgerConfig,
    action: str,
) -> AccountRef:
    """
    Read-modify-write of one account's balance fields.
    The version column makes a concurrent write fail with StaleDataError, in
    which case the row is re-read and the mutation applied again.
    """
    kind = AccountKind(kind)
    for attempt in range(1, config.max_write_attempts + 1):
        account = get_account_model(db, kind, account_id)
        mutate(account)
        try:
            db.commit()
            db.refresh(account)
            return AccountRef.from_model(account)
        except StaleDataError:
            db.rollback()
            logger.warning(
                f"Concurrent update while trying to {action} for {kind.value} {account_id} "
                f"(attempt {attempt}/{config.max_write_attempts})")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error trying to {action} for {kind.value} {account_id}: {str(e)}")
            raise ValueError(f"Failed to {action}")

    raise ConcurrentUpdateError(f"Could not {action} for {account_id}, the account kept changing")


def _outstanding(account: AccountModel) -> Balance:
    return AccountRef.from_model(account).outstanding


def _store_outstanding(account: AccountModel, balance: Balance):
    account.outstanding_balance = balance.amount
    account.outstanding_balance_type = balance.type


def update_opening_balance(
    db: Session,
    kind: AccountKind,
    account_id: str,
    amount: Decimal,
    balance_type: BalanceType,
    config: LedgerConfig,
) -> AccountRef:
    """Change the opening balance and shift the outstanding balance by the same signed delta."""
    new_opening = Balance(abs(to_decimal(amount)), BalanceType(balance_type))

    def mutate(account: AccountModel):
        ref = AccountRef.from_model(account)
        _store_outstanding(account, sync_outstanding_balance(ref.opening, new_opening, ref.outstanding))
        account.opening_balance = new_opening.amount
        account.opening_balance_type = new_opening.type

    account = _write_balance(db, kind, account_id, mutate, config, "update opening balance")
    logger.info(f"Opening balance of {AccountKind(kind).value} {account_id} set to {new_opening.amount} {new_opening.type.value}")
    return account


def post_transaction(
    db: Session,
    kind: AccountKind,
    account_id: str,
    amount: Decimal,
    tx_type: BalanceType,
    config: LedgerConfig,
) -> AccountRef:
    """Fold a new transaction into the stored outstanding balance."""
    def mutate(account: AccountModel):
        _store_outstanding(account, add_to_balance(_outstanding(account), amount, tx_type))

    return _write_balance(db, kind, account_id, mutate, config, "post transaction")


def reverse_transaction(
    db: Session,
    kind: AccountKind,
    account_id: str,
    amount: Decimal,
    tx_type: BalanceType,
    config: LedgerConfig,
) -> AccountRef:
    """Take a previously posted transaction back out of the outstanding balance."""
    def mutate(account: AccountModel):
        _store_outstanding(account, subtract_from_balance(_outstanding(account), amount, tx_type))

    return _write_balance(db, kind, account_id, mutate, config, "reverse transaction")


def set_outstanding_balance(
    db: Session,
    kind: AccountKind,
    account_id: str,
    balance: Balance,
    config: LedgerConfig,
) -> AccountRef:
    """Overwrite the outstanding balance, used when a full replay disagrees with the stored value."""
    def mutate(account: AccountModel):
        _store_outstanding(account, Balance(to_decimal(balance.amount), BalanceType(balance.type)))

    return _write_balance(db, kind, account_id, mutate, config, "set outstanding balance")
