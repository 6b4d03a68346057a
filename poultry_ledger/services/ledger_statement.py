from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional

from poultry_ledger.core.config import LedgerConfig
from poultry_ledger.logger_config import logger
from poultry_ledger.services.transaction_aggregator import (
    ADJUSTMENTS,
    PRINCIPAL,
    RECEIPTS,
    AccountRef,
    DateLike,
    Particulars,
    Posting,
    TransactionAggregator,
    Window,
    precedence_of,
)
from poultry_ledger.utils.balance import ZERO, Balance, BalanceType, from_signed, to_signed

BalanceWriter = Callable[[AccountRef, Balance], None]


@dataclass
class StatementEntry:
    id: str
    txn_key: str
    date: Optional[datetime]
    particulars: Particulars
    side: BalanceType
    amount: Decimal
    birds: int
    weight: Decimal
    balance: Decimal

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "txn_key": self.txn_key,
            "date": self.date.isoformat() if self.date else None,
            "particulars": self.particulars.value,
            "side": self.side.value,
            "amount": float(self.amount),
            "birds": self.birds,
            "weight": float(self.weight),
            "balance": float(self.balance),
        }


@dataclass
class Statement:
    account: AccountRef
    window: Window
    opening: Balance
    entries: List[StatementEntry]
    principal: Decimal
    receipts: Decimal
    discount_and_other: Decimal
    birds: int
    weight: Decimal
    closing: Balance
    reconciled: bool = False

    def to_dict(self) -> dict:
        return {
            "account": {
                "id": self.account.id,
                "name": self.account.display_name,
                "kind": self.account.kind.value,
                "natural_side": self.account.natural_side.value,
            },
            "start_date": self.window.start.isoformat() if self.window.start else None,
            "end_date": self.window.end.isoformat() if self.window.end else None,
            "opening_balance": {"amount": float(self.opening.amount), "type": self.opening.type.value},
            "entries": [entry.to_dict() for entry in self.entries],
            "totals": {
                "principal": float(self.principal),
                "receipts": float(self.receipts),
                "discount_and_other": float(self.discount_and_other),
                "birds": self.birds,
                "weight": float(self.weight),
                "closing_balance": {"amount": float(self.closing.amount), "type": self.closing.type.value},
            },
            "reconciled": self.reconciled,
        }


def _sort_key(posting: Posting):
    return (posting.date, posting.txn_key, precedence_of(posting.particulars), posting.entry_id)


class LedgerStatementBuilder:
    """
    Chronological statement for one account with a running balance.

    The running balance is kept in the account's natural polarity: a customer
    statement reads in debit terms, a vendor statement in credit terms.
    """

    def __init__(self, aggregator: TransactionAggregator, config: LedgerConfig,
                 balance_writer: Optional[BalanceWriter] = None):
        self.aggregator = aggregator
        self.config = config
        self.balance_writer = balance_writer

    def build(self, account: AccountRef, start: DateLike = None, end: DateLike = None) -> Statement:
        window = Window.of(start, end)
        opening_signed = to_signed(account.opening.amount, account.opening.type)

        in_window: List[Posting] = []
        for posting in self.aggregator.postings_for(account):
            position = window.position(posting.date)
            if position < 0:
                opening_signed += posting.signed
            elif position == 0:
                in_window.append(posting)
        in_window.sort(key=_sort_key)

        opening = from_signed(opening_signed)
        running = self._natural(opening_signed, account)
        entries = [StatementEntry(
            id=f"{account.id}:opening",
            txn_key="",
            date=window.start,
            particulars=Particulars.OPENING,
            side=opening.type,
            amount=opening.amount,
            birds=0,
            weight=ZERO,
            balance=running,
        )]

        principal = receipts = adjustments = weight = ZERO
        birds = 0
        for posting in in_window:
            if posting.side == account.natural_side:
                running += posting.amount
            else:
                running -= posting.amount
                if self.config.clamp_running_balance and running < 0:
                    running = ZERO

            if posting.particulars in PRINCIPAL:
                principal += posting.amount
            elif posting.particulars in RECEIPTS:
                receipts += posting.amount
            elif posting.particulars in ADJUSTMENTS:
                adjustments += posting.amount
            birds += posting.birds
            weight += posting.weight

            entries.append(StatementEntry(
                id=posting.entry_id,
                txn_key=posting.txn_key,
                date=posting.date,
                particulars=posting.particulars,
                side=posting.side,
                amount=posting.amount,
                birds=posting.birds,
                weight=posting.weight,
                balance=running,
            ))

        closing = from_signed(self._natural(running, account))
        statement = Statement(
            account=account,
            window=window,
            opening=opening,
            entries=entries,
            principal=principal,
            receipts=receipts,
            discount_and_other=adjustments,
            birds=birds,
            weight=weight,
            closing=closing,
        )

        # only a statement that runs to the present can be compared with the stored balance
        if end is None:
            statement.reconciled = self._reconcile(account, closing)
        return statement

    @staticmethod
    def _natural(value: Decimal, account: AccountRef) -> Decimal:
        """Signed (debit positive) to natural polarity and back; the mapping is its own inverse."""
        return value if account.natural_side == BalanceType.DEBIT else -value

    def _reconcile(self, account: AccountRef, closing: Balance) -> bool:
        stored = to_signed(account.outstanding.amount, account.outstanding.type)
        computed = to_signed(closing.amount, closing.type)
        if abs(computed - stored) <= self.config.reconcile_tolerance:
            return False

        if self.balance_writer is None:
            logger.warning(
                f"{account.kind.value} {account.id} outstanding {stored} differs from statement closing {computed}")
            return False

        try:
            self.balance_writer(account, closing)
        except Exception as e:
            logger.error(f"Failed to correct outstanding balance for {account.kind.value} {account.id}: {str(e)}")
            return False

        logger.info(
            f"Corrected outstanding balance for {account.kind.value} {account.id}: {stored} -> {computed}")
        return True
