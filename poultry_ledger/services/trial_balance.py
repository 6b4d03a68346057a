from decimal import Decimal
from typing import List, Optional

from poultry_ledger.logger_config import logger
from poultry_ledger.models.group import GroupType
from poultry_ledger.services.account_tree import AccountTree
from poultry_ledger.services.transaction_aggregator import (
    AccountKind,
    AccountRef,
    AggregateResult,
    DateLike,
    TransactionAggregator,
    as_datetime,
)
from poultry_ledger.utils.balance import ZERO, to_signed

CREDIT_POSITIVE = {GroupType.LIABILITY, GroupType.INCOME}

MEMBER_ORDER = (AccountKind.LEDGER, AccountKind.CUSTOMER, AccountKind.VENDOR)


class _Totals:
    """Running sums for one summary row. Each entity's closing lands in its own column before summing."""

    def __init__(self, group_type: GroupType):
        self.group_type = group_type
        self.closing = ZERO
        self.debit = ZERO
        self.credit = ZERO
        self.transaction_debit = ZERO
        self.transaction_credit = ZERO
        self.birds = 0
        self.weight = ZERO
        self.discount_and_other = ZERO

    def add(self, account: AccountRef, result: AggregateResult):
        opening = to_signed(account.opening.amount, account.opening.type)
        closing = result.closing_signed(opening)
        debit, credit = split_by_polarity(closing, self.group_type)
        self.closing += closing
        self.debit += debit
        self.credit += credit
        self.transaction_debit += result.debit_total
        self.transaction_credit += result.credit_total
        self.birds += result.birds
        self.weight += result.weight
        self.discount_and_other += result.discount_and_other


def split_by_polarity(signed: Decimal, group_type: GroupType):
    """Place a signed closing into the (debit, credit) column the group's nature calls for."""
    if GroupType(group_type) in CREDIT_POSITIVE:
        return (ZERO, signed) if signed >= 0 else (-signed, ZERO)
    return (signed, ZERO) if signed >= 0 else (ZERO, -signed)


class TrialBalanceEngine:
    """Group summary: one row per direct sub-group and direct member, closing balances by group polarity."""

    def __init__(self, tree: AccountTree, aggregator: TransactionAggregator):
        self.tree = tree
        self.aggregator = aggregator

    def group_summary(self, group_id: str, start: DateLike = None, end: DateLike = None) -> dict:
        group = self.tree.node(group_id)
        rows: List[dict] = []

        for child in self.tree.children_of(group.id):
            totals = _Totals(group.type)
            for kind in MEMBER_ORDER:
                for account in self.tree.descendants_of(child.id, kind):
                    self._accumulate(totals, account, start, end)
            rows.append(self._row("group", child.id, child.name, totals))

        for kind in MEMBER_ORDER:
            for account in self.tree.direct_members(group.id, kind):
                totals = _Totals(group.type)
                self._accumulate(totals, account, start, end)
                rows.append(self._row(kind.value, account.id, account.display_name, totals))

        totals = {
            "debit": sum((row["debit"] for row in rows), 0.0),
            "credit": sum((row["credit"] for row in rows), 0.0),
            "transaction_debit": sum((row["transaction_debit"] for row in rows), 0.0),
            "transaction_credit": sum((row["transaction_credit"] for row in rows), 0.0),
            "birds": sum(row["birds"] for row in rows),
            "weight": sum((row["weight"] for row in rows), 0.0),
            "discount_and_other": sum((row["discount_and_other"] for row in rows), 0.0),
        }

        return {
            "group": {"id": group.id, "name": group.name, "type": group.type.value},
            "start_date": _iso(start),
            "end_date": _iso(end, end_of_day=True),
            "rows": rows,
            "totals": totals,
        }

    def _accumulate(self, totals: _Totals, account: AccountRef, start, end):
        try:
            totals.add(account, self.aggregator.aggregate(account, start, end))
        except Exception as e:
            logger.warning(f"Skipping {account.kind.value} {account.id} in group summary: {str(e)}")

    @staticmethod
    def _row(row_type: str, row_id: str, name: str, totals: _Totals) -> dict:
        return {
            "type": row_type,
            "id": row_id,
            "name": name,
            "debit": float(totals.debit),
            "credit": float(totals.credit),
            "transaction_debit": float(totals.transaction_debit),
            "transaction_credit": float(totals.transaction_credit),
            "birds": totals.birds,
            "weight": float(totals.weight),
            "discount_and_other": float(totals.discount_and_other),
            "closing_balance": float(totals.closing),
        }


def _iso(value: DateLike, end_of_day: bool = False) -> Optional[str]:
    moment = as_datetime(value, end_of_day=end_of_day)
    return moment.isoformat() if moment is not None else None
