from decimal import Decimal
from typing import Callable, Dict, List

from poultry_ledger.logger_config import logger
from poultry_ledger.models.group import GroupType
from poultry_ledger.services.account_tree import AccountTree, GroupNode
from poultry_ledger.services.transaction_aggregator import (
    AccountKind,
    AccountRef,
    DateLike,
    TransactionAggregator,
)
from poultry_ledger.utils.balance import ZERO

# group balance from a group's (debit, credit)
Nature = Callable[[Decimal, Decimal], Decimal]

INCOME_NATURE: Nature = lambda debit, credit: credit - debit
EXPENSE_NATURE: Nature = lambda debit, credit: debit - credit


def roll_up(tree: AccountTree, group_type: GroupType, leaf_totals: Callable[[AccountRef], tuple],
            nature: Nature) -> List[dict]:
    """
    Fold member (debit, credit) pairs up a same-type forest.
    Children are computed before parents with an explicit post-order stack.
    """
    results: Dict[str, dict] = {}
    roots = tree.same_type_roots(group_type)

    for root in roots:
        stack = [(root, False)]
        while stack:
            node, expanded = stack.pop()
            if node.id in results:
                continue
            children = [child for child in tree.same_type_children(node) if child.id not in results]
            if not expanded and children:
                stack.append((node, True))
                stack.extend((child, False) for child in reversed(children))
                continue
            results[node.id] = _group_result(tree, node, leaf_totals, nature, results)

    return [results[root.id] for root in roots]


def _group_result(tree: AccountTree, node: GroupNode, leaf_totals, nature: Nature, results: Dict[str, dict]) -> dict:
    debit = credit = ZERO
    for kind in AccountKind:
        # every vendor is already its own member somewhere, so the all-vendors flag is not applied here
        for account in tree.direct_members(node.id, kind, include_all_vendors=False):
            account_debit, account_credit = leaf_totals(account)
            debit += account_debit
            credit += account_credit

    children = [results[child.id] for child in tree.same_type_children(node) if child.id in results]
    balance = nature(debit, credit) + sum((child["balance"] for child in children), ZERO)
    debit_total = debit + sum((child["debit_total"] for child in children), ZERO)
    credit_total = credit + sum((child["credit_total"] for child in children), ZERO)

    return {
        "id": node.id,
        "name": node.name,
        "type": node.type.value,
        "balance": balance,
        "debit_total": debit_total,
        "credit_total": credit_total,
        "children": children,
    }


def serialize_groups(groups: List[dict]) -> List[dict]:
    return [
        {
            **group,
            "balance": float(group["balance"]),
            "debit_total": float(group["debit_total"]),
            "credit_total": float(group["credit_total"]),
            "children": serialize_groups(group["children"]),
        }
        for group in groups
    ]


class ProfitAndLossEngine:
    """Income and expenses over a period. Uses period movement only, never opening or closing balances."""

    def __init__(self, tree: AccountTree, aggregator: TransactionAggregator):
        self.tree = tree
        self.aggregator = aggregator

    def _flow(self, start: DateLike, end: DateLike):
        def totals(account: AccountRef):
            try:
                result = self.aggregator.aggregate(account, start, end)
            except Exception as e:
                logger.warning(f"Skipping {account.kind.value} {account.id} in profit and loss: {str(e)}")
                return ZERO, ZERO
            return result.debit_total, result.credit_total
        return totals

    def _compute(self, start: DateLike, end: DateLike):
        flow = self._flow(start, end)
        income_groups = roll_up(self.tree, GroupType.INCOME, flow, INCOME_NATURE)
        expense_groups = roll_up(self.tree, GroupType.EXPENSES, flow, EXPENSE_NATURE)
        total_income = sum((group["balance"] for group in income_groups), ZERO)
        total_expenses = sum((group["balance"] for group in expense_groups), ZERO)
        return income_groups, expense_groups, total_income, total_expenses

    def build(self, start: DateLike = None, end: DateLike = None) -> dict:
        income_groups, expense_groups, total_income, total_expenses = self._compute(start, end)

        return {
            "income": {"groups": serialize_groups(income_groups), "total": float(total_income)},
            "expenses": {"groups": serialize_groups(expense_groups), "total": float(total_expenses)},
            "totals": {
                "total_income": float(total_income),
                "total_expenses": float(total_expenses),
                "net_profit": float(total_income - total_expenses),
            },
        }

    def net_profit(self, start: DateLike = None, end: DateLike = None) -> Decimal:
        _, _, total_income, total_expenses = self._compute(start, end)
        return total_income - total_expenses
