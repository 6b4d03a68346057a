from poultry_ledger.logger_config import logger
from poultry_ledger.models.group import GroupType
from poultry_ledger.services.account_tree import AccountTree
from poultry_ledger.services.profit_and_loss import (
    EXPENSE_NATURE,
    INCOME_NATURE,
    ProfitAndLossEngine,
    roll_up,
    serialize_groups,
)
from poultry_ledger.services.transaction_aggregator import AccountRef, DateLike, TransactionAggregator
from poultry_ledger.utils.balance import ZERO, to_signed


class BalanceSheetEngine:
    """
    Position as on a date: asset and liability trees of closing balances,
    with the period's net profit carried as capital.
    """

    def __init__(self, tree: AccountTree, aggregator: TransactionAggregator):
        self.tree = tree
        self.aggregator = aggregator

    def _closing(self, as_on: DateLike):
        def totals(account: AccountRef):
            try:
                result = self.aggregator.aggregate(account, None, as_on)
            except Exception as e:
                logger.warning(f"Skipping {account.kind.value} {account.id} in balance sheet: {str(e)}")
                return ZERO, ZERO
            signed = result.closing_signed(to_signed(account.opening.amount, account.opening.type))
            return (signed, ZERO) if signed >= 0 else (ZERO, -signed)
        return totals

    def build(self, as_on: DateLike = None) -> dict:
        closing = self._closing(as_on)
        # assets read debit positive, liabilities credit positive
        asset_groups = roll_up(self.tree, GroupType.ASSETS, closing, EXPENSE_NATURE)
        liability_groups = roll_up(self.tree, GroupType.LIABILITY, closing, INCOME_NATURE)

        total_assets = sum((group["balance"] for group in asset_groups), ZERO)
        total_liabilities = sum((group["balance"] for group in liability_groups), ZERO)
        capital = ProfitAndLossEngine(self.tree, self.aggregator).net_profit(None, as_on)
        liabilities_and_capital = total_liabilities + capital

        return {
            "assets": {"groups": serialize_groups(asset_groups), "total": float(total_assets)},
            "liabilities": {"groups": serialize_groups(liability_groups), "total": float(total_liabilities)},
            "totals": {
                "total_assets": float(total_assets),
                "total_liabilities": float(total_liabilities),
                "capital": float(capital),
                "total_liabilities_and_capital": float(liabilities_and_capital),
                "difference": float(total_assets - liabilities_and_capital),
            },
        }
