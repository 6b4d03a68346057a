from sqlalchemy.orm import Session

from poultry_ledger.core.config import LedgerConfig
from poultry_ledger.logger_config import logger
from poultry_ledger.services.account_service import get_account, set_outstanding_balance
from poultry_ledger.services.balance_sheet import BalanceSheetEngine
from poultry_ledger.services.ledger_statement import LedgerStatementBuilder
from poultry_ledger.services.profit_and_loss import ProfitAndLossEngine
from poultry_ledger.services.source_loader import SourceLoader
from poultry_ledger.services.transaction_aggregator import (
    AccountKind,
    AccountRef,
    DateLike,
    TransactionAggregator,
)
from poultry_ledger.services.trial_balance import TrialBalanceEngine
from poultry_ledger.utils.balance import Balance


class ReportService:
    """
    Computed reports for one request: loads the chart and the sources
    from the session and hands them to the engines.
    """
    def __init__(self, db: Session, config: LedgerConfig):
        self.db = db
        self.config = config
        self.loader = SourceLoader(db)

    def _aggregator(self, end: DateLike = None) -> TransactionAggregator:
        return TransactionAggregator(self.loader.load_sources(end), self.config)

    # ================= GROUP SUMMARY ===================

    def group_summary(self, group_id: str, start: DateLike = None, end: DateLike = None) -> dict:
        tree = self.loader.load_tree()
        logger.debug(f"Group summary for {group_id} from {start} to {end}")
        return TrialBalanceEngine(tree, self._aggregator(end)).group_summary(group_id, start, end)

    # ================= STATEMENTS ===================

    def statement(self, kind: AccountKind, account_id: str, start: DateLike = None, end: DateLike = None) -> dict:
        account = get_account(self.db, kind, account_id)
        builder = LedgerStatementBuilder(self._aggregator(end), self.config, balance_writer=self._write_outstanding)
        return builder.build(account, start, end).to_dict()

    def _write_outstanding(self, account: AccountRef, balance: Balance):
        set_outstanding_balance(self.db, account.kind, account.id, balance, self.config)

    # ================= FINANCIAL STATEMENTS ===================

    def profit_and_loss(self, start: DateLike = None, end: DateLike = None) -> dict:
        tree = self.loader.load_tree()
        return ProfitAndLossEngine(tree, self._aggregator(end)).build(start, end)

    def balance_sheet(self, as_on: DateLike = None) -> dict:
        tree = self.loader.load_tree()
        return BalanceSheetEngine(tree, self._aggregator(as_on)).build(as_on)
