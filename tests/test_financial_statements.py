"""Profit and loss and balance sheet roll-ups"""

from datetime import date
from decimal import Decimal

import pytest

from poultry_ledger.models import GroupType, Voucher, VoucherEntry, VoucherType
from poultry_ledger.services.account_tree import AccountTree
from poultry_ledger.services.balance_sheet import BalanceSheetEngine
from poultry_ledger.services.profit_and_loss import ProfitAndLossEngine
from poultry_ledger.services.transaction_aggregator import SourceBundle, TransactionAggregator
from poultry_ledger.utils.balance import BalanceType
from tests.factories import day, make_group, make_ledger, make_vendor

D = Decimal


def journal(voucher_id, when, *lines):
    entries = [
        VoucherEntry(id=index, account=account, debit_amount=D(debit), credit_amount=D(credit))
        for index, (account, debit, credit) in enumerate(lines, start=1)
    ]
    return Voucher(id=voucher_id, voucher_type=VoucherType.JOURNAL, date=when, entries=entries)


@pytest.fixture
def chart():
    groups = [
        make_group("GRP-CASH", "Cash-in-Hand", GroupType.ASSETS),
        make_group("GRP-CAP", "Capital Account", GroupType.LIABILITY),
        make_group("GRP-SALES", "Sales Accounts", GroupType.INCOME),
        make_group("GRP-DIR", "Direct Expenses", GroupType.EXPENSES),
        make_group("GRP-FEED", "Feed Expenses", GroupType.EXPENSES, parent_id="GRP-DIR"),
        make_group("GRP-PUR", "Purchase Accounts", GroupType.EXPENSES, includes_all_vendors=True),
    ]
    ledgers = [
        make_ledger("LED-CASH", "Cash", "GRP-CASH", opening="1000"),
        make_ledger("LED-CAP", "Owner Capital", "GRP-CAP", opening="1000", opening_type=BalanceType.CREDIT),
        make_ledger("LED-SALES", "Sales", "GRP-SALES", opening="5000", opening_type=BalanceType.CREDIT),
        make_ledger("LED-FEED", "Feed", "GRP-FEED"),
    ]
    vendors = [make_vendor("VEN-1", "Green Farms", group_id="GRP-CAP")]
    return AccountTree.build(groups, ledgers, vendors=vendors)


@pytest.fixture
def vouchers():
    return [
        journal("VCH-1", day(5), ("Cash", "1200", "0"), ("Sales", "0", "1200")),
        journal("VCH-2", day(6), ("Feed", "400", "0"), ("Cash", "0", "400")),
    ]


def aggregator(config, vouchers):
    return TransactionAggregator(SourceBundle(vouchers=vouchers), config)


class TestProfitAndLoss:
    def test_period_flow_only(self, chart, vouchers, config):
        report = ProfitAndLossEngine(chart, aggregator(config, vouchers)).build()

        assert report["income"]["total"] == 1200.0
        assert report["expenses"]["total"] == 400.0
        assert report["totals"]["net_profit"] == 800.0

    def test_opening_edits_do_not_move_profit(self, vouchers, config):
        def net_profit(opening):
            groups = [make_group("GRP-SALES", "Sales Accounts", GroupType.INCOME)]
            ledgers = [make_ledger("LED-SALES", "Sales", "GRP-SALES", opening=opening,
                                   opening_type=BalanceType.CREDIT)]
            return ProfitAndLossEngine(AccountTree.build(groups, ledgers), aggregator(config, vouchers)).net_profit()

        assert net_profit("0") == net_profit("25000") == D("1200")

    def test_children_nest_under_same_type_parent(self, chart, vouchers, config):
        report = ProfitAndLossEngine(chart, aggregator(config, vouchers)).build()

        expense_roots = {group["id"]: group for group in report["expenses"]["groups"]}
        assert set(expense_roots) == {"GRP-DIR", "GRP-PUR"}
        direct = expense_roots["GRP-DIR"]
        assert direct["balance"] == 400.0
        assert [child["id"] for child in direct["children"]] == ["GRP-FEED"]
        assert direct["children"][0]["debit_total"] == 400.0

    def test_all_vendor_flag_does_not_double_count(self, chart, vouchers, config):
        report = ProfitAndLossEngine(chart, aggregator(config, vouchers)).build()
        purchase = next(group for group in report["expenses"]["groups"] if group["id"] == "GRP-PUR")
        assert purchase["balance"] == 0.0

    def test_window(self, chart, vouchers, config):
        engine = ProfitAndLossEngine(chart, aggregator(config, vouchers))
        assert engine.net_profit(start=date(2024, 1, 6)) == D("-400")
        assert engine.net_profit(end=date(2024, 1, 5)) == D("1200")


class TestBalanceSheet:
    def test_balances_after_trading(self, chart, vouchers, config):
        sheet = BalanceSheetEngine(chart, aggregator(config, vouchers)).build(date(2024, 1, 31))

        assert sheet["assets"]["total"] == 1800.0
        assert sheet["liabilities"]["total"] == 1000.0
        assert sheet["totals"]["capital"] == 800.0
        assert sheet["totals"]["total_liabilities_and_capital"] == 1800.0
        assert sheet["totals"]["difference"] == 0.0

    def test_as_on_cuts_later_activity(self, chart, vouchers, config):
        sheet = BalanceSheetEngine(chart, aggregator(config, vouchers)).build(date(2024, 1, 5))

        assert sheet["assets"]["total"] == 2200.0
        assert sheet["totals"]["capital"] == 1200.0
        assert sheet["totals"]["difference"] == 0.0

    def test_before_any_activity(self, chart, vouchers, config):
        sheet = BalanceSheetEngine(chart, aggregator(config, vouchers)).build(date(2024, 1, 1))
        assert sheet["assets"]["total"] == 1000.0
        assert sheet["liabilities"]["total"] == 1000.0
        assert sheet["totals"]["capital"] == 0.0
