"""Group summary rows and totals"""

from datetime import date
from decimal import Decimal

import pytest

from poultry_ledger.common.exceptions import GroupNotFoundError
from poultry_ledger.models import GroupType, Trip, TripPurchase, TripSale
from poultry_ledger.services.account_tree import AccountTree
from poultry_ledger.services.trial_balance import TrialBalanceEngine, split_by_polarity
from poultry_ledger.services.transaction_aggregator import SourceBundle, TransactionAggregator
from poultry_ledger.utils.balance import BalanceType
from tests.factories import day, make_customer, make_group, make_ledger, make_vendor

D = Decimal


def engine(tree, config, **sources):
    return TrialBalanceEngine(tree, TransactionAggregator(SourceBundle(**sources), config))


class TestPolarity:
    @pytest.mark.parametrize("group_type", [GroupType.ASSETS, GroupType.EXPENSES, GroupType.OTHERS])
    def test_debit_natured(self, group_type):
        assert split_by_polarity(D("10"), group_type) == (D("10"), D("0"))
        assert split_by_polarity(D("-10"), group_type) == (D("0"), D("10"))

    @pytest.mark.parametrize("group_type", [GroupType.LIABILITY, GroupType.INCOME])
    def test_credit_natured(self, group_type):
        assert split_by_polarity(D("10"), group_type) == (D("0"), D("10"))
        assert split_by_polarity(D("-10"), group_type) == (D("10"), D("0"))


class TestGroupSummary:
    def test_child_group_rolls_up(self, expense_groups, config):
        ledger = make_ledger("LED-FEED", "Feed", "GRP-CHILD", opening="300")
        tree = AccountTree.build(expense_groups, ledgers=[ledger])
        summary = engine(tree, config).group_summary("GRP-ROOT")

        (row,) = summary["rows"]
        assert row["type"] == "group"
        assert row["id"] == "GRP-CHILD"
        assert row["debit"] == 300.0
        assert row["credit"] == 0.0
        assert summary["totals"]["debit"] == 300.0
        assert summary["group"] == {"id": "GRP-ROOT", "name": "Direct Expenses", "type": "Expenses"}

    def test_direct_members_follow_the_group(self, config):
        groups = [make_group("GRP-D", "Sundry Debtors", GroupType.ASSETS)]
        customers = [make_customer("CUS-1", "Star Chicken", group_id="GRP-D")]
        ledgers = [make_ledger("LED-1", "Petty Cash", "GRP-D", opening="50")]
        tree = AccountTree.build(groups, ledgers=ledgers, customers=customers)
        trip = Trip(id="TRP-1", date=day(3), sales=[
            TripSale(id=1, client_id="CUS-1", amount=D("1000"), cash_paid=D("400"), birds=80, weight=D("160"))])

        summary = engine(tree, config, trips=[trip]).group_summary("GRP-D")

        assert [(row["type"], row["id"]) for row in summary["rows"]] == [("ledger", "LED-1"), ("customer", "CUS-1")]
        customer_row = summary["rows"][1]
        assert customer_row["debit"] == 600.0
        assert customer_row["transaction_debit"] == 1000.0
        assert customer_row["transaction_credit"] == 400.0
        assert customer_row["birds"] == 80
        assert summary["totals"]["debit"] == 650.0
        assert summary["totals"]["birds"] == 80

    def test_containing_group_type_decides_column(self, config):
        # a payable parked under a liability group shows in the debit column when its signed closing is negative
        groups = [make_group("GRP-L", "Sundry Creditors", GroupType.LIABILITY)]
        vendors = [make_vendor("VEN-1", "Green Farms", group_id="GRP-L", opening="500")]
        tree = AccountTree.build(groups, vendors=vendors)
        (row,) = engine(tree, config).group_summary("GRP-L")["rows"]
        assert (row["debit"], row["credit"]) == (500.0, 0.0)
        assert row["closing_balance"] == -500.0

    def test_sub_group_keeps_both_columns(self, config):
        groups = [
            make_group("GRP-A", "Current Assets", GroupType.ASSETS),
            make_group("GRP-D", "Sundry Debtors", GroupType.ASSETS, parent_id="GRP-A"),
        ]
        customers = [
            make_customer("CUS-1", "Star Chicken", group_id="GRP-D", opening="700"),
            make_customer("CUS-2", "Advance Shop", group_id="GRP-D", opening="200", opening_type=BalanceType.CREDIT),
        ]
        tree = AccountTree.build(groups, customers=customers)
        (row,) = engine(tree, config).group_summary("GRP-A")["rows"]
        assert (row["debit"], row["credit"]) == (700.0, 200.0)
        assert row["closing_balance"] == 500.0

    def test_date_window(self, expense_groups, config):
        vendor = make_vendor("VEN-1", "Green Farms", group_id="GRP-ROOT")
        tree = AccountTree.build(expense_groups, vendors=[vendor])
        trips = [
            Trip(id="TRP-1", date=day(2), purchases=[TripPurchase(id=1, supplier_id="VEN-1", amount=D("100"))]),
            Trip(id="TRP-2", date=day(12), purchases=[TripPurchase(id=2, supplier_id="VEN-1", amount=D("250"))]),
        ]
        summary = engine(tree, config, trips=trips).group_summary(
            "GRP-ROOT", start=date(2024, 1, 10), end=date(2024, 1, 31))

        row = next(r for r in summary["rows"] if r["type"] == "vendor")
        assert row["transaction_credit"] == 250.0
        assert row["credit"] == 350.0
        assert summary["start_date"] == "2024-01-10T00:00:00"
        assert summary["end_date"].startswith("2024-01-31T23:59:59")

    def test_all_vendor_group(self, config):
        groups = [
            make_group("GRP-P", "Purchase Accounts", GroupType.EXPENSES, includes_all_vendors=True),
            make_group("GRP-L", "Sundry Creditors", GroupType.LIABILITY),
        ]
        vendors = [make_vendor("VEN-1", "Green Farms", group_id="GRP-L", opening="90")]
        tree = AccountTree.build(groups, vendors=vendors)
        (row,) = engine(tree, config).group_summary("GRP-P")["rows"]
        assert row["id"] == "VEN-1"
        assert row["credit"] == 90.0

    def test_failing_entity_contributes_zero(self, expense_groups, config, monkeypatch):
        ledger = make_ledger("LED-FEED", "Feed", "GRP-ROOT", opening="300")
        tree = AccountTree.build(expense_groups, ledgers=[ledger])
        summary_engine = engine(tree, config)

        def broken(*args, **kwargs):
            raise RuntimeError("bad row")

        monkeypatch.setattr(summary_engine.aggregator, "aggregate", broken)
        summary = summary_engine.group_summary("GRP-ROOT")
        assert [row["debit"] for row in summary["rows"]] == [0.0, 0.0]
        assert summary["totals"]["debit"] == 0.0

    def test_unknown_group(self, config):
        with pytest.raises(GroupNotFoundError):
            engine(AccountTree.build([]), config).group_summary("GRP-NOPE")
