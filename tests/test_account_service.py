"""Stored balance writes"""

from decimal import Decimal

import pytest
from sqlalchemy.orm.exc import StaleDataError

from poultry_ledger.common.exceptions import AccountNotFoundError, ConcurrentUpdateError
from poultry_ledger.core.config import LedgerConfig
from poultry_ledger.models import Customer, GroupType
from poultry_ledger.services.account_service import (
    get_account,
    list_accounts,
    post_transaction,
    reverse_transaction,
    set_outstanding_balance,
    update_opening_balance,
)
from poultry_ledger.services.transaction_aggregator import AccountKind
from poultry_ledger.utils.balance import Balance, BalanceType
from tests.factories import make_customer, make_group, make_ledger, make_vendor

D = Decimal


@pytest.fixture
def customer(db):
    customer = make_customer("CUS-1", "Star Chicken", opening="200")
    customer.outstanding_balance = D("500")
    db.add(customer)
    db.commit()
    return customer


def flaky_commit(db, failures):
    """Make the next `failures` commits lose an optimistic version check."""
    real_commit = db.commit
    calls = []

    def commit():
        calls.append(1)
        if len(calls) <= failures:
            raise StaleDataError("version mismatch")
        real_commit()

    return commit, calls


class TestLookups:
    def test_get_account(self, db, customer):
        account = get_account(db, AccountKind.CUSTOMER, "CUS-1")
        assert account.display_name == "Star Chicken"
        assert account.outstanding == Balance(D("500"), BalanceType.DEBIT)

    def test_missing_account(self, db):
        with pytest.raises(AccountNotFoundError):
            get_account(db, AccountKind.VENDOR, "VEN-NOPE")

    def test_ledger_polarity_comes_from_its_group(self, db):
        db.add(make_group("GRP-CAP", "Capital Account", GroupType.LIABILITY))
        db.add(make_ledger("LED-CAP", "Owner Capital", "GRP-CAP"))
        db.commit()
        assert get_account(db, "ledger", "LED-CAP").natural_side == BalanceType.CREDIT

    def test_list_accounts_skips_inactive(self, db):
        db.add(make_vendor("VEN-1", "Green Farms"))
        closed = make_vendor("VEN-2", "Old Farms")
        closed.is_active = False
        db.add(closed)
        db.commit()
        assert [account.id for account in list_accounts(db, AccountKind.VENDOR)] == ["VEN-1"]


class TestBalanceWrites:
    def test_opening_change_moves_outstanding(self, db, customer, config):
        account = update_opening_balance(db, AccountKind.CUSTOMER, "CUS-1", D("500"), BalanceType.DEBIT, config)
        assert account.opening == Balance(D("500"), BalanceType.DEBIT)
        assert account.outstanding == Balance(D("800"), BalanceType.DEBIT)

    def test_opening_flip_to_credit(self, db, customer, config):
        account = update_opening_balance(db, AccountKind.CUSTOMER, "CUS-1", D("100"), BalanceType.CREDIT, config)
        assert account.outstanding == Balance(D("200"), BalanceType.DEBIT)

    def test_post_and_reverse(self, db, customer, config):
        posted = post_transaction(db, AccountKind.CUSTOMER, "CUS-1", D("700"), BalanceType.CREDIT, config)
        assert posted.outstanding == Balance(D("200"), BalanceType.CREDIT)
        reversed_ = reverse_transaction(db, AccountKind.CUSTOMER, "CUS-1", D("700"), BalanceType.CREDIT, config)
        assert reversed_.outstanding == Balance(D("500"), BalanceType.DEBIT)

    def test_set_outstanding(self, db, customer, config):
        account = set_outstanding_balance(
            db, AccountKind.CUSTOMER, "CUS-1", Balance(D("650"), BalanceType.DEBIT), config)
        assert account.outstanding == Balance(D("650"), BalanceType.DEBIT)

    def test_write_bumps_version(self, db, customer, config):
        before = customer.version
        post_transaction(db, AccountKind.CUSTOMER, "CUS-1", D("1"), BalanceType.DEBIT, config)
        assert db.get(Customer, "CUS-1").version == before + 1

    def test_missing_account(self, db, config):
        with pytest.raises(AccountNotFoundError):
            post_transaction(db, AccountKind.LEDGER, "LED-NOPE", D("1"), BalanceType.DEBIT, config)


class TestOptimisticRetry:
    def test_lost_race_is_retried(self, db, customer, config, monkeypatch):
        commit, calls = flaky_commit(db, failures=1)
        monkeypatch.setattr(db, "commit", commit)

        account = update_opening_balance(db, AccountKind.CUSTOMER, "CUS-1", D("500"), BalanceType.DEBIT, config)

        assert len(calls) == 2
        assert account.outstanding == Balance(D("800"), BalanceType.DEBIT)

    def test_gives_up_after_max_attempts(self, db, customer, monkeypatch):
        commit, calls = flaky_commit(db, failures=10)
        monkeypatch.setattr(db, "commit", commit)

        with pytest.raises(ConcurrentUpdateError):
            post_transaction(db, AccountKind.CUSTOMER, "CUS-1", D("50"), BalanceType.DEBIT,
                             LedgerConfig(max_write_attempts=2))

        assert len(calls) == 2
        monkeypatch.undo()
        db.expire_all()
        assert db.get(Customer, "CUS-1").outstanding_balance == D("500")
