"""Signed balance arithmetic"""

from decimal import Decimal

import pytest

from poultry_ledger.utils.balance import (
    Balance,
    BalanceType,
    add_to_balance,
    from_signed,
    subtract_from_balance,
    sync_outstanding_balance,
    to_decimal,
    to_signed,
)

D = Decimal
DEBIT = BalanceType.DEBIT
CREDIT = BalanceType.CREDIT


class TestSignedForm:
    def test_debit_is_positive(self):
        assert to_signed(D("100"), DEBIT) == D("100")

    def test_credit_is_negative(self):
        assert to_signed(D("100"), CREDIT) == D("-100")

    def test_missing_type_reads_as_debit(self):
        assert to_signed(D("40"), None) == D("40")

    def test_amount_sign_is_ignored(self):
        assert to_signed(D("-40"), CREDIT) == D("-40")

    def test_accepts_raw_strings(self):
        assert to_signed("25.50", "credit") == D("-25.50")

    def test_zero_is_debit(self):
        assert from_signed(D("0")) == Balance(D("0"), DEBIT)

    def test_negative_becomes_credit(self):
        assert from_signed(D("-12.5")) == Balance(D("12.5"), CREDIT)

    @pytest.mark.parametrize("amount,balance_type", [
        (D("0.01"), DEBIT),
        (D("750"), CREDIT),
        (D("123456.78"), DEBIT),
    ])
    def test_round_trip(self, amount, balance_type):
        assert from_signed(to_signed(amount, balance_type)) == Balance(amount, balance_type)

    def test_to_decimal_handles_none_and_float(self):
        assert to_decimal(None) == D("0")
        assert to_decimal(0.1) == D("0.1")


class TestMutators:
    def test_credit_reduces_debit_balance(self):
        assert add_to_balance(Balance(D("1000"), DEBIT), D("400"), CREDIT) == Balance(D("600"), DEBIT)

    def test_add_then_subtract_restores(self):
        changed = add_to_balance(Balance(D("1000"), DEBIT), D("400"), DEBIT)
        assert changed == Balance(D("1400"), DEBIT)
        assert subtract_from_balance(changed, D("400"), DEBIT) == Balance(D("1000"), DEBIT)

    def test_crossing_zero_flips_type(self):
        assert add_to_balance(Balance(D("100"), DEBIT), D("250"), CREDIT) == Balance(D("150"), CREDIT)

    def test_sync_outstanding_keeps_transactions(self):
        result = sync_outstanding_balance(
            old_opening=Balance(D("200"), DEBIT),
            new_opening=Balance(D("500"), DEBIT),
            current_outstanding=Balance(D("500"), DEBIT),
        )
        assert result == Balance(D("800"), DEBIT)

    def test_sync_outstanding_across_types(self):
        result = sync_outstanding_balance(
            old_opening=Balance(D("100"), DEBIT),
            new_opening=Balance(D("100"), CREDIT),
            current_outstanding=Balance(D("50"), DEBIT),
        )
        assert result == Balance(D("150"), CREDIT)
