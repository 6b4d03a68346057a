import enum
from decimal import Decimal
from typing import NamedTuple, Optional, Union

Number = Union[Decimal, int, float, str, None]


class BalanceType(str, enum.Enum):
    DEBIT = "debit"
    CREDIT = "credit"


class Balance(NamedTuple):
    amount: Decimal
    type: BalanceType


ZERO = Decimal("0")


def to_decimal(value: Number) -> Decimal:
    """Coerce a stored amount to Decimal. Missing amounts count as zero."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def to_signed(amount: Number, balance_type: Optional[Union[BalanceType, str]]) -> Decimal:
    """
    Signed form of an (amount, type) pair.
    Debit is positive, credit is negative. A missing type is read as debit.
    """
    magnitude = abs(to_decimal(amount))
    if balance_type is not None and BalanceType(balance_type) == BalanceType.CREDIT:
        return -magnitude
    return magnitude


def from_signed(value: Number) -> Balance:
    """Back to an (amount, type) pair. Zero is always reported as debit."""
    value = to_decimal(value)
    if value >= 0:
        return Balance(value, BalanceType.DEBIT)
    return Balance(-value, BalanceType.CREDIT)


# ===== MUTATORS =====

def add_to_balance(balance: Balance, amount: Number, tx_type: Union[BalanceType, str]) -> Balance:
    """Apply a transaction of `amount` on side `tx_type` to a stored balance."""
    signed = to_signed(balance.amount, balance.type) + to_signed(amount, tx_type)
    return from_signed(signed)


def subtract_from_balance(balance: Balance, amount: Number, tx_type: Union[BalanceType, str]) -> Balance:
    """Undo a previously applied transaction (used for reversals and edits)."""
    signed = to_signed(balance.amount, balance.type) - to_signed(amount, tx_type)
    return from_signed(signed)


def sync_outstanding_balance(old_opening: Balance, new_opening: Balance, current_outstanding: Balance) -> Balance:
    """
    Shift the outstanding balance by the change in opening balance so that
    transactions already folded into it are preserved.
    """
    delta = to_signed(new_opening.amount, new_opening.type) - to_signed(old_opening.amount, old_opening.type)
    signed = to_signed(current_outstanding.amount, current_outstanding.type) + delta
    return from_signed(signed)
