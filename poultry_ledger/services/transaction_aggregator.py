import enum
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterator, List, Optional, Union

from poultry_ledger.core.config import LedgerConfig
from poultry_ledger.models.account import Customer, Ledger, Vendor
from poultry_ledger.models.group import GroupType
from poultry_ledger.models.stock import StockType
from poultry_ledger.models.voucher import VoucherType
from poultry_ledger.utils.balance import ZERO, Balance, BalanceType, to_decimal

DateLike = Union[date, datetime, str, None]

CENT = Decimal("0.01")


class AccountKind(str, enum.Enum):
    LEDGER = "ledger"
    CUSTOMER = "customer"
    VENDOR = "vendor"


class Particulars(str, enum.Enum):
    OPENING = "OP BAL"
    SALES = "SALES"
    STOCK_SALE = "STOCK_SALE"
    INDIRECT_SALES = "INDIRECT_SALES"
    PURCHASE = "PURCHASE"
    STOCK_PURCHASE = "STOCK_PURCHASE"
    INDIRECT_PURCHASE = "INDIRECT_PURCHASE"
    EXPENSE = "EXPENSE"
    RECEIPT = "RECEIPT"
    PAYMENT = "PAYMENT"
    CASH_RECEIPT = "BY CASH RECEIPT"
    BANK_RECEIPT = "BY BANK RECEIPT"
    CASH_PAYMENT = "BY CASH PAYMENT"
    BANK_PAYMENT = "BY BANK PAYMENT"
    DISCOUNT = "DISCOUNT"
    JOURNAL = "JOURNAL"
    LESS_TDS = "LESS TDS"


# statement ordering for entries that share a date and a source document
PRECEDENCE = {
    Particulars.OPENING: 0,
    Particulars.SALES: 1,
    Particulars.STOCK_SALE: 1,
    Particulars.INDIRECT_SALES: 1,
    Particulars.PURCHASE: 1,
    Particulars.STOCK_PURCHASE: 1,
    Particulars.INDIRECT_PURCHASE: 1,
    Particulars.EXPENSE: 1,
    Particulars.RECEIPT: 1,
    Particulars.PAYMENT: 1,
    Particulars.CASH_RECEIPT: 2,
    Particulars.CASH_PAYMENT: 2,
    Particulars.BANK_RECEIPT: 3,
    Particulars.BANK_PAYMENT: 3,
    Particulars.DISCOUNT: 4,
}
OTHER_PRECEDENCE = 99

PRINCIPAL = {
    Particulars.SALES, Particulars.STOCK_SALE, Particulars.INDIRECT_SALES,
    Particulars.PURCHASE, Particulars.STOCK_PURCHASE, Particulars.INDIRECT_PURCHASE,
    Particulars.EXPENSE,
}
RECEIPTS = {
    Particulars.RECEIPT, Particulars.PAYMENT,
    Particulars.CASH_RECEIPT, Particulars.BANK_RECEIPT,
    Particulars.CASH_PAYMENT, Particulars.BANK_PAYMENT,
}
ADJUSTMENTS = {Particulars.DISCOUNT, Particulars.JOURNAL, Particulars.LESS_TDS}

CREDIT_NATURE_GROUPS = {GroupType.LIABILITY, GroupType.INCOME}


def precedence_of(particulars: Particulars) -> int:
    return PRECEDENCE.get(particulars, OTHER_PRECEDENCE)


def natural_side_for(kind: AccountKind, group_type: Optional[GroupType] = None) -> BalanceType:
    """Customers are receivables, vendors payables, ledgers follow their group."""
    if kind == AccountKind.CUSTOMER:
        return BalanceType.DEBIT
    if kind == AccountKind.VENDOR:
        return BalanceType.CREDIT
    if group_type is not None and GroupType(group_type) in CREDIT_NATURE_GROUPS:
        return BalanceType.CREDIT
    return BalanceType.DEBIT


def _balance(amount, balance_type, default: BalanceType) -> Balance:
    return Balance(to_decimal(amount), BalanceType(balance_type) if balance_type else default)


@dataclass(frozen=True)
class AccountRef:
    """One view over Ledger, Customer and Vendor rows so the engines never branch on the model class."""
    kind: AccountKind
    id: str
    display_name: str
    opening: Balance
    outstanding: Balance
    group_id: Optional[str]
    natural_side: BalanceType
    tds_applicable: bool = False
    tds_updated_at: Optional[datetime] = None
    is_active: bool = True

    @classmethod
    def from_model(cls, model, group_type: Optional[GroupType] = None) -> "AccountRef":
        if isinstance(model, Customer):
            kind, name = AccountKind.CUSTOMER, model.shop_name
        elif isinstance(model, Vendor):
            kind, name = AccountKind.VENDOR, model.vendor_name
        elif isinstance(model, Ledger):
            kind, name = AccountKind.LEDGER, model.name
            if group_type is None and model.group is not None:
                group_type = model.group.type
        else:
            raise TypeError(f"Unsupported account model: {type(model).__name__}")

        natural = natural_side_for(kind, group_type)
        return cls(
            kind=kind,
            id=str(model.id),
            display_name=name or "",
            opening=_balance(model.opening_balance, model.opening_balance_type, natural),
            outstanding=_balance(model.outstanding_balance, model.outstanding_balance_type, natural),
            group_id=model.group_id,
            natural_side=natural,
            tds_applicable=bool(getattr(model, "tds_applicable", False)),
            tds_updated_at=getattr(model, "tds_updated_at", None),
            is_active=model.is_active is not False,
        )


@dataclass
class SourceBundle:
    """Every transaction source the aggregator reads. Missing sources contribute nothing."""
    vouchers: Optional[List] = field(default_factory=list)
    trips: Optional[List] = field(default_factory=list)
    stocks: Optional[List] = field(default_factory=list)
    indirect_sales: Optional[List] = field(default_factory=list)

    def __post_init__(self):
        self.vouchers = list(self.vouchers or [])
        self.trips = list(self.trips or [])
        self.stocks = list(self.stocks or [])
        self.indirect_sales = list(self.indirect_sales or [])


@dataclass(frozen=True)
class Posting:
    txn_key: str
    entry_id: str
    date: datetime
    particulars: Particulars
    side: BalanceType
    amount: Decimal
    birds: int = 0
    weight: Decimal = ZERO

    @property
    def signed(self) -> Decimal:
        return self.amount if self.side == BalanceType.DEBIT else -self.amount


@dataclass
class AggregateResult:
    debit_total: Decimal = ZERO
    credit_total: Decimal = ZERO
    # signed net of everything dated before the window start
    carry_forward: Decimal = ZERO
    birds: int = 0
    weight: Decimal = ZERO
    discount_and_other: Decimal = ZERO

    @property
    def net(self) -> Decimal:
        return self.debit_total - self.credit_total

    def closing_signed(self, opening_signed: Decimal) -> Decimal:
        return opening_signed + self.carry_forward + self.net


def as_datetime(value: DateLike, end_of_day: bool = False) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.replace(tzinfo=None)
        if end_of_day and value.time() == time.min:
            return datetime.combine(value.date(), time.max)
        return value
    return datetime.combine(value, time.max if end_of_day else time.min)


@dataclass(frozen=True)
class Window:
    """Inclusive date window. Either bound may be open; `end` covers its whole day."""
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @classmethod
    def of(cls, start: DateLike = None, end: DateLike = None) -> "Window":
        return cls(as_datetime(start), as_datetime(end, end_of_day=True))

    def position(self, when: datetime) -> int:
        """-1 before the window, 0 inside it, 1 after it."""
        when = as_datetime(when)
        if self.end is not None and when > self.end:
            return 1
        if self.start is not None and when < self.start:
            return -1
        return 0


class TransactionAggregator:
    """
    Normalizes vouchers, trips, inventory stock and indirect sales into
    postings for a single account and folds them over a date window.
    """

    def __init__(self, sources: SourceBundle, config: LedgerConfig):
        self.sources = sources if sources is not None else SourceBundle()
        self.config = config

    # ===== FOLDING =====

    def aggregate(self, account: AccountRef, start: DateLike = None, end: DateLike = None) -> AggregateResult:
        result = AggregateResult()
        window = Window.of(start, end)
        for posting in self.postings_for(account):
            position = window.position(posting.date)
            if position > 0:
                continue
            if position < 0:
                result.carry_forward += posting.signed
                continue

            if posting.side == BalanceType.DEBIT:
                result.debit_total += posting.amount
            else:
                result.credit_total += posting.amount
            result.birds += posting.birds
            result.weight += posting.weight
            if posting.particulars in ADJUSTMENTS:
                result.discount_and_other += posting.amount
        return result

    # ===== POSTINGS =====

    def postings_for(self, account: AccountRef) -> List[Posting]:
        postings: List[Posting] = []
        postings.extend(self._voucher_postings(account))
        postings.extend(self._trip_postings(account))
        postings.extend(self._stock_postings(account))
        postings.extend(self._indirect_sale_postings(account))
        return [p for p in postings if p.amount != 0]

    def tds_on(self, account: AccountRef, amount: Decimal, when: datetime) -> Decimal:
        """TDS deducted from a vendor purchase made after TDS was switched on."""
        if account.kind != AccountKind.VENDOR or not account.tds_applicable:
            return ZERO
        if account.tds_updated_at is None or as_datetime(when) <= as_datetime(account.tds_updated_at):
            return ZERO
        return (to_decimal(amount) * to_decimal(self.config.tds_rate)).quantize(CENT, rounding=ROUND_HALF_UP)

    def _voucher_postings(self, account: AccountRef) -> Iterator[Posting]:
        for voucher in self.sources.vouchers:
            if voucher.is_active is False:
                continue
            voucher_type = VoucherType(voucher.voucher_type)
            key = str(voucher.id)

            if voucher_type in (VoucherType.PAYMENT, VoucherType.RECEIPT):
                yield from self._party_postings(account, voucher, voucher_type, key)
                continue

            for index, entry in enumerate(voucher.entries or []):
                if not _entry_matches(entry.account, account):
                    continue
                debit = to_decimal(entry.debit_amount)
                credit = to_decimal(entry.credit_amount)
                entry_key = f"{key}:entry:{entry.id if entry.id is not None else index}"
                if debit:
                    yield Posting(key, f"{entry_key}:dr", voucher.date, Particulars.JOURNAL, BalanceType.DEBIT, debit)
                if credit:
                    yield Posting(key, f"{entry_key}:cr", voucher.date, Particulars.JOURNAL, BalanceType.CREDIT, credit)

    def _party_postings(self, account, voucher, voucher_type, key) -> Iterator[Posting]:
        is_payment = voucher_type == VoucherType.PAYMENT
        particulars = Particulars.PAYMENT if is_payment else Particulars.RECEIPT
        # the party side of a payment is debited, the paying account credited
        party_side = BalanceType.DEBIT if is_payment else BalanceType.CREDIT
        header_side = BalanceType.CREDIT if is_payment else BalanceType.DEBIT
        parties = voucher.parties or []

        for index, party in enumerate(parties):
            if str(party.party_id) == account.id:
                party_key = party.id if party.id is not None else index
                yield Posting(key, f"{key}:party:{party_key}", voucher.date, particulars,
                              party_side, to_decimal(party.amount))

        if not parties and voucher.party_id is not None and str(voucher.party_id) == account.id:
            yield Posting(key, f"{key}:party", voucher.date, particulars, party_side, _entry_total(voucher))

        if voucher.account_id is not None and str(voucher.account_id) == account.id:
            total = sum((to_decimal(p.amount) for p in parties), ZERO) if parties else _entry_total(voucher)
            yield Posting(key, f"{key}:account", voucher.date, particulars, header_side, total)

    def _trip_postings(self, account: AccountRef) -> Iterator[Posting]:
        for trip in self.sources.trips:
            key = str(trip.id)

            for index, sale in enumerate(trip.sales or []):
                when = sale.timestamp or trip.date
                line = f"{key}:sale:{sale.id if sale.id is not None else index}"
                yield from self._sale_postings(account, line, line, when, sale,
                                               customer_id=sale.client_id, principal=Particulars.SALES)

            for index, purchase in enumerate(trip.purchases or []):
                if purchase.supplier_id is None or str(purchase.supplier_id) != account.id:
                    continue
                when = purchase.timestamp or trip.date
                line = f"{key}:purchase:{purchase.id if purchase.id is not None else index}"
                yield from self._purchase_postings(account, line, line, when, purchase.amount,
                                                   Particulars.PURCHASE, purchase.birds, purchase.weight)

    def _stock_postings(self, account: AccountRef) -> Iterator[Posting]:
        for stock in self.sources.stocks:
            if stock.is_active is False:
                continue
            key = str(stock.id)
            stock_type = StockType(stock.type)

            if stock_type in (StockType.PURCHASE, StockType.OPENING):
                if stock.vendor_id is not None and str(stock.vendor_id) == account.id:
                    yield from self._purchase_postings(account, key, f"{key}:purchase", stock.date, stock.amount,
                                                       Particulars.STOCK_PURCHASE, stock.birds, stock.weight)
                if _ref_matches(stock.cash_ledger_id, account):
                    yield Posting(key, f"{key}:cash", stock.date, Particulars.CASH_PAYMENT,
                                  BalanceType.CREDIT, to_decimal(stock.cash_paid))
                if _ref_matches(stock.online_ledger_id, account):
                    yield Posting(key, f"{key}:online", stock.date, Particulars.BANK_PAYMENT,
                                  BalanceType.CREDIT, to_decimal(stock.online_paid))

            elif stock_type in (StockType.SALE, StockType.RECEIPT):
                # a receipt only settles money, there is no sale amount behind it
                principal = Particulars.STOCK_SALE if stock_type == StockType.SALE else None
                yield from self._sale_postings(account, key, f"{key}:sale", stock.date, stock,
                                               customer_id=stock.customer_id, principal=principal)

            if _ref_matches(stock.expense_ledger_id, account):
                yield Posting(key, f"{key}:expense", stock.date, Particulars.EXPENSE,
                              BalanceType.DEBIT, to_decimal(stock.amount))

    def _indirect_sale_postings(self, account: AccountRef) -> Iterator[Posting]:
        for sale in self.sources.indirect_sales:
            if sale.is_active is False:
                continue
            key = str(sale.id)
            if account.kind == AccountKind.CUSTOMER and _ref_matches(sale.customer_id, account):
                yield Posting(key, f"{key}:sale", sale.date, Particulars.INDIRECT_SALES, BalanceType.DEBIT,
                              to_decimal(sale.sale_amount), sale.sale_birds or 0, to_decimal(sale.sale_weight))
            if account.kind == AccountKind.VENDOR and _ref_matches(sale.vendor_id, account):
                yield from self._purchase_postings(account, key, f"{key}:purchase", sale.date, sale.purchase_amount,
                                                   Particulars.INDIRECT_PURCHASE, sale.purchase_birds,
                                                   sale.purchase_weight)

    # ===== SHARED LINE RULES =====

    def _sale_postings(self, account, key, line, when, sale, customer_id, principal) -> Iterator[Posting]:
        """A customer is debited the sale and credited whatever was collected on it."""
        if customer_id is not None and str(customer_id) == account.id:
            if principal is not None:
                yield Posting(key, f"{line}:amount", when, principal, BalanceType.DEBIT,
                              to_decimal(sale.amount), sale.birds or 0, to_decimal(sale.weight))
            yield Posting(key, f"{line}:cash", when, Particulars.CASH_RECEIPT, BalanceType.CREDIT,
                          to_decimal(sale.cash_paid))
            yield Posting(key, f"{line}:online", when, Particulars.BANK_RECEIPT, BalanceType.CREDIT,
                          to_decimal(sale.online_paid))
            yield Posting(key, f"{line}:discount", when, Particulars.DISCOUNT, BalanceType.CREDIT,
                          to_decimal(sale.discount))

        if _ref_matches(sale.cash_ledger_id, account):
            yield Posting(key, f"{line}:cash-ledger", when, Particulars.CASH_RECEIPT, BalanceType.DEBIT,
                          to_decimal(sale.cash_paid))
        if _ref_matches(sale.online_ledger_id, account):
            yield Posting(key, f"{line}:online-ledger", when, Particulars.BANK_RECEIPT, BalanceType.DEBIT,
                          to_decimal(sale.online_paid))

    def _purchase_postings(self, account, key, line, when, amount, principal, birds, weight) -> Iterator[Posting]:
        amount = to_decimal(amount)
        yield Posting(key, f"{line}:amount", when, principal, BalanceType.CREDIT,
                      amount, birds or 0, to_decimal(weight))
        tds = self.tds_on(account, amount, when)
        if tds:
            yield Posting(key, f"{line}:tds", when, Particulars.LESS_TDS, BalanceType.DEBIT, tds)


def _ref_matches(ref, account: AccountRef) -> bool:
    return ref is not None and str(ref) == account.id


def _entry_matches(entry_account: Optional[str], account: AccountRef) -> bool:
    """Voucher entries name their account; older rows stored the id instead."""
    if not entry_account:
        return False
    label = entry_account.strip()
    if label == account.id:
        return True
    return bool(account.display_name) and label.lower() == account.display_name.strip().lower()


def _entry_total(voucher) -> Decimal:
    entries = voucher.entries or []
    debit = sum((to_decimal(e.debit_amount) for e in entries), ZERO)
    if debit:
        return debit
    return sum((to_decimal(e.credit_amount) for e in entries), ZERO)

