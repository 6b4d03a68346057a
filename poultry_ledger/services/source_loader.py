from sqlalchemy.orm import Session, selectinload

from poultry_ledger.logger_config import logger
from poultry_ledger.models.account import Customer, Ledger, Vendor
from poultry_ledger.models.group import Group
from poultry_ledger.models.stock import IndirectSale, InventoryStock
from poultry_ledger.models.trip import Trip
from poultry_ledger.models.voucher import Voucher
from poultry_ledger.services.account_tree import AccountTree
from poultry_ledger.services.transaction_aggregator import DateLike, SourceBundle, as_datetime


class SourceLoader:
    """
    Reads the chart of accounts and the transaction sources from the database.
    Sources are loaded up to `end` only; earlier history is needed for carry-forward.
    """

    def __init__(self, db: Session):
        self.db = db

    def load_tree(self) -> AccountTree:
        groups = self.db.query(Group).filter(Group.is_active.is_(True)).all()
        ledgers = self.db.query(Ledger).filter(Ledger.is_active.is_(True)).all()
        customers = self.db.query(Customer).filter(Customer.is_active.is_(True)).all()
        vendors = self.db.query(Vendor).filter(Vendor.is_active.is_(True)).all()
        logger.debug(
            f"Loaded chart: {len(groups)} groups, {len(ledgers)} ledgers, "
            f"{len(customers)} customers, {len(vendors)} vendors")
        return AccountTree.build(groups, ledgers, customers, vendors)

    def load_sources(self, end: DateLike = None) -> SourceBundle:
        end_at = as_datetime(end, end_of_day=True)

        vouchers = self.db.query(Voucher).options(
            selectinload(Voucher.entries), selectinload(Voucher.parties)
        ).filter(Voucher.is_active.is_(True))
        # trip lines may carry a later timestamp than the trip, so trips are not cut by date
        trips = self.db.query(Trip).options(
            selectinload(Trip.sales), selectinload(Trip.purchases))
        stocks = self.db.query(InventoryStock).filter(InventoryStock.is_active.is_(True))
        indirect_sales = self.db.query(IndirectSale).filter(IndirectSale.is_active.is_(True))

        if end_at is not None:
            vouchers = vouchers.filter(Voucher.date <= end_at)
            stocks = stocks.filter(InventoryStock.date <= end_at)
            indirect_sales = indirect_sales.filter(IndirectSale.date <= end_at)

        return SourceBundle(
            vouchers=vouchers.order_by(Voucher.date).all(),
            trips=trips.order_by(Trip.date).all(),
            stocks=stocks.order_by(InventoryStock.date).all(),
            indirect_sales=indirect_sales.order_by(IndirectSale.date).all(),
        )

