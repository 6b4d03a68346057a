# poultry_ledger/models/__init__.py
from .group import Group, GroupType
from .account import Ledger, LedgerType, Customer, Vendor
from .voucher import Voucher, VoucherEntry, VoucherParty, VoucherType, PartyType
from .trip import Trip, TripSale, TripPurchase
from .stock import InventoryStock, IndirectSale, StockType
