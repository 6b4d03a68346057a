import enum
from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.sql import func
from poultry_ledger.core.database import Base
from poultry_ledger.models.group import generate_custom_id


class StockType(str, enum.Enum):
    OPENING = "opening"
    PURCHASE = "purchase"
    SALE = "sale"
    MORTALITY = "mortality"
    WEIGHT_LOSS = "weight_loss"
    CONSUME = "consume"
    RECEIPT = "receipt"
    NATURAL_WEIGHT_LOSS = "natural_weight_loss"


class InventoryStock(Base):
    __tablename__ = "inventory_stocks"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("STK"))
    type = Column(Enum(StockType), nullable=False)
    date = Column(DateTime, nullable=False)
    bill_number = Column(String(50), nullable=True)

    vendor_id = Column(String(20), ForeignKey("vendors.id"), nullable=True)
    customer_id = Column(String(20), ForeignKey("customers.id"), nullable=True)
    cash_ledger_id = Column(String(20), ForeignKey("ledgers.id"), nullable=True)
    online_ledger_id = Column(String(20), ForeignKey("ledgers.id"), nullable=True)
    expense_ledger_id = Column(String(20), ForeignKey("ledgers.id"), nullable=True)

    birds = Column(Integer, default=0)
    weight = Column(Numeric(15, 3), default=0)
    rate = Column(Numeric(15, 2), default=0)
    amount = Column(Numeric(15, 2), default=0)
    cash_paid = Column(Numeric(15, 2), default=0)
    online_paid = Column(Numeric(15, 2), default=0)
    discount = Column(Numeric(15, 2), default=0)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class IndirectSale(Base):
    """Pass-through deal: bought from a vendor and sold straight to a customer."""
    __tablename__ = "indirect_sales"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("IND"))
    invoice_number = Column(String(50), nullable=True)
    date = Column(DateTime, nullable=False)
    customer_id = Column(String(20), ForeignKey("customers.id"), nullable=False)
    vendor_id = Column(String(20), ForeignKey("vendors.id"), nullable=False)

    sale_birds = Column(Integer, default=0)
    sale_weight = Column(Numeric(15, 3), default=0)
    sale_amount = Column(Numeric(15, 2), default=0)
    purchase_birds = Column(Integer, default=0)
    purchase_weight = Column(Numeric(15, 3), default=0)
    purchase_amount = Column(Numeric(15, 2), default=0)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
