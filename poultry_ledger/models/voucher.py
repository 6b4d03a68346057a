import enum
from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from poultry_ledger.core.database import Base
from poultry_ledger.models.group import generate_custom_id


class VoucherType(str, enum.Enum):
    SALES = "Sales"
    PURCHASE = "Purchase"
    PAYMENT = "Payment"
    RECEIPT = "Receipt"
    CONTRA = "Contra"
    JOURNAL = "Journal"


class PartyType(str, enum.Enum):
    CUSTOMER = "customer"
    LEDGER = "ledger"
    VENDOR = "vendor"


class Voucher(Base):
    """
    Manual accounting entry.
    Payment/Receipt vouchers carry a header account and a list of parties.
    Other voucher types carry entries keyed by account name.
    """
    __tablename__ = "vouchers"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("VCH"))
    voucher_number = Column(String(50), nullable=True)
    voucher_type = Column(Enum(VoucherType), nullable=False)
    date = Column(DateTime, nullable=False)
    account_id = Column(String(20), nullable=True)
    # legacy single-party vouchers
    party_id = Column(String(20), nullable=True)
    narration = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    entries = relationship("VoucherEntry", back_populates="voucher",
                           cascade="all, delete-orphan", order_by="VoucherEntry.id")
    parties = relationship("VoucherParty", back_populates="voucher",
                           cascade="all, delete-orphan", order_by="VoucherParty.id")


class VoucherEntry(Base):
    __tablename__ = "voucher_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    voucher_id = Column(String(20), ForeignKey("vouchers.id"), nullable=False)
    account = Column(String(150), nullable=False)
    debit_amount = Column(Numeric(15, 2), default=0)
    credit_amount = Column(Numeric(15, 2), default=0)
    narration = Column(Text, nullable=True)

    voucher = relationship("Voucher", back_populates="entries")


class VoucherParty(Base):
    __tablename__ = "voucher_parties"

    id = Column(Integer, primary_key=True, autoincrement=True)
    voucher_id = Column(String(20), ForeignKey("vouchers.id"), nullable=False)
    party_id = Column(String(20), nullable=False)
    party_type = Column(Enum(PartyType), nullable=False)
    amount = Column(Numeric(15, 2), default=0)

    voucher = relationship("Voucher", back_populates="parties")
