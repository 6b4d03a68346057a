import enum
from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from poultry_ledger.core.database import Base
from poultry_ledger.models.group import generate_custom_id
from poultry_ledger.utils.balance import BalanceType


class LedgerType(str, enum.Enum):
    VENDOR = "vendor"
    CUSTOMER = "customer"
    OTHER = "other"


class Ledger(Base):
    """General ledger account (cash, bank, expense heads, capital...)."""
    __tablename__ = "ledgers"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("LED"))
    name = Column(String(150), nullable=False)
    slug = Column(String(170), nullable=True)
    group_id = Column(String(20), ForeignKey("groups.id"), nullable=False)
    ledger_type = Column(Enum(LedgerType), default=LedgerType.OTHER, nullable=False)

    opening_balance = Column(Numeric(15, 2), default=0, nullable=False)
    opening_balance_type = Column(Enum(BalanceType), default=BalanceType.DEBIT, nullable=False)
    outstanding_balance = Column(Numeric(15, 2), default=0, nullable=False)
    outstanding_balance_type = Column(Enum(BalanceType), default=BalanceType.DEBIT, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    group = relationship("Group", back_populates="ledgers")

    __mapper_args__ = {"version_id_col": version}


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("CUS"))
    shop_name = Column(String(150), nullable=False)
    owner_name = Column(String(150), nullable=True)
    contact = Column(String(20), nullable=True)
    place = Column(String(150), nullable=True)
    tds_applicable = Column(Boolean, default=False, nullable=False)
    group_id = Column(String(20), ForeignKey("groups.id"), nullable=True)

    opening_balance = Column(Numeric(15, 2), default=0, nullable=False)
    opening_balance_type = Column(Enum(BalanceType), default=BalanceType.DEBIT, nullable=False)
    outstanding_balance = Column(Numeric(15, 2), default=0, nullable=False)
    outstanding_balance_type = Column(Enum(BalanceType), default=BalanceType.DEBIT, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    group = relationship("Group")

    __mapper_args__ = {"version_id_col": version}


class Vendor(Base):
    __tablename__ = "vendors"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("VEN"))
    vendor_name = Column(String(150), nullable=False)
    company_name = Column(String(150), nullable=True)
    contact_number = Column(String(20), nullable=True)
    tds_applicable = Column(Boolean, default=False, nullable=False)
    # TDS only applies to purchases made after this moment
    tds_updated_at = Column(DateTime, nullable=True)
    group_id = Column(String(20), ForeignKey("groups.id"), nullable=True)

    opening_balance = Column(Numeric(15, 2), default=0, nullable=False)
    opening_balance_type = Column(Enum(BalanceType), default=BalanceType.CREDIT, nullable=False)
    outstanding_balance = Column(Numeric(15, 2), default=0, nullable=False)
    outstanding_balance_type = Column(Enum(BalanceType), default=BalanceType.CREDIT, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    group = relationship("Group")

    __mapper_args__ = {"version_id_col": version}
