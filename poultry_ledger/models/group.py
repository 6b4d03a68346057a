import enum
import re
import secrets
import string
from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from poultry_ledger.core.database import Base


class GroupType(str, enum.Enum):
    LIABILITY = "Liability"
    ASSETS = "Assets"
    EXPENSES = "Expenses"
    INCOME = "Income"
    OTHERS = "Others"


def generate_custom_id(prefix: str, length: int = 8) -> str:
    random_part = ''.join(secrets.choice(string.ascii_uppercase)
                          for _ in range(length))
    return f"{prefix}-{random_part}"


def slugify(name: str) -> str:
    slug = re.sub(r"[\s\W-]+", "-", name.lower().strip())
    return slug.strip("-")


class Group(Base):
    """Chart-of-accounts node. Type decides debit/credit polarity for everything below it."""
    __tablename__ = "groups"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("GRP"))
    name = Column(String(100), unique=True, nullable=False)
    slug = Column(String(120), unique=True, nullable=False)
    type = Column(Enum(GroupType), nullable=False)
    parent_id = Column(String(20), ForeignKey("groups.id"), nullable=True)
    is_predefined = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    # every vendor rolls up under this group (Purchase Accounts)
    includes_all_vendors = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    parent = relationship("Group", remote_side=[id], back_populates="children")
    children = relationship("Group", back_populates="parent")
    ledgers = relationship("Ledger", back_populates="group")
