"""create chart of accounts, accounts and transaction source tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision: str = "a1b2c3d4e5f6"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENUMS = {
    "grouptype": ("LIABILITY", "ASSETS", "EXPENSES", "INCOME", "OTHERS"),
    "balancetype": ("DEBIT", "CREDIT"),
    "ledgertype": ("VENDOR", "CUSTOMER", "OTHER"),
    "vouchertype": ("SALES", "PURCHASE", "PAYMENT", "RECEIPT", "CONTRA", "JOURNAL"),
    "partytype": ("CUSTOMER", "LEDGER", "VENDOR"),
    "stocktype": ("OPENING", "PURCHASE", "SALE", "MORTALITY", "WEIGHT_LOSS", "CONSUME", "RECEIPT",
                  "NATURAL_WEIGHT_LOSS"),
}


def enum(name: str):
    # types are created up front, tables must not create them again
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def balance_columns(natural: str):
    return [
        sa.Column("opening_balance", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("opening_balance_type", enum("balancetype"), nullable=False, server_default=natural),
        sa.Column("outstanding_balance", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("outstanding_balance_type", enum("balancetype"), nullable=False, server_default=natural),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    for name, values in ENUMS.items():
        sa.Enum(*values, name=name).create(bind, checkfirst=True)

    op.create_table(
        "groups",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("slug", sa.String(120), nullable=False, unique=True),
        sa.Column("type", enum("grouptype"), nullable=False),
        sa.Column("parent_id", sa.String(20), sa.ForeignKey("groups.id"), nullable=True),
        sa.Column("is_predefined", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("includes_all_vendors", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    )
    op.create_index("ix_groups_parent_id", "groups", ["parent_id"])

    op.create_table(
        "ledgers",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("slug", sa.String(170), nullable=True),
        sa.Column("group_id", sa.String(20), sa.ForeignKey("groups.id"), nullable=False),
        sa.Column("ledger_type", enum("ledgertype"), nullable=False, server_default="OTHER"),
        *balance_columns("DEBIT"),
    )
    op.create_index("ix_ledgers_group_id", "ledgers", ["group_id"])

    op.create_table(
        "customers",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("shop_name", sa.String(150), nullable=False),
        sa.Column("owner_name", sa.String(150), nullable=True),
        sa.Column("contact", sa.String(20), nullable=True),
        sa.Column("place", sa.String(150), nullable=True),
        sa.Column("tds_applicable", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("group_id", sa.String(20), sa.ForeignKey("groups.id"), nullable=True),
        *balance_columns("DEBIT"),
    )

    op.create_table(
        "vendors",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("vendor_name", sa.String(150), nullable=False),
        sa.Column("company_name", sa.String(150), nullable=True),
        sa.Column("contact_number", sa.String(20), nullable=True),
        sa.Column("tds_applicable", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("tds_updated_at", sa.DateTime(), nullable=True),
        sa.Column("group_id", sa.String(20), sa.ForeignKey("groups.id"), nullable=True),
        *balance_columns("CREDIT"),
    )

    op.create_table(
        "vouchers",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("voucher_number", sa.String(50), nullable=True),
        sa.Column("voucher_type", enum("vouchertype"), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("account_id", sa.String(20), nullable=True),
        sa.Column("party_id", sa.String(20), nullable=True),
        sa.Column("narration", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    )
    op.create_index("ix_vouchers_date", "vouchers", ["date"])

    op.create_table(
        "voucher_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("voucher_id", sa.String(20), sa.ForeignKey("vouchers.id"), nullable=False),
        sa.Column("account", sa.String(150), nullable=False),
        sa.Column("debit_amount", sa.Numeric(15, 2), server_default="0"),
        sa.Column("credit_amount", sa.Numeric(15, 2), server_default="0"),
        sa.Column("narration", sa.Text(), nullable=True),
    )

    op.create_table(
        "voucher_parties",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("voucher_id", sa.String(20), sa.ForeignKey("vouchers.id"), nullable=False),
        sa.Column("party_id", sa.String(20), nullable=False),
        sa.Column("party_type", enum("partytype"), nullable=False),
        sa.Column("amount", sa.Numeric(15, 2), server_default="0"),
    )
    op.create_index("ix_voucher_parties_party_id", "voucher_parties", ["party_id"])

    op.create_table(
        "trips",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("trip_number", sa.String(50), nullable=True),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    )

    op.create_table(
        "trip_sales",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("trip_id", sa.String(20), sa.ForeignKey("trips.id"), nullable=False),
        sa.Column("client_id", sa.String(20), sa.ForeignKey("customers.id"), nullable=True),
        sa.Column("bill_number", sa.String(50), nullable=True),
        sa.Column("birds", sa.Integer(), server_default="0"),
        sa.Column("weight", sa.Numeric(15, 3), server_default="0"),
        sa.Column("rate", sa.Numeric(15, 2), server_default="0"),
        sa.Column("amount", sa.Numeric(15, 2), server_default="0"),
        sa.Column("discount", sa.Numeric(15, 2), server_default="0"),
        sa.Column("cash_paid", sa.Numeric(15, 2), server_default="0"),
        sa.Column("online_paid", sa.Numeric(15, 2), server_default="0"),
        sa.Column("cash_ledger_id", sa.String(20), sa.ForeignKey("ledgers.id"), nullable=True),
        sa.Column("online_ledger_id", sa.String(20), sa.ForeignKey("ledgers.id"), nullable=True),
        sa.Column("timestamp", sa.DateTime(), nullable=True),
    )

    op.create_table(
        "trip_purchases",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("trip_id", sa.String(20), sa.ForeignKey("trips.id"), nullable=False),
        sa.Column("supplier_id", sa.String(20), sa.ForeignKey("vendors.id"), nullable=True),
        sa.Column("dc_number", sa.String(50), nullable=True),
        sa.Column("birds", sa.Integer(), server_default="0"),
        sa.Column("weight", sa.Numeric(15, 3), server_default="0"),
        sa.Column("rate", sa.Numeric(15, 2), server_default="0"),
        sa.Column("amount", sa.Numeric(15, 2), server_default="0"),
        sa.Column("timestamp", sa.DateTime(), nullable=True),
    )

    op.create_table(
        "inventory_stocks",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("type", enum("stocktype"), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("bill_number", sa.String(50), nullable=True),
        sa.Column("vendor_id", sa.String(20), sa.ForeignKey("vendors.id"), nullable=True),
        sa.Column("customer_id", sa.String(20), sa.ForeignKey("customers.id"), nullable=True),
        sa.Column("cash_ledger_id", sa.String(20), sa.ForeignKey("ledgers.id"), nullable=True),
        sa.Column("online_ledger_id", sa.String(20), sa.ForeignKey("ledgers.id"), nullable=True),
        sa.Column("expense_ledger_id", sa.String(20), sa.ForeignKey("ledgers.id"), nullable=True),
        sa.Column("birds", sa.Integer(), server_default="0"),
        sa.Column("weight", sa.Numeric(15, 3), server_default="0"),
        sa.Column("rate", sa.Numeric(15, 2), server_default="0"),
        sa.Column("amount", sa.Numeric(15, 2), server_default="0"),
        sa.Column("cash_paid", sa.Numeric(15, 2), server_default="0"),
        sa.Column("online_paid", sa.Numeric(15, 2), server_default="0"),
        sa.Column("discount", sa.Numeric(15, 2), server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    )
    op.create_index("ix_inventory_stocks_date", "inventory_stocks", ["date"])

    op.create_table(
        "indirect_sales",
        sa.Column("id", sa.String(20), primary_key=True),
        sa.Column("invoice_number", sa.String(50), nullable=True),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("customer_id", sa.String(20), sa.ForeignKey("customers.id"), nullable=False),
        sa.Column("vendor_id", sa.String(20), sa.ForeignKey("vendors.id"), nullable=False),
        sa.Column("sale_birds", sa.Integer(), server_default="0"),
        sa.Column("sale_weight", sa.Numeric(15, 3), server_default="0"),
        sa.Column("sale_amount", sa.Numeric(15, 2), server_default="0"),
        sa.Column("purchase_birds", sa.Integer(), server_default="0"),
        sa.Column("purchase_weight", sa.Numeric(15, 3), server_default="0"),
        sa.Column("purchase_amount", sa.Numeric(15, 2), server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()")),
    )


def downgrade() -> None:
    for table in ("indirect_sales", "inventory_stocks", "trip_purchases", "trip_sales", "trips",
                  "voucher_parties", "voucher_entries", "vouchers", "vendors", "customers", "ledgers", "groups"):
        op.drop_table(table)

    bind = op.get_bind()
    for name in reversed(list(ENUMS)):
        sa.Enum(name=name).drop(bind, checkfirst=True)
