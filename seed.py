from dotenv import load_dotenv

load_dotenv()

from poultry_ledger.core.config import settings  # noqa: E402
from poultry_ledger.core.database import Base, SessionLocal, engine  # noqa: E402
from poultry_ledger.models import (  # noqa: E402
    Customer,
    Group,
    IndirectSale,
    InventoryStock,
    Ledger,
    PartyType,
    StockType,
    Trip,
    TripPurchase,
    TripSale,
    Vendor,
    Voucher,
    VoucherEntry,
    VoucherParty,
    VoucherType,
)
from poultry_ledger.services.group_service import initialize_predefined_groups  # noqa: E402
from poultry_ledger.services.report_service import ReportService  # noqa: E402
from poultry_ledger.services.transaction_aggregator import AccountKind  # noqa: E402
from poultry_ledger.utils.balance import BalanceType  # noqa: E402

from faker import Faker  # noqa: E402
import random  # noqa: E402
from datetime import datetime, timedelta  # noqa: E402
from decimal import Decimal  # noqa: E402

fake = Faker()


def money(low, high):
    return Decimal(str(round(random.uniform(low, high), 2)))


Base.metadata.create_all(bind=engine)
db = SessionLocal()

try:
    print("🔄 Clearing existing data...")
    for model in (VoucherParty, VoucherEntry, Voucher, TripSale, TripPurchase, Trip, InventoryStock, IndirectSale,
                  Customer, Vendor, Ledger):
        db.query(model).delete()
    db.commit()
    print("✅ Data cleared.")

    print("🔄 Creating chart of accounts...")
    initialize_predefined_groups(db)
    groups = {group.name: group for group in db.query(Group).all()}

    cash = Ledger(name="Cash", group_id=groups["Cash-in-Hand"].id)
    bank = Ledger(name="Bank", group_id=groups["Bank Accounts"].id)
    rent = Ledger(name="Shop Rent", group_id=groups["Indirect Expenses"].id)
    feed = Ledger(name="Feed", group_id=groups["Direct Expenses"].id)
    db.add_all([cash, bank, rent, feed])

    print("🔄 Creating customers and vendors...")
    customers = []
    vendors = []
    for _ in range(random.randint(10, 15)):
        opening = money(0, 5000)
        customers.append(Customer(
            shop_name=fake.company(),
            owner_name=fake.name(),
            contact=''.join(filter(str.isdigit, fake.phone_number()))[:20],
            place=fake.city(),
            group_id=groups["Sundry Debtors"].id,
            opening_balance=opening,
            opening_balance_type=BalanceType.DEBIT,
            outstanding_balance=opening,
            outstanding_balance_type=BalanceType.DEBIT,
        ))
    for _ in range(random.randint(5, 8)):
        tds = random.choice([True, False])
        vendors.append(Vendor(
            vendor_name=fake.company(),
            company_name=fake.company(),
            contact_number=''.join(filter(str.isdigit, fake.phone_number()))[:20],
            tds_applicable=tds,
            tds_updated_at=datetime.now() - timedelta(days=60) if tds else None,
            group_id=groups["Sundry Creditors"].id,
        ))
    db.add_all(customers + vendors)
    db.commit()
    print(f"✅ Seeded {len(customers)} customers")
    print(f"✅ Seeded {len(vendors)} vendors")

    print("🔄 Creating trips...")
    for day in range(30, 0, -1):
        trip_date = datetime.now() - timedelta(days=day)
        trip = Trip(trip_number=f"T-{day:03d}", date=trip_date)
        for _ in range(random.randint(1, 3)):
            birds = random.randint(100, 500)
            weight = Decimal(str(round(birds * random.uniform(1.8, 2.4), 3)))
            rate = money(90, 120)
            trip.purchases.append(TripPurchase(
                supplier_id=random.choice(vendors).id, birds=birds, weight=weight,
                rate=rate, amount=(weight * rate).quantize(Decimal("0.01")), timestamp=trip_date,
            ))
        for _ in range(random.randint(2, 5)):
            birds = random.randint(50, 200)
            weight = Decimal(str(round(birds * random.uniform(1.8, 2.4), 3)))
            rate = money(120, 150)
            amount = (weight * rate).quantize(Decimal("0.01"))
            cash_paid = (amount * Decimal(str(random.choice([0, 0.25, 0.5, 1])))).quantize(Decimal("0.01"))
            trip.sales.append(TripSale(
                client_id=random.choice(customers).id, bill_number=fake.bothify("B-####"),
                birds=birds, weight=weight, rate=rate, amount=amount,
                cash_paid=cash_paid, cash_ledger_id=cash.id, discount=money(0, 50),
                timestamp=trip_date + timedelta(hours=random.randint(1, 8)),
            ))
        db.add(trip)
    db.commit()

    print("🔄 Creating vouchers and stock...")
    for vendor in vendors:
        voucher = Voucher(voucher_type=VoucherType.PAYMENT, date=datetime.now() - timedelta(days=5),
                          account_id=bank.id, narration="Weekly settlement")
        voucher.parties.append(VoucherParty(party_id=vendor.id, party_type=PartyType.VENDOR,
                                            amount=money(1000, 10000)))
        db.add(voucher)
    for _ in range(10):
        db.add(InventoryStock(type=StockType.CONSUME, date=datetime.now() - timedelta(days=random.randint(1, 30)),
                              expense_ledger_id=feed.id, amount=money(200, 2000)))
    db.commit()

    print("🔄 Reconciling outstanding balances...")
    reports = ReportService(db, settings.ledger_config())
    for customer in customers:
        reports.statement(AccountKind.CUSTOMER, customer.id)
    for vendor in vendors:
        reports.statement(AccountKind.VENDOR, vendor.id)
    for ledger in (cash, bank, rent, feed):
        reports.statement(AccountKind.LEDGER, ledger.id)
    print("✅ Seeding complete")

except Exception as e:
    db.rollback()
    print(f"❌ Seeding failed: {e}")
    raise
finally:
    db.close()
