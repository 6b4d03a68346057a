from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from poultry_ledger.core.database import Base
from poultry_ledger.models.group import generate_custom_id


class Trip(Base):
    """Vehicle trip. Only its sales and purchases matter for accounting."""
    __tablename__ = "trips"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("TRP"))
    trip_number = Column(String(50), nullable=True)
    date = Column(DateTime, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    sales = relationship("TripSale", back_populates="trip",
                         cascade="all, delete-orphan", order_by="TripSale.id")
    purchases = relationship("TripPurchase", back_populates="trip",
                             cascade="all, delete-orphan", order_by="TripPurchase.id")


class TripSale(Base):
    __tablename__ = "trip_sales"

    id = Column(Integer, primary_key=True, autoincrement=True)
    trip_id = Column(String(20), ForeignKey("trips.id"), nullable=False)
    client_id = Column(String(20), ForeignKey("customers.id"), nullable=True)
    bill_number = Column(String(50), nullable=True)
    birds = Column(Integer, default=0)
    weight = Column(Numeric(15, 3), default=0)
    rate = Column(Numeric(15, 2), default=0)
    amount = Column(Numeric(15, 2), default=0)
    discount = Column(Numeric(15, 2), default=0)
    cash_paid = Column(Numeric(15, 2), default=0)
    online_paid = Column(Numeric(15, 2), default=0)
    cash_ledger_id = Column(String(20), ForeignKey("ledgers.id"), nullable=True)
    online_ledger_id = Column(String(20), ForeignKey("ledgers.id"), nullable=True)
    timestamp = Column(DateTime, nullable=True)

    trip = relationship("Trip", back_populates="sales")


class TripPurchase(Base):
    __tablename__ = "trip_purchases"

    id = Column(Integer, primary_key=True, autoincrement=True)
    trip_id = Column(String(20), ForeignKey("trips.id"), nullable=False)
    supplier_id = Column(String(20), ForeignKey("vendors.id"), nullable=True)
    dc_number = Column(String(50), nullable=True)
    birds = Column(Integer, default=0)
    weight = Column(Numeric(15, 3), default=0)
    rate = Column(Numeric(15, 2), default=0)
    amount = Column(Numeric(15, 2), default=0)
    timestamp = Column(DateTime, nullable=True)

    trip = relationship("Trip", back_populates="purchases")
