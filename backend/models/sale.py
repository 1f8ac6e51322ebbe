# backend/models/sale.py
import enum
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Float, Date, DateTime, Text, Enum, ForeignKey, CheckConstraint, func
)
from sqlalchemy.orm import relationship
from database import Base


# Accepted tenders at the counter
class PaymentMethod(str, enum.Enum):
    CASH = "Cash"
    CREDIT_CARD = "Credit Card"
    DEBIT_CARD = "Debit Card"
    CHECK = "Check"
    GIFT_CARD = "Gift Card"
    OTHER = "Other"


class PaymentStatus(str, enum.Enum):
    PAID = "Paid"
    PENDING = "Pending"
    CANCELLED = "Cancelled"


def _enum_values(enum_cls):
    # Persist the display value ("Credit Card"), not the member name
    return [member.value for member in enum_cls]


# A committed point-of-sale transaction
class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    sale_number = Column(String, unique=True, nullable=False, index=True)
    sale_date = Column(DateTime, nullable=False, default=datetime.now, index=True)

    # Soft reference: kept as given even when no such customer exists (walk-in when NULL)
    customer_id = Column(Integer, nullable=True, index=True)

    subtotal = Column(Float, CheckConstraint("subtotal >= 0"), nullable=False)
    tax = Column(Float, CheckConstraint("tax >= 0"), nullable=False, default=0.0)
    discount = Column(Float, CheckConstraint("discount >= 0"), nullable=False, default=0.0)
    total = Column(Float, CheckConstraint("total >= 0"), nullable=False)

    payment_method = Column(Enum(PaymentMethod, name="paymentmethod", values_callable=_enum_values), nullable=False)
    payment_status = Column(
        Enum(PaymentStatus, name="paymentstatus", values_callable=_enum_values),
        nullable=False, default=PaymentStatus.PAID,
    )
    staff_member = Column(String, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    items = relationship(
        "SaleItem", back_populates="sale", cascade="all, delete-orphan", order_by="SaleItem.position"
    )
    customer = relationship(
        "Customer", primaryjoin="foreign(Sale.customer_id) == Customer.id", viewonly=True, lazy="joined"
    )


# A line of a sale; unit_price is the price captured at the moment of sale
class SaleItem(Base):
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0) # Order of the line within the sale
    product_id = Column(Integer, nullable=False, index=True) # Soft reference to products.id
    quantity = Column(Integer, CheckConstraint("quantity >= 1"), nullable=False)
    unit_price = Column(Float, CheckConstraint("unit_price >= 0"), nullable=False)
    subtotal = Column(Float, CheckConstraint("subtotal >= 0"), nullable=False)

    sale = relationship("Sale", back_populates="items")
    product = relationship(
        "Product", primaryjoin="foreign(SaleItem.product_id) == Product.id", viewonly=True, lazy="joined"
    )


# Per-day counter behind the SALE-YYYYMMDD-NNNN numbering
class SaleSequence(Base):
    __tablename__ = "sale_sequences"

    day = Column(Date, primary_key=True)
    last_number = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
