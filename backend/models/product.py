# backend/models/product.py
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, CheckConstraint, func
from database import Base

# Model Product
# A catalogue item sold at the counter. Holds the current unit price and the
# stock level that sales decrement; min_stock is the low-stock alert threshold.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    sku = Column(String, unique=True, nullable=False, index=True)

    category = Column(String, nullable=False, index=True)
    supplier = Column(String)
    description = Column(String)
    barcode = Column(String)

    # Price and stock guarded by constraints.
    price = Column(Float, CheckConstraint("price >= 0"), nullable=False)
    stock_quantity = Column(Integer, CheckConstraint("stock_quantity >= 0"), nullable=False, default=0)
    min_stock = Column(Integer, CheckConstraint("min_stock >= 0"), nullable=False, default=10)

    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
