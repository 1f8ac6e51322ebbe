# backend/models/customer.py
from sqlalchemy import Column, Integer, String, Float, DateTime, CheckConstraint, func
from database import Base

# Represents a registered customer with contact details and loyalty aggregates
class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    phone = Column(String, nullable=False)

    # Postal address
    address_street = Column(String, nullable=True)
    address_city = Column(String, nullable=True)
    address_state = Column(String, nullable=True)
    address_zip_code = Column(String, nullable=True)
    address_country = Column(String, nullable=True, default="USA")

    # Loyalty aggregates, only ever incremented by committed sales
    total_spent = Column(Float, CheckConstraint("total_spent >= 0"), nullable=False, default=0.0)
    loyalty_points = Column(Integer, CheckConstraint("loyalty_points >= 0"), nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Nested view of the address columns used by the API schemas
    @property
    def address(self):
        return {
            "street": self.address_street,
            "city": self.address_city,
            "state": self.address_state,
            "zip_code": self.address_zip_code,
            "country": self.address_country,
        }
