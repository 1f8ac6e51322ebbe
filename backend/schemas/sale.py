# backend/schemas/sale.py
from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.sale import PaymentMethod, PaymentStatus
from schemas.customer import CustomerBrief


# Request models accept both snake_case and the camelCase keys used by the web client
class _RequestBase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# One requested line; presence and sign of product and quantity are checked by the sale processor
class SaleItemCreate(_RequestBase):
    product_id: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("product_id", "productId", "product")
    )
    quantity: Optional[int] = None # 0 counts as missing
    unit_price: Optional[float] = Field(default=None, ge=0) # Overrides the catalogue price


class SaleCreate(_RequestBase):
    customer: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("customer", "customer_id", "customerId")
    )
    items: List[SaleItemCreate] = Field(default_factory=list)
    staff_member: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    tax: float = Field(default=0.0, ge=0)
    discount: float = Field(default=0.0, ge=0)
    notes: Optional[str] = None
    # Pre-assigned number (imports); skips the daily allocator
    sale_number: Optional[str] = None


# Product fields embedded in a sale line
class ProductBrief(BaseModel):
    id: int
    name: str
    sku: str
    price: float
    category: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class SaleItemOut(BaseModel):
    id: int
    product_id: int
    product: Optional[ProductBrief] = None
    quantity: int
    unit_price: float
    subtotal: float

    model_config = ConfigDict(from_attributes=True)


class SaleOut(BaseModel):
    id: int
    sale_number: str
    sale_date: datetime
    customer_id: Optional[int] = None
    customer: Optional[CustomerBrief] = None
    items: List[SaleItemOut]
    subtotal: float
    tax: float
    discount: float
    total: float
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    staff_member: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
