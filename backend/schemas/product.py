# backend/schemas/product.py
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List, Literal, Union
from datetime import datetime

SKU_PATTERN = r"^[A-Za-z0-9_-]+$"


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


def _norm_sku(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip().upper()


# Shared base attributes for product entities
class ProductBase(ORMBase):
    name: str = Field(min_length=1)
    sku: str = Field(min_length=1, pattern=SKU_PATTERN)
    category: str = Field(min_length=1)
    price: float = Field(ge=0)
    stock_quantity: int = Field(ge=0)
    min_stock: int = Field(default=10, ge=0)
    supplier: Optional[str] = None
    description: Optional[str] = None
    barcode: Optional[str] = None
    is_active: bool = True


# Schema for creating a new product
class ProductCreate(ProductBase):
    @field_validator("sku", mode="before")
    @classmethod
    def normalize_sku(cls, v):
        return _norm_sku(v) if isinstance(v, str) else v


# Schema for partial product updates
class ProductUpdate(ORMBase):
    """All fields optional; only the ones sent are applied."""
    name: Optional[str] = Field(None, min_length=1)
    sku: Optional[str] = Field(None, min_length=1, pattern=SKU_PATTERN)
    category: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    stock_quantity: Optional[int] = Field(None, ge=0)
    min_stock: Optional[int] = Field(None, ge=0)
    supplier: Optional[str] = None
    description: Optional[str] = None
    barcode: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("sku", mode="before")
    @classmethod
    def normalize_sku(cls, v):
        return _norm_sku(v) if isinstance(v, str) else v


# Full product representation including ID
class ProductOut(ProductBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Paginated response for product listings
class ProductListPage(ORMBase):
    items: List[ProductOut]
    total: int
    page: int
    page_size: int


# Bulk edit of several products at once
class ProductBulkUpdate(BaseModel):
    ids: List[int] = Field(min_length=1)
    field: Literal["price", "stock_quantity", "category"]
    operation: Literal["set", "increase", "decrease"] = "set"
    value: Union[float, str]


class ProductBulkUpdateResult(BaseModel):
    updated: int


class ProductStats(BaseModel):
    total_products: int
    low_stock_products: int
    stock_value: float
    total_categories: int
