# backend/schemas/customer.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class Address(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = "USA"


# Input schema for registering a customer
class CustomerCreate(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    phone: str = Field(min_length=1)
    address: Optional[Address] = None


# Partial update; loyalty aggregates are not editable
class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, min_length=1)
    address: Optional[Address] = None


class CustomerOut(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    address: Address
    total_spent: float
    loyalty_points: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# Customer fields embedded in a sale
class CustomerBrief(BaseModel):
    id: int
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class CustomerStats(BaseModel):
    total_customers: int
    new_customers: int
