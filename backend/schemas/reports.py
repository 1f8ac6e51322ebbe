# schemas/reports.py
from typing import List, Optional
from pydantic import BaseModel

# Chart series: parallel label and value lists
class ChartSeries(BaseModel):
    labels: List[str]
    data: List[float]

class DashboardStats(BaseModel):
    total_products: int
    low_stock_products: int
    out_of_stock_products: int
    stock_value: float
    total_customers: int
    sales_today: int
    revenue_today: float
    revenue_this_month: float

class TopProductItem(BaseModel):
    name: str
    sku: str
    total_quantity: int
    total_revenue: float
    profit_margin: float

class InventoryHealth(BaseModel):
    total_products: int
    low_stock_count: int
    out_of_stock_count: int
    healthy_count: int
    health_percentage: float

class TopCustomer(BaseModel):
    name: str
    total_spent: float
    loyalty_points: int

class CustomerInsights(BaseModel):
    total_customers: int
    vip_customers: int
    new_customers: int
    top_customer: Optional[TopCustomer] = None
