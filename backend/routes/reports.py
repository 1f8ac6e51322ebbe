# routes/reports.py
from datetime import date, datetime, timedelta
from typing import List

import pandas as pd
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy import and_, func
from sqlalchemy.orm import Session, selectinload

from config import settings
from database import get_db
from utils.tokenJWT import get_current_user
from models.users import User
from models.product import Product
from models.customer import Customer
from models.sale import Sale, SaleItem
from routes.customers import count_new_customers
from services.sale_numbers import day_bounds
from schemas.reports import (
    ChartSeries, DashboardStats, TopProductItem, InventoryHealth, CustomerInsights, TopCustomer
)

router = APIRouter(prefix="/reports", tags=["Reports"])

# Cost assumed when estimating margins; products carry no purchase price
ESTIMATED_COST_RATIO = 0.6

def _revenue_between(db: Session, start: datetime, end: datetime) -> float:
    value = (
        db.query(func.coalesce(func.sum(Sale.total), 0.0))
        .filter(Sale.sale_date >= start, Sale.sale_date < end)
        .scalar()
    )
    return float(value or 0.0)

def _low_stock_filter():
    return and_(Product.stock_quantity > 0, Product.stock_quantity <= Product.min_stock)

# -----------------------------
# 1) Dashboard
# -----------------------------
@router.get("/dashboard-stats", response_model=DashboardStats)
def dashboard_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    today = date.today()
    start, end = day_bounds(today)
    month_start = datetime(today.year, today.month, 1)

    stock_value = (
        db.query(func.coalesce(func.sum(Product.stock_quantity * Product.price), 0.0))
        .filter(Product.is_active.is_(True))
        .scalar()
    )

    return DashboardStats(
        total_products=db.query(Product).count(),
        low_stock_products=db.query(Product).filter(_low_stock_filter()).count(),
        out_of_stock_products=db.query(Product).filter(Product.stock_quantity == 0).count(),
        stock_value=float(stock_value or 0.0),
        total_customers=db.query(Customer).count(),
        sales_today=db.query(Sale).filter(Sale.sale_date >= start, Sale.sale_date < end).count(),
        revenue_today=_revenue_between(db, start, end),
        revenue_this_month=_revenue_between(db, month_start, end),
    )

# -----------------------------
# 2) Sales trend (one point per day)
# -----------------------------
@router.get("/sales-trend", response_model=ChartSeries)
def sales_trend(
    days: int = Query(7, ge=1, le=366),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    today = date.today()
    first_day = today - timedelta(days=days - 1)
    window_start, _ = day_bounds(first_day)
    _, window_end = day_bounds(today)

    rows = (
        db.query(Sale.sale_date, Sale.total)
        .filter(Sale.sale_date >= window_start, Sale.sale_date < window_end)
        .all()
    )
    totals = {}
    for sale_date, total in rows:
        totals[sale_date.date()] = totals.get(sale_date.date(), 0.0) + total

    labels, data = [], []
    # Fill missing dates with zero revenue
    for i in range(days):
        current = first_day + timedelta(days=i)
        labels.append(f"{current:%a}, {current:%b} {current.day}")
        data.append(round(totals.get(current, 0.0), 2))

    return ChartSeries(labels=labels, data=data)

# -----------------------------
# 3) Sales by product category
# -----------------------------
@router.get("/sales-by-category", response_model=ChartSeries)
def sales_by_category(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rows = (
        db.query(Product.category.label("category"), func.sum(SaleItem.subtotal).label("revenue"))
        .select_from(SaleItem)
        .join(Product, Product.id == SaleItem.product_id)
        .filter(Product.category != None)
        .group_by(Product.category)
        .order_by(func.sum(SaleItem.subtotal).desc())
        .all()
    )
    return ChartSeries(labels=[r.category for r in rows], data=[round(float(r.revenue), 2) for r in rows])

# -----------------------------
# 4) Top products by revenue
# -----------------------------
@router.get("/top-products", response_model=List[TopProductItem])
def top_products(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rows = (
        db.query(
            Product.name.label("name"),
            Product.sku.label("sku"),
            Product.price.label("price"),
            func.sum(SaleItem.quantity).label("total_quantity"),
            func.sum(SaleItem.subtotal).label("total_revenue"),
        )
        .select_from(SaleItem)
        .join(Product, Product.id == SaleItem.product_id)
        .group_by(Product.id, Product.name, Product.sku, Product.price)
        .order_by(func.sum(SaleItem.subtotal).desc())
        .limit(limit)
        .all()
    )

    items: List[TopProductItem] = []
    for r in rows:
        revenue = float(r.total_revenue or 0.0)
        quantity = int(r.total_quantity or 0)
        estimated_cost = quantity * r.price * ESTIMATED_COST_RATIO
        margin = round((revenue - estimated_cost) / revenue * 100, 1) if revenue else 0.0
        items.append(TopProductItem(
            name=r.name, sku=r.sku, total_quantity=quantity,
            total_revenue=round(revenue, 2), profit_margin=margin,
        ))
    return items

# -----------------------------
# 5) Inventory health
# -----------------------------
@router.get("/inventory-health", response_model=InventoryHealth)
def inventory_health(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    active = db.query(Product).filter(Product.is_active.is_(True))
    total = active.count()
    low = active.filter(_low_stock_filter()).count()
    out = active.filter(Product.stock_quantity == 0).count()
    healthy = total - low - out

    return InventoryHealth(
        total_products=total,
        low_stock_count=low,
        out_of_stock_count=out,
        healthy_count=healthy,
        health_percentage=round(healthy / total * 100, 1) if total else 0.0,
    )

# -----------------------------
# 6) Customer insights
# -----------------------------
@router.get("/customer-insights", response_model=CustomerInsights)
def customer_insights(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    top = db.query(Customer).order_by(Customer.total_spent.desc(), Customer.id.asc()).first()

    return CustomerInsights(
        total_customers=db.query(Customer).count(),
        vip_customers=db.query(Customer).filter(Customer.loyalty_points >= settings.VIP_LOYALTY_POINTS).count(),
        new_customers=count_new_customers(db),
        top_customer=TopCustomer(
            name=top.name, total_spent=top.total_spent, loyalty_points=top.loyalty_points
        ) if top else None,
    )

# -----------------------------
# 7) CSV export
# -----------------------------
PRODUCT_COLUMNS = [
    "id", "name", "sku", "category", "price", "stock_quantity", "min_stock",
    "supplier", "description", "barcode", "is_active", "created_at", "updated_at",
]
CUSTOMER_COLUMNS = [
    "id", "name", "email", "phone", "address_street", "address_city", "address_state",
    "address_zip_code", "address_country", "total_spent", "loyalty_points", "created_at",
]
SALE_COLUMNS = [
    "sale_number", "sale_date", "customer_name", "customer_email", "items", "subtotal", "tax",
    "discount", "total", "payment_method", "payment_status", "staff_member", "notes",
]

def _products_frame(db: Session) -> pd.DataFrame:
    rows = [{c: getattr(p, c) for c in PRODUCT_COLUMNS} for p in db.query(Product).order_by(Product.id).all()]
    return pd.DataFrame(rows, columns=PRODUCT_COLUMNS)

def _customers_frame(db: Session) -> pd.DataFrame:
    rows = [{c: getattr(cu, c) for c in CUSTOMER_COLUMNS} for cu in db.query(Customer).order_by(Customer.id).all()]
    return pd.DataFrame(rows, columns=CUSTOMER_COLUMNS)

def _sales_frame(db: Session) -> pd.DataFrame:
    sales = db.query(Sale).options(selectinload(Sale.items)).order_by(Sale.sale_date.asc(), Sale.id.asc()).all()
    rows = []
    for s in sales:
        lines = "; ".join(
            f"{it.product.sku if it.product else f'#{it.product_id}'} x {it.quantity}" for it in s.items
        )
        rows.append({
            "sale_number": s.sale_number,
            "sale_date": s.sale_date,
            "customer_name": s.customer.name if s.customer else None,
            "customer_email": s.customer.email if s.customer else None,
            "items": lines,
            "subtotal": s.subtotal,
            "tax": s.tax,
            "discount": s.discount,
            "total": s.total,
            "payment_method": s.payment_method.value,
            "payment_status": s.payment_status.value,
            "staff_member": s.staff_member,
            "notes": s.notes,
        })
    return pd.DataFrame(rows, columns=SALE_COLUMNS)

EXPORTERS = {
    "products": _products_frame,
    "customers": _customers_frame,
    "sales": _sales_frame,
}

@router.get("/export/{export_type}")
def export_data(
    export_type: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    exporter = EXPORTERS.get(export_type)
    if exporter is None:
        raise HTTPException(status_code=400, detail="Invalid export type")

    csv_data = exporter(db).to_csv(index=False)
    return Response(
        content=csv_data,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={export_type}-export.csv"},
    )
