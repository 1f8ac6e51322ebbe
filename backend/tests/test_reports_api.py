import io
from datetime import date

import pandas as pd
import pytest


@pytest.fixture
def recorded_sale(client, auth_headers, products, customer):
    resp = client.post("/api/sales", headers=auth_headers, json={
        "items": [{"productId": products[0].id, "quantity": 2}],
        "customer": customer.id, "staffMember": "Sam Carter", "paymentMethod": "Cash",
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_dashboard_stats(client, auth_headers, recorded_sale):
    stats = client.get("/api/reports/dashboard-stats", headers=auth_headers).json()
    assert stats == {
        "total_products": 3,
        "low_stock_products": 1,
        "out_of_stock_products": 1,
        "stock_value": 1320.0,
        "total_customers": 1,
        "sales_today": 1,
        "revenue_today": 50.0,
        "revenue_this_month": 50.0,
    }


def test_sales_trend_fills_missing_days(client, auth_headers, recorded_sale):
    trend = client.get("/api/reports/sales-trend", headers=auth_headers, params={"days": 7}).json()
    today = date.today()

    assert len(trend["labels"]) == 7
    assert trend["labels"][-1] == f"{today:%a}, {today:%b} {today.day}"
    assert trend["data"] == [0.0] * 6 + [50.0]


def test_sales_by_category(client, auth_headers, recorded_sale):
    series = client.get("/api/reports/sales-by-category", headers=auth_headers).json()
    assert series == {"labels": ["Electronics"], "data": [50.0]}


def test_top_products(client, auth_headers, recorded_sale):
    top = client.get("/api/reports/top-products", headers=auth_headers).json()
    assert top == [{
        "name": "Wireless Mouse",
        "sku": "ELEC-001",
        "total_quantity": 2,
        "total_revenue": 50.0,
        "profit_margin": 40.0,
    }]


def test_inventory_health(client, auth_headers, products):
    health = client.get("/api/reports/inventory-health", headers=auth_headers).json()
    assert health == {
        "total_products": 3,
        "low_stock_count": 1,
        "out_of_stock_count": 1,
        "healthy_count": 1,
        "health_percentage": 33.3,
    }


def test_inventory_health_without_products(client, auth_headers):
    assert client.get("/api/reports/inventory-health", headers=auth_headers).json()["health_percentage"] == 0.0


def test_customer_insights(client, auth_headers, recorded_sale):
    insights = client.get("/api/reports/customer-insights", headers=auth_headers).json()
    assert insights["total_customers"] == 1
    assert insights["vip_customers"] == 0
    assert insights["top_customer"] == {"name": "Maria Lopez", "total_spent": 50.0, "loyalty_points": 5}


def test_export_sales_csv(client, auth_headers, recorded_sale):
    resp = client.get("/api/reports/export/sales", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert resp.headers["content-disposition"] == "attachment; filename=sales-export.csv"

    frame = pd.read_csv(io.StringIO(resp.text))
    assert frame.loc[0, "sale_number"] == recorded_sale["sale_number"]
    assert frame.loc[0, "customer_email"] == "maria.lopez@example.com"
    assert frame.loc[0, "items"] == "ELEC-001 x 2"


def test_export_products_csv(client, auth_headers, products):
    frame = pd.read_csv(io.StringIO(client.get("/api/reports/export/products", headers=auth_headers).text))
    assert list(frame["sku"]) == ["ELEC-001", "HOME-001", "OFF-001"]


def test_export_unknown_type(client, auth_headers):
    resp = client.get("/api/reports/export/invoices", headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid export type"
