from datetime import date

from models.product import Product
from services.sale_numbers import format_sale_number


def _sale_body(items, **extra):
    body = {"items": items, "staffMember": "Sam Carter", "paymentMethod": "Credit Card"}
    body.update(extra)
    return body


def test_requires_authentication(client, db_session):
    assert client.get("/api/sales").status_code in (401, 403)


def test_create_and_fetch_sale(client, auth_headers, products, customer):
    mouse = products[0]
    resp = client.post("/api/sales", headers=auth_headers, json=_sale_body(
        [{"productId": mouse.id, "quantity": 2}], customerId=customer.id, tax=4.0, notes="gift wrap",
    ))
    assert resp.status_code == 201, resp.text
    sale = resp.json()

    assert sale["sale_number"].startswith("SALE-")
    assert sale["total"] == 54.0
    assert sale["payment_method"] == "Credit Card"
    assert sale["payment_status"] == "Paid"
    assert sale["customer"]["email"] == "maria.lopez@example.com"
    assert sale["items"][0]["product"]["sku"] == "ELEC-001"
    assert sale["notes"] == "gift wrap"

    detail = client.get(f"/api/sales/{sale['id']}", headers=auth_headers)
    assert detail.status_code == 200
    assert detail.json()["sale_number"] == sale["sale_number"]

    listing = client.get("/api/sales", headers=auth_headers).json()
    assert [s["id"] for s in listing] == [sale["id"]]


def test_insufficient_stock_is_a_conflict(client, auth_headers, products, db_session):
    lamp = products[1]
    resp = client.post("/api/sales", headers=auth_headers, json=_sale_body([{"productId": lamp.id, "quantity": 10}]))

    assert resp.status_code == 409
    assert resp.json() == {"detail": "Insufficient stock for Desk Lamp", "error": "insufficient_stock"}
    db_session.expire_all()
    assert db_session.get(Product, lamp.id).stock_quantity == 3


def test_missing_items(client, auth_headers, db_session):
    resp = client.post("/api/sales", headers=auth_headers, json=_sale_body([]))
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Items array is required"


def test_missing_staff_member(client, auth_headers, products):
    resp = client.post("/api/sales", headers=auth_headers,
                       json={"items": [{"productId": products[0].id, "quantity": 1}], "paymentMethod": "Cash"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "validation_error"


def test_unknown_product_is_not_found(client, auth_headers, db_session):
    resp = client.post("/api/sales", headers=auth_headers, json=_sale_body([{"productId": 777, "quantity": 1}]))
    assert resp.status_code == 404


def test_unknown_payment_method_is_rejected(client, auth_headers, products):
    resp = client.post("/api/sales", headers=auth_headers,
                       json=_sale_body([{"productId": products[0].id, "quantity": 1}], paymentMethod="Barter"))
    assert resp.status_code == 422


def test_duplicate_sale_number(client, auth_headers, products):
    body = _sale_body([{"productId": products[0].id, "quantity": 1}], saleNumber="IMPORT-0001")
    assert client.post("/api/sales", headers=auth_headers, json=body).status_code == 201

    resp = client.post("/api/sales", headers=auth_headers, json=body)
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Sale number IMPORT-0001 already exists"


def test_sale_not_found(client, auth_headers):
    resp = client.get("/api/sales/12345", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Sale not found"


def test_supplied_number_in_daily_format_is_skipped(client, auth_headers, products):
    today_third = format_sale_number(date.today(), 3)
    line = [{"productId": products[0].id, "quantity": 1}]

    assert client.post("/api/sales", headers=auth_headers, json=_sale_body(line)).status_code == 201
    assert client.post("/api/sales", headers=auth_headers,
                       json=_sale_body(line, saleNumber=today_third)).status_code == 201

    created = [client.post("/api/sales", headers=auth_headers, json=_sale_body(line)) for _ in range(3)]
    assert [r.status_code for r in created] == [201, 201, 201]
    assert [r.json()["sale_number"] for r in created] == [
        format_sale_number(date.today(), n) for n in (2, 4, 5)
    ]


def test_zero_quantity_is_a_validation_error(client, auth_headers, products):
    resp = client.post("/api/sales", headers=auth_headers,
                       json=_sale_body([{"productId": products[0].id, "quantity": 0}]))
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Each item must have productId and quantity"
