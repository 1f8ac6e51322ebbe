"""
Sale workflow tests against the service layer.

Covers pricing, stock decrements, loyalty accrual and the guarantee that a
rejected sale leaves stock, sales and customer totals untouched.
"""
from datetime import date

import pytest

from models.customer import Customer
from models.product import Product
from models.sale import PaymentMethod, PaymentStatus, Sale
from schemas.sale import SaleCreate
from services import ledger
from services.sale_numbers import format_sale_number
from services.sale_processor import create_sale, get_sale, list_sales
from utils.errors import InsufficientStockError, NotFoundError, ValidationError


def _payload(items, **overrides):
    data = {"items": items, "staff_member": "Sam Carter", "payment_method": "Cash"}
    data.update(overrides)
    return SaleCreate.model_validate(data)


def _stock(db_session, product_id):
    db_session.expire_all()
    return db_session.get(Product, product_id).stock_quantity


class TestCreateSale:
    def test_totals_and_stock(self, db_session, products):
        mouse, lamp, _ = products
        sale = create_sale(db_session, _payload(
            [{"productId": mouse.id, "quantity": 2}, {"productId": lamp.id, "quantity": 1}],
            tax=5.0, discount=2.0,
        ))

        assert sale.subtotal == pytest.approx(90.0)
        assert sale.total == pytest.approx(93.0)
        assert sale.payment_method == PaymentMethod.CASH
        assert sale.payment_status == PaymentStatus.PAID
        assert [i.product_id for i in sale.items] == [mouse.id, lamp.id]
        assert [i.subtotal for i in sale.items] == [pytest.approx(50.0), pytest.approx(40.0)]
        assert _stock(db_session, mouse.id) == 48
        assert _stock(db_session, lamp.id) == 2

    def test_unit_price_override(self, db_session, products):
        mouse = products[0]
        sale = create_sale(db_session, _payload([{"product": mouse.id, "quantity": 3, "unitPrice": 20.0}]))

        assert sale.items[0].unit_price == pytest.approx(20.0)
        assert sale.subtotal == pytest.approx(60.0)
        db_session.expire_all()
        assert db_session.get(Product, mouse.id).price == pytest.approx(25.0)

    def test_price_is_captured_at_sale_time(self, db_session, products):
        mouse = products[0]
        sale = create_sale(db_session, _payload([{"product_id": mouse.id, "quantity": 1}]))

        mouse.price = 99.0
        db_session.commit()

        assert get_sale(db_session, sale.id).items[0].unit_price == pytest.approx(25.0)

    def test_customer_loyalty_accrues(self, db_session, products, customer):
        mouse = products[0]
        create_sale(db_session, _payload([{"productId": mouse.id, "quantity": 5}], customer=customer.id))

        db_session.expire_all()
        refreshed = db_session.get(Customer, customer.id)
        assert refreshed.total_spent == pytest.approx(125.0)
        assert refreshed.loyalty_points == 12

    def test_unknown_customer_is_kept_without_totals(self, db_session, products):
        sale = create_sale(db_session, _payload([{"productId": products[0].id, "quantity": 1}], customer=9999))

        assert sale.customer_id == 9999
        assert sale.customer is None

    def test_walk_in_sale(self, db_session, products):
        sale = create_sale(db_session, _payload([{"productId": products[0].id, "quantity": 1}]))
        assert sale.customer_id is None

    def test_sale_numbers_follow_each_other(self, db_session, products):
        first = create_sale(db_session, _payload([{"productId": products[0].id, "quantity": 1}]))
        second = create_sale(db_session, _payload([{"productId": products[0].id, "quantity": 1}]))

        assert first.sale_number.endswith("-0001")
        assert second.sale_number.endswith("-0002")
        assert first.sale_number[:-5] == second.sale_number[:-5]


class TestRejectedSale:
    def test_insufficient_stock_changes_nothing(self, db_session, products, customer):
        mouse, lamp, _ = products
        payload = _payload(
            [{"productId": mouse.id, "quantity": 1}, {"productId": lamp.id, "quantity": 4}],
            customer=customer.id,
        )

        with pytest.raises(InsufficientStockError) as exc_info:
            create_sale(db_session, payload)

        assert exc_info.value.product_name == "Desk Lamp"
        assert exc_info.value.available == 3
        assert _stock(db_session, mouse.id) == 50
        assert _stock(db_session, lamp.id) == 3
        assert db_session.query(Sale).count() == 0
        assert db_session.get(Customer, customer.id).total_spent == 0

    def test_repeated_lines_share_stock(self, db_session, products):
        lamp = products[1]
        with pytest.raises(InsufficientStockError):
            create_sale(db_session, _payload([
                {"productId": lamp.id, "quantity": 2},
                {"productId": lamp.id, "quantity": 2},
            ]))
        assert _stock(db_session, lamp.id) == 3

    def test_unknown_product(self, db_session, products):
        with pytest.raises(NotFoundError):
            create_sale(db_session, _payload([{"productId": 4242, "quantity": 1}]))
        assert db_session.query(Sale).count() == 0

    @pytest.mark.parametrize("overrides, message", [
        ({"items": []}, "Items array is required"),
        ({"staff_member": "  "}, "Staff member and payment method are required"),
        ({"payment_method": None}, "Staff member and payment method are required"),
    ])
    def test_header_validation(self, db_session, products, overrides, message):
        data = {"items": [{"productId": products[0].id, "quantity": 1}],
                "staff_member": "Sam Carter", "payment_method": "Cash"}
        data.update(overrides)

        with pytest.raises(ValidationError) as exc_info:
            create_sale(db_session, SaleCreate.model_validate(data))
        assert exc_info.value.message == message

    def test_line_without_quantity(self, db_session, products):
        with pytest.raises(ValidationError, match="productId and quantity"):
            create_sale(db_session, _payload([{"productId": products[0].id}]))

    def test_discount_larger_than_total(self, db_session, products):
        with pytest.raises(ValidationError):
            create_sale(db_session, _payload([{"productId": products[0].id, "quantity": 1}], discount=30.0))
        assert _stock(db_session, products[0].id) == 50


class TestLedger:
    def test_decrement_refuses_to_go_negative(self, db_session, products):
        lamp = products[1]
        assert ledger.decrement_stock(db_session, lamp.id, 4) is False
        assert ledger.decrement_stock(db_session, lamp.id, 3) is True
        db_session.commit()
        assert _stock(db_session, lamp.id) == 0

    @pytest.mark.parametrize("amount, points", [(0, 0), (-5, 0), (9.99, 0), (10, 1), (125, 12)])
    def test_loyalty_points(self, amount, points):
        assert ledger.loyalty_points_for(amount) == points


def test_list_sales_newest_first(db_session, products):
    first = create_sale(db_session, _payload([{"productId": products[0].id, "quantity": 1}]))
    second = create_sale(db_session, _payload([{"productId": products[0].id, "quantity": 1}]))

    assert [s.id for s in list_sales(db_session)] == [second.id, first.id]


def test_selling_the_last_units(db_session):
    widget = Product(name="Widget", sku="WID-001", category="Parts", price=11.0, stock_quantity=5)
    db_session.add(widget)
    db_session.commit()

    with pytest.raises(InsufficientStockError):
        create_sale(db_session, _payload([{"productId": widget.id, "quantity": 6}]))
    assert _stock(db_session, widget.id) == 5

    sale = create_sale(db_session, _payload([{"productId": widget.id, "quantity": 5}]))
    assert _stock(db_session, widget.id) == 0
    assert sale.items[0].unit_price == pytest.approx(11.0)


def test_loyalty_adds_to_existing_balance(db_session, products):
    regular = Customer(name="Chen Wei", email="chen.wei@example.com", phone="555-0104",
                       total_spent=100.0, loyalty_points=10)
    db_session.add(regular)
    db_session.commit()

    create_sale(db_session, _payload(
        [{"productId": products[0].id, "quantity": 2, "unitPrice": 25.0}], customer=regular.id, tax=5.0,
    ))

    db_session.expire_all()
    refreshed = db_session.get(Customer, regular.id)
    assert refreshed.total_spent == pytest.approx(155.0)
    assert refreshed.loyalty_points == 15


def test_walk_in_sale_leaves_customers_alone(db_session, products, customer):
    create_sale(db_session, _payload([{"productId": products[0].id, "quantity": 1}]))

    db_session.expire_all()
    untouched = db_session.get(Customer, customer.id)
    assert (untouched.total_spent, untouched.loyalty_points) == (0, 0)


def test_supplied_todays_number_does_not_block_counter(db_session, products):
    mouse = products[0]
    today = date.today()

    first = create_sale(db_session, _payload([{"productId": mouse.id, "quantity": 1}]))
    supplied = create_sale(db_session, _payload(
        [{"productId": mouse.id, "quantity": 1}], sale_number=format_sale_number(today, 3),
    ))
    numbers = [
        create_sale(db_session, _payload([{"productId": mouse.id, "quantity": 1}])).sale_number
        for _ in range(3)
    ]

    assert first.sale_number == format_sale_number(today, 1)
    assert supplied.sale_number == format_sale_number(today, 3)
    assert numbers == [format_sale_number(today, n) for n in (2, 4, 5)]
    assert db_session.query(Sale).count() == 5
    assert _stock(db_session, mouse.id) == 45


@pytest.mark.parametrize("quantity, message", [
    (0, "Each item must have productId and quantity"),
    (-2, "Quantity must be a positive whole number"),
])
def test_non_positive_quantity(db_session, products, quantity, message):
    with pytest.raises(ValidationError) as exc_info:
        create_sale(db_session, _payload([{"productId": products[0].id, "quantity": quantity}]))

    assert exc_info.value.message == message
    assert _stock(db_session, products[0].id) == 50
