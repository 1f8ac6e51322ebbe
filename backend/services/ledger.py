# backend/services/ledger.py
# Product and customer ledger writes used by the sale workflow. Each write is a
# single conditional UPDATE so the check and the mutation cannot interleave with
# another request.
import math

from sqlalchemy import update
from sqlalchemy.orm import Session

from config import settings
from models.customer import Customer
from models.product import Product
from utils.errors import NotFoundError


def get_product(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise NotFoundError(f"Product {product_id} not found")
    return product


def decrement_stock(db: Session, product_id: int, quantity: int) -> bool:
    """Take ``quantity`` off the product's stock only if enough is left."""
    result = db.execute(
        update(Product)
        .where(Product.id == product_id, Product.stock_quantity >= quantity)
        .values(stock_quantity=Product.stock_quantity - quantity)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def loyalty_points_for(amount: float) -> int:
    if amount <= 0:
        return 0
    return math.floor(amount / settings.LOYALTY_POINT_VALUE)


def record_purchase(db: Session, customer_id: int, amount: float) -> bool:
    """Add a committed sale to the customer's totals. False if no such customer."""
    result = db.execute(
        update(Customer)
        .where(Customer.id == customer_id)
        .values(
            total_spent=Customer.total_spent + amount,
            loyalty_points=Customer.loyalty_points + loyalty_points_for(amount),
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
