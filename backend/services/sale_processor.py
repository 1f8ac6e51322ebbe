# backend/services/sale_processor.py
"""
Sale transaction workflow.

An order is validated and priced completely before anything is written.
The writes (sale number, stock decrements, sale record, customer totals)
then run in one transaction that commits at the end, so a rejected order
leaves no trace: no stock taken, no sale, no loyalty change.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from models.product import Product
from models.sale import Sale, SaleItem, PaymentStatus
from schemas.sale import SaleCreate
from services import ledger
from services.sale_numbers import allocate_sale_number
from utils.errors import (
    AppError, ConflictError, InsufficientStockError, InternalError, NotFoundError, ValidationError
)

logger = logging.getLogger(__name__)


@dataclass
class PricedLine:
    product: Product
    quantity: int
    unit_price: float

    @property
    def subtotal(self) -> float:
        return self.quantity * self.unit_price


def _validate_header(payload: SaleCreate) -> None:
    if not payload.items:
        raise ValidationError("Items array is required")
    if not (payload.staff_member or "").strip() or not payload.payment_method:
        raise ValidationError("Staff member and payment method are required")


def _price_lines(db: Session, payload: SaleCreate) -> List[PricedLine]:
    lines: List[PricedLine] = []
    requested: Dict[int, int] = {}

    for item in payload.items:
        if not item.product_id or not item.quantity:
            raise ValidationError("Each item must have productId and quantity")
        if item.quantity < 0:
            raise ValidationError("Quantity must be a positive whole number")

        product = ledger.get_product(db, item.product_id)

        # Repeated lines for one product draw on the same stock
        wanted = requested.get(product.id, 0) + item.quantity
        if product.stock_quantity < wanted:
            raise InsufficientStockError(product.id, product.name, wanted, product.stock_quantity)
        requested[product.id] = wanted

        unit_price = item.unit_price if item.unit_price is not None else product.price
        lines.append(PricedLine(product=product, quantity=item.quantity, unit_price=unit_price))

    return lines


def create_sale(db: Session, payload: SaleCreate) -> Sale:
    """Validate, price and commit a sale. Returns the persisted sale."""
    _validate_header(payload)
    lines = _price_lines(db, payload)

    subtotal = sum(line.subtotal for line in lines)
    tax = payload.tax or 0.0
    discount = payload.discount or 0.0
    total = subtotal + tax - discount
    if total < 0:
        raise ValidationError("Discount cannot exceed subtotal plus tax")

    sale_date = datetime.now()

    try:
        sale_number = payload.sale_number or allocate_sale_number(db, sale_date.date())

        for line in lines:
            if not ledger.decrement_stock(db, line.product.id, line.quantity):
                # Stock was taken by a concurrent sale since validation
                db.refresh(line.product)
                raise InsufficientStockError(
                    line.product.id, line.product.name, line.quantity, line.product.stock_quantity
                )

        sale = Sale(
            sale_number=sale_number,
            sale_date=sale_date,
            customer_id=payload.customer,
            subtotal=subtotal,
            tax=tax,
            discount=discount,
            total=total,
            payment_method=payload.payment_method,
            payment_status=PaymentStatus.PAID,
            staff_member=payload.staff_member.strip(),
            notes=payload.notes,
            items=[
                SaleItem(
                    position=position,
                    product_id=line.product.id,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    subtotal=line.subtotal,
                )
                for position, line in enumerate(lines)
            ],
        )
        db.add(sale)
        db.flush()

        if payload.customer is not None:
            if not ledger.record_purchase(db, payload.customer, total):
                logger.info("Sale %s references unknown customer %s; totals not updated",
                            sale_number, payload.customer)

        db.commit()
    except AppError:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        if payload.sale_number:
            raise ConflictError(f"Sale number {payload.sale_number} already exists")
        logger.error("Sale commit rejected by constraint: %s", e)
        raise ConflictError("Sale could not be recorded, please retry")
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Sale commit failed: %s", e)
        raise InternalError("Sale could not be recorded")

    logger.info("Sale %s recorded: %d line(s), total %.2f, staff %s",
                sale.sale_number, len(lines), sale.total, sale.staff_member)
    return get_sale(db, sale.id)


def _sale_query(db: Session):
    return db.query(Sale).options(selectinload(Sale.items))


def get_sale(db: Session, sale_id: int) -> Sale:
    sale = _sale_query(db).filter(Sale.id == sale_id).first()
    if not sale:
        raise NotFoundError("Sale not found")
    return sale


def list_sales(db: Session) -> List[Sale]:
    return _sale_query(db).order_by(Sale.sale_date.desc(), Sale.id.desc()).all()
