# backend/services/sale_numbers.py
"""
Daily sale numbering: SALE-YYYYMMDD-NNNN.

The sequence for a day lives in one ``sale_sequences`` row and is advanced
with a single UPDATE, so concurrent sales on the same day are serialised by
the database row lock instead of racing on a count query. The first sale of
a day creates the row, seeded with the number of sales already recorded in
that day's window so numbering continues from existing data.

Numbers may also be supplied by the caller (imports) and can land in a
day's range ahead of the counter; the allocator steps over any number that
is already recorded instead of handing it out again.
"""
import logging
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.sale import Sale, SaleSequence
from utils.errors import InternalError

logger = logging.getLogger(__name__)

SALE_NUMBER_PREFIX = "SALE"
SEQUENCE_PAD = 4


def format_sale_number(day: date, seq: int) -> str:
    return f"{SALE_NUMBER_PREFIX}-{day:%Y%m%d}-{seq:0{SEQUENCE_PAD}d}"


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """Half-open local-time window [start of day, start of next day)."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def count_sales_on(db: Session, day: date) -> int:
    start, end = day_bounds(day)
    return db.query(func.count(Sale.id)).filter(Sale.sale_date >= start, Sale.sale_date < end).scalar() or 0


def _increment(db: Session, day: date) -> Optional[int]:
    result = db.execute(
        update(SaleSequence)
        .where(SaleSequence.day == day)
        .values(last_number=SaleSequence.last_number + 1)
        .execution_options(synchronize_session=False)
    )
    if not result.rowcount:
        return None
    return db.execute(select(SaleSequence.last_number).where(SaleSequence.day == day)).scalar_one()


def _number_taken(db: Session, number: str) -> bool:
    return db.query(Sale.id).filter(Sale.sale_number == number).first() is not None


def allocate_sale_number(db: Session, day: Optional[date] = None) -> str:
    """
    Reserve the next sale number for ``day`` (local today by default).

    Must be the first write of the caller's transaction: losing the race to
    create the day's row rolls the session back before retrying.
    """
    day = day or date.today()

    seq = _increment(db, day)
    if seq is None:
        seq = count_sales_on(db, day) + 1
        db.add(SaleSequence(day=day, last_number=seq))
        try:
            db.flush()
        except IntegrityError:
            # Another request created the row first; take the next slot from it
            db.rollback()
            seq = _increment(db, day)
            if seq is None:
                raise InternalError(f"Could not allocate a sale number for {day.isoformat()}")

    number = format_sale_number(day, seq)
    while _number_taken(db, number):
        logger.info("Sale number %s already recorded, skipping", number)
        seq = _increment(db, day)
        number = format_sale_number(day, seq)

    logger.debug("Allocated sale number %s", number)
    return number
