"""Populate the database with an admin account and a small sample catalogue.

Sales are recorded through the regular sale workflow so stock levels, sale
numbers and customer loyalty totals stay consistent with each other.

    python seed_db.py --admin-password <password> [--reset]
"""
import argparse
import logging
import random

from database import Base, SessionLocal, engine, init_db
from models.customer import Customer
from models.product import Product
from models.sale import PaymentMethod
from models.users import User
from schemas.sale import SaleCreate, SaleItemCreate
from services.sale_processor import create_sale
from utils.errors import InsufficientStockError
from utils.hashing import get_password_hash

logger = logging.getLogger("seed_db")

PRODUCTS = [
    # name, sku, category, price, stock, min_stock, supplier
    ("Wireless Mouse", "ELEC-001", "Electronics", 25.99, 120, 15, "TechSource"),
    ("USB-C Charger 65W", "ELEC-002", "Electronics", 39.50, 60, 10, "TechSource"),
    ("Noise Cancelling Headphones", "ELEC-003", "Electronics", 149.00, 8, 10, "SoundWorks"),
    ("A4 Copy Paper (500)", "OFF-001", "Office Supplies", 6.75, 300, 50, "PaperCo"),
    ("Gel Pen Pack (10)", "OFF-002", "Office Supplies", 4.20, 0, 20, "PaperCo"),
    ("Desk Organizer", "OFF-003", "Office Supplies", 18.00, 35, 5, "HomeDesk"),
    ("Arabica Coffee Beans 1kg", "FOOD-001", "Groceries", 21.40, 45, 10, "BeanHouse"),
    ("Green Tea (100 bags)", "FOOD-002", "Groceries", 7.90, 12, 15, "LeafTrade"),
    ("Yoga Mat", "SPRT-001", "Sports", 29.99, 25, 5, "FitGear"),
    ("Steel Water Bottle", "SPRT-002", "Sports", 15.50, 70, 10, "FitGear"),
]

CUSTOMERS = [
    ("Ayesha Khan", "ayesha.khan@example.com", "555-0101", "12 Garden Rd", "Austin", "TX", "73301"),
    ("Daniel Moore", "daniel.moore@example.com", "555-0102", "48 Lake St", "Denver", "CO", "80202"),
    ("Maria Lopez", "maria.lopez@example.com", "555-0103", "7 Pine Ave", "Miami", "FL", "33101"),
    ("Chen Wei", "chen.wei@example.com", "555-0104", "301 Market St", "Seattle", "WA", "98101"),
]

STAFF = ["Sam Carter", "Priya Patel", "Jordan Lee"]


def reset_tables():
    Base.metadata.drop_all(bind=engine)
    init_db()


def seed(admin_email: str, admin_password: str, sales_count: int) -> None:
    session = SessionLocal()
    try:
        if not session.query(User).filter(User.email == admin_email).first():
            session.add(User(
                name="Administrator", email=admin_email,
                password_hash=get_password_hash(admin_password), role="admin",
            ))

        if session.query(Product).count() == 0:
            for name, sku, category, price, stock, min_stock, supplier in PRODUCTS:
                session.add(Product(
                    name=name, sku=sku, category=category, price=price, stock_quantity=stock,
                    min_stock=min_stock, supplier=supplier, description=f"{category}: {name}",
                ))

        if session.query(Customer).count() == 0:
            for name, email, phone, street, city, state, zip_code in CUSTOMERS:
                session.add(Customer(
                    name=name, email=email, phone=phone, address_street=street, address_city=city,
                    address_state=state, address_zip_code=zip_code, address_country="USA",
                ))

        session.commit()

        products = session.query(Product).filter(Product.stock_quantity > 5).all()
        customer_ids = [c.id for c in session.query(Customer).all()]
        methods = list(PaymentMethod)

        created = 0
        for _ in range(sales_count):
            picked = random.sample(products, k=min(len(products), random.randint(1, 3)))
            payload = SaleCreate(
                customer=random.choice(customer_ids + [None]),
                items=[SaleItemCreate(product_id=p.id, quantity=random.randint(1, 2)) for p in picked],
                staff_member=random.choice(STAFF),
                payment_method=random.choice(methods),
                tax=round(random.uniform(0, 5), 2),
            )
            try:
                sale = create_sale(session, payload)
            except InsufficientStockError as e:
                logger.warning("Skipped sample sale: %s", e.message)
                continue
            created += 1
            logger.info("Seeded %s (total %.2f)", sale.sale_number, sale.total)

        logger.info("Seeding finished: %d products, %d customers, %d sales",
                    session.query(Product).count(), len(customer_ids), created)
    finally:
        session.close()


def main():
    parser = argparse.ArgumentParser(description="Seed the SmartStock database with sample data")
    parser.add_argument("--admin-email", default="admin@example.com")
    parser.add_argument("--admin-password", required=True)
    parser.add_argument("--sales", type=int, default=10, help="Number of sample sales to record")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate all tables first")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    if args.reset:
        reset_tables()
    else:
        init_db()
    seed(args.admin_email.strip().lower(), args.admin_password, args.sales)


if __name__ == "__main__":
    main()
