"""
Pytest fixtures for the SmartStock API tests.

Every test runs against a fresh in-memory SQLite schema shared by the test
session and the application through a static connection pool.
"""
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine
from main import app
from models.customer import Customer
from models.product import Product
from models.users import User
from utils.hashing import get_password_hash
from utils.tokenJWT import create_user_token


@pytest.fixture(scope="function")
def db_session():
    """Recreate all tables and hand out a session on the shared connection."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(scope="function")
def client(db_session):
    with TestClient(app) as test_client:
        yield test_client


def _make_user(db_session, email, role):
    user = User(name=email.split("@")[0], email=email,
                password_hash=get_password_hash("Password123!"), role=role)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
def admin_user(db_session):
    return _make_user(db_session, "admin@example.com", "admin")


@pytest.fixture(scope="function")
def staff_user(db_session):
    return _make_user(db_session, "staff@example.com", "user")


@pytest.fixture(scope="function")
def auth_headers(admin_user):
    return {"Authorization": f"Bearer {create_user_token(admin_user)}"}


@pytest.fixture(scope="function")
def staff_headers(staff_user):
    return {"Authorization": f"Bearer {create_user_token(staff_user)}"}


@pytest.fixture(scope="function")
def products(db_session):
    """Three catalogue products: plenty in stock, nearly sold out, sold out."""
    rows = [
        Product(name="Wireless Mouse", sku="ELEC-001", category="Electronics",
                price=25.0, stock_quantity=50, min_stock=10),
        Product(name="Desk Lamp", sku="HOME-001", category="Home",
                price=40.0, stock_quantity=3, min_stock=5),
        Product(name="Gel Pens", sku="OFF-001", category="Office Supplies",
                price=4.5, stock_quantity=0, min_stock=20),
    ]
    db_session.add_all(rows)
    db_session.commit()
    for row in rows:
        db_session.refresh(row)
    return rows


@pytest.fixture(scope="function")
def customer(db_session):
    row = Customer(name="Maria Lopez", email="maria.lopez@example.com", phone="555-0103",
                   address_city="Miami", address_state="FL")
    db_session.add(row)
    db_session.commit()
    db_session.refresh(row)
    return row
