# backend/routes/customers.py
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from database import get_db
from models.customer import Customer
from models.users import User
from schemas.customer import Address, CustomerCreate, CustomerOut, CustomerStats, CustomerUpdate
from utils.tokenJWT import get_current_user, role_required

router = APIRouter(prefix="/customers", tags=["Customers"])
logger = logging.getLogger(__name__)

NEW_CUSTOMER_WINDOW = timedelta(days=30)


def _get_or_404(db: Session, customer_id: int) -> Customer:
    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer

def _email_taken(db: Session, email: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(Customer).filter(func.lower(Customer.email) == email)
    if exclude_id is not None:
        query = query.filter(Customer.id != exclude_id)
    return query.first() is not None

def _apply_address(customer: Customer, address: Address) -> None:
    customer.address_street = address.street
    customer.address_city = address.city
    customer.address_state = address.state
    customer.address_zip_code = address.zip_code
    customer.address_country = address.country


# Customers registered in the last 30 days
def count_new_customers(db: Session) -> int:
    since = datetime.now(timezone.utc) - NEW_CUSTOMER_WINDOW
    return db.query(Customer).filter(Customer.created_at >= since).count()


@router.get("/stats/dashboard", response_model=CustomerStats)
def customer_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return CustomerStats(total_customers=db.query(Customer).count(), new_customers=count_new_customers(db))


@router.get("", response_model=List[CustomerOut])
def list_customers(
    search: Optional[str] = Query(None, description="Name, email or phone fragment"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Customer)
    if search:
        like = f"%{search}%"
        query = query.filter(or_(Customer.name.ilike(like), Customer.email.ilike(like), Customer.phone.ilike(like)))
    return query.order_by(Customer.updated_at.desc(), Customer.id.desc()).all()


@router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _get_or_404(db, customer_id)


@router.post("", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: CustomerCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    email = payload.email.strip().lower()
    if _email_taken(db, email):
        raise HTTPException(status_code=400, detail="Customer with this email already exists")

    customer = Customer(name=payload.name.strip(), email=email, phone=payload.phone.strip())
    _apply_address(customer, payload.address or Address())
    db.add(customer)
    db.commit()
    db.refresh(customer)

    logger.info("Customer %s created by %s", customer.id, current_user.email)
    return customer


# Partial update of contact details; loyalty totals are never editable here
@router.put("/{customer_id}", response_model=CustomerOut)
def update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    customer = _get_or_404(db, customer_id)
    changes = payload.model_dump(exclude_unset=True)

    for key in ("name", "email", "phone"):
        if key in changes and changes[key] is None:
            raise HTTPException(status_code=400, detail=f"{key} cannot be null")

    if payload.name is not None: customer.name = payload.name.strip()
    if payload.phone is not None: customer.phone = payload.phone.strip()
    if payload.email is not None:
        email = payload.email.strip().lower()
        if email != customer.email and _email_taken(db, email, exclude_id=customer.id):
            raise HTTPException(status_code=400, detail="Customer with this email already exists")
        customer.email = email
    if payload.address is not None:
        _apply_address(customer, payload.address)

    db.commit()
    db.refresh(customer)

    logger.info("Customer %s updated by %s", customer.id, current_user.email)
    return customer


@router.delete("/{customer_id}")
def delete_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    customer = _get_or_404(db, customer_id)
    db.delete(customer)
    db.commit()
    logger.info("Customer %s deleted by %s", customer_id, current_user.email)
    return {"message": "Customer deleted successfully"}
