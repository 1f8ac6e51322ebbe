# backend/routes/sales.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas.sale import SaleCreate, SaleOut
from services.sale_processor import create_sale, get_sale, list_sales
from utils.tokenJWT import get_current_user

router = APIRouter(prefix="/sales", tags=["Sales"])


# List all sales, newest first
@router.get("", response_model=List[SaleOut])
def list_all_sales(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return list_sales(db)


# Record a sale: validates stock, decrements it and updates customer loyalty
@router.post("", response_model=SaleOut, status_code=status.HTTP_201_CREATED)
def record_sale(
    payload: SaleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return create_sale(db, payload)


@router.get("/{sale_id}", response_model=SaleOut)
def get_sale_detail(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return get_sale(db, sale_id)
