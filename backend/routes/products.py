# backend/routes/products.py
import logging
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import get_current_user, role_required
from models.users import User
from models.product import Product
import schemas.product as product_schemas

router = APIRouter(prefix="/products", tags=["Products"])
logger = logging.getLogger(__name__)


# ---- HELPERS ----
def _get_or_404(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product

def _ensure_unique_sku(db: Session, sku: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(Product).filter(Product.sku == sku)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=409, detail="Product SKU already exists")


# =========================
# PRODUCT LIST
# =========================
@router.get("", response_model=product_schemas.ProductListPage)
def list_products(
    search: Optional[str] = Query(None, description="Name or SKU fragment"),
    category: Optional[str] = Query(None),
    low_stock: bool = Query(False, description="Only products at or below their minimum stock"),
    out_of_stock: bool = Query(False),
    is_active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=1000),
    sort_by: str = Query("updated_at"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Product)

    if search:
        like = f"%{search}%"
        query = query.filter(or_(Product.name.ilike(like), Product.sku.ilike(like)))
    if category: query = query.filter(Product.category == category)
    if low_stock: query = query.filter(Product.stock_quantity <= Product.min_stock)
    if out_of_stock: query = query.filter(Product.stock_quantity == 0)
    if is_active is not None: query = query.filter(Product.is_active == is_active)

    allowed = {
        "id": Product.id, "name": Product.name, "sku": Product.sku,
        "price": Product.price, "stock_quantity": Product.stock_quantity,
        "updated_at": Product.updated_at,
    }
    sort_col = allowed.get(sort_by.lower(), Product.updated_at)
    query = query.order_by(sort_col.asc() if order == "asc" else sort_col.desc(), Product.id.desc())

    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()

    return {"items": items, "total": total, "page": page, "page_size": page_size}


# =========================
# HELPER ENDPOINTS
# =========================
@router.get("/stats/dashboard", response_model=product_schemas.ProductStats)
def product_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    total_products = db.query(Product).count()
    low_stock_products = db.query(Product).filter(Product.stock_quantity <= Product.min_stock).count()
    stock_value = (
        db.query(func.coalesce(func.sum(Product.stock_quantity * Product.price), 0.0))
        .filter(Product.is_active.is_(True))
        .scalar()
    )
    total_categories = db.query(func.count(func.distinct(Product.category))).scalar()

    return product_schemas.ProductStats(
        total_products=total_products,
        low_stock_products=low_stock_products,
        stock_value=float(stock_value or 0.0),
        total_categories=total_categories or 0,
    )

@router.get("/categories", response_model=List[str])
def product_categories(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rows = db.query(Product.category).distinct().filter(Product.category != None, Product.category != "").all()
    return sorted(r[0] for r in rows)


# =========================
# BULK UPDATE
# =========================
@router.post("/bulk-update", response_model=product_schemas.ProductBulkUpdateResult)
def bulk_update_products(
    payload: product_schemas.ProductBulkUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    products = db.query(Product).filter(Product.id.in_(payload.ids)).all()
    if len(products) != len(set(payload.ids)):
        raise HTTPException(status_code=404, detail="One or more products not found")

    if payload.field == "category":
        if payload.operation != "set":
            raise HTTPException(status_code=400, detail="Category only supports the 'set' operation")
        value = str(payload.value).strip()
        if not value:
            raise HTTPException(status_code=400, detail="Category cannot be empty")
        for p in products:
            p.category = value
    else:
        try:
            number = float(payload.value)
        except (TypeError, ValueError):
            raise HTTPException(status_code=400, detail=f"Invalid numeric value: {payload.value}")
        if payload.field == "stock_quantity":
            if not number.is_integer():
                raise HTTPException(status_code=400, detail="Stock must be a whole number")
            number = int(number)

        for p in products:
            current = getattr(p, payload.field)
            if payload.operation == "set":
                new_value = number
            elif payload.operation == "increase":
                new_value = current + number
            else:
                new_value = current - number
            if new_value < 0:
                raise HTTPException(status_code=400, detail=f"{payload.field} cannot be negative for {p.name}")
            setattr(p, payload.field, new_value)

    db.commit()
    logger.info("Bulk %s of %s on %d product(s) by %s",
                payload.operation, payload.field, len(products), current_user.email)
    return {"updated": len(products)}


# =========================
# SINGLE PRODUCT
# =========================
@router.get("/{product_id}", response_model=product_schemas.ProductOut)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _get_or_404(db, product_id)


@router.post("", response_model=product_schemas.ProductOut, status_code=status.HTTP_201_CREATED)
def add_product(
    payload: product_schemas.ProductCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _ensure_unique_sku(db, payload.sku)

    new_product = Product(**payload.model_dump())
    db.add(new_product)
    db.commit()
    db.refresh(new_product)

    logger.info("Product %s (%s) created by %s", new_product.id, new_product.sku, current_user.email)
    return new_product


# Partial update: only fields present in the request are changed
@router.put("/{product_id}", response_model=product_schemas.ProductOut)
def update_product(
    product_id: int,
    payload: product_schemas.ProductUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = _get_or_404(db, product_id)
    changes = payload.model_dump(exclude_unset=True)

    for key in ("name", "sku", "category", "price", "stock_quantity", "min_stock", "is_active"):
        if key in changes and changes[key] is None:
            raise HTTPException(status_code=400, detail=f"{key} cannot be null")
    if changes.get("sku") and changes["sku"] != product.sku:
        _ensure_unique_sku(db, changes["sku"], exclude_id=product.id)

    for key, value in changes.items():
        setattr(product, key, value)

    db.commit()
    db.refresh(product)

    logger.info("Product %s updated by %s: %s", product.id, current_user.email, sorted(changes))
    return product


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    product = _get_or_404(db, product_id)
    pid, pname = product.id, product.name
    db.delete(product)
    db.commit()
    logger.info("Product %s deleted by %s", pid, current_user.email)
    return {"detail": f"Product '{pname}' deleted"}
