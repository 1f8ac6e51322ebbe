# backend/routes/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from utils.hashing import get_password_hash, verify_password
from utils.tokenJWT import create_user_token, get_current_user
from models import users as models
from schemas import user as schemas
from database import get_db
from sqlalchemy import func

router = APIRouter(prefix="/auth", tags=["Auth"])
logger = logging.getLogger(__name__)

# Register a new user
@router.post("/signup", response_model=schemas.AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(user: schemas.UserCreate, db: Session = Depends(get_db)):
    # Normalize email input
    normalized_email = user.email.strip().lower()

    # Check for existing user
    db_user = db.query(models.User).filter(func.lower(models.User.email) == normalized_email).first()
    if db_user:
        logger.warning("Signup rejected, email already registered: %s", normalized_email)
        raise HTTPException(status_code=400, detail="User already exists with this email")

    # Create new user instance with hashed password
    new_user = models.User(
        name=user.name.strip(),
        email=normalized_email,
        password_hash=get_password_hash(user.password),
        role="user",
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    logger.info("User %s signed up", new_user.email)
    return {"user": new_user, "token": create_user_token(new_user)}


# Authenticate user and issue JWT token
@router.post("/login", response_model=schemas.AuthResponse)
def login(payload: schemas.UserLogin, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    db_user = db.query(models.User).filter(models.User.email == email).first()

    # Validate credentials
    if not db_user or not verify_password(payload.password, db_user.password_hash):
        logger.warning("Failed login for %s", email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")

    logger.info("User %s logged in", db_user.email)
    return {"user": db_user, "token": create_user_token(db_user)}


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: models.User = Depends(get_current_user)):
    return current_user
