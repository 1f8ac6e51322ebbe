# utils/tokenJWT.py
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.users import User

logger = logging.getLogger(__name__)

# Every business endpoint expects "Authorization: Bearer <token>"
bearer_scheme = HTTPBearer()

_credentials_exception = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


# Token issued on signup and login: staff email as subject plus id and role
def create_user_token(user: User) -> str:
    return create_access_token(data={"sub": user.email, "id": user.id, "role": user.role})


def decode_token(token: str) -> dict:
    """Verified claims of ``token``; 401 when expired, tampered or missing a subject."""
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.info("Rejected bearer token: %s", e)
        raise _credentials_exception
    if not claims.get("sub"):
        raise _credentials_exception
    return claims


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    claims = decode_token(credentials.credentials)

    # Accounts removed after the token was issued lose access immediately
    user = db.query(User).filter(User.email == claims["sub"]).first()
    if user is None:
        logger.info("Token subject %s no longer exists", claims["sub"])
        raise _credentials_exception
    return user


# Dependency factory for role checks, e.g. Depends(role_required("admin"))
def role_required(*allowed_roles):
    allowed = {role.lower() for role in allowed_roles}

    def _checker(current_user: User = Depends(get_current_user)):
        if allowed and (current_user.role or "").lower() not in allowed:
            logger.warning("User %s (role %s) denied, requires %s",
                           current_user.email, current_user.role, sorted(allowed))
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Forbidden"
            )
        return current_user
    return _checker
