# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    # Required: the process refuses to start without them
    SECRET_KEY: str
    DATABASE_URL: str

    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Extra origin allowed by CORS (deployed frontend)
    FRONTEND_URL: Optional[str] = None

    LOG_LEVEL: str = "INFO"

    # One loyalty point per LOYALTY_POINT_VALUE of sale total
    LOYALTY_POINT_VALUE: int = 10
    VIP_LOYALTY_POINTS: int = 500

    class Config:
        env_file: ClassVar[str] = str(env_path)

settings = Settings()
