# backend/main.py
import logging

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from database import init_db
from utils.errors import register_exception_handlers

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Router imports
from routes.auth import router as auth_router
from routes.products import router as products_router
from routes.customers import router as customers_router
from routes.sales import router as sales_router
from routes.reports import router as reports_router

# Create tables on startup
init_db()

app = FastAPI(title="SmartStock API", version="1.0.0")

# CORS Configuration
# Local development origins plus the deployed frontend, when configured
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

if settings.FRONTEND_URL:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Router registration under /api
api = APIRouter(prefix="/api")
api.include_router(auth_router)
api.include_router(products_router)
api.include_router(customers_router)
api.include_router(sales_router)
api.include_router(reports_router)
app.include_router(api)

logger.info("SmartStock API ready, %d CORS origin(s)", len(origins))

@app.get("/")
def read_root():
    return {"message": "SmartStock Inventory Management API"}
