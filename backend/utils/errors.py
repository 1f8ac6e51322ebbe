# backend/utils/errors.py
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors raised by the business layer.

    Each subclass maps to one HTTP status class so the client can tell bad
    input, dangling references and state conflicts apart.
    """
    status_code = 500
    error = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    status_code = 400
    error = "validation_error"


class NotFoundError(AppError):
    status_code = 404
    error = "not_found"


class ConflictError(AppError):
    status_code = 409
    error = "conflict"


class InsufficientStockError(ConflictError):
    error = "insufficient_stock"

    def __init__(self, product_id: int, product_name: str, requested: int, available: int):
        super().__init__(f"Insufficient stock for {product_name}")
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available


class InternalError(AppError):
    pass


def _error_response(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": message, "error": error})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        else:
            logger.warning("%s %s rejected (%s): %s", request.method, request.url.path, exc.error, exc.message)
        return _error_response(exc.status_code, exc.error, exc.message)

    @app.exception_handler(SQLAlchemyError)
    async def handle_db_error(request: Request, exc: SQLAlchemyError):
        logger.exception("Database error on %s %s", request.method, request.url.path)
        return _error_response(InternalError.status_code, InternalError.error, "Database operation failed")
