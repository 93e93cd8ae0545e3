"""Error taxonomy for the recipe catalog.

Every error carries the HTTP status it maps to; the handlers registered in
``main.py`` render them as ``{"error": message}``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger("recipe_catalog.errors")


class RecipeCatalogError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RecipeCatalogError):
    """Missing or malformed required fields."""
    status_code = 400


class ConflictError(RecipeCatalogError):
    """A dish with the same name already exists."""
    status_code = 400


class NotFoundError(RecipeCatalogError):
    status_code = 404


class StorageError(RecipeCatalogError):
    """Persistence failure (database or image directory)."""
    status_code = 500


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def catalog_error_handler(request: Request, exc: RecipeCatalogError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return _error_response(exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Collapse FastAPI's 422 payload into the catalog's single-message shape
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg", "invalid request"))
    return _error_response(400, "; ".join(parts) or "Invalid request")


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"{request.method} {request.url.path} storage failure: {exc}")
    return _error_response(500, str(exc))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RecipeCatalogError, catalog_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
