"""
Centralized exception handlers for FastAPI.

Maps raised errors to HTTP responses: the product family's domain
exceptions, request-shape errors, and any unexpected fault.
Result-returning services never reach these handlers; their failures
are projected by ``app.shared.errors.projection``.
No stack traces or internal details are exposed to clients.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.domain.shop.errors import (
    CategoryNotFoundError,
    ProductNotFoundError,
    ProductValidationError,
    ShopDomainError,
)
from app.shared.errors.projection import INTERNAL_ERROR_MESSAGE

logger = logging.getLogger(__name__)

HTTP_400 = 400
HTTP_404 = 404
HTTP_500 = 500


def _error_response(
    status_code: int, message: str, errors: list[str] | None = None
) -> JSONResponse:
    """Build a JSON error response in the same shape as projected errors."""
    body: dict[str, object] = {"message": message}
    if errors:
        body["errors"] = errors
    return JSONResponse(status_code=status_code, content=body)


def _describe(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    return f"{location}: {error.get('msg', 'invalid value')}" if location else error.get("msg", "")


def register_error_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(ProductNotFoundError)
    async def handle_product_not_found(
        _request: Request, exc: ProductNotFoundError
    ) -> JSONResponse:
        """Handle missing product errors."""
        logger.warning("Product not found: %s", exc.product_id)
        return _error_response(HTTP_404, exc.message)

    @app.exception_handler(CategoryNotFoundError)
    async def handle_category_not_found(
        _request: Request, exc: CategoryNotFoundError
    ) -> JSONResponse:
        """Handle products that reference a missing category."""
        logger.warning("Category not found: %s", exc.category_id)
        return _error_response(HTTP_404, exc.message)

    @app.exception_handler(ProductValidationError)
    async def handle_product_validation(
        _request: Request, exc: ProductValidationError
    ) -> JSONResponse:
        """Handle product field rule violations."""
        logger.info("Product validation failed: %d error(s)", len(exc.errors))
        return _error_response(HTTP_400, exc.message, exc.errors)

    @app.exception_handler(ShopDomainError)
    async def handle_shop_domain(
        _request: Request, exc: ShopDomainError
    ) -> JSONResponse:
        """Catch-all for unmapped shop domain errors."""
        logger.error("Unhandled shop domain error: %s", exc.message)
        return _error_response(HTTP_500, INTERNAL_ERROR_MESSAGE)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle malformed request bodies, paths and queries."""
        errors = [_describe(e) for e in exc.errors()]
        logger.info("Malformed request: %d error(s)", len(errors))
        return _error_response(HTTP_400, "Invalid request", errors)

    @app.exception_handler(Exception)
    async def handle_unexpected(
        _request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _error_response(HTTP_500, INTERNAL_ERROR_MESSAGE)
