"""
Error Handlers
Custom exceptions and exception handlers for FastAPI.
"""

import logging
from typing import Any, Dict, Optional, Union
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base exception for API errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ResourceNotFoundError(APIError):
    """Exception raised when resource is not found."""

    def __init__(self, resource: str, resource_id: Union[int, str]):
        super().__init__(
            message=f"{resource} not found: {resource_id}",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": str(resource_id)},
        )


class InvalidRequestError(APIError):
    """Exception raised for invalid requests."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class AuthenticationRequiredError(APIError):
    """Raised when an action needs a signed-in user."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message=message, status_code=status.HTTP_401_UNAUTHORIZED)


class PermissionDeniedError(APIError):
    """Raised when the signed-in user lacks the role for an action."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message=message, status_code=status.HTTP_403_FORBIDDEN, details=details)


class ConflictError(APIError):
    """Raised when a write collides with existing state."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message=message, status_code=status.HTTP_409_CONFLICT, details=details)


class ProductUnavailableError(ConflictError):
    """Raised when engagement is attempted on a sold product."""

    def __init__(self, product_id: Union[int, str]):
        super().__init__(
            message="Product is no longer available",
            details={"product_id": str(product_id)},
        )


class CommentQuotaExceededError(APIError):
    """Raised when an author already holds the maximum comments on a product."""

    def __init__(self, quota: int, product_id: Union[int, str]):
        super().__init__(
            message=f"You can only post {quota} comments per product",
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            details={"quota": quota, "product_id": str(product_id)},
        )


class ImageTooLargeError(APIError):
    """Raised when an upload exceeds its bucket's size ceiling."""

    def __init__(self, size: int, max_bytes: int):
        super().__init__(
            message=f"Image must be less than {max_bytes // (1024 * 1024)}MB",
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            details={"size": size, "max_bytes": max_bytes},
        )


class StorageError(APIError):
    """Raised when the object store rejects an upload."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message=message, status_code=status.HTTP_502_BAD_GATEWAY, details=details)


class FormSubmissionError(APIError):
    """
    Raised when a dashboard form submission fails.

    Carries the submitted values so the client can re-open the form
    with its contents intact.
    """

    def __init__(self, cause: APIError, form: Optional[Dict[str, Any]] = None):
        details = dict(cause.details)
        details["form"] = form or {}
        super().__init__(message=cause.message, status_code=cause.status_code, details=details)
        self.cause = cause


def setup_error_handlers(app: FastAPI) -> None:
    """
    Set up custom error handlers for the FastAPI app.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        """Handle custom API errors."""
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            f"API error: {exc.message}",
            extra={
                "status_code": exc.status_code,
                "details": exc.details,
                "path": request.url.path,
            },
        )

        error_type = exc.__class__.__name__
        if isinstance(exc, FormSubmissionError):
            error_type = exc.cause.__class__.__name__

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "message": exc.message,
                    "type": error_type,
                    "details": exc.details,
                }
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors."""
        logger.warning(f"Validation error: {exc}", extra={"path": request.url.path})

        # Convert error details to JSON-serializable format
        errors = []
        for error in exc.errors():
            errors.append(
                {
                    "loc": error.get("loc", []),
                    "msg": str(error.get("msg", "")),
                    "type": error.get("type", ""),
                }
            )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": {
                    "message": "Request validation failed",
                    "type": "ValidationError",
                    "details": errors,
                }
            },
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        """Handle value errors."""
        logger.warning(f"Value error: {exc}", extra={"path": request.url.path})

        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": {
                    "message": str(exc),
                    "type": "ValueError",
                }
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.error(f"Unexpected error: {exc}", exc_info=True, extra={"path": request.url.path})

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "message": "An unexpected error occurred",
                    "type": "InternalServerError",
                }
            },
        )
