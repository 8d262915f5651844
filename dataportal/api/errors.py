"""
Error Handlers
Custom exceptions and exception handlers for the portal.
"""

import logging
from typing import Optional, Union
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, Response
from fastapi.exceptions import RequestValidationError

from .templating import templates

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base exception for portal errors."""

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


class SearchServiceError(APIError):
    """
    Exception raised when a call to the remote search service fails.

    Carries the fault message together with the last SOAP envelopes sent
    and received, so pages can show them as diagnostics.
    """

    def __init__(
        self,
        fault_message: str,
        operation: Optional[str] = None,
        last_request: Optional[str] = None,
        last_response: Optional[str] = None,
    ):
        self.fault_message = fault_message
        self.operation = operation
        self.last_request = last_request
        self.last_response = last_response
        super().__init__(
            message=fault_message,
            status_code=status.HTTP_502_BAD_GATEWAY,
            details={"operation": operation} if operation else None,
        )


class TransformError(APIError):
    """Exception raised when the result stylesheet cannot be loaded or applied."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(
            message=message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, details=details
        )


class ResourceNotFoundError(APIError):
    """Exception raised when resource is not found."""

    def __init__(self, resource: str, resource_id: Union[int, str]):
        super().__init__(
            message=f"{resource} not found: {resource_id}",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id},
        )


class InvalidRequestError(APIError):
    """Exception raised for invalid requests."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


def _wants_json(request: Request) -> bool:
    return request.url.path.startswith("/api/")


def _error_response(
    request: Request, status_code: int, message: str, error_type: str, details=None
) -> Response:
    """Render an error as JSON for API paths and as an HTML page otherwise."""
    if _wants_json(request):
        error = {"message": message, "type": error_type}
        if details is not None:
            error["details"] = details
        return JSONResponse(status_code=status_code, content={"error": error})

    return templates.TemplateResponse(
        request,
        "error.html",
        {"status_code": status_code, "message": message, "error_type": error_type},
        status_code=status_code,
    )


def setup_error_handlers(app: FastAPI) -> None:
    """
    Set up custom error handlers for the FastAPI app.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        """Handle custom portal errors."""
        logger.error(
            f"API error: {exc.message}",
            extra={
                "status_code": exc.status_code,
                "details": exc.details,
                "path": request.url.path,
            },
        )

        return _error_response(
            request, exc.status_code, exc.message, exc.__class__.__name__, exc.details
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
                    "loc": list(error.get("loc", [])),
                    "msg": str(error.get("msg", "")),
                    "type": error.get("type", ""),
                }
            )

        return _error_response(
            request,
            422,
            "Request validation failed",
            "ValidationError",
            errors,
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        """Handle value errors."""
        logger.warning(f"Value error: {exc}", extra={"path": request.url.path})

        return _error_response(request, status.HTTP_400_BAD_REQUEST, str(exc), "ValueError")

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.error(f"Unexpected error: {exc}", exc_info=True, extra={"path": request.url.path})

        return _error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An unexpected error occurred",
            "InternalServerError",
        )
