# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error response carries a human-readable `detail`, a machine-readable
# `code`, and where possible a `suggestion` telling the caller how to fix it.
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ThreadCraftException(Exception):
    """
    Base exception for the ThreadCraft API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "THREADCRAFT_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Not Found Exceptions
# =============================================================================

class ResourceNotFoundError(ThreadCraftException):
    """Raised when a row looked up by id doesn't exist."""

    def __init__(self, resource: str, resource_id: str, code: str | None = None):
        key = resource.lower().replace(" ", "_")
        super().__init__(
            message=f"{resource.capitalize()} not found: {resource_id}",
            code=code or f"{key.upper()}_NOT_FOUND",
            status_code=404,
            suggestion=f"Check that the {key}_id is correct",
            details={f"{key}_id": resource_id}
        )


class OrderNotFoundError(ResourceNotFoundError):
    def __init__(self, order_id: str):
        super().__init__("order", order_id)


class CustomerNotFoundError(ResourceNotFoundError):
    def __init__(self, customer_id: str):
        super().__init__("customer", customer_id)


class CatalogItemNotFoundError(ResourceNotFoundError):
    def __init__(self, catalog_item_id: str):
        super().__init__("catalog item", catalog_item_id)


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, user_id: str):
        super().__init__("user", user_id)


class InvitationNotFoundError(ThreadCraftException):
    """Raised for unknown, used or cancelled invitation tokens."""

    def __init__(self, reference: str):
        super().__init__(
            message="Invitation not found or no longer valid",
            code="INVITATION_NOT_FOUND",
            status_code=404,
            suggestion="Ask an administrator to send a new invitation",
            details={"reference": reference}
        )


# =============================================================================
# Validation / Conflict Exceptions
# =============================================================================

class InvalidReferenceError(ThreadCraftException):
    """Raised when a request references a related row that doesn't exist."""

    def __init__(self, resource: str, resource_id: str, field: str):
        super().__init__(
            message=f"{resource.capitalize()} not found: {resource_id}",
            code="INVALID_REFERENCE",
            status_code=400,
            suggestion=f"Check that `{field}` points to an existing {resource}",
            details={"field": field, "value": resource_id}
        )


class ConflictError(ThreadCraftException):
    """Raised when a write would violate a uniqueness rule."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=409,
            suggestion=suggestion,
            details=details,
        )


class InvitationExpiredError(ThreadCraftException):
    """Raised when an invitation token is past its expiry."""

    def __init__(self, expires_at: str):
        super().__init__(
            message="Invitation has expired",
            code="INVITATION_EXPIRED",
            status_code=400,
            suggestion="Ask an administrator to send a new invitation",
            details={"expires_at": expires_at}
        )


class BadRequestError(ThreadCraftException):
    """Generic 400 for business-rule violations."""

    def __init__(self, message: str, code: str = "BAD_REQUEST", details: dict[str, Any] | None = None):
        super().__init__(message=message, code=code, status_code=400, details=details)


# =============================================================================
# Auth Exceptions
# =============================================================================

class InsufficientRoleError(ThreadCraftException):
    """Raised when an authenticated user's role may not call an endpoint."""

    def __init__(self, role: str, allowed: list[str]):
        super().__init__(
            message="You do not have permission to perform this action",
            code="INSUFFICIENT_ROLE",
            status_code=403,
            suggestion=f"This endpoint requires one of these roles: {', '.join(allowed)}",
            details={"role": role, "allowed_roles": allowed}
        )


class InvalidCredentialsError(ThreadCraftException):
    """Raised when password sign-in fails."""

    def __init__(self):
        super().__init__(
            message="Invalid email or password",
            code="INVALID_CREDENTIALS",
            status_code=401,
            suggestion="Check your email and password and try again",
        )


# =============================================================================
# Order Exceptions
# =============================================================================

class OrderItemsUpdateError(ThreadCraftException):
    """Raised when order fields were saved but reconciling items failed."""

    def __init__(self, order: dict[str, Any], error: str):
        super().__init__(
            message="Order updated but items update failed",
            code="ORDER_ITEMS_UPDATE_FAILED",
            status_code=400,
            suggestion="Reload the order and re-submit the item changes",
            details={"order": order, "error": error}
        )


# =============================================================================
# Upload Exceptions
# =============================================================================

class InvalidFileTypeError(ThreadCraftException):
    """Raised when uploaded file type is not allowed."""

    def __init__(self, filename: str, allowed: list[str]):
        super().__init__(
            message=f"Invalid file type: {filename}",
            code="INVALID_FILE_TYPE",
            status_code=400,
            suggestion=f"Only these file types are supported: {', '.join(allowed)}",
            details={"filename": filename, "allowed_types": allowed}
        )


class FileTooLargeError(ThreadCraftException):
    """Raised when uploaded file exceeds size limit."""

    def __init__(self, size_mb: float, max_mb: int):
        super().__init__(
            message=f"File too large: {size_mb:.1f}MB (max: {max_mb}MB)",
            code="FILE_TOO_LARGE",
            status_code=413,
            suggestion=f"Upload a file smaller than {max_mb}MB",
            details={"size_mb": size_mb, "max_mb": max_mb}
        )


class TooManyFilesError(ThreadCraftException):
    """Raised when more files are uploaded at once than allowed."""

    def __init__(self, count: int, max_files: int):
        super().__init__(
            message=f"Too many files: {count} (max: {max_files})",
            code="TOO_MANY_FILES",
            status_code=400,
            suggestion=f"Upload at most {max_files} images per request",
            details={"count": count, "max_files": max_files}
        )


class ImageProcessingError(ThreadCraftException):
    """Raised when an uploaded image cannot be decoded or re-encoded."""

    def __init__(self, filename: str, error: str, status_code: int = 400, code: str = "IMAGE_PROCESSING_ERROR"):
        super().__init__(
            message=f"Failed to process image {filename}: {error}",
            code=code,
            status_code=status_code,
            suggestion="Check that the file is a valid, non-corrupted image",
            details={"filename": filename, "error": error}
        )


class StorageUploadError(ThreadCraftException):
    """Raised when file upload to storage fails."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Failed to upload file to storage: {error}",
            code="STORAGE_UPLOAD_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error}
        )


# =============================================================================
# Database Exceptions
# =============================================================================

class DatabaseError(ThreadCraftException):
    """Raised when a Supabase query fails unexpectedly."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            message=f"Failed to {operation}",
            code="DATABASE_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def threadcraft_exception_handler(
    request: Request,
    exc: ThreadCraftException
) -> JSONResponse:
    """
    Convert ThreadCraftException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


def _format_location(loc: tuple | list) -> str:
    # Drop the leading "body"/"query"/"path" marker
    parts = [str(part) for part in loc]
    if parts and parts[0] in ("body", "query", "path", "header", "form"):
        parts = parts[1:]
    return ".".join(parts)


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle request validation errors.

    Returns 400 with one entry per invalid field, e.g.
    {"field": "items.0.quantity", "message": "Input should be greater than or equal to 1"}
    """
    errors = [
        {"field": _format_location(error.get("loc", ())), "message": error.get("msg", "Invalid value")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Validation failed",
            "code": "VALIDATION_ERROR",
            "errors": errors,
        }
    )
