"""
Custom exception classes for the application.

Every error carries a stable code, an HTTP status and enough details for an
operator to see which row, draft or order failed.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "ORDER_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier, **(details or {})}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None,
        status_code: int = 422
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=status_code,
            details=details
        )


class ConflictError(AppError):
    """Conflict with existing resource (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# BULK UPLOAD ERRORS
# ===================

class InvalidFileFormatError(ValidationError):
    """Uploaded file is not a supported spreadsheet."""

    def __init__(self, filename: Optional[str], supported: list[str]):
        super().__init__(
            code="INVALID_FILE_FORMAT",
            message=f"File must be one of: {', '.join(supported)}",
            details={"filename": filename, "supported": supported}
        )


class FileTooLargeError(ValidationError):
    """Uploaded file exceeds the size limit."""

    def __init__(self, size_bytes: int, limit_bytes: int):
        super().__init__(
            code="FILE_TOO_LARGE",
            message=f"File exceeds the {limit_bytes // (1024 * 1024)}MB upload limit",
            details={"size_bytes": size_bytes, "limit_bytes": limit_bytes},
            status_code=413
        )


class SpreadsheetParseError(ValidationError):
    """Spreadsheet could not be read."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="SPREADSHEET_PARSE_ERROR",
            message=message,
            details=details
        )


class SkuConflictError(ConflictError):
    """A later row for an existing SKU disagrees with its base info."""

    def __init__(self, sku: str, row: int, fields: list[str]):
        super().__init__(
            code="SKU_CONFLICT",
            message=f"Row {row} changes base info of SKU {sku}: {', '.join(fields)}",
            details={"sku": sku, "row": row, "fields": fields}
        )


class PersistenceError(AppError):
    """A product draft failed to write during commit."""

    def __init__(
        self,
        index: int,
        sku: str,
        committed: int,
        message: str
    ):
        super().__init__(
            code="PERSISTENCE_FAILED",
            message=f"Failed to save product {sku}: {message}",
            status_code=500,
            details={"index": index, "sku": sku, "committed": committed}
        )


# ===================
# ORDER ERRORS
# ===================

class OrderNotFoundError(NotFoundError):
    """Order not found for the given user."""

    def __init__(self, user_id: str, order_id: str):
        super().__init__(
            resource="Order",
            identifier=order_id,
            code="ORDER_NOT_FOUND",
            details={"user_id": user_id}
        )


class UnknownOrderStatusError(ValidationError):
    """Stored or requested status is not one of the known values."""

    def __init__(self, status: Any, valid: list[str]):
        super().__init__(
            code="UNKNOWN_ORDER_STATUS",
            message=f"Unknown order status: {status}",
            details={"provided": status, "valid": valid}
        )


class InvalidStatusTransitionError(ValidationError):
    """Requested status is not reachable from the current one."""

    def __init__(
        self,
        current_status: str,
        new_status: str,
        allowed: Optional[list[str]] = None,
        order_id: Optional[str] = None
    ):
        allowed = allowed or []
        super().__init__(
            code="INVALID_STATUS_TRANSITION",
            message=f"Cannot transition from {current_status} to {new_status}",
            details={
                "order_id": order_id,
                "current_status": current_status,
                "new_status": new_status,
                "allowed": allowed,
                "reason": f"{current_status} is terminal" if not allowed
                          else f"Allowed next: {', '.join(allowed)}"
            }
        )


class ConflictingTransitionError(ConflictError):
    """Order status changed since the caller read it."""

    def __init__(
        self,
        order_id: str,
        expected_status: str,
        stored_status: Optional[str]
    ):
        super().__init__(
            code="CONFLICTING_STATUS_TRANSITION",
            message=f"Order {order_id} is no longer {expected_status}",
            details={
                "order_id": order_id,
                "expected_status": expected_status,
                "stored_status": stored_status
            }
        )
