"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    DatabaseError,

    # Bulk upload
    InvalidFileFormatError,
    FileTooLargeError,
    SpreadsheetParseError,
    SkuConflictError,
    PersistenceError,

    # Orders
    OrderNotFoundError,
    UnknownOrderStatusError,
    InvalidStatusTransitionError,
    ConflictingTransitionError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "DatabaseError",

    # Bulk upload
    "InvalidFileFormatError",
    "FileTooLargeError",
    "SpreadsheetParseError",
    "SkuConflictError",
    "PersistenceError",

    # Orders
    "OrderNotFoundError",
    "UnknownOrderStatusError",
    "InvalidStatusTransitionError",
    "ConflictingTransitionError",
]
