"""
Errors raised across the warehouse client boundary.

Backend-specific failures are wrapped into one of these kinds at the point
they leave a client, keeping the native message text for diagnostics.
"""

import re

from .types import WarehouseType

_SENSITIVE_PATTERNS = [
    (r'password[=:]\s*[\'"][^\'";]+[\'"]', "password=***"),
    (r"password[=:]\s*\w+", "password=***"),
    (r'user[=:]\s*[\'"][^\'";]+[\'"]', "user=***"),
    (r'account[=:]\s*[\'"][^\'";]+[\'"]', "account=***"),
    (r'token[=:]\s*[\'"][^\'";]+[\'"]', "token=***"),
    (r"token[=:]\s*[\w\-\.]+", "token=***"),
    (r'key[=:]\s*[\'"][^\'";]+[\'"]', "key=***"),
]


def sanitize_error_message(error_message: str) -> str:
    """
    Sanitize error messages to remove sensitive information.

    Args:
        error_message: The raw error message

    Returns:
        str: Sanitized error message
    """
    sanitized_message = error_message
    for pattern, replacement in _SENSITIVE_PATTERNS:
        sanitized_message = re.sub(
            pattern, replacement, sanitized_message, flags=re.IGNORECASE
        )

    return sanitized_message


class WarehouseError(Exception):
    """Base class for every error raised by a warehouse client."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class WarehouseConnectionError(WarehouseError):
    """Exception raised for connection and session configuration errors."""

    def __init__(self, message: str, warehouse_type: WarehouseType | None = None):
        super().__init__(message)
        self.warehouse_type = warehouse_type


class WarehouseQueryError(WarehouseError):
    """Exception raised for query execution errors."""

    def __init__(self, message: str, query: str | None = None):
        super().__init__(message)
        self.query = query


class ParseError(WarehouseError):
    """Exception raised when a native type descriptor cannot be understood."""


class UnsupportedWarehouseError(WarehouseError):
    """Exception raised when credentials name an unknown warehouse type."""
