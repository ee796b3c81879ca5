"""Custom exception classes for the application."""

from typing import Optional


class PriceWatchException(Exception):
    """Base exception for all pricewatch errors."""

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class ConfigurationError(PriceWatchException):
    """Raised when required settings (credentials, URLs) are missing or invalid."""


class RecordStoreError(PriceWatchException):
    """Raised when the record store cannot be read from or written to."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"Record store {operation} failed: {message}")


class NavigationError(PriceWatchException):
    """Raised when a product page could not be loaded."""

    def __init__(self, url: str, status: Optional[int] = None):
        self.url = url
        self.status = status
        detail = f"status {status}" if status is not None else "no response"
        super().__init__(f"Navigation to {url} failed: {detail}")
