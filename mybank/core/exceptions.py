from typing import Optional, Any


class MyBankError(Exception):
    """
    Base exception for the mybank service.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ConfigurationError(MyBankError):
    """
    Raised when required settings are missing or invalid. Fatal at startup.
    """
    def __init__(self, message: str = "Invalid configuration", details: Optional[Any] = None):
        super().__init__(message, code="CONFIGURATION_ERROR", status_code=500, details=details)


class DatabaseError(MyBankError):
    """
    Raised when a request-scoped database operation fails.
    All subclasses surface to the caller as a generic internal failure.
    """
    def __init__(self, message: str = "Database operation failed", details: Optional[Any] = None):
        super().__init__(message, code="INTERNAL_ERROR", status_code=500, details=details)


class DatabaseUnavailableError(DatabaseError):
    """
    Raised when no database client could be established at startup.
    """
    def __init__(self, message: str = "Database is not available", details: Optional[Any] = None):
        super().__init__(message, details=details)


class SessionCheckoutTimeoutError(DatabaseError):
    """
    Raised when every pooled session stays leased past the checkout timeout.
    """
    def __init__(self, message: str = "Timed out waiting for a database session", details: Optional[Any] = None):
        super().__init__(message, details=details)


class DatabaseTimeoutError(DatabaseError):
    """
    Raised when a database operation exceeds its time budget.
    """
    def __init__(self, message: str = "Database operation timed out", details: Optional[Any] = None):
        super().__init__(message, details=details)
