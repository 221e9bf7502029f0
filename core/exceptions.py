"""
Custom exception classes for package tracking errors
"""
from typing import Any, Dict, Optional
from fastapi import status


class BaseCustomException(Exception):
    """Base custom exception class"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(BaseCustomException):
    """Raised when input is missing or malformed"""

    def __init__(self, message: str, field: str = None, details: Optional[Dict[str, Any]] = None):
        if field:
            details = details or {}
            details["field"] = field

        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details
        )


class ResourceNotFoundError(BaseCustomException):
    """Raised when a requested resource is not found"""

    def __init__(self, resource: str, identifier: str, details: Optional[Dict[str, Any]] = None):
        message = f"{resource} with identifier '{identifier}' not found"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details
        )


class DuplicateOrderRefError(BaseCustomException):
    """Raised when a package already exists for an order reference"""

    def __init__(self, order_ref: str):
        super().__init__(
            message=f"Order reference '{order_ref}' already exists",
            status_code=status.HTTP_409_CONFLICT,
            details={"order_reference": order_ref}
        )


class InvalidTransitionError(BaseCustomException):
    """Raised when a status change is not allowed from the current status"""

    def __init__(self, current: str, requested: str):
        super().__init__(
            message=f"Invalid status transition from {current} to {requested}",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"current_status": current, "requested_status": requested}
        )


class ConcurrentUpdateError(BaseCustomException):
    """Raised when a record was changed by someone else between read and write"""

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            message=f"{resource} '{identifier}' was modified concurrently, reload and retry",
            status_code=status.HTTP_409_CONFLICT,
            details={"id": identifier}
        )


class StoreError(BaseCustomException):
    """Raised when the database cannot complete an operation"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"Storage error: {message}",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details=details
        )
